# pkgledger/modules/cli.py
"""
Administrative CLI for the package ledger.
- Uses rich for colored output, tables, panels and dependency trees.
- Operates on one ledger file (--ledger, or [ledger] file from the config).
- Supports --no-color and --quiet, plus short aliases for commands.

Usage examples:
  python -m pkgledger.modules.cli list
  python -m pkgledger.modules.cli install app 1.0
  python -m pkgledger.modules.cli depend app 1.0 lib 2.0
  python -m pkgledger.modules.cli tree app 1.0
  python -m pkgledger.modules.cli rm app 1.0
"""

from __future__ import annotations
import argparse
import json
import sys
from typing import List, Optional, Set, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from pkgledger.modules.config import LedgerConfig, config as default_config
from pkgledger.modules.ledger import PackageLedger, UninstallConflict
from pkgledger.modules.version import version_key


def make_console(no_color: bool, quiet: bool) -> Console:
    if no_color:
        return Console(color_system=None, force_terminal=False, quiet=quiet, highlight=False)
    return Console(quiet=quiet, highlight=False)


def pair(pkg: str, version: str) -> str:
    """pkg@version pronto para ir dentro de markup do rich."""
    return escape(f"{pkg}@{version}")


def edges_table(title: str, edges) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("package", style="cyan")
    table.add_column("version", style="magenta")
    for peer in sorted(edges):
        table.add_row(escape(peer), escape(edges[peer]))
    return table


class CLI:
    def __init__(self, console: Console, ledger: PackageLedger):
        self.console = console
        self.ledger = ledger

    # -----------------------
    # leitura
    # -----------------------
    def cmd_list(self, args) -> int:
        installed = self.ledger.get_installed()
        if not installed:
            self.console.print("[yellow]No packages installed[/yellow]")
            return 0
        table = Table(title=f"installed ({len(installed)})")
        table.add_column("package", style="cyan")
        table.add_column("version", style="magenta")
        table.add_column("required by")
        for pkg in sorted(installed):
            version = installed[pkg]
            depended = self.ledger.get_depended_on(pkg, version) or {}
            table.add_row(escape(pkg), escape(version),
                          ", ".join(pair(p, v) for p, v in sorted(depended.items())))
        self.console.print(table)
        return 0

    def cmd_show(self, args) -> int:
        record = self.ledger.get_relation(args.package, args.version)
        if record is None:
            self.console.print(f"[yellow]No relation recorded for {pair(args.package, args.version)}[/yellow]")
            return 1
        state = "installed" if self.ledger.is_installed(args.package, args.version) else "not installed"
        self.console.print(Panel(f"{pair(args.package, args.version)} ({state})", title="relation"))
        self.console.print(edges_table("depends on", record.dependencies))
        self.console.print(edges_table("required by", record.depended_on))
        return 0

    def cmd_tree(self, args) -> int:
        if self.ledger.get_relation(args.package, args.version) is None:
            self.console.print(f"[yellow]No relation recorded for {pair(args.package, args.version)}[/yellow]")
            return 1
        root = Tree(f"[bold]{pair(args.package, args.version)}[/bold]")
        self._grow(root, args.package, args.version, {(args.package, args.version)})
        self.console.print(root)
        return 0

    def _grow(self, node: Tree, pkg: str, version: str, path: Set[Tuple[str, str]]):
        dependencies = self.ledger.get_dependencies(pkg, version) or {}
        for dep_pkg in sorted(dependencies):
            dep_version = dependencies[dep_pkg]
            label = pair(dep_pkg, dep_version)
            if (dep_pkg, dep_version) in path:
                node.add(f"[red]{label} (cycle)[/red]")
                continue
            child = node.add(label)
            self._grow(child, dep_pkg, dep_version, path | {(dep_pkg, dep_version)})

    def cmd_versions(self, args) -> int:
        versions = self.ledger.get_all_relations().get(args.package)
        if not versions:
            self.console.print(f"[yellow]No versions recorded for {escape(args.package)}[/yellow]")
            return 1
        for version in sorted(versions, key=version_key):
            marker = " [green](installed)[/green]" if self.ledger.is_installed(args.package, version) else ""
            self.console.print(f"{pair(args.package, version)}{marker}")
        return 0

    def cmd_dropped(self, args) -> int:
        if not self.ledger.dropped:
            self.console.print("[green]No invalid entries dropped on load[/green]")
            return 0
        table = Table(title="dropped on load")
        table.add_column("package", style="cyan")
        table.add_column("version", style="red")
        for pkg, version in self.ledger.dropped:
            table.add_row(escape(pkg), escape(version))
        self.console.print(table)
        return 0

    def cmd_dump(self, args) -> int:
        self.console.print_json(json.dumps(self.ledger.to_dict()))
        return 0

    # -----------------------
    # escrita
    # -----------------------
    def cmd_install(self, args) -> int:
        self.ledger.install(args.package, args.version)
        self.ledger.save()
        self.console.print(f"[green]Recorded {pair(args.package, args.version)} as installed[/green]")
        return 0

    def cmd_depend(self, args) -> int:
        self.ledger.depend(args.package, args.version, args.dep_package, args.dep_version)
        self.ledger.save()
        self.console.print(
            f"[green]{pair(args.package, args.version)} -> {pair(args.dep_package, args.dep_version)}[/green]")
        return 0

    def cmd_undepend(self, args) -> int:
        remaining = self.ledger.remove_depend(args.package, args.version, args.dep_package, args.dep_version)
        self.ledger.save()
        dep = pair(args.dep_package, args.dep_version)
        if remaining == 0:
            self.console.print(f"[yellow]{dep} is no longer required by anything[/yellow]")
        else:
            self.console.print(f"{dep} still required by {remaining} package(s)")
        return 0

    def cmd_uninstall(self, args) -> int:
        try:
            self.ledger.uninstall(args.package, args.version)
        except UninstallConflict as e:
            self.console.print(f"[red]{escape(str(e))}[/red]")
            self.console.print(edges_table("required by", e.required_by))
            return 1
        self.console.print(f"[green]Uninstalled {pair(args.package, args.version)}[/green]")
        return 0


# -----------------------
# CLI wiring and argparse setup
# -----------------------
def _add_pair(p: argparse.ArgumentParser):
    p.add_argument("package")
    p.add_argument("version")


def _add_edge(p: argparse.ArgumentParser):
    _add_pair(p)
    p.add_argument("dep_package")
    p.add_argument("dep_version")


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="pkgledger", description="package ledger CLI (rich-enabled)")
    ap.add_argument("--no-color", action="store_true", help="Disable color output")
    ap.add_argument("--quiet", action="store_true", help="Quiet mode; less output")
    ap.add_argument("--conf", help="Path to pkgledger.conf")
    ap.add_argument("--ledger", help="Path to the ledger JSON file")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("list", aliases=["ls"], help="List installed packages")
    _add_pair(sub.add_parser("show", aliases=["s"], help="Show the relation record of a package version"))
    _add_pair(sub.add_parser("tree", aliases=["t"], help="Show the dependency tree of a package version"))
    sub.add_parser("versions", aliases=["v"], help="List recorded versions of a package").add_argument("package")
    sub.add_parser("dropped", help="List invalid entries dropped while loading")
    sub.add_parser("dump", help="Print the ledger document")

    _add_pair(sub.add_parser("install", aliases=["i"], help="Record a package version as installed"))
    _add_edge(sub.add_parser("depend", aliases=["d"], help="Record a dependency edge"))
    _add_edge(sub.add_parser("undepend", aliases=["ud"], help="Remove a dependency edge"))
    _add_pair(sub.add_parser("uninstall", aliases=["rm", "r"], help="Uninstall a package version"))
    return ap


COMMANDS = {
    "list": "cmd_list", "ls": "cmd_list",
    "show": "cmd_show", "s": "cmd_show",
    "tree": "cmd_tree", "t": "cmd_tree",
    "versions": "cmd_versions", "v": "cmd_versions",
    "dropped": "cmd_dropped",
    "dump": "cmd_dump",
    "install": "cmd_install", "i": "cmd_install",
    "depend": "cmd_depend", "d": "cmd_depend",
    "undepend": "cmd_undepend", "ud": "cmd_undepend",
    "uninstall": "cmd_uninstall", "rm": "cmd_uninstall", "r": "cmd_uninstall",
}


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = build_argparser()
    args = parser.parse_args(argv)
    console = make_console(args.no_color, args.quiet)

    try:
        cfg = LedgerConfig(locations=[args.conf], required=True) if args.conf else default_config
        ledger = PackageLedger(args.ledger, cfg=cfg)
    except (OSError, ValueError) as e:
        # ValueError cobre json.JSONDecodeError
        console.print(f"[red]Cannot open ledger: {escape(str(e))}[/red]")
        return 3

    cli = CLI(console=console, ledger=ledger)
    try:
        return getattr(cli, COMMANDS[args.command])(args)
    except OSError as e:
        console.print(f"[red]Cannot write ledger: {escape(str(e))}[/red]")
        return 3


if __name__ == "__main__":
    raise SystemExit(main())
