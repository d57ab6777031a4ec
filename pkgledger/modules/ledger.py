# pkgledger/modules/ledger.py
"""
PackageLedger: registro local de pacotes instalados e do grafo de dependências
por versão.

Formato do arquivo (JSON):
{
  "version": "0.0.0",
  "installed": {"<pkg>": "<versão>", ...},
  "dependencies": {
    "<pkg>": {
      "<versão>": {
        "dependencies": {"<peer>": "<versão>", ...},
        "dependedOn":   {"<peer>": "<versão>", ...}
      }
    }
  }
}

Cada aresta é gravada duas vezes: "A@1 depende de B@2" fica em
relations[A][1].dependencies[B] = 2 e relations[B][2].dependedOn[A] = 1.
depend / remove_depend / uninstall mantêm as duas pontas juntas; o load
confia no documento como está.
"""

from __future__ import annotations
import json
import os
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Set, Tuple

from pkgledger.modules import logger as _logger
from pkgledger.modules import version as _version
from pkgledger.modules.config import config as default_config
from pkgledger.modules.relation import RelationRecord

DEFAULT_SCHEMA_VERSION = "0.0.0"

Relations = Dict[str, Dict[str, RelationRecord]]


class LedgerError(Exception):
    pass


class UninstallConflict(LedgerError):
    """Raised when a top-level uninstall targets a pair other pairs still require."""

    def __init__(self, package: str, version: str, required_by: Mapping[str, str]):
        self.package = package
        self.version = version
        self.required_by = dict(required_by)
        dep_pkg, dep_version = next(iter(self.required_by.items()))
        message = (f"refusing to uninstall {package}@{version} because it is required by "
                   f"{dep_pkg}@{dep_version}")
        if len(self.required_by) > 1:
            message += f" (and {len(self.required_by) - 1} more)"
        super().__init__(message)


def _fmt_edges(edges: Mapping[str, str]) -> str:
    return ", ".join(f"{p}@{v}" for p, v in edges.items())


class PackageLedger:
    def __init__(self,
                 ledger_file: Optional[str] = None,
                 version_check: Optional[Callable[[str], bool]] = None,
                 cfg=None):
        """
        ledger_file: caminho do JSON; sem ele usa [ledger] file da configuração.
        version_check: predicado de versão válida usado no load (default: version.check).
        cfg: LedgerConfig alternativo (testes, CLI --conf).
        """
        cfg = cfg or default_config
        self.log = _logger.Logger("ledger", cfg)
        self.ledger_file = os.path.abspath(os.path.expanduser(ledger_file or cfg.ledger_file()))
        self.version_check = version_check or _version.check
        self.schema_version = DEFAULT_SCHEMA_VERSION
        self.dropped: List[Tuple[str, str]] = []
        self._installed: Dict[str, str] = {}
        self._relations: Relations = {}
        self._tearing_down: Set[Tuple[str, str]] = set()
        self.load()

    # -------------------------
    # persistência
    # -------------------------
    def load(self):
        """Carrega o ledger do disco; cria o arquivo vazio se ele não existir."""
        self.dropped = []
        if not os.path.exists(self.ledger_file):
            self.schema_version = DEFAULT_SCHEMA_VERSION
            self._installed = {}
            self._relations = {}
            self.log.info(f"Creating empty ledger at {self.ledger_file}")
            self.save()
            return

        with open(self.ledger_file, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            data = {}

        self.schema_version = data.get("version") or DEFAULT_SCHEMA_VERSION
        self._installed = self._to_installed(data.get("installed"))
        self._relations = self._to_relations(data.get("dependencies"))
        for pkg, version in self.dropped:
            self.log.warning(f"Dropped invalid version entry {pkg}@{version!r} from {self.ledger_file}")
        self.log.debug(f"Loaded ledger {self.ledger_file}: {len(self._installed)} installed, "
                       f"{len(self._relations)} packages with relations")

    @staticmethod
    def _to_installed(obj) -> Dict[str, str]:
        if not isinstance(obj, dict):
            return {}
        return {pkg: v for pkg, v in obj.items() if isinstance(v, str) and v}

    def _to_relations(self, obj) -> Relations:
        relations: Relations = {}
        if not isinstance(obj, dict):
            return relations
        for pkg, version_map in obj.items():
            if not isinstance(version_map, dict):
                continue
            pkg_relations: Dict[str, RelationRecord] = {}
            for version, raw in version_map.items():
                if not self.version_check(version):
                    self.dropped.append((pkg, version))
                    continue
                pkg_relations[version] = RelationRecord(raw if isinstance(raw, dict) else None)
            if pkg_relations:
                relations[pkg] = pkg_relations
        return relations

    def to_dict(self) -> Dict:
        return {
            "version": self.schema_version,
            "installed": dict(self._installed),
            "dependencies": {
                pkg: {version: record.to_dict() for version, record in versions.items()}
                for pkg, versions in self._relations.items()
            },
        }

    def save(self):
        """Grava o ledger inteiro (JSON indentado), criando o diretório se preciso."""
        d = os.path.dirname(self.ledger_file)
        if d:
            os.makedirs(d, exist_ok=True)
        with open(self.ledger_file, "w", encoding="utf-8") as fh:
            json.dump(self.to_dict(), fh, indent=4)
        self.log.debug(f"Ledger saved to {self.ledger_file}")

    # -------------------------
    # installed set
    # -------------------------
    def get_installed(self) -> Mapping[str, str]:
        return MappingProxyType(self._installed)

    def is_installed(self, pkg: str, version: Optional[str] = None) -> bool:
        v = self._installed.get(pkg)
        if not v:
            return False
        return v == version if version else True

    def install(self, pkg: str, version: str):
        previous = self._installed.get(pkg)
        self._installed[pkg] = version
        if previous and previous != version:
            self.log.success(f"Installed {pkg}@{version} (replaces {pkg}@{previous})", to_history=True)
        else:
            self.log.success(f"Installed {pkg}@{version}", to_history=True)

    # -------------------------
    # arestas
    # -------------------------
    def _record(self, pkg: str, version: str) -> RelationRecord:
        """Record do par, criado na primeira aresta que o toca."""
        versions = self._relations.setdefault(pkg, {})
        record = versions.get(version)
        if record is None:
            record = versions[version] = RelationRecord()
        return record

    def depend(self, pkg: str, version: str, dep_pkg: str, dep_version: str):
        """Registra que pkg@version exige dep_pkg@dep_version (e o espelho reverso)."""
        dependencies = self._record(pkg, version).dependencies
        previous = dependencies.get(dep_pkg)
        if previous is not None and previous != dep_version:
            # troca de versão do peer: a aresta reversa antiga deixa de valer
            self._remove_depended(dep_pkg, previous, pkg, version)
        dependencies[dep_pkg] = dep_version
        self._record(dep_pkg, dep_version).depended_on[pkg] = version
        self.log.debug(f"{pkg}@{version} depends on {dep_pkg}@{dep_version}")

    def remove_depend(self, pkg: str, version: str, dep_pkg: str, dep_version: str) -> int:
        """
        Remove a aresta pkg@version -> dep_pkg@dep_version nas duas pontas.
        Retorna quantos pares ainda dependem de dep_pkg@dep_version (0 se não há record).
        """
        dependencies = self.get_dependencies(pkg, version)
        if dependencies is not None and dependencies.get(dep_pkg) == dep_version:
            del dependencies[dep_pkg]
        depended = self.get_depended_on(dep_pkg, dep_version)
        if depended is None:
            return 0
        if depended.get(pkg) == version:
            del depended[pkg]
        return len(depended)

    def _remove_depended(self, pkg: str, version: str, depended_pkg: str, depended_version: str):
        depended = self.get_depended_on(pkg, version)
        if depended is not None and depended.get(depended_pkg) == depended_version:
            del depended[depended_pkg]

    def _remove_relation(self, pkg: str, version: str):
        versions = self._relations.get(pkg)
        if versions is None:
            return
        versions.pop(version, None)
        if not versions:
            del self._relations[pkg]

    def is_depended_on_by_other(self, pkg: str, version: str) -> bool:
        return bool(self.get_depended_on(pkg, version))

    # -------------------------
    # uninstall
    # -------------------------
    def uninstall(self, pkg: str, version: str, is_dependency_cascade: bool = False):
        """
        Remove pkg@version do ledger.

        - Se alguém ainda depende do par: chamada de topo -> UninstallConflict
          (nada é alterado); chamada em cascata -> retorna sem mexer em nada.
        - Senão, desfaz cada dependência do par e desinstala em cascata as que
          ficarem órfãs, remove do installed (se for a versão instalada) e apaga
          o record do par.
        - Só a chamada de topo grava o arquivo.
        """
        depended = self.get_depended_on(pkg, version)
        if depended:
            if is_dependency_cascade:
                self.log.debug(f"Keeping {pkg}@{version}: still required by {_fmt_edges(depended)}")
                return
            self.log.info(f"Refusing to uninstall {pkg}@{version}: required by {_fmt_edges(depended)}")
            raise UninstallConflict(pkg, version, depended)

        key = (pkg, version)
        if key in self._tearing_down:
            self.log.warning(f"Dependency cycle reaches {pkg}@{version} again; skipping")
            return

        self._tearing_down.add(key)
        try:
            dependencies = self.get_dependencies(pkg, version)
            if dependencies:
                for required_pkg, required_version in list(dependencies.items()):
                    self._remove_depended(required_pkg, required_version, pkg, version)
                    self.uninstall(required_pkg, required_version, True)

            if self._installed.get(pkg) == version:
                del self._installed[pkg]
                if is_dependency_cascade:
                    self.log.success(f"Uninstalled orphaned dependency {pkg}@{version}", to_history=True)
                else:
                    self.log.success(f"Uninstalled {pkg}@{version}", to_history=True)
            self._remove_relation(pkg, version)
        finally:
            self._tearing_down.discard(key)

        if not is_dependency_cascade:
            self.save()

    # -------------------------
    # consultas
    # -------------------------
    def get_depended_on(self, pkg: str, version: str) -> Optional[Dict[str, str]]:
        record = self.get_relation(pkg, version)
        if record is None:
            return None
        return record.depended_on

    def get_dependencies(self, pkg: str, version: str) -> Optional[Dict[str, str]]:
        record = self.get_relation(pkg, version)
        if record is None:
            return None
        return record.dependencies

    def get_relation(self, pkg: str, version: str) -> Optional[RelationRecord]:
        versions = self._relations.get(pkg)
        if versions is None:
            return None
        return versions.get(version)

    def get_all_relations(self) -> Relations:
        return self._relations
