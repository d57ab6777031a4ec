# pkgledger/modules/relation.py
"""
RelationRecord: arestas de um par (pacote, versão).

Formato persistido (dentro de "dependencies" -> pkg -> versão):
{
  "dependencies": {"<peer>": "<versão do peer exigida>"},
  "dependedOn":   {"<peer>": "<versão do peer que exige este par>"}
}

O record não valida nada; quem mantém o espelho entre as duas direções é o
PackageLedger.
"""

from typing import Any, Dict, Optional


class RelationRecord:
    """Forward edges (dependencies) and reverse edges (depended_on) of one pair."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        data = data or {}
        self.dependencies: Dict[str, str] = dict(data.get("dependencies") or {})
        self.depended_on: Dict[str, str] = dict(data.get("dependedOn") or {})

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {
            "dependencies": dict(self.dependencies),
            "dependedOn": dict(self.depended_on),
        }

    def __eq__(self, other):
        if not isinstance(other, RelationRecord):
            return NotImplemented
        return self.dependencies == other.dependencies and self.depended_on == other.depended_on

    def __repr__(self):
        return f"RelationRecord(dependencies={self.dependencies!r}, depended_on={self.depended_on!r})"
