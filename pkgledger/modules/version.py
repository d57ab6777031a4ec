# pkgledger/modules/version.py
"""
Utilitários de versão.

O ledger só precisa saber se um token de versão é válido (check) para filtrar
entradas corrompidas ao carregar o arquivo. version_key é a chave de
ordenação que a CLI usa para listar as versões de um pacote.
"""

import re

_VERSION_RE = re.compile(r"v?\d+[0-9A-Za-z]*(?:[.\-_+][0-9A-Za-z]+)*")


def check(version) -> bool:
    """True se `version` parece um token de versão (1.0, v2.3.4, 1.0.0-beta.1)."""
    if not isinstance(version, str):
        return False
    return _VERSION_RE.fullmatch(version) is not None


def version_key(v: str):
    if not isinstance(v, str):
        return [v]
    s = v.strip()
    if s.startswith("v") and re.match(r"v\d", s):
        s = s[1:]
    parts = re.split(r'[.\-_\+]', s)
    key = []
    for p in parts:
        if p.isdigit():
            key.append(int(p))
        else:
            m = re.match(r'([a-zA-Z]+)(\d+)$', p)
            if m:
                key.append(m.group(1))
                key.append(int(m.group(2)))
            else:
                key.append(p.lower())
    return key
