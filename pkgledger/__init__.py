"""pkgledger - local package-installation ledger."""

__version__ = "0.1.0"
