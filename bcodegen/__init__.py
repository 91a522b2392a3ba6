"""Intermediate representation, symbol bookkeeping and code generators for the B language."""

__version__ = "0.1.0"
__all__ = ["fasm", "ir", "irdump", "symbols", "targets"]