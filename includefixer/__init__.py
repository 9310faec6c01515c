"""Add missing #include directives to C sources using a symbol index."""

from includefixer.errors import (
    ConflictError,
    DetectionError,
    IncludeFixerError,
    LoadError,
    NotFoundError,
    UnresolvedError,
)
from includefixer.in_memory_index import InMemorySymbolIndex
from includefixer.index_manager import SymbolIndexManager
from includefixer.symbols import SymbolIndex, SymbolKind, SymbolRecord
from includefixer.yaml_index import YamlSymbolIndex

__all__ = [
    "ConflictError",
    "DetectionError",
    "IncludeFixerError",
    "InMemorySymbolIndex",
    "LoadError",
    "NotFoundError",
    "SymbolIndex",
    "SymbolIndexManager",
    "SymbolKind",
    "SymbolRecord",
    "UnresolvedError",
    "YamlSymbolIndex",
]
