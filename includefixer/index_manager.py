#!/usr/bin/env python3

import logging

from includefixer.symbols import SymbolIndex, SymbolRecord

logger = logging.getLogger(__name__)


class SymbolIndexManager:
    """Fans a lookup out to every registered index.

    Indices are queried in the order they were added, and that order is the
    ranking callers see: matches from an earlier index come first.
    """

    def __init__(self):
        self._indices: list[SymbolIndex] = []

    def add_symbol_index(self, index: SymbolIndex) -> None:
        self._indices.append(index)

    @property
    def indices(self) -> tuple[SymbolIndex, ...]:
        return tuple(self._indices)

    def lookup(self, name: str) -> list[SymbolRecord]:
        """Return the matches of every index, concatenated in priority order."""
        results: list[SymbolRecord] = []
        for index in self._indices:
            results.extend(index.lookup(name))
        logger.debug(f"Lookup {name!r}: {[r.header_path for r in results]}")
        return results
