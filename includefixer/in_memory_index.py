#!/usr/bin/env python3

import logging
from collections import defaultdict

from includefixer.symbols import SymbolKind, SymbolRecord

logger = logging.getLogger(__name__)


class InMemorySymbolIndex:
    """Symbol index over a fixed list of records."""

    def __init__(self, symbols: list[SymbolRecord]):
        self._symbols: dict[str, list[SymbolRecord]] = defaultdict(list)
        for symbol in symbols:
            self._symbols[symbol.name].append(symbol)

    @classmethod
    def from_spec(cls, spec: str) -> "InMemorySymbolIndex":
        """Build an index from `<symbol>=<header>[,<header>...]` pairs.

        Pairs are separated by semicolons. Entries without `=` and empty
        names or headers are skipped.
        """
        symbols = []
        for pair in spec.split(";"):
            name, sep, headers = pair.partition("=")
            name = name.strip()
            if not sep or not name:
                if pair.strip():
                    logger.debug(f"Skipping malformed symbol mapping {pair!r}")
                continue
            for header in headers.split(","):
                header = header.strip()
                if not header:
                    continue
                symbols.append(
                    SymbolRecord(
                        name=name,
                        kind=SymbolKind.UNKNOWN,
                        header_path=header,
                        line_hint=1,
                    )
                )
        return cls(symbols)

    def lookup(self, name: str) -> list[SymbolRecord]:
        return list(self._symbols.get(name.strip(), ()))

    def __len__(self) -> int:
        return sum(len(records) for records in self._symbols.values())
