#!/usr/bin/env python3
"""
Symbol index backed by a find-all-symbols YAML database.

The database is a YAML stream; each document holds one symbol record (or a
list of them) keyed Name / Type / FilePath / LineNumber.
"""

import logging
import os
from collections import defaultdict
from pathlib import Path

import yaml
from pydantic import ValidationError

from includefixer.errors import LoadError, NotFoundError
from includefixer.symbols import SymbolRecord

logger = logging.getLogger(__name__)

DEFAULT_DB_FILENAME = "find_all_symbols_db.yaml"


def parse_symbols_yaml(text: str) -> list[SymbolRecord]:
    """Parse a YAML stream of symbol records, raising LoadError on bad input."""
    records = []
    try:
        for document in yaml.safe_load_all(text):
            if document is None:
                continue
            entries = document if isinstance(document, list) else [document]
            for entry in entries:
                if not isinstance(entry, dict):
                    raise LoadError(f"Expected a symbol record, got {type(entry).__name__}")
                records.append(SymbolRecord.model_validate(entry))
    except yaml.YAMLError as e:
        raise LoadError(f"Malformed YAML: {e}") from e
    except ValidationError as e:
        raise LoadError(f"Invalid symbol record: {e}") from e
    return records


class YamlSymbolIndex:
    """Read-only index over the records of one database file."""

    def __init__(self, symbols: list[SymbolRecord], source: Path | None = None):
        self.source = source
        self._symbols: dict[str, list[SymbolRecord]] = defaultdict(list)
        for symbol in symbols:
            self._symbols[symbol.name].append(symbol)

    @classmethod
    def create_from_file(cls, path: Path) -> "YamlSymbolIndex":
        """Load the database at `path`."""
        try:
            text = Path(path).read_text()
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(f"Cannot read {path}: {e}") from e

        symbols = parse_symbols_yaml(text)
        logger.debug(f"Loaded {len(symbols)} symbols from {path}")
        return cls(symbols, source=Path(path))

    @classmethod
    def create_from_directory(
        cls, directory: Path, filename: str = DEFAULT_DB_FILENAME
    ) -> "YamlSymbolIndex":
        """Load `filename` from `directory` or the nearest ancestor holding it."""
        start = Path(os.path.abspath(directory))
        current = start
        # Each step moves one component closer to the root.
        for _ in range(len(start.parts)):
            candidate = current / filename
            if candidate.is_file():
                return cls.create_from_file(candidate)
            if current == current.parent:
                break
            current = current.parent
        raise NotFoundError(filename, start)

    def lookup(self, name: str) -> list[SymbolRecord]:
        return list(self._symbols.get(name, ()))

    def __len__(self) -> int:
        return sum(len(records) for records in self._symbols.values())
