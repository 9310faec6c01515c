#!/usr/bin/env python3
"""
Unresolved-symbol detection for C translation units.

A symbol is unresolved when the unit uses it but neither the unit nor any
header it includes (that can be found on the search paths) declares it.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple

from includefixer import c_syntax
from includefixer.errors import DetectionError
from includefixer.search_paths import IncludeSearchPaths

logger = logging.getLogger(__name__)


class UnresolvedSymbol(NamedTuple):
    """A use of a name with no visible declaration."""

    name: str
    offset: int  # character offset of the first use


class IncludeDirective(NamedTuple):
    spelling: str  # '"foo.h"' or '<foo.h>'
    offset: int


@dataclass
class TranslationUnit:
    """What the fixer needs to know about one source unit."""

    path: Path
    code: str
    includes: list[IncludeDirective] = field(default_factory=list)
    unresolved: list[UnresolvedSymbol] = field(default_factory=list)
    insertion_offset: int = 0
    has_include_block: bool = False

    @property
    def included_spellings(self) -> set[str]:
        return {include.spelling for include in self.includes}


def read_unit(path: Path) -> str:
    """Read a source file, raising DetectionError if that is impossible."""
    try:
        return Path(path).read_text()
    except FileNotFoundError as e:
        raise DetectionError(f"{path}: no such file") from e
    except (OSError, UnicodeDecodeError) as e:
        raise DetectionError(f"{path}: {e}") from e


class UnresolvedSymbolDetector:
    """Finds unresolved symbols using a tree-sitter parse of the unit and its headers."""

    def __init__(self, search_paths: IncludeSearchPaths | None = None):
        self.search_paths = search_paths or IncludeSearchPaths()
        self.parser = c_syntax.create_parser()
        # Declarations per header, shared across units.
        self._header_declarations: dict[Path, tuple[set[str], list[str]]] = {}

    def detect(self, path: Path, code: str) -> TranslationUnit:
        data = code.encode()
        tree = self.parser.parse(data)
        root = tree.root_node
        if root.has_error:
            raise DetectionError(f"{path}: syntax errors, cannot analyze unit")

        unit_dir = Path(path).absolute().parent
        includes = [
            IncludeDirective(spelling, c_syntax.char_offset(data, node.start_byte))
            for spelling, node in c_syntax.find_includes(root)
        ]

        declared = {c_syntax.node_text(n) for n in c_syntax.iter_declared_names(root)}
        visited: set[Path] = set()
        for include in includes:
            declared |= self._declarations_from(include.spelling, unit_dir, visited)

        unresolved = []
        seen = set()
        for node in c_syntax.iter_used_names(root):
            name = c_syntax.node_text(node)
            if name in seen or name in declared or c_syntax.is_builtin(name):
                continue
            seen.add(name)
            unresolved.append(UnresolvedSymbol(name, c_syntax.char_offset(data, node.start_byte)))

        insertion, has_block = c_syntax.include_insertion_point(root, data)
        logger.debug(f"{path}: unresolved {[s.name for s in unresolved]}")
        return TranslationUnit(
            path=Path(path),
            code=code,
            includes=includes,
            unresolved=unresolved,
            insertion_offset=c_syntax.char_offset(data, insertion),
            has_include_block=has_block,
        )

    def _declarations_from(self, spelling: str, from_dir: Path, visited: set[Path]) -> set[str]:
        """Names declared by an included header and everything it includes."""
        header = self.search_paths.resolve(spelling, from_dir)
        if header is None:
            logger.debug(f"Include {spelling} not found on search paths")
            return set()
        header = header.resolve()
        if header in visited:
            return set()
        visited.add(header)

        names, nested = self._parse_header(header)
        names = set(names)
        for nested_spelling in nested:
            names |= self._declarations_from(nested_spelling, header.parent, visited)
        return names

    def _parse_header(self, header: Path) -> tuple[set[str], list[str]]:
        if header in self._header_declarations:
            return self._header_declarations[header]
        try:
            data = header.read_bytes()
        except OSError as e:
            logger.warning(f"Failed to read header {header}: {e}")
            result: tuple[set[str], list[str]] = (set(), [])
        else:
            root = self.parser.parse(data).root_node
            if root.has_error:
                logger.warning(f"Syntax errors in header {header}, declarations may be incomplete")
            result = (
                {c_syntax.node_text(n) for n in c_syntax.iter_declared_names(root)},
                [spelling for spelling, _ in c_syntax.find_includes(root)],
            )
        self._header_declarations[header] = result
        return result
