#!/usr/bin/env python3
"""
Collect the symbols declared by C headers into a symbol database.
"""

import logging
from pathlib import Path

from tree_sitter import Node

from includefixer import c_syntax
from includefixer.symbols import SymbolKind, SymbolRecord

logger = logging.getLogger(__name__)

HEADER_SUFFIXES = {".h", ".hh", ".hpp", ".hxx"}

# Header guards and feature flags rather than API
IGNORE_MACRO_SUFFIXES = (
    "_H",
    "_H_",
    "_H__",
    "_HPP",
    "_HPP_",
    "_HPP__",
    "_INCLUDED",
    "_DEFINED",
)


def _is_guard_macro(node: Node) -> bool:
    name = node.child_by_field_name("name")
    return (
        node.type == "preproc_def"
        and node.child_by_field_name("value") is None
        and name is not None
        and c_syntax.node_text(name).endswith(IGNORE_MACRO_SUFFIXES)
    )


class SymbolFinder:
    """Extracts find-all-symbols records from header files."""

    def __init__(self, root: Path | None = None):
        self.root = root
        self.parser = c_syntax.create_parser()

    def header_path(self, path: Path) -> str:
        if self.root is None:
            return path.as_posix()
        try:
            return path.absolute().relative_to(self.root.absolute()).as_posix()
        except ValueError:
            return path.as_posix()

    def find_in_paths(self, paths: list[Path]) -> list[SymbolRecord]:
        """Scan header files, descending into directories."""
        headers = []
        for path in paths:
            if path.is_dir():
                headers.extend(
                    sorted(p for p in path.rglob("*") if p.is_file() and p.suffix in HEADER_SUFFIXES)
                )
            else:
                headers.append(path)

        records: list[SymbolRecord] = []
        seen = set()
        for header in headers:
            for record in self.find_in_file(header):
                if record not in seen:
                    seen.add(record)
                    records.append(record)
        return records

    def find_in_file(self, path: Path) -> list[SymbolRecord]:
        try:
            code = path.read_bytes()
        except OSError as e:
            logger.warning(f"Failed to read {path}: {e}")
            return []
        return self.find_in_source(code, self.header_path(path))

    def find_in_source(self, code: bytes, header_path: str) -> list[SymbolRecord]:
        root = self.parser.parse(code).root_node
        if root.has_error:
            logger.warning(f"Syntax errors in {header_path}, some symbols may be missing")

        records = []
        for node in c_syntax.iter_file_scope(root):
            for name_node, kind in self._symbols_of(node):
                records.append(
                    SymbolRecord(
                        name=c_syntax.node_text(name_node),
                        kind=kind,
                        header_path=header_path,
                        line_hint=name_node.start_point[0] + 1,
                    )
                )
        return records

    def _symbols_of(self, node: Node) -> list[tuple[Node, SymbolKind]]:
        kind = node.type
        symbols: list[tuple[Node, SymbolKind]] = []

        if kind == "function_definition":
            name = c_syntax.declarator_name(node.child_by_field_name("declarator"))
            if name is not None:
                symbols.append((name, SymbolKind.FUNCTION))

        elif kind == "declaration":
            symbols.extend(self._tag_symbols(node.child_by_field_name("type")))
            for declarator in node.children_by_field_name("declarator"):
                name = c_syntax.declarator_name(declarator)
                if name is None:
                    continue
                is_function = declarator.type == "function_declarator" or (
                    declarator.type == "pointer_declarator"
                    and any(c.type == "function_declarator" for c in declarator.named_children)
                )
                symbols.append((name, SymbolKind.FUNCTION if is_function else SymbolKind.VARIABLE))

        elif kind == "type_definition":
            symbols.extend(self._tag_symbols(node.child_by_field_name("type")))
            for declarator in node.children_by_field_name("declarator"):
                name = c_syntax.declarator_name(declarator)
                if name is not None:
                    symbols.append((name, SymbolKind.TYPEDEF))

        elif kind in c_syntax.TAG_SPECIFIERS:
            symbols.extend(self._tag_symbols(node))

        elif kind in ("preproc_def", "preproc_function_def") and not _is_guard_macro(node):
            name = node.child_by_field_name("name")
            if name is not None:
                symbols.append((name, SymbolKind.MACRO))

        return symbols

    def _tag_symbols(self, node: Node | None) -> list[tuple[Node, SymbolKind]]:
        """Named struct/union/enum definitions and their enumerators."""
        if node is None or node.type not in c_syntax.TAG_SPECIFIERS:
            return []
        body = node.child_by_field_name("body")
        if body is None:
            return []

        symbols = []
        name = node.child_by_field_name("name")
        if node.type == "enum_specifier":
            if name is not None:
                symbols.append((name, SymbolKind.ENUM))
            for enumerator in body.named_children:
                if enumerator.type == "enumerator":
                    constant = enumerator.child_by_field_name("name")
                    if constant is not None:
                        symbols.append((constant, SymbolKind.ENUM_CONSTANT))
        elif name is not None:
            symbols.append((name, SymbolKind.CLASS))
        return symbols


def find_all_symbols(paths: list[Path], root: Path | None = None) -> list[SymbolRecord]:
    """Convenience function to scan headers with a fresh SymbolFinder."""
    return SymbolFinder(root).find_in_paths(paths)
