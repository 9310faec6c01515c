#!/usr/bin/env python3
"""
Turns the unresolved symbols of a unit into a single #include insertion.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from includefixer.config import FixerConfig
from includefixer.detect import TranslationUnit
from includefixer.edits import TextEdit
from includefixer.errors import UnresolvedError
from includefixer.index_manager import SymbolIndexManager
from includefixer.search_paths import IncludeSearchPaths, spell_header
from includefixer.style import IncludeStyle, predefined_style

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeaderCandidate:
    """A header that declares a symbol, with its #include spelling."""

    header_path: str
    spelling: str


HeaderSelector = Callable[[Sequence[HeaderCandidate]], HeaderCandidate]


def select_first_candidate(candidates: Sequence[HeaderCandidate]) -> HeaderCandidate:
    """Pick the best-ranked candidate: earliest index, then earliest record."""
    return candidates[0]


@dataclass
class FixResult:
    """Headers added to one unit and the symbols left unresolved."""

    path: Path
    headers: list[str] = field(default_factory=list)
    unresolved: list[UnresolvedError] = field(default_factory=list)
    edits: list[TextEdit] = field(default_factory=list)

    @property
    def unresolved_names(self) -> list[str]:
        return [error.name for error in self.unresolved]


class IncludeFixer:
    """Chooses a header for each unresolved symbol and builds the edit adding them."""

    def __init__(
        self,
        index_manager: SymbolIndexManager,
        config: FixerConfig,
        select_header: HeaderSelector = select_first_candidate,
    ):
        self.index_manager = index_manager
        self.config = config
        self.select_header = select_header

    def candidates(
        self, name: str, search_paths: IncludeSearchPaths, from_dir: Path
    ) -> list[HeaderCandidate]:
        """Distinct headers declaring name, in ranking order."""
        result = []
        seen = set()
        for record in self.index_manager.lookup(name):
            if record.header_path in seen:
                continue
            seen.add(record.header_path)
            spelling = spell_header(
                record.header_path,
                search_paths,
                from_dir,
                minimize=self.config.minimize_include_paths,
            )
            result.append(HeaderCandidate(record.header_path, spelling))
        return result

    def create_edits(
        self,
        unit: TranslationUnit,
        search_paths: IncludeSearchPaths | None = None,
        style: IncludeStyle | None = None,
    ) -> FixResult:
        search_paths = search_paths or IncludeSearchPaths()
        style = style or predefined_style(self.config.style)
        from_dir = unit.path.absolute().parent
        included = unit.included_spellings

        result = FixResult(path=unit.path)
        headers: set[str] = set()
        for symbol in unit.unresolved:
            candidates = self.candidates(symbol.name, search_paths, from_dir)
            if not candidates:
                result.unresolved.append(UnresolvedError(symbol.name, symbol.offset))
                continue
            if any(c.spelling in included for c in candidates):
                logger.debug(f"{symbol.name}: declaring header already included")
                continue
            chosen = self.select_header(candidates)
            logger.debug(f"{symbol.name}: chose {chosen.spelling} from {len(candidates)} candidates")
            headers.add(chosen.spelling)

        result.headers = sorted(headers, key=style.sort_key)
        if result.headers:
            result.edits = [self._insertion_edit(unit, result.headers)]
        return result

    def _insertion_edit(self, unit: TranslationUnit, headers: list[str]) -> TextEdit:
        offset = unit.insertion_offset
        text = "".join(f"#include {header}\n" for header in headers)
        if offset > 0 and unit.code[offset - 1] != "\n":
            text = "\n" + text
        if not unit.has_include_block and offset < len(unit.code):
            text += "\n"
        return TextEdit(str(unit.path), offset, 0, text)
