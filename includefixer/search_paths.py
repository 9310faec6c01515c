#!/usr/bin/env python3

import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class IncludeSearchPaths(BaseModel):
    """Directories searched for #include targets."""

    include_dirs: list[Path] = Field(default_factory=list)  # -I / -iquote
    system_dirs: list[Path] = Field(default_factory=list)  # -isystem

    def merged(self, other: "IncludeSearchPaths") -> "IncludeSearchPaths":
        """Combine with another set of paths, keeping first occurrences."""
        return IncludeSearchPaths(
            include_dirs=_unique(self.include_dirs + other.include_dirs),
            system_dirs=_unique(self.system_dirs + other.system_dirs),
        )

    def candidates(self, spelling: str, from_dir: Path) -> list[tuple[Path, bool]]:
        """Directories to try for an include spelling, as (dir, is_system)."""
        dirs = [(d, False) for d in self.include_dirs] + [(d, True) for d in self.system_dirs]
        if spelling.startswith('"'):
            dirs.insert(0, (from_dir, False))
        return dirs

    def resolve(self, spelling: str, from_dir: Path) -> Path | None:
        """Find the file an include spelling such as `"foo.h"` or `<foo.h>` refers to."""
        name = strip_include_delimiters(spelling)
        if not name:
            return None
        if os.path.isabs(name):
            return Path(name) if os.path.isfile(name) else None
        for directory, _ in self.candidates(spelling, from_dir):
            candidate = directory / name
            if candidate.is_file():
                return candidate
        return None


def _unique(paths: list[Path]) -> list[Path]:
    seen = set()
    result = []
    for path in paths:
        if path not in seen:
            seen.add(path)
            result.append(path)
    return result


def is_spelled(header: str) -> bool:
    """Check if a header is already written as `"..."` or `<...>`."""
    return (header.startswith('"') and header.endswith('"') and len(header) > 1) or (
        header.startswith("<") and header.endswith(">")
    )


def strip_include_delimiters(spelling: str) -> str:
    if is_spelled(spelling):
        return spelling[1:-1]
    return spelling


def spell_header(
    header: str,
    search_paths: IncludeSearchPaths,
    from_dir: Path,
    minimize: bool = True,
) -> str:
    """Turn a header path into the text that follows `#include`.

    With minimize, the path is rewritten relative to whichever search
    directory gives the shortest spelling; system directories produce an
    angled include. Headers no search directory contains are quoted as-is.
    """
    if is_spelled(header):
        return header
    if not minimize:
        return f'"{header}"'

    target = Path(os.path.abspath(header))
    best: tuple[str, bool] | None = None
    for directory, is_system in [(from_dir, False)] + search_paths.candidates("<>", from_dir):
        try:
            relative = target.relative_to(os.path.abspath(directory)).as_posix()
        except ValueError:
            continue
        if best is None or len(relative) < len(best[0]):
            best = (relative, is_system)

    if best is None:
        return f'"{header}"'
    relative, is_system = best
    logger.debug(f"Minimized {header} to {relative}")
    return f"<{relative}>" if is_system else f'"{relative}"'
