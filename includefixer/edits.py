#!/usr/bin/env python3

import logging
from collections import defaultdict
from pathlib import Path
from typing import NamedTuple

from includefixer.errors import ConflictError

logger = logging.getLogger(__name__)


class TextEdit(NamedTuple):
    """Replace `length` characters at `offset` of a file with `replacement_text`."""

    file_path: str
    offset: int
    length: int
    replacement_text: str

    @property
    def end(self) -> int:
        return self.offset + self.length


def check_conflicts(edits: list[TextEdit], text_length: int) -> list[TextEdit]:
    """Return edits sorted by offset, raising ConflictError if any two overlap.

    Two insertions at the same offset also conflict since their order
    would be undefined.
    """
    ordered = sorted(edits, key=lambda e: (e.offset, e.length))
    previous = None
    for edit in ordered:
        if edit.offset < 0 or edit.length < 0 or edit.end > text_length:
            raise ConflictError(
                f"Edit at {edit.offset}+{edit.length} does not fit {edit.file_path} "
                f"({text_length} characters)"
            )
        if previous is not None and (
            edit.offset < previous.end or edit.offset == previous.offset
        ):
            raise ConflictError(
                f"Conflicting edits in {edit.file_path}: "
                f"{previous.offset}+{previous.length} and {edit.offset}+{edit.length}"
            )
        previous = edit
    return ordered


def apply_edits(text: str, edits: list[TextEdit]) -> str:
    """Apply non-overlapping edits to text in one left-to-right pass."""
    if not edits:
        return text

    pieces = []
    position = 0
    for edit in check_conflicts(edits, len(text)):
        pieces.append(text[position : edit.offset])
        pieces.append(edit.replacement_text)
        position = edit.end
    pieces.append(text[position:])
    return "".join(pieces)


def apply_edits_to_files(edits: list[TextEdit]) -> list[Path]:
    """Apply edits to the files they name and return the files that changed.

    Every file's edits are checked before anything is written, so a conflict
    leaves all files untouched.
    """
    by_file: dict[str, list[TextEdit]] = defaultdict(list)
    for edit in edits:
        by_file[edit.file_path].append(edit)

    updates: dict[Path, str] = {}
    for file_path, file_edits in by_file.items():
        path = Path(file_path)
        original = path.read_text()
        updated = apply_edits(original, file_edits)
        if updated != original:
            updates[path] = updated

    for path, content in updates.items():
        path.write_text(content)
        logger.debug(f"Rewrote {path}")

    return list(updates)
