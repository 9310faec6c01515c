#!/usr/bin/env python3


class IncludeFixerError(Exception):
    """Base class for include-fixer failures."""


class LoadError(IncludeFixerError):
    """Raised when a symbol database or compilation database cannot be loaded."""


class NotFoundError(IncludeFixerError):
    """Raised when a directory search finds no symbol database."""

    def __init__(self, filename: str, start_dir):
        self.filename = filename
        self.start_dir = start_dir
        super().__init__(f"No {filename} found in {start_dir} or any parent directory")


class ConflictError(IncludeFixerError):
    """Raised when two edits for the same buffer overlap."""


class DetectionError(IncludeFixerError):
    """Raised when a unit cannot be analyzed for unresolved symbols."""


class UnresolvedError(IncludeFixerError):
    """A symbol with no candidate header.

    Never raised by lookups; the fixer collects these to describe misses.
    """

    def __init__(self, name: str, offset: int):
        self.name = name
        self.offset = offset
        super().__init__(f"No header found for symbol {name}")
