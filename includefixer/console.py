#!/usr/bin/env python3

from typing import IO

from rich.console import Console as RichConsole
from rich.markup import escape


class Console:
    """Report output on stderr, kept off stdout so piped source text stays clean."""

    def __init__(self, quiet: bool = False, file: IO[str] | None = None):
        self.quiet = quiet
        self._rich = RichConsole(
            file=file, stderr=file is None, highlight=False, emoji=False, soft_wrap=True
        )

    def print(self, *args, **kwargs):
        """Print using Rich console."""
        return self._rich.print(*args, **kwargs)

    def added_header(self, spelling: str):
        if not self.quiet:
            self.print(f"Added #include {escape(spelling)}")

    def unresolved_symbol(self, name: str):
        if not self.quiet:
            self.print(f"Unresolved symbol: {escape(name)}")

    def error(self, message: str):
        """Errors are printed even in quiet mode."""
        self.print(f"[red]{escape(message)}[/red]")
