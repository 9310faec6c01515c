#!/usr/bin/env python3
"""
Include flags from a JSON compilation database (compile_commands.json).
"""

import json
import logging
import os
import shlex
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from includefixer.errors import LoadError
from includefixer.search_paths import IncludeSearchPaths

logger = logging.getLogger(__name__)

COMPILE_COMMANDS = "compile_commands.json"


class CompileCommand(BaseModel):
    """One entry of compile_commands.json."""

    directory: Path
    file: Path
    arguments: list[str] = Field(default_factory=list)
    command: str | None = None

    def argv(self) -> list[str]:
        if self.arguments:
            return self.arguments
        return shlex.split(self.command or "")

    def source_path(self) -> Path:
        return Path(os.path.normpath(self.directory / self.file))

    def search_paths(self) -> IncludeSearchPaths:
        """Extract -I, -iquote and -isystem directories."""
        include_dirs: list[Path] = []
        system_dirs: list[Path] = []
        argv = self.argv()
        i = 0
        while i < len(argv):
            arg = argv[i]
            for flag, target in (("-isystem", system_dirs), ("-iquote", include_dirs), ("-I", include_dirs)):
                if arg == flag and i + 1 < len(argv):
                    i += 1
                    target.append(self._absolute(argv[i]))
                    break
                if arg.startswith(flag) and len(arg) > len(flag):
                    target.append(self._absolute(arg[len(flag):]))
                    break
            i += 1
        return IncludeSearchPaths(include_dirs=include_dirs, system_dirs=system_dirs)

    def _absolute(self, path: str) -> Path:
        return Path(os.path.normpath(self.directory / path))


class CompilationDatabase:
    """Per-file include search paths taken from compile_commands.json."""

    def __init__(self, commands: list[CompileCommand], source: Path | None = None):
        self.source = source
        self._commands = {command.source_path(): command for command in commands}

    @classmethod
    def load(cls, build_path: Path) -> "CompilationDatabase":
        """Load compile_commands.json from build_path (a directory or the file itself)."""
        path = Path(build_path)
        if path.is_dir():
            path = path / COMPILE_COMMANDS
        try:
            entries = json.loads(path.read_text())
            if not isinstance(entries, list):
                raise LoadError(f"{path}: expected a list of compile commands")
            commands = [CompileCommand.model_validate(entry) for entry in entries]
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise LoadError(f"Cannot load compilation database {path}: {e}") from e
        logger.debug(f"Loaded {len(commands)} compile commands from {path}")
        return cls(commands, source=path)

    @classmethod
    def find(cls, start_path: Path) -> Optional["CompilationDatabase"]:
        """Find compile_commands.json by searching up the directory tree."""
        current = Path(os.path.abspath(start_path))
        for _ in range(len(current.parts)):
            candidate = current / COMPILE_COMMANDS
            if candidate.is_file():
                return cls.load(candidate)
            if current == current.parent:
                break
            current = current.parent
        return None

    def search_paths_for(self, source: Path) -> IncludeSearchPaths:
        command = self._commands.get(Path(os.path.abspath(source)))
        if command is None:
            return IncludeSearchPaths()
        return command.search_paths()
