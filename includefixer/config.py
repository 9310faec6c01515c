#!/usr/bin/env python3

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from includefixer.search_paths import IncludeSearchPaths
from includefixer.yaml_index import DEFAULT_DB_FILENAME


class DatabaseFormat(str, Enum):
    FIXED = "fixed"  # hard-coded mapping from --input
    YAML = "yaml"  # database created by find-all-symbols
    PERSISTED = "persisted"  # alias of yaml

    @property
    def is_persisted(self) -> bool:
        return self is not DatabaseFormat.FIXED


class FixerConfig(BaseModel):
    """Settings for one include-fixer run."""

    # Symbol database
    db_format: DatabaseFormat = DatabaseFormat.YAML
    input: str = ""  # literal mapping, or database file/directory
    db_filename: str = DEFAULT_DB_FILENAME

    # Output policy
    minimize_include_paths: bool = True
    quiet: bool = False
    stdin_mode: bool = False
    style: str = "llvm"  # fallback when no .clang-format is found

    # Include search
    include_dirs: list[Path] = Field(default_factory=list)
    system_include_dirs: list[Path] = Field(default_factory=list)
    build_path: Path | None = None  # directory holding compile_commands.json

    def search_paths(self) -> IncludeSearchPaths:
        """Search paths given on the command line."""
        return IncludeSearchPaths(
            include_dirs=[p.absolute() for p in self.include_dirs],
            system_dirs=[p.absolute() for p in self.system_include_dirs],
        )
