#!/usr/bin/env python3
"""
Runs the include fixer over a batch of source units.
"""

import logging
import sys
from pathlib import Path
from typing import IO

from includefixer.compile_db import CompilationDatabase
from includefixer.config import DatabaseFormat, FixerConfig
from includefixer.console import Console
from includefixer.detect import UnresolvedSymbolDetector, read_unit
from includefixer.edits import apply_edits, apply_edits_to_files
from includefixer.errors import ConflictError, DetectionError, LoadError, NotFoundError
from includefixer.fixer import FixResult, IncludeFixer
from includefixer.in_memory_index import InMemorySymbolIndex
from includefixer.index_manager import SymbolIndexManager
from includefixer.style import resolve_style
from includefixer.yaml_index import YamlSymbolIndex

logger = logging.getLogger(__name__)


def create_symbol_index_manager(config: FixerConfig, first_source: Path) -> SymbolIndexManager:
    """Set up the configured symbol database.

    Raises LoadError or NotFoundError when a persisted database is unusable.
    """
    manager = SymbolIndexManager()
    if config.db_format is DatabaseFormat.FIXED:
        manager.add_symbol_index(InMemorySymbolIndex.from_spec(config.input))
        return manager

    if config.input and Path(config.input).is_dir():
        index = YamlSymbolIndex.create_from_directory(Path(config.input), config.db_filename)
    elif config.input:
        index = YamlSymbolIndex.create_from_file(Path(config.input))
    else:
        # No database given: look in the directory of the first file and its parents.
        directory = first_source.absolute().parent
        index = YamlSymbolIndex.create_from_directory(directory, config.db_filename)
    manager.add_symbol_index(index)
    return manager


def run_include_fixer(
    config: FixerConfig,
    sources: list[Path],
    console: Console,
    stdin: IO[str] | None = None,
    stdout: IO[str] | None = None,
) -> int:
    """Fix every source and return the process exit code.

    In stdin mode the unit is read from stdin and written to stdout, which
    default to the process streams.
    """
    if not sources:
        console.error("No input files given")
        return 1

    code = None
    if config.stdin_mode:
        if len(sources) != 1:
            console.error("Expected exactly one file path in stdin mode")
            return 1
        stdin = stdin if stdin is not None else sys.stdin
        stdout = stdout if stdout is not None else sys.stdout
        code = stdin.read()
        if not code:
            return 0

    try:
        index_manager = create_symbol_index_manager(config, sources[0])
    except (LoadError, NotFoundError) as e:
        console.error(f"Couldn't find YAML db: {e}")
        return 1

    try:
        if config.build_path is not None:
            compile_db = CompilationDatabase.load(config.build_path)
        else:
            compile_db = CompilationDatabase.find(sources[0].absolute().parent)
    except LoadError as e:
        console.error(str(e))
        return 1

    fixer = IncludeFixer(index_manager, config)
    failed = False
    for source in sources:
        search_paths = config.search_paths()
        if compile_db is not None:
            search_paths = search_paths.merged(compile_db.search_paths_for(source))
        detector = UnresolvedSymbolDetector(search_paths)

        try:
            unit_code = code if code is not None else read_unit(source)
            unit = detector.detect(source, unit_code)
            style = resolve_style(config.style, source)
            result = fixer.create_edits(unit, search_paths, style)
            if config.stdin_mode:
                stdout.write(apply_edits(unit_code, result.edits))
            else:
                apply_edits_to_files(result.edits)
        except DetectionError as e:
            console.error(f"Failed to analyze {source}: {e}")
            failed = True
            continue
        except ConflictError as e:
            console.error(f"Not writing {source}: {e}")
            failed = True
            continue
        except OSError as e:
            console.error(f"Failed to write {source}: {e}")
            return 1

        report(result, console)

    return 1 if failed else 0


def report(result: FixResult, console: Console) -> None:
    for header in result.headers:
        console.added_header(header)
    for name in result.unresolved_names:
        console.unresolved_symbol(name)
