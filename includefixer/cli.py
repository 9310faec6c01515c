#!/usr/bin/env python3

import logging
import sys
from pathlib import Path

import click

from includefixer.config import DatabaseFormat, FixerConfig
from includefixer.console import Console
from includefixer.driver import run_include_fixer
from includefixer.find_symbols import find_all_symbols
from includefixer.style import PREDEFINED_STYLES
from includefixer.symbols import dump_symbols_yaml
from includefixer.yaml_index import DEFAULT_DB_FILENAME


def setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )


@click.command()
@click.option(
    "--db",
    "db_format",
    type=click.Choice([f.value for f in DatabaseFormat], case_sensitive=False),
    default=DatabaseFormat.YAML.value,
    help="Symbol database format: fixed (hard-coded mapping) or yaml/persisted "
    "(database created by find-all-symbols)",
)
@click.option(
    "--input",
    "input_",
    default="",
    help="String to initialize the database: 'symbol=header[,header];...' for fixed, "
    "a database file or directory for yaml",
)
@click.option(
    "--minimize-paths/--no-minimize-paths",
    default=True,
    help="Whether to minimize added include paths",
)
@click.option("-q", "--quiet", is_flag=True, help="Reduce terminal output")
@click.option(
    "--stdin",
    "stdin_mode",
    is_flag=True,
    help="Override the source file's content with input from stdin and print the "
    "fixed code to stdout. Requires exactly one source file.",
)
@click.option(
    "--style",
    type=click.Choice(sorted(PREDEFINED_STYLES), case_sensitive=False),
    default="llvm",
    help="Fallback style for ordering new headers if no .clang-format file is found",
)
@click.option(
    "-p",
    "--build-path",
    type=click.Path(exists=True, path_type=Path),
    help="Directory containing compile_commands.json",
)
@click.option(
    "-I",
    "--include-dir",
    "include_dirs",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Add a directory to the include search path",
)
@click.option(
    "--isystem",
    "system_include_dirs",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Add a directory to the system include search path",
)
@click.option(
    "--db-filename",
    default=DEFAULT_DB_FILENAME,
    show_default=True,
    help="Database file name to search for when no --input is given",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.argument("sources", nargs=-1, required=True, type=click.Path(path_type=Path))
def main(
    db_format: str,
    input_: str,
    minimize_paths: bool,
    quiet: bool,
    stdin_mode: bool,
    style: str,
    build_path: Path | None,
    include_dirs: tuple[Path, ...],
    system_include_dirs: tuple[Path, ...],
    db_filename: str,
    verbose: bool,
    sources: tuple[Path, ...],
):
    """Add missing #include directives to C SOURCES."""
    setup_logging(verbose)
    config = FixerConfig(
        db_format=DatabaseFormat(db_format.lower()),
        input=input_,
        db_filename=db_filename,
        minimize_include_paths=minimize_paths,
        quiet=quiet,
        stdin_mode=stdin_mode,
        style=style.lower(),
        include_dirs=list(include_dirs),
        system_include_dirs=list(system_include_dirs),
        build_path=build_path,
    )
    exit_code = run_include_fixer(
        config,
        list(sources),
        Console(quiet=quiet),
        stdin=click.get_text_stream("stdin"),
        stdout=click.get_text_stream("stdout"),
    )
    sys.exit(exit_code)


@click.command()
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Write header paths relative to this directory",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help=f"Output file (e.g. {DEFAULT_DB_FILENAME}); defaults to stdout",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
def find_all_symbols_main(root: Path | None, output: Path | None, verbose: bool, paths: tuple[Path, ...]):
    """Build a symbol database from the headers in PATHS."""
    setup_logging(verbose)
    records = find_all_symbols(list(paths), root=root)
    if output is None:
        dump_symbols_yaml(records, click.get_text_stream("stdout"))
    else:
        with open(output, "w", encoding="utf-8") as f:
            dump_symbols_yaml(records, f)
        Console().print(f"Wrote {len(records)} symbols to {output}")


if __name__ == "__main__":
    main()
