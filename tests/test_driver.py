#!/usr/bin/env python3

import io
import tempfile
from pathlib import Path

import pytest

from includefixer import driver
from includefixer.config import DatabaseFormat, FixerConfig
from includefixer.console import Console
from includefixer.driver import create_symbol_index_manager, run_include_fixer
from includefixer.edits import TextEdit
from includefixer.fixer import IncludeFixer

MAIN_C = """#include "existing.h"

int main(void) {
    Foo f;
    Bar b;
    return Baz(f, b);
}
"""

FIXED_MAIN_C = """#include "bar.h"
#include "foo.h"
#include "existing.h"

int main(void) {
    Foo f;
    Bar b;
    return Baz(f, b);
}
"""

SPEC = "Foo=foo.h;Bar=bar.h,bar2.h"

DB_TEXT = """---
Name:            Foo
FilePath:        foo.h
LineNumber:      3
Type:            Class
...
"""

UNIQUE_DB_NAME = "includefixer_driver_db_that_does_not_exist.yaml"


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def output():
    return io.StringIO()


def fixed_config(**kwargs) -> FixerConfig:
    return FixerConfig(db_format=DatabaseFormat.FIXED, input=SPEC, **kwargs)


class TestFileMode:
    def test_rewrites_file_and_reports(self, temp_dir, output):
        source = temp_dir / "main.c"
        source.write_text(MAIN_C)

        code = run_include_fixer(fixed_config(), [source], Console(file=output))

        assert code == 0
        assert source.read_text() == FIXED_MAIN_C
        lines = output.getvalue().splitlines()
        assert 'Added #include "bar.h"' in lines
        assert 'Added #include "foo.h"' in lines
        assert "Unresolved symbol: Baz" in lines

    def test_quiet_suppresses_report(self, temp_dir, output):
        source = temp_dir / "main.c"
        source.write_text(MAIN_C)

        code = run_include_fixer(fixed_config(quiet=True), [source], Console(quiet=True, file=output))

        assert code == 0
        assert output.getvalue() == ""

    def test_rerun_leaves_file_alone(self, temp_dir, output):
        source = temp_dir / "main.c"
        source.write_text(FIXED_MAIN_C)

        assert run_include_fixer(fixed_config(), [source], Console(file=output)) == 0
        assert source.read_text() == FIXED_MAIN_C
        assert "Added" not in output.getvalue()

    def test_failing_unit_does_not_stop_others(self, temp_dir, output):
        broken = temp_dir / "broken.c"
        broken.write_text("int main( {\n")
        good = temp_dir / "good.c"
        good.write_text(MAIN_C)

        code = run_include_fixer(fixed_config(), [broken, good], Console(file=output))

        assert code == 1
        assert broken.read_text() == "int main( {\n"
        assert good.read_text() == FIXED_MAIN_C
        assert f"Failed to analyze {broken}" in output.getvalue()

    def test_conflicting_edits_skip_only_that_unit(self, temp_dir, output, monkeypatch):
        class OverlappingFixer(IncludeFixer):
            def create_edits(self, unit, search_paths=None, style=None):
                result = super().create_edits(unit, search_paths, style)
                if unit.path.name == "first.c":
                    path = str(unit.path)
                    result.edits = [TextEdit(path, 0, 4, "x"), TextEdit(path, 2, 2, "y")]
                return result

        monkeypatch.setattr(driver, "IncludeFixer", OverlappingFixer)
        first = temp_dir / "first.c"
        first.write_text(MAIN_C)
        second = temp_dir / "second.c"
        second.write_text(MAIN_C)

        code = run_include_fixer(fixed_config(), [first, second], Console(file=output))

        assert code == 1
        assert first.read_text() == MAIN_C
        assert second.read_text() == FIXED_MAIN_C
        assert f"Not writing {first}" in output.getvalue()

    def test_invalid_style_file_falls_back_per_unit(self, temp_dir, output):
        (temp_dir / ".clang-format").write_text("IncludeCategories:\n  - Regex: '(unclosed'\n    Priority: 1\n")
        sub = temp_dir / "sub"
        sub.mkdir()
        (sub / ".clang-format").write_text("BasedOnStyle: LLVM\n")
        first = temp_dir / "a.c"
        first.write_text(MAIN_C)
        second = sub / "b.c"
        second.write_text(MAIN_C)

        code = run_include_fixer(fixed_config(), [first, second], Console(file=output))

        assert code == 0
        assert first.read_text() == FIXED_MAIN_C
        assert second.read_text() == FIXED_MAIN_C

    def test_missing_source(self, temp_dir, output):
        code = run_include_fixer(fixed_config(), [temp_dir / "missing.c"], Console(file=output))

        assert code == 1
        assert "no such file" in output.getvalue()

    def test_no_sources(self, output):
        assert run_include_fixer(fixed_config(), [], Console(file=output)) == 1


class TestStreamMode:
    def test_prints_fixed_code(self, temp_dir, output):
        stdout = io.StringIO()
        source = temp_dir / "main.c"

        code = run_include_fixer(
            fixed_config(stdin_mode=True),
            [source],
            Console(file=output),
            stdin=io.StringIO(MAIN_C),
            stdout=stdout,
        )

        assert code == 0
        assert stdout.getvalue() == FIXED_MAIN_C
        assert not source.exists()
        assert "Unresolved symbol: Baz" in output.getvalue()

    def test_unchanged_code_is_echoed(self, temp_dir, output):
        stdout = io.StringIO()
        run_include_fixer(
            fixed_config(stdin_mode=True),
            [temp_dir / "main.c"],
            Console(file=output),
            stdin=io.StringIO(FIXED_MAIN_C),
            stdout=stdout,
        )

        assert stdout.getvalue() == FIXED_MAIN_C

    def test_empty_input(self, temp_dir, output):
        stdout = io.StringIO()

        code = run_include_fixer(
            fixed_config(stdin_mode=True),
            [temp_dir / "main.c"],
            Console(file=output),
            stdin=io.StringIO(""),
            stdout=stdout,
        )

        assert code == 0
        assert stdout.getvalue() == ""

    def test_defaults_to_process_streams(self, temp_dir, output, monkeypatch):
        stdout = io.StringIO()
        monkeypatch.setattr("sys.stdin", io.StringIO(MAIN_C))
        monkeypatch.setattr("sys.stdout", stdout)

        code = run_include_fixer(fixed_config(stdin_mode=True), [temp_dir / "main.c"], Console(file=output))

        assert code == 0
        assert stdout.getvalue() == FIXED_MAIN_C

    def test_requires_exactly_one_source(self, temp_dir, output):
        code = run_include_fixer(
            fixed_config(stdin_mode=True),
            [temp_dir / "a.c", temp_dir / "b.c"],
            Console(file=output),
            stdin=io.StringIO(MAIN_C),
            stdout=io.StringIO(),
        )

        assert code == 1
        assert "exactly one" in output.getvalue()


class TestDatabaseSetup:
    def test_yaml_database_found_next_to_source(self, temp_dir, output):
        (temp_dir / "find_all_symbols_db.yaml").write_text(DB_TEXT)
        src = temp_dir / "src"
        src.mkdir()
        source = src / "main.c"
        source.write_text("void f(void) { Foo a; }\n")

        code = run_include_fixer(FixerConfig(), [source], Console(file=output))

        assert code == 0
        assert source.read_text() == '#include "foo.h"\n\nvoid f(void) { Foo a; }\n'

    def test_yaml_database_from_input_file(self, temp_dir):
        db = temp_dir / "symbols.yaml"
        db.write_text(DB_TEXT)

        manager = create_symbol_index_manager(
            FixerConfig(db_format=DatabaseFormat.PERSISTED, input=str(db)), temp_dir / "a.c"
        )

        assert [r.header_path for r in manager.lookup("Foo")] == ["foo.h"]

    def test_yaml_database_from_input_directory(self, temp_dir):
        (temp_dir / "find_all_symbols_db.yaml").write_text(DB_TEXT)
        nested = temp_dir / "a" / "b"
        nested.mkdir(parents=True)

        manager = create_symbol_index_manager(FixerConfig(input=str(nested)), temp_dir / "x.c")

        assert len(manager.lookup("Foo")) == 1

    def test_fixed_database(self, temp_dir):
        manager = create_symbol_index_manager(fixed_config(), temp_dir / "a.c")

        assert [r.header_path for r in manager.lookup("Bar")] == ["bar.h", "bar2.h"]

    def test_missing_database(self, temp_dir, output):
        source = temp_dir / "main.c"
        source.write_text(MAIN_C)

        code = run_include_fixer(FixerConfig(db_filename=UNIQUE_DB_NAME), [source], Console(file=output))

        assert code == 1
        assert "Couldn't find YAML db" in output.getvalue()
        assert source.read_text() == MAIN_C

    def test_malformed_database(self, temp_dir, output):
        db = temp_dir / "symbols.yaml"
        db.write_text("Name: [unterminated\n")
        source = temp_dir / "main.c"
        source.write_text(MAIN_C)

        code = run_include_fixer(FixerConfig(input=str(db)), [source], Console(file=output))

        assert code == 1
        assert source.read_text() == MAIN_C


class TestCompilationDatabase:
    def test_include_dirs_from_build_path(self, temp_dir, output):
        include = temp_dir / "include"
        include.mkdir()
        (include / "foo.h").write_text("typedef int Foo;\n")
        source = temp_dir / "main.c"
        source.write_text("void f(void) { Foo a; }\n")
        build = temp_dir / "build"
        build.mkdir()
        (build / "compile_commands.json").write_text(
            f'[{{"directory": "{temp_dir}", "file": "main.c", "arguments": ["cc", "-Iinclude", "main.c"]}}]'
        )
        config = FixerConfig(
            db_format=DatabaseFormat.FIXED, input=f"Foo={include / 'foo.h'}", build_path=build
        )

        assert run_include_fixer(config, [source], Console(file=output)) == 0
        assert source.read_text() == '#include "foo.h"\n\nvoid f(void) { Foo a; }\n'
