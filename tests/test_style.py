#!/usr/bin/env python3

import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from includefixer.style import IncludeCategory, parse_style_file, predefined_style, resolve_style


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


def test_llvm_orders_quoted_before_angled():
    style = predefined_style("llvm")
    headers = ["<zlib.h>", '"foo.h"', '"bar.h"', '"llvm/ADT/X.h"']

    assert sorted(headers, key=style.sort_key) == ['"bar.h"', '"foo.h"', '"llvm/ADT/X.h"', "<zlib.h>"]


def test_google_orders_c_system_headers_first():
    style = predefined_style("Google")
    headers = ['"foo.h"', "<vector>", "<zlib.h>"]

    assert sorted(headers, key=style.sort_key) == ["<zlib.h>", "<vector>", '"foo.h"']


def test_none_style_is_lexicographic():
    style = predefined_style("none")
    headers = ["<b.h>", '"c.h"', "<a.h>"]

    assert sorted(headers, key=style.sort_key) == sorted(headers)


def test_unknown_style():
    with pytest.raises(ValueError, match="Unknown style"):
        predefined_style("fancy")


def test_style_file_based_on_preset():
    style = parse_style_file("BasedOnStyle: Chromium\nColumnLimit: 100\n", ".clang-format")
    assert style.name == "chromium"
    assert style.priority("<zlib.h>") == 1


def test_style_file_include_categories():
    text = """
BasedOnStyle: LLVM
IncludeCategories:
  - Regex: '^"project/'
    Priority: 1
  - Regex: '.*'
    Priority: 5
"""
    style = parse_style_file(text, ".clang-format")

    assert style.priority('"project/a.h"') == 1
    assert style.priority("<stdio.h>") == 5


def test_style_file_skips_other_languages():
    text = "---\nLanguage: JavaScript\nBasedOnStyle: Google\n---\nLanguage: Cpp\nBasedOnStyle: WebKit\n"
    assert parse_style_file(text, ".clang-format").name == "webkit"


def test_resolve_uses_nearest_style_file(temp_dir):
    (temp_dir / ".clang-format").write_text("BasedOnStyle: Google\n")
    src = temp_dir / "src"
    src.mkdir()

    assert resolve_style("llvm", src / "a.c").name == "google"


def test_resolve_falls_back(temp_dir):
    assert resolve_style("mozilla", temp_dir / "a.c").name == "mozilla"


def test_unreadable_style_file_falls_back(temp_dir):
    (temp_dir / ".clang-format").write_text("BasedOnStyle: [broken\n")
    assert resolve_style("gnu", temp_dir / "a.c").name == "gnu"


BAD_REGEX_STYLE = """
BasedOnStyle: Google
IncludeCategories:
  - Regex: '(unclosed'
    Priority: 1
"""


def test_invalid_category_regex_rejected_on_load():
    with pytest.raises(ValidationError):
        IncludeCategory(regex="(unclosed", priority=1)
    with pytest.raises(ValidationError):
        parse_style_file(BAD_REGEX_STYLE, ".clang-format")


def test_invalid_category_regex_falls_back(temp_dir):
    (temp_dir / ".clang-format").write_text(BAD_REGEX_STYLE)

    style = resolve_style("llvm", temp_dir / "a.c")

    assert style.name == "llvm"
    assert style.priority('"foo.h"') == 1
