#!/usr/bin/env python3

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

STYLE_FILENAMES = (".clang-format", "_clang-format")

# Headers matching no category sort last.
UNMATCHED_PRIORITY = 2**31 - 1


class IncludeCategory(BaseModel):
    """A clang-format include category."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    regex: str = Field(alias="Regex")
    priority: int = Field(alias="Priority")

    @field_validator("regex")
    @classmethod
    def _check_regex(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid include category regex {value!r}: {e}") from e
        return value


class IncludeStyle(BaseModel):
    """The parts of a formatting style that order #include lines."""

    name: str
    categories: list[IncludeCategory] = Field(default_factory=list)

    def priority(self, spelling: str) -> int:
        for category in self.categories:
            if re.search(category.regex, spelling):
                return category.priority
        return UNMATCHED_PRIORITY

    def sort_key(self, spelling: str) -> tuple[int, str]:
        return (self.priority(spelling), spelling)


_LLVM_CATEGORIES = [
    IncludeCategory(regex=r'^"(llvm|llvm-c|clang|clang-c)/', priority=2),
    IncludeCategory(regex=r'^(<|"(gtest|gmock|isl|json)/)', priority=3),
    IncludeCategory(regex=r".*", priority=1),
]

_GOOGLE_CATEGORIES = [
    IncludeCategory(regex=r"^<ext/.*\.h>", priority=2),
    IncludeCategory(regex=r"^<.*\.h>", priority=1),
    IncludeCategory(regex=r"^<.*", priority=2),
    IncludeCategory(regex=r".*", priority=3),
]

PREDEFINED_STYLES: dict[str, list[IncludeCategory]] = {
    "llvm": _LLVM_CATEGORIES,
    "google": _GOOGLE_CATEGORIES,
    "chromium": _GOOGLE_CATEGORIES,
    "mozilla": _LLVM_CATEGORIES,
    "webkit": _LLVM_CATEGORIES,
    "gnu": _LLVM_CATEGORIES,
    "none": [],
}


def predefined_style(name: str) -> IncludeStyle:
    """Return a named preset, raising ValueError for unknown names."""
    key = name.lower()
    if key not in PREDEFINED_STYLES:
        raise ValueError(f"Unknown style {name!r}, expected one of {sorted(PREDEFINED_STYLES)}")
    return IncludeStyle(name=key, categories=list(PREDEFINED_STYLES[key]))


def parse_style_file(text: str, name: str) -> IncludeStyle:
    """Parse the include settings of a .clang-format file.

    Only the first document for C/C++ (or without a Language key) is used.
    """
    for document in yaml.safe_load_all(text):
        if not isinstance(document, dict):
            continue
        if document.get("Language", "Cpp") not in ("Cpp", "C"):
            continue

        base_name = str(document.get("BasedOnStyle", "llvm"))
        try:
            style = predefined_style(base_name)
        except ValueError:
            logger.warning(f"{name}: unknown BasedOnStyle {base_name!r}, using llvm")
            style = predefined_style("llvm")

        if "IncludeCategories" in document:
            categories = [
                IncludeCategory.model_validate(entry)
                for entry in document["IncludeCategories"] or []
            ]
            style = IncludeStyle(name=style.name, categories=categories)
        return style
    return predefined_style("llvm")


def find_style_file(start_dir: Path) -> Path | None:
    """Find the nearest .clang-format at or above start_dir."""
    current = Path(os.path.abspath(start_dir))
    for _ in range(len(current.parts)):
        for filename in STYLE_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                return candidate
        if current == current.parent:
            break
        current = current.parent
    return None


def resolve_style(fallback: str, source: Path) -> IncludeStyle:
    """Use the .clang-format governing source, or the fallback preset if none exists."""
    style_file = find_style_file(Path(source).absolute().parent)
    if style_file is not None:
        try:
            style = parse_style_file(style_file.read_text(), str(style_file))
            logger.debug(f"Using style from {style_file}")
            return style
        except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
            logger.warning(f"Ignoring unreadable style file {style_file}: {e}")
    return predefined_style(fallback)
