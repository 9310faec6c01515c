#!/usr/bin/env python3

from collections.abc import Iterable
from enum import Enum
from typing import IO, Any, Protocol

import yaml
from pydantic import BaseModel, ConfigDict, Field


class SymbolKind(str, Enum):
    """Symbol kinds, spelled the way find-all-symbols writes them."""

    UNKNOWN = "Unknown"
    FUNCTION = "Function"
    CLASS = "Class"
    VARIABLE = "Variable"
    TYPEDEF = "TypedefName"
    ENUM = "EnumDecl"
    ENUM_CONSTANT = "EnumConstantDecl"
    MACRO = "Macro"


class SymbolRecord(BaseModel):
    """A symbol and the header that declares it."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(alias="Name")
    kind: SymbolKind = Field(default=SymbolKind.UNKNOWN, alias="Type")
    header_path: str = Field(alias="FilePath")
    line_hint: int = Field(default=1, alias="LineNumber")

    def __hash__(self):
        return hash((self.name, self.header_path))

    def __eq__(self, other):
        return (
            isinstance(other, SymbolRecord)
            and self.name == other.name
            and self.header_path == other.header_path
        )

    def to_yaml_dict(self) -> dict[str, Any]:
        """Return the record keyed the way find-all-symbols writes it."""
        return {
            "Name": self.name,
            "Type": self.kind.value,
            "FilePath": self.header_path,
            "LineNumber": self.line_hint,
        }


class SymbolIndex(Protocol):
    """Lookup from an identifier to the records declaring it.

    A name with no matches yields an empty list; lookups never raise.
    """

    def lookup(self, name: str) -> list[SymbolRecord]: ...


def dump_symbols_yaml(records: Iterable[SymbolRecord], stream: IO[str]) -> None:
    """Write records as a YAML stream, one document per record."""
    yaml.safe_dump_all(
        (record.to_yaml_dict() for record in records),
        stream,
        explicit_start=True,
        default_flow_style=False,
        sort_keys=False,
    )
