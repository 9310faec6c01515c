#!/usr/bin/env python3

import io

from includefixer.symbols import SymbolKind, SymbolRecord, dump_symbols_yaml
from includefixer.yaml_index import parse_symbols_yaml


def test_record_identity_is_name_and_header():
    a = SymbolRecord(name="Foo", kind=SymbolKind.CLASS, header_path="foo.h", line_hint=3)
    b = SymbolRecord(name="Foo", kind=SymbolKind.UNKNOWN, header_path="foo.h", line_hint=1)
    c = SymbolRecord(name="Foo", header_path="other.h")

    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert len({a, b, c}) == 2


def test_record_defaults():
    record = SymbolRecord(name="bar", header_path="bar.h")
    assert record.kind == SymbolKind.UNKNOWN
    assert record.line_hint == 1


def test_record_accepts_find_all_symbols_keys():
    record = SymbolRecord.model_validate(
        {"Name": "Foo", "Type": "Function", "FilePath": "inc/foo.h", "LineNumber": 12}
    )
    assert record.name == "Foo"
    assert record.kind == SymbolKind.FUNCTION
    assert record.header_path == "inc/foo.h"
    assert record.line_hint == 12


def test_dump_writes_one_document_per_record():
    records = [
        SymbolRecord(name="Foo", kind=SymbolKind.CLASS, header_path="foo.h", line_hint=2),
        SymbolRecord(name="bar", kind=SymbolKind.FUNCTION, header_path="bar.h", line_hint=7),
    ]
    stream = io.StringIO()
    dump_symbols_yaml(records, stream)

    text = stream.getvalue()
    assert text.count("---") == 2
    assert "Name: Foo" in text
    assert "Type: Function" in text

    loaded = parse_symbols_yaml(text)
    assert loaded == records
    assert [r.kind for r in loaded] == [SymbolKind.CLASS, SymbolKind.FUNCTION]
    assert [r.line_hint for r in loaded] == [2, 7]
