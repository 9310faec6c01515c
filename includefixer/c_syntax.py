#!/usr/bin/env python3
"""
Tree-sitter helpers for C translation units.

Finds declarations, identifier uses, include directives and the point where
new includes belong. Offsets returned here are byte offsets into the parsed
source.
"""

from collections.abc import Iterator

import tree_sitter_c as tsc
from tree_sitter import Language, Node, Parser, Tree

C_LANGUAGE = Language(tsc.language())

BUILT_IN_C_TYPES = {
    "int",
    "char",
    "float",
    "double",
    "void",
    "short",
    "long",
    "signed",
    "unsigned",
    "size_t",
    "ptrdiff_t",
    "wchar_t",
    "bool",
    "_Bool",
    "FILE",
    "va_list",
}

C_KEYWORDS = {
    "auto",
    "break",
    "case",
    "const",
    "continue",
    "default",
    "do",
    "else",
    "enum",
    "extern",
    "for",
    "goto",
    "if",
    "register",
    "return",
    "sizeof",
    "static",
    "struct",
    "switch",
    "typedef",
    "union",
    "volatile",
    "while",
    "inline",
    "restrict",
    "defined",
}

PREDEFINED_IDENTIFIERS = {
    "NULL",
    "true",
    "false",
    "va_start",
    "va_end",
    "va_arg",
    "va_copy",
}

WRAPPING_DECLARATORS = {
    "init_declarator",
    "pointer_declarator",
    "array_declarator",
    "function_declarator",
    "parenthesized_declarator",
    "attributed_declarator",
}

TAG_SPECIFIERS = {"struct_specifier", "union_specifier", "enum_specifier"}

# Containers that hold file-scope items.
PREPROC_CONTAINERS = {
    "preproc_ifdef",
    "preproc_if",
    "preproc_else",
    "preproc_elif",
    "preproc_elifdef",
}

# Subtrees that never contain identifier uses.
OPAQUE_NODES = {
    "comment",
    "preproc_def",
    "preproc_function_def",
    "preproc_include",
    "preproc_call",
    "attribute_specifier",
    "attribute_declaration",
    "ms_declspec_modifier",
    "gnu_asm_expression",
}


def create_parser() -> Parser:
    return Parser(C_LANGUAGE)


def parse(code: bytes) -> Tree:
    return create_parser().parse(code)


# Helper to avoid type-checking warnings.
def node_text(node: Node) -> str:
    assert node.text is not None
    return node.text.decode(errors="replace").strip()


def is_builtin(name: str) -> bool:
    """Check if a name is a keyword, built-in type or predefined identifier."""
    if name in BUILT_IN_C_TYPES or name in C_KEYWORDS or name in PREDEFINED_IDENTIFIERS:
        return True
    # __func__, __FILE__, __LINE__ and compiler-reserved macros
    if name.startswith("__") and name.endswith("__"):
        return True
    return False


def same_node(a: Node | None, b: Node | None) -> bool:
    return (
        a is not None
        and b is not None
        and a.type == b.type
        and a.start_byte == b.start_byte
        and a.end_byte == b.end_byte
    )


def declarator_name(node: Node | None) -> Node | None:
    """Unwrap pointer/array/function/init declarators down to the declared name."""
    while node is not None and node.type in WRAPPING_DECLARATORS:
        inner = node.child_by_field_name("declarator")
        if inner is None:
            inner = next(
                (
                    child
                    for child in node.named_children
                    if child.type.endswith("declarator")
                    or child.type in ("identifier", "type_identifier")
                ),
                None,
            )
        node = inner
    if node is not None and node.type in ("identifier", "type_identifier"):
        return node
    return None


def is_tag_name(node: Node) -> bool:
    """Check if node is the tag of a struct, union or enum specifier."""
    parent = node.parent
    return (
        parent is not None
        and parent.type in TAG_SPECIFIERS
        and same_node(parent.child_by_field_name("name"), node)
    )


def iter_nodes(root: Node) -> Iterator[Node]:
    """Pre-order traversal of every node under root."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def iter_declared_names(root: Node) -> Iterator[Node]:
    """Yield the name node of every declaration under root.

    Covers functions, variables, parameters, typedefs, tags, enumerators,
    macros and macro parameters. Scoping is not tracked.
    """
    for node in iter_nodes(root):
        kind = node.type
        if kind == "function_declarator":
            name = declarator_name(node.child_by_field_name("declarator"))
            if name is not None:
                yield name
        elif kind in ("declaration", "parameter_declaration", "type_definition"):
            for declarator in node.children_by_field_name("declarator"):
                name = declarator_name(declarator)
                if name is not None:
                    yield name
        elif kind in TAG_SPECIFIERS or kind in (
            "enumerator",
            "preproc_def",
            "preproc_function_def",
        ):
            name = node.child_by_field_name("name")
            if name is not None:
                yield name
        elif kind == "preproc_params":
            for child in node.named_children:
                if child.type == "identifier":
                    yield child


def iter_used_names(root: Node) -> Iterator[Node]:
    """Yield identifier and type nodes that reference a declaration, in source order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in OPAQUE_NODES:
            continue

        if node.type == "identifier":
            yield node
        elif node.type == "type_identifier" and not is_tag_name(node):
            yield node

        children = node.children
        if node.type in ("preproc_if", "preproc_elif"):
            condition = node.child_by_field_name("condition")
            children = [c for c in children if not same_node(c, condition)]
        elif node.type in ("preproc_ifdef", "preproc_elifdef"):
            guard = node.child_by_field_name("name")
            children = [c for c in children if not same_node(c, guard)]
        stack.extend(reversed(children))


def iter_file_scope(root: Node) -> Iterator[Node]:
    """Yield file-scope items, looking through preprocessor conditionals."""
    for child in root.named_children:
        if child.type in PREPROC_CONTAINERS:
            yield from iter_file_scope(child)
        else:
            yield child


def find_includes(root: Node) -> list[tuple[str, Node]]:
    """Return (spelling, directive) for every #include of a header name."""
    includes = []
    for node in iter_nodes(root):
        if node.type != "preproc_include":
            continue
        path = node.child_by_field_name("path")
        if path is not None and path.type in ("string_literal", "system_lib_string"):
            includes.append((node_text(path), node))
    return includes


def header_guard_define(node: Node) -> Node | None:
    """Return the #define of an #ifndef/#define header guard, if node is one."""
    if node.type != "preproc_ifdef" or not node.children or node.children[0].type != "#ifndef":
        return None
    guard = node.child_by_field_name("name")
    body = [c for c in node.named_children if not same_node(c, guard) and c.type != "comment"]
    if guard is None or not body or body[0].type != "preproc_def":
        return None
    name = body[0].child_by_field_name("name")
    if name is None or node_text(name) != node_text(guard):
        return None
    return body[0]


def _line_start_after(code: bytes, offset: int) -> int:
    if offset == 0 or code[offset - 1 : offset] == b"\n":
        return offset
    newline = code.find(b"\n", offset)
    return len(code) if newline == -1 else newline + 1


def _direct_includes(node: Node) -> list[Node]:
    return [child for child in node.named_children if child.type == "preproc_include"]


def include_insertion_point(root: Node, code: bytes) -> tuple[int, bool]:
    """Find where new #include lines go.

    Returns (byte offset, has_include_block). With existing includes this is
    the start of the first one at file scope or directly inside a header
    guard; includes under other conditionals do not count. Otherwise it is
    the first line after any leading comments and header guard.
    """
    includes = _direct_includes(root)
    for item in root.named_children:
        if header_guard_define(item) is not None:
            includes.extend(_direct_includes(item))
    if includes:
        return min(include.start_byte for include in includes), True

    offset = 0
    items = list(root.named_children)
    while items:
        item = items.pop(0)
        if item.type == "comment":
            offset = item.end_byte
            continue
        define = header_guard_define(item)
        if define is not None:
            offset = define.end_byte
            guard = item.child_by_field_name("name")
            # Continue with the items inside the guard, after its #define.
            items = [
                c
                for c in item.named_children
                if not same_node(c, guard) and c.start_byte >= define.end_byte
            ]
            continue
        break
    return _line_start_after(code, offset), False


def char_offset(code: bytes, byte_offset: int) -> int:
    """Convert a byte offset into code to a character offset."""
    return len(code[:byte_offset].decode(errors="replace"))
