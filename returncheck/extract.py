"""Extract declarations, imports and call sites from a Python Tree-sitter AST."""

from __future__ import annotations

import ast
from typing import Iterable

from .models import (
    KIND_CLASS,
    KIND_CONSTRUCTOR,
    KIND_FUNCTION,
    CallSite,
    Definition,
    ExtractedModule,
    ImportedName,
    ImportItem,
    Location,
)
from .suppression import is_suppressed_call_shape


IMPORT_TYPES = {"import_statement", "import_from_statement"}
PACKAGE_ANNOTATIONS_NAME = "__package_annotations__"
CONSTRUCTOR_NAMES = {"__init__"}
TRANSPARENT_PARENTS = {"parenthesized_expression"}
SUGGEST_KEYWORD = "suggest"


def extract_module(
    parsed,
    path: str | None = None,
    module: str | None = None,
    is_package: bool = False,
) -> ExtractedModule:
    tree = parsed.tree
    source_bytes = parsed.source_bytes

    results = ExtractedModule(
        path=path if path is not None else parsed.path,
        module=module,
        is_package=is_package,
    )

    scope: list[tuple[str, str]] = []

    def walk(node):
        node_type = node.type

        if node_type in ("function_definition", "class_definition"):
            name_node = node.child_by_field_name("name")
            if name_node is not None:
                name = _node_text(name_node, source_bytes)
                is_class = node_type == "class_definition"
                results_list = results.classes if is_class else results.functions
                results_list.append(
                    Definition(
                        kind=_definition_kind(node_type, name, scope),
                        name=name,
                        qualname=_qualname(scope, name),
                        decorators=tuple(_decorators(node, source_bytes)),
                        returns=_return_annotation(node, source_bytes),
                        location=_location(name_node),
                        bases=tuple(_class_bases(node, source_bytes)),
                        suggest=_suggestion(node, source_bytes),
                    )
                )
                scope.append(("class" if is_class else "function", name))
                for child in node.children:
                    walk(child)
                scope.pop()
                return

        if node_type == "assignment" and not scope:
            results.package_annotations.extend(_package_annotations(node, source_bytes))

        if node_type in IMPORT_TYPES:
            results.imports.extend(_extract_imports(node, source_bytes))

        if node_type == "call":
            func_node = node.child_by_field_name("function")
            name = _node_to_dotted_name(func_node, source_bytes) if func_node else None
            if name:
                discarded = is_discarded(node)
                results.calls.append(
                    CallSite(
                        name=name,
                        scope=tuple(scope),
                        location=_location(node),
                        discarded=discarded,
                        suppressed=discarded and is_suppressed_call_shape(node, source_bytes),
                    )
                )

        for child in node.children:
            walk(child)

    walk(tree.root_node)

    return results


def is_discarded(call_node) -> bool:
    """True when the value of ``call_node`` is produced but never used."""
    node = call_node
    parent = node.parent
    while parent is not None and parent.type in TRANSPARENT_PARENTS:
        node, parent = parent, parent.parent
    if parent is not None and parent.type == "await":
        parent = parent.parent
    return parent is not None and parent.type == "expression_statement"


def _definition_kind(node_type: str, name: str, scope: list[tuple[str, str]]) -> str:
    if node_type == "class_definition":
        return KIND_CLASS
    if name in CONSTRUCTOR_NAMES and scope and scope[-1][0] == "class":
        return KIND_CONSTRUCTOR
    return KIND_FUNCTION


def _decorators(definition_node, source_bytes: bytes) -> list[str]:
    parent = definition_node.parent
    if parent is None or parent.type != "decorated_definition":
        return []

    names: list[str] = []
    for child in parent.children:
        if child.type != "decorator" or not child.named_children:
            continue
        expression = child.named_children[0]
        if expression.type == "call":
            expression = expression.child_by_field_name("function")
        name = _node_to_dotted_name(expression, source_bytes) if expression else None
        if name:
            names.append(name)
    return names


def _suggestion(definition_node, source_bytes: bytes) -> str | None:
    """The ``suggest="..."`` keyword of the first decorator call that carries one."""
    parent = definition_node.parent
    if parent is None or parent.type != "decorated_definition":
        return None

    for child in parent.children:
        if child.type != "decorator" or not child.named_children:
            continue
        expression = child.named_children[0]
        if expression.type != "call":
            continue
        arguments = expression.child_by_field_name("arguments")
        if arguments is None:
            continue
        for argument in arguments.named_children:
            if argument.type != "keyword_argument":
                continue
            name = argument.child_by_field_name("name")
            value = argument.child_by_field_name("value")
            if name is None or value is None or value.type != "string":
                continue
            if _node_text(name, source_bytes) == SUGGEST_KEYWORD:
                suggested = _string_literal(value, source_bytes)
                if suggested:
                    return suggested
    return None


def _class_bases(definition_node, source_bytes: bytes) -> list[str]:
    if definition_node.type != "class_definition":
        return []
    bases_node = definition_node.child_by_field_name("superclasses")
    if bases_node is None:
        return []

    # Keyword arguments such as ``metaclass=`` and computed bases are skipped.
    bases: list[str] = []
    for child in bases_node.named_children:
        name = _node_to_dotted_name(child, source_bytes)
        if name:
            bases.append(name)
    return bases


def _return_annotation(definition_node, source_bytes: bytes) -> str | None:
    if definition_node.type != "function_definition":
        return None
    return_node = definition_node.child_by_field_name("return_type")
    if return_node is None:
        return None
    return _node_text(return_node, source_bytes).strip()


def _package_annotations(node, source_bytes: bytes) -> list[tuple[str, bool]]:
    left = node.child_by_field_name("left")
    right = node.child_by_field_name("right")
    if left is None or right is None:
        return []
    if _node_text(left, source_bytes) != PACKAGE_ANNOTATIONS_NAME:
        return []

    items = [right]
    if right.type in ("tuple", "list", "set", "parenthesized_expression"):
        items = list(right.named_children)

    entries: list[tuple[str, bool]] = []
    for item in items:
        if item.type == "string":
            value = _string_literal(item, source_bytes)
            if value:
                entries.append((value, True))
            continue
        if item.type == "call":
            item = item.child_by_field_name("function")
        name = _node_to_dotted_name(item, source_bytes) if item else None
        if name:
            entries.append((name, False))
    return entries


def _string_literal(node, source_bytes: bytes) -> str | None:
    try:
        value = ast.literal_eval(_node_text(node, source_bytes))
    except (ValueError, SyntaxError):
        return None
    if isinstance(value, str):
        return value.strip()
    return None


def _qualname(scope: Iterable[tuple[str, str]], name: str) -> str:
    names = [value for _, value in scope]
    if not names:
        return name
    return ".".join([*names, name])


def _location(node) -> Location:
    line, column = node.start_point
    return Location(line=line + 1, column=column + 1)


def _node_text(node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _node_to_dotted_name(node, source_bytes: bytes) -> str | None:
    """Dotted text of an identifier/attribute chain, or None for other expressions."""
    if node.type in ("identifier", "dotted_name"):
        return _node_text(node, source_bytes)
    if node.type == "attribute":
        obj = node.child_by_field_name("object")
        attr = node.child_by_field_name("attribute")
        if obj is None or attr is None:
            return None
        obj_name = _node_to_dotted_name(obj, source_bytes)
        if obj_name is None:
            return None
        return f"{obj_name}.{_node_text(attr, source_bytes)}"
    return None


def _extract_imports(node, source_bytes: bytes) -> list[ImportItem]:
    text = _node_text(node, source_bytes)
    try:
        module = ast.parse(text)
    except SyntaxError:
        return []

    imports: list[ImportItem] = []
    for stmt in module.body:
        if isinstance(stmt, ast.Import):
            imports.append(
                ImportItem(
                    kind="import",
                    module=None,
                    names=tuple(ImportedName(alias.name, alias.asname) for alias in stmt.names),
                    location=_location(node),
                )
            )
        elif isinstance(stmt, ast.ImportFrom):
            imports.append(
                ImportItem(
                    kind="from",
                    module=stmt.module,
                    names=tuple(ImportedName(alias.name, alias.asname) for alias in stmt.names),
                    location=_location(node),
                    level=stmt.level,
                )
            )

    return imports
