"""Call shapes whose discarded result is expected and never reported.

Three idioms are recognised, all purely from syntax:

* ``try: call(); fail() except ...:`` where the call exists only to raise;
* the last statement of ``with pytest.raises(...)`` / ``self.assertRaises(...)``;
* mock verification chains such as ``verify(mock).method()``.
"""

from __future__ import annotations


FAIL_NAMES = {"fail"}
RAISES_NAMES = {"raises", "assertRaises", "assertRaisesRegex"}
VERIFICATION_NAMES = {"verify", "when"}
EXCEPT_CLAUSE_TYPES = {"except_clause", "except_group_clause"}


def is_suppressed_call_shape(call_node, source_bytes: bytes) -> bool:
    if _is_mock_verification(call_node, source_bytes):
        return True

    statement = _enclosing_statement(call_node)
    if statement is None:
        return False
    block = statement.parent
    if block is None or block.type != "block":
        return False

    owner = block.parent
    if owner is None:
        return False
    if owner.type == "try_statement" and owner.child_by_field_name("body") == block:
        return _has_except_clause(owner) and _followed_by_fail(statement, block, source_bytes)
    if owner.type == "with_statement":
        return _expects_raise(owner, source_bytes) and _is_last_statement(statement, block)
    return False


def _enclosing_statement(call_node):
    node = call_node.parent
    while node is not None and node.type != "expression_statement":
        if node.type not in ("await", "parenthesized_expression"):
            return None
        node = node.parent
    return node


def _statements(block) -> list:
    return [child for child in block.named_children if child.type != "comment"]


def _is_last_statement(statement, block) -> bool:
    statements = _statements(block)
    return bool(statements) and statements[-1] == statement


def _followed_by_fail(statement, block, source_bytes: bytes) -> bool:
    statements = _statements(block)
    for index, candidate in enumerate(statements[:-1]):
        if candidate == statement:
            return _is_fail_call(statements[index + 1], source_bytes)
    return False


def _is_fail_call(statement, source_bytes: bytes) -> bool:
    if statement.type != "expression_statement" or not statement.named_children:
        return False
    expression = statement.named_children[0]
    if expression.type != "call":
        return False
    name = _callee_text(expression, source_bytes)
    return name is not None and name.rsplit(".", 1)[-1] in FAIL_NAMES


def _has_except_clause(try_node) -> bool:
    return any(child.type in EXCEPT_CLAUSE_TYPES for child in try_node.children)


def _expects_raise(with_node, source_bytes: bytes) -> bool:
    for clause in with_node.named_children:
        if clause.type != "with_clause":
            continue
        for item in clause.named_children:
            value = item.child_by_field_name("value") or (
                item.named_children[0] if item.named_children else None
            )
            if value is not None and value.type == "as_pattern" and value.named_children:
                value = value.named_children[0]
            if value is None or value.type != "call":
                continue
            name = _callee_text(value, source_bytes)
            if name is not None and name.rsplit(".", 1)[-1] in RAISES_NAMES:
                return True
    return False


def _is_mock_verification(call_node, source_bytes: bytes) -> bool:
    function = call_node.child_by_field_name("function")
    if function is None or function.type != "attribute":
        return False
    receiver = function.child_by_field_name("object")
    if receiver is None or receiver.type != "call":
        return False
    name = _callee_text(receiver, source_bytes)
    if name is None:
        return False
    return name.rsplit(".", 1)[-1] in VERIFICATION_NAMES


def _callee_text(call_node, source_bytes: bytes) -> str | None:
    function = call_node.child_by_field_name("function")
    if function is None or function.type not in ("identifier", "attribute"):
        return None
    return source_bytes[function.start_byte : function.end_byte].decode("utf-8", errors="replace")
