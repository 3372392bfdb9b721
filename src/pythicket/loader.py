# Thicket Module Loader
# Decodes parsed modules from their JSON document form into AST objects

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, List, TypeVar, Union

from pythicket.types import (
    Block,
    Expression,
    Identifier,
    Module,
    ObjectField,
    ObjectLitExpr,
    Statement,
    assignment,
    binary_op,
    boolean_lit,
    expression_stmt,
    func_call,
    func_decl,
    get_field,
    if_stmt,
    import_stmt,
    module,
    null_lit,
    number_lit,
    return_stmt,
    set_stmt,
    string_lit,
    unary_op,
    var_decl,
    variable_ref,
    while_stmt,
)
from pythicket.errors import ModuleFormatError

T = TypeVar("T")

BINARY_OPERATORS = frozenset({
    "add", "subtract", "multiply", "divide",
    "and", "or",
    "lessThan", "greaterThan", "lessThanEquals", "greaterThanEquals",
    "equals", "notEqual",
})

UNARY_OPERATORS = frozenset({"not", "negative"})


#==============================================================================
# Decoding State
#==============================================================================

class _Decoder:
    """Tracks the document path so errors can point at the bad node"""

    def __init__(self) -> None:
        self.path: List[str] = []

    def current_path(self) -> str:
        return "$" + "".join(self.path)

    def fail(self, message: str, value: Any | None = None) -> ModuleFormatError:
        return ModuleFormatError(self.current_path(), message, value)

    def child(self, segment: str, fn: Callable[[Any], T], value: Any) -> T:
        self.path.append(segment)
        try:
            return fn(value)
        finally:
            self.path.pop()

    #---------------------------------------------------------------------------
    # Field access
    #---------------------------------------------------------------------------

    def obj(self, value: Any, what: str) -> dict:
        if not isinstance(value, dict):
            raise self.fail(f"{what} must be an object", value)
        return value

    def require(self, node: dict, key: str) -> Any:
        if key not in node:
            raise self.fail(f"missing '{key}' property")
        return node[key]

    def identifier(self, node: dict, key: str) -> Identifier:
        value = self.require(node, key)
        if not isinstance(value, str):
            raise self.fail(f"'{key}' must be a string", value)
        return value

    def identifiers(self, node: dict, key: str) -> List[Identifier]:
        value = self.require(node, key)
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise self.fail(f"'{key}' must be a list of strings", value)
        return list(value)

    def list_of(self, node: dict, key: str, fn: Callable[[Any], T]) -> List[T]:
        value = self.require(node, key)
        if not isinstance(value, list):
            raise self.fail(f"'{key}' must be a list", value)
        return [self.child(f".{key}[{i}]", fn, item) for i, item in enumerate(value)]

    def block(self, node: dict, key: str) -> Block:
        return self.list_of(node, key, self.statement)

    def expr_field(self, node: dict, key: str) -> Expression:
        return self.child(f".{key}", self.expression, self.require(node, key))

    #---------------------------------------------------------------------------
    # Modules
    #---------------------------------------------------------------------------

    def module(self, value: Any) -> Module:
        node = self.obj(value, "Module")
        name = self.identifier(node, "name")
        body = self.block(node, "body")
        exports = self.identifiers(node, "exports") if "exports" in node else []
        return module(name, body, exports)

    #---------------------------------------------------------------------------
    # Statements
    #---------------------------------------------------------------------------

    def statement(self, value: Any) -> Statement:
        node = self.obj(value, "Statement")
        kind = self.identifier(node, "statementKind")

        if kind == "funcDecl":
            return func_decl(
                self.identifier(node, "functionName"),
                self.identifiers(node, "argNames"),
                self.block(node, "body"),
            )
        elif kind == "return":
            if node.get("returnedValue") is None:
                return return_stmt()
            return return_stmt(self.expr_field(node, "returnedValue"))
        elif kind == "varDecl":
            return var_decl(self.identifier(node, "variableName"))
        elif kind == "assignment":
            return assignment(
                self.identifier(node, "variableName"),
                self.expr_field(node, "variableValue"),
            )
        elif kind == "if":
            false_body = self.block(node, "falseBody") if "falseBody" in node else []
            return if_stmt(
                self.expr_field(node, "condition"),
                self.block(node, "trueBody"),
                false_body,
            )
        elif kind == "while":
            return while_stmt(self.expr_field(node, "condition"), self.block(node, "body"))
        elif kind == "set":
            return set_stmt(
                self.expr_field(node, "object"),
                self.identifier(node, "field"),
                self.expr_field(node, "value"),
            )
        elif kind == "expression":
            return expression_stmt(self.expr_field(node, "expression"))
        elif kind == "import":
            return import_stmt(
                self.identifier(node, "moduleName"),
                self.identifiers(node, "imports"),
            )
        elif kind == "classDecl":
            raise self.fail("class declarations must be desugared before evaluation")
        raise self.fail(f"unknown statementKind '{kind}'", kind)

    #---------------------------------------------------------------------------
    # Expressions
    #---------------------------------------------------------------------------

    def expression(self, value: Any) -> Expression:
        node = self.obj(value, "Expression")
        kind = self.identifier(node, "expressionKind")

        if kind == "binOp":
            op = self.identifier(node, "binOp")
            if op not in BINARY_OPERATORS:
                raise self.fail(f"unknown binOp '{op}'", op)
            return binary_op(
                op,
                self.expr_field(node, "leftOperand"),
                self.expr_field(node, "rightOperand"),
            )
        elif kind == "unaryOp":
            op = self.identifier(node, "unaryOp")
            if op not in UNARY_OPERATORS:
                raise self.fail(f"unknown unaryOp '{op}'", op)
            return unary_op(op, self.expr_field(node, "operand"))
        elif kind == "numberLit":
            number = self.require(node, "value")
            if isinstance(number, bool) or not isinstance(number, (int, float)):
                raise self.fail("'value' must be a number", number)
            return number_lit(number)
        elif kind == "booleanLit":
            flag = self.require(node, "isTrue")
            if not isinstance(flag, bool):
                raise self.fail("'isTrue' must be a boolean", flag)
            return boolean_lit(flag)
        elif kind == "stringLit":
            return string_lit(self.identifier(node, "value"))
        elif kind == "nullLit":
            return null_lit()
        elif kind == "objectLit":
            return ObjectLitExpr(
                kind="objectLit",
                fields=self.list_of(node, "fields", self.object_field),
            )
        elif kind == "funcCall":
            return func_call(
                self.expr_field(node, "callee"),
                self.list_of(node, "args", self.expression),
            )
        elif kind == "variableRef":
            return variable_ref(self.identifier(node, "variableName"))
        elif kind == "get":
            return get_field(self.expr_field(node, "object"), self.identifier(node, "field"))
        raise self.fail(f"unknown expressionKind '{kind}'", kind)

    def object_field(self, value: Any) -> ObjectField:
        node = self.obj(value, "Object field")
        return ObjectField(
            name=self.identifier(node, "fieldName"),
            value=self.expr_field(node, "fieldValue"),
        )


#==============================================================================
# Public API
#==============================================================================

def load_module(data: Any) -> Module:
    """
    Decode one module from its JSON document form.

    Args:
        data: Parsed JSON (a dict with name, body and exports)

    Returns:
        The decoded Module

    Raises:
        ModuleFormatError: If the document is malformed
    """
    return _Decoder().module(data)


def load_modules(data: Any) -> List[Module]:
    """Decode a single module document or a list of them"""
    if isinstance(data, list):
        decoder = _Decoder()
        return [decoder.child(f"[{i}]", decoder.module, item) for i, item in enumerate(data)]
    return [load_module(data)]


def load_module_file(path: Union[str, Path]) -> List[Module]:
    """
    Read and decode a JSON module file.

    Raises:
        OSError: If the file cannot be read
        ModuleFormatError: If the file is not valid JSON or not a module document
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ModuleFormatError("$", f"invalid JSON: {e.msg} (line {e.lineno})") from e
    return load_modules(data)
