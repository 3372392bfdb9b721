"""
Thicket Type Definitions for Python
Implements the module/statement/expression AST and the runtime Value domain

This module provides frozen dataclasses using a Literal 'kind' field for
dispatch, plus constructor helpers and kind guards. The AST arrives already
parsed and desugared, so there is no class declaration node.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    List,
    Literal,
    Optional,
    TypeAlias,
    Union,
)

if TYPE_CHECKING:
    from pythicket.env import Environment


Identifier: TypeAlias = str

# Reserved module name under which the native function table is imported
NATIVE_MODULE_NAME: Identifier = "Native"
MAIN_MODULE_NAME: Identifier = "Main"


#==============================================================================
# Expression AST
#==============================================================================

BinaryOperator = Literal[
    "add", "subtract", "multiply", "divide",
    "and", "or",
    "lessThan", "greaterThan", "lessThanEquals", "greaterThanEquals",
    "equals", "notEqual",
]

UnaryOperator = Literal["not", "negative"]


@dataclass(frozen=True)
class BinaryOpExpr:
    """Binary operation"""
    kind: Literal["binOp"]
    op: BinaryOperator
    left: Expression
    right: Expression


@dataclass(frozen=True)
class UnaryOpExpr:
    """Unary operation"""
    kind: Literal["unaryOp"]
    op: UnaryOperator
    operand: Expression


@dataclass(frozen=True)
class NumberLitExpr:
    kind: Literal["numberLit"]
    value: float


@dataclass(frozen=True)
class BooleanLitExpr:
    kind: Literal["booleanLit"]
    value: bool


@dataclass(frozen=True)
class StringLitExpr:
    kind: Literal["stringLit"]
    value: str


@dataclass(frozen=True)
class NullLitExpr:
    kind: Literal["nullLit"]


@dataclass(frozen=True)
class ObjectField:
    """Field initializer inside an object literal"""
    name: Identifier
    value: Expression


@dataclass(frozen=True)
class ObjectLitExpr:
    """Object literal; fields are evaluated in order"""
    kind: Literal["objectLit"]
    fields: List[ObjectField]


@dataclass(frozen=True)
class FuncCallExpr:
    """Call; the callee is an expression so that f()() is expressible"""
    kind: Literal["funcCall"]
    callee: Expression
    args: List[Expression]


@dataclass(frozen=True)
class VariableRefExpr:
    kind: Literal["variableRef"]
    name: Identifier


@dataclass(frozen=True)
class GetExpr:
    """Field read: object.field"""
    kind: Literal["get"]
    object: Expression
    field: Identifier


Expression: TypeAlias = Union[
    BinaryOpExpr,
    UnaryOpExpr,
    NumberLitExpr,
    BooleanLitExpr,
    StringLitExpr,
    NullLitExpr,
    ObjectLitExpr,
    FuncCallExpr,
    VariableRefExpr,
    GetExpr,
]


#==============================================================================
# Statement AST
#==============================================================================

@dataclass(frozen=True)
class FuncDeclStmt:
    """Function declaration"""
    kind: Literal["funcDecl"]
    name: Identifier
    params: List[Identifier]
    body: Block


@dataclass(frozen=True)
class ReturnStmt:
    """Return statement; a missing value returns null"""
    kind: Literal["return"]
    value: Optional[Expression] = None


@dataclass(frozen=True)
class VarDeclStmt:
    kind: Literal["varDecl"]
    name: Identifier


@dataclass(frozen=True)
class AssignmentStmt:
    kind: Literal["assignment"]
    name: Identifier
    value: Expression


@dataclass(frozen=True)
class IfStmt:
    kind: Literal["if"]
    condition: Expression
    true_body: Block
    false_body: Block


@dataclass(frozen=True)
class WhileStmt:
    kind: Literal["while"]
    condition: Expression
    body: Block


@dataclass(frozen=True)
class SetStmt:
    """Field write: object.field = value"""
    kind: Literal["set"]
    object: Expression
    field: Identifier
    value: Expression


@dataclass(frozen=True)
class ExpressionStmt:
    kind: Literal["expression"]
    expression: Expression


@dataclass(frozen=True)
class ImportStmt:
    """import a, b from Module"""
    kind: Literal["import"]
    module: Identifier
    names: List[Identifier]


Statement: TypeAlias = Union[
    FuncDeclStmt,
    ReturnStmt,
    VarDeclStmt,
    AssignmentStmt,
    IfStmt,
    WhileStmt,
    SetStmt,
    ExpressionStmt,
    ImportStmt,
]

Block: TypeAlias = List[Statement]


@dataclass(frozen=True)
class Module:
    """A parsed module: top-level statements plus the names it exports"""
    name: Identifier
    body: Block
    exports: List[Identifier] = field(default_factory=list)


#==============================================================================
# Value Domain (runtime values)
#==============================================================================

ValueKind = Literal[
    "number",
    "boolean",
    "string",
    "null",
    "object",
    "closure",
    "nativeFunc",
]


@dataclass(frozen=True)
class NumberVal:
    """Double-precision number value"""
    kind: Literal["number"]
    value: float


@dataclass(frozen=True)
class BoolVal:
    """Boolean value"""
    kind: Literal["boolean"]
    value: bool


@dataclass(frozen=True)
class StringVal:
    """String value"""
    kind: Literal["string"]
    value: str


@dataclass(frozen=True)
class NullVal:
    """Null value"""
    kind: Literal["null"]


@dataclass(frozen=True, eq=False)
class ObjectVal:
    """
    Object value.

    The fields dict is shared by every alias of the object, so writes
    through one alias are visible through all of them. Python equality is
    identity; language equality lives in pythicket.operators.
    """
    kind: Literal["object"]
    fields: Dict[Identifier, Value]


@dataclass(frozen=True, eq=False)
class ClosureVal:
    """
    Closure value.

    env is the environment active where the function was declared. For a
    recursive function that environment holds this very closure, so the
    two reference each other.
    """
    kind: Literal["closure"]
    name: Identifier
    params: List[Identifier]
    body: Block
    env: Environment


# Parameter kinds accepted in a native signature; "any" is not checked
ParamKind = Union[ValueKind, Literal["any"]]


@dataclass(frozen=True)
class NativeFunctionVal:
    """Host-provided function imported from the Native module"""
    kind: Literal["nativeFunc"]
    name: Identifier
    params: List[ParamKind]
    returns: ValueKind
    impl: Callable[..., Any]


Value: TypeAlias = Union[
    NumberVal,
    BoolVal,
    StringVal,
    NullVal,
    ObjectVal,
    ClosureVal,
    NativeFunctionVal,
]


#==============================================================================
# Type Guards
#==============================================================================

def is_number(v: Value) -> bool:
    return v.kind == "number"


def is_bool(v: Value) -> bool:
    return v.kind == "boolean"


def is_string(v: Value) -> bool:
    return v.kind == "string"


def is_null(v: Value) -> bool:
    return v.kind == "null"


def is_object(v: Value) -> bool:
    return v.kind == "object"


def is_closure(v: Value) -> bool:
    return v.kind == "closure"


def is_native(v: Value) -> bool:
    return v.kind == "nativeFunc"


def is_callable(v: Value) -> bool:
    """Check if value can be applied"""
    return v.kind in ("closure", "nativeFunc")


#==============================================================================
# Value Constructors
#==============================================================================

def number_val(value: float) -> NumberVal:
    return NumberVal(kind="number", value=float(value))


def bool_val(value: bool) -> BoolVal:
    return BoolVal(kind="boolean", value=value)


def string_val(value: str) -> StringVal:
    return StringVal(kind="string", value=value)


def null_val() -> NullVal:
    return NullVal(kind="null")


def object_val(fields: Optional[Dict[Identifier, Value]] = None) -> ObjectVal:
    return ObjectVal(kind="object", fields=fields if fields is not None else {})


def closure_val(name: Identifier, params: List[Identifier], body: Block,
                env: Environment) -> ClosureVal:
    return ClosureVal(kind="closure", name=name, params=params, body=body, env=env)


def native_val(name: Identifier, params: List[ParamKind], returns: ValueKind,
               impl: Callable[..., Any]) -> NativeFunctionVal:
    return NativeFunctionVal(kind="nativeFunc", name=name, params=params,
                             returns=returns, impl=impl)


#==============================================================================
# Expression Constructors
#==============================================================================

def binary_op(op: BinaryOperator, left: Expression, right: Expression) -> BinaryOpExpr:
    return BinaryOpExpr(kind="binOp", op=op, left=left, right=right)


def unary_op(op: UnaryOperator, operand: Expression) -> UnaryOpExpr:
    return UnaryOpExpr(kind="unaryOp", op=op, operand=operand)


def number_lit(value: float) -> NumberLitExpr:
    return NumberLitExpr(kind="numberLit", value=float(value))


def boolean_lit(value: bool) -> BooleanLitExpr:
    return BooleanLitExpr(kind="booleanLit", value=value)


def string_lit(value: str) -> StringLitExpr:
    return StringLitExpr(kind="stringLit", value=value)


def null_lit() -> NullLitExpr:
    return NullLitExpr(kind="nullLit")


def object_lit(fields: Optional[Dict[Identifier, Expression]] = None) -> ObjectLitExpr:
    """Build an object literal from an ordered name -> expression mapping"""
    items = fields or {}
    return ObjectLitExpr(
        kind="objectLit",
        fields=[ObjectField(name=name, value=value) for name, value in items.items()],
    )


def func_call(callee: Expression, args: Optional[List[Expression]] = None) -> FuncCallExpr:
    return FuncCallExpr(kind="funcCall", callee=callee, args=list(args or []))


def variable_ref(name: Identifier) -> VariableRefExpr:
    return VariableRefExpr(kind="variableRef", name=name)


def get_field(obj: Expression, field_name: Identifier) -> GetExpr:
    return GetExpr(kind="get", object=obj, field=field_name)


#==============================================================================
# Statement Constructors
#==============================================================================

def func_decl(name: Identifier, params: List[Identifier], body: Block) -> FuncDeclStmt:
    return FuncDeclStmt(kind="funcDecl", name=name, params=list(params), body=body)


def return_stmt(value: Optional[Expression] = None) -> ReturnStmt:
    return ReturnStmt(kind="return", value=value)


def var_decl(name: Identifier) -> VarDeclStmt:
    return VarDeclStmt(kind="varDecl", name=name)


def assignment(name: Identifier, value: Expression) -> AssignmentStmt:
    return AssignmentStmt(kind="assignment", name=name, value=value)


def if_stmt(condition: Expression, true_body: Block,
            false_body: Optional[Block] = None) -> IfStmt:
    return IfStmt(kind="if", condition=condition, true_body=true_body,
                  false_body=false_body or [])


def while_stmt(condition: Expression, body: Block) -> WhileStmt:
    return WhileStmt(kind="while", condition=condition, body=body)


def set_stmt(obj: Expression, field_name: Identifier, value: Expression) -> SetStmt:
    return SetStmt(kind="set", object=obj, field=field_name, value=value)


def expression_stmt(expression: Expression) -> ExpressionStmt:
    return ExpressionStmt(kind="expression", expression=expression)


def import_stmt(module: Identifier, names: List[Identifier]) -> ImportStmt:
    return ImportStmt(kind="import", module=module, names=list(names))


def module(name: Identifier, body: Block,
           exports: Optional[List[Identifier]] = None) -> Module:
    return Module(name=name, body=body, exports=list(exports or []))
