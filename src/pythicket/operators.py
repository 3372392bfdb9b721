"""
Thicket Operators
Arithmetic, logical, relational and equality semantics over runtime values

Every operator checks operand kinds before computing. When both operands
are wrong, the reported kind is the left one.
"""

from __future__ import annotations

import math
from typing import Callable, Dict

from pythicket.types import (
    BinaryOperator,
    UnaryOperator,
    Value,
    ValueKind,
    bool_val,
    is_callable,
    is_null,
    is_object,
    number_val,
)
from pythicket.errors import ThicketError, exhaustive


# Kinds allowed on either side of == and !=
EQUATABLE_KINDS: tuple[ValueKind, ...] = ("number", "boolean", "null", "object")


#==============================================================================
# Helper Functions
#==============================================================================

def expect_both(kind: ValueKind, left: Value, right: Value) -> None:
    """Raise TypeMismatch unless both operands have the given kind"""
    if left.kind != kind:
        raise ThicketError.type_mismatch([kind], left.kind)
    if right.kind != kind:
        raise ThicketError.type_mismatch([kind], right.kind)


def expect_kind(kind: ValueKind, operand: Value) -> None:
    if operand.kind != kind:
        raise ThicketError.type_mismatch([kind], operand.kind)


#==============================================================================
# Arithmetic and Relational Operators
#==============================================================================

def _divide(a: float, b: float) -> float:
    # IEEE semantics: Python raises on float division by zero
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


_ARITHMETIC: Dict[str, Callable[[float, float], float]] = {
    "add": lambda a, b: a + b,
    "subtract": lambda a, b: a - b,
    "multiply": lambda a, b: a * b,
    "divide": _divide,
}

_RELATIONAL: Dict[str, Callable[[float, float], bool]] = {
    "lessThan": lambda a, b: a < b,
    "greaterThan": lambda a, b: a > b,
    "lessThanEquals": lambda a, b: a <= b,
    "greaterThanEquals": lambda a, b: a >= b,
}


#==============================================================================
# Structural Equality
#==============================================================================

def values_equal(left: Value, right: Value) -> bool:
    """
    Typed structural equality.

    Functions are never comparable. Null compares unequal to anything but
    null without raising, while mixing any other two kinds raises
    TypeMismatch. Objects compare field by field, ignoring field order.

    Raises:
        ThicketError: TypeMismatch when the operands cannot be compared
    """
    for operand in (left, right):
        if is_callable(operand):
            raise ThicketError.type_mismatch(EQUATABLE_KINDS, operand.kind)

    if is_null(left):
        return is_null(right)
    if is_null(right):
        return False

    if is_object(left) and is_object(right):
        if len(left.fields) != len(right.fields):
            return False
        for name, value in left.fields.items():
            if name not in right.fields:
                return False
            if not values_equal(value, right.fields[name]):
                return False
        return True

    if left.kind == right.kind and left.kind in ("number", "boolean"):
        return left.value == right.value

    raise ThicketError.type_mismatch([left.kind], right.kind)


#==============================================================================
# Operator Application
#==============================================================================

def apply_binary(op: BinaryOperator, left: Value, right: Value) -> Value:
    """
    Apply a binary operator to two already-evaluated operands.

    Raises:
        ThicketError: TypeMismatch on operands of the wrong kind
    """
    if op in _ARITHMETIC:
        expect_both("number", left, right)
        return number_val(_ARITHMETIC[op](left.value, right.value))

    if op in _RELATIONAL:
        expect_both("number", left, right)
        return bool_val(_RELATIONAL[op](left.value, right.value))

    if op == "and":
        expect_both("boolean", left, right)
        return bool_val(left.value and right.value)
    if op == "or":
        expect_both("boolean", left, right)
        return bool_val(left.value or right.value)

    if op == "equals":
        return bool_val(values_equal(left, right))
    if op == "notEqual":
        return bool_val(not values_equal(left, right))

    exhaustive(op)


def apply_unary(op: UnaryOperator, operand: Value) -> Value:
    """Apply a unary operator to an already-evaluated operand"""
    if op == "not":
        expect_kind("boolean", operand)
        return bool_val(not operand.value)
    if op == "negative":
        expect_kind("number", operand)
        return number_val(-operand.value)

    exhaustive(op)
