"""Tests for pythicket.operators."""

import math

import pytest

from pythicket.errors import ErrorCodes, ThicketError
from pythicket.operators import EQUATABLE_KINDS, apply_binary, apply_unary, values_equal
from pythicket.types import (
    bool_val,
    closure_val,
    native_val,
    null_val,
    number_val,
    object_val,
    string_val,
)
from pythicket.env import Environment


def _mismatch(fn, *args):
    with pytest.raises(ThicketError) as exc:
        fn(*args)
    assert exc.value.code == ErrorCodes.TYPE_MISMATCH
    return exc.value.failure


class TestArithmetic:
    def test_add_subtract_multiply(self):
        assert apply_binary("add", number_val(2), number_val(3)) == number_val(5)
        assert apply_binary("subtract", number_val(2), number_val(3)) == number_val(-1)
        assert apply_binary("multiply", number_val(7), number_val(8)) == number_val(56)

    def test_divide(self):
        assert apply_binary("divide", number_val(7), number_val(2)) == number_val(3.5)

    def test_divide_by_zero_follows_ieee(self):
        assert apply_binary("divide", number_val(1), number_val(0)).value == math.inf
        assert apply_binary("divide", number_val(-1), number_val(0)).value == -math.inf
        assert math.isnan(apply_binary("divide", number_val(0), number_val(0)).value)

    def test_rejects_non_numbers(self):
        failure = _mismatch(apply_binary, "add", number_val(1), string_val("a"))
        assert failure.expected_kinds == ("number",)
        assert failure.actual_kind == "string"

    def test_left_operand_reported_first(self):
        failure = _mismatch(apply_binary, "multiply", bool_val(True), null_val())
        assert failure.actual_kind == "boolean"


class TestRelational:
    @pytest.mark.parametrize("op,expected", [
        ("lessThan", True),
        ("greaterThan", False),
        ("lessThanEquals", True),
        ("greaterThanEquals", False),
    ])
    def test_compare(self, op, expected):
        assert apply_binary(op, number_val(1), number_val(2)) == bool_val(expected)

    def test_rejects_strings(self):
        failure = _mismatch(apply_binary, "lessThan", string_val("a"), string_val("b"))
        assert failure.actual_kind == "string"


class TestLogical:
    def test_and_or(self):
        assert apply_binary("and", bool_val(True), bool_val(False)) == bool_val(False)
        assert apply_binary("or", bool_val(True), bool_val(False)) == bool_val(True)

    def test_rejects_numbers(self):
        failure = _mismatch(apply_binary, "and", bool_val(True), number_val(1))
        assert failure.expected_kinds == ("boolean",)
        assert failure.actual_kind == "number"


class TestUnary:
    def test_not(self):
        assert apply_unary("not", bool_val(True)) == bool_val(False)

    def test_negative(self):
        assert apply_unary("negative", number_val(4)) == number_val(-4)

    def test_not_requires_boolean(self):
        failure = _mismatch(apply_unary, "not", number_val(1))
        assert failure.expected_kinds == ("boolean",)

    def test_negative_requires_number(self):
        failure = _mismatch(apply_unary, "negative", null_val())
        assert failure.actual_kind == "null"


class TestEquality:
    def test_numbers_and_booleans(self):
        assert values_equal(number_val(3), number_val(3))
        assert not values_equal(number_val(3), number_val(4))
        assert values_equal(bool_val(False), bool_val(False))

    def test_objects_ignore_field_order(self):
        left = object_val({"a": number_val(1), "b": bool_val(True)})
        right = object_val({"b": bool_val(True), "a": number_val(1)})
        assert values_equal(left, right)

    def test_objects_with_extra_field_differ(self):
        left = object_val({"a": number_val(1)})
        right = object_val({"a": number_val(1), "b": number_val(2)})
        assert not values_equal(left, right)
        assert not values_equal(right, left)

    def test_objects_with_different_names_differ(self):
        assert not values_equal(
            object_val({"a": number_val(1)}),
            object_val({"b": number_val(1)}),
        )

    def test_nested_objects(self):
        left = object_val({"inner": object_val({"x": null_val()})})
        right = object_val({"inner": object_val({"x": null_val()})})
        assert values_equal(left, right)

    def test_null_on_left_never_raises(self):
        assert values_equal(null_val(), null_val())
        assert not values_equal(null_val(), object_val())
        assert not values_equal(null_val(), string_val("x"))

    def test_null_on_right_is_false(self):
        assert not values_equal(number_val(1), null_val())
        assert not values_equal(string_val("x"), null_val())

    def test_mixed_kinds_raise(self):
        failure = _mismatch(values_equal, number_val(1), bool_val(True))
        assert failure.expected_kinds == ("number",)
        assert failure.actual_kind == "boolean"

    def test_strings_are_not_comparable(self):
        failure = _mismatch(values_equal, string_val("a"), string_val("a"))
        assert failure.expected_kinds == ("string",)
        assert failure.actual_kind == "string"

    def test_functions_are_not_comparable(self):
        fn = closure_val("f", [], [], Environment())
        failure = _mismatch(values_equal, null_val(), fn)
        assert failure.expected_kinds == EQUATABLE_KINDS
        assert failure.actual_kind == "closure"

    def test_left_function_reported_first(self):
        native = native_val("n", [], "null", lambda: None)
        fn = closure_val("f", [], [], Environment())
        failure = _mismatch(values_equal, native, fn)
        assert failure.actual_kind == "nativeFunc"

    def test_not_equal_negates(self):
        assert apply_binary("notEqual", number_val(1), number_val(2)) == bool_val(True)
        assert apply_binary("equals", number_val(1), number_val(1)) == bool_val(True)
        _mismatch(apply_binary, "notEqual", number_val(1), string_val("1"))
