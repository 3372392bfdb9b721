"""
Thicket Native Functions
Host-provided functions importable from the Native module

This module provides the fluent builder for native function descriptors,
the display form used when printing values, and the default native table
(print, clock, parseNum, readString).
"""

from __future__ import annotations

import math
import re
import sys
import time
from typing import Any, Callable, Iterable, Iterator, List, Optional, TextIO

from pythicket.types import (
    Identifier,
    NativeFunctionVal,
    ParamKind,
    Value,
    ValueKind,
    bool_val,
    is_string,
    native_val,
    number_val,
)


# Leading number accepted by parseNum: sign, digits, fraction, exponent
FLOAT_PREFIX_PATTERN = re.compile(
    r'[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)'
)


#==============================================================================
# Native Builder
#==============================================================================

class NativeBuilder:
    """
    Builder pattern for constructing native functions with a fluent interface.

    Example:
        fn = (NativeBuilder("double")
              .params("number")
              .returns("number")
              .impl(lambda n: n.value * 2)
              .build())
    """

    def __init__(self, name: Identifier) -> None:
        self._name = name
        self._params: List[ParamKind] = []
        self._returns: Optional[ValueKind] = None
        self._impl: Optional[Callable[..., Any]] = None

    def params(self, *param_kinds: ParamKind) -> "NativeBuilder":
        """Set parameter kinds; their count is the function's arity"""
        self._params = list(param_kinds)
        return self

    def returns(self, kind: ValueKind) -> "NativeBuilder":
        """Set the kind the host result is wrapped into"""
        self._returns = kind
        return self

    def impl(self, fn: Callable[..., Any]) -> "NativeBuilder":
        """Set the host callable; it receives the argument Values positionally"""
        self._impl = fn
        return self

    def build(self) -> NativeFunctionVal:
        """
        Build the native function.

        Raises:
            ValueError: If the return kind or implementation is missing
        """
        if self._returns is None:
            raise ValueError(f"Native function {self._name} missing return kind")
        if self._impl is None:
            raise ValueError(f"Native function {self._name} missing implementation")
        return native_val(self._name, self._params, self._returns, self._impl)


def define_native(name: Identifier) -> NativeBuilder:
    """Start defining a native function"""
    return NativeBuilder(name)


#==============================================================================
# Display Form
#==============================================================================

def format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def display_value(value: Value) -> str:
    """
    Render a value the way print shows it.

    Objects list their fields sorted by name, e.g. { a: 1, b: true }.
    """
    kind = value.kind
    if kind == "number":
        return format_number(value.value)
    if kind == "boolean":
        return "true" if value.value else "false"
    if kind == "string":
        return f'"{value.value}"'
    if kind == "null":
        return "null"
    if kind == "object":
        if not value.fields:
            return "{}"
        parts = [f"{name}: {display_value(value.fields[name])}" for name in sorted(value.fields)]
        return "{ " + ", ".join(parts) + " }"
    if kind == "closure":
        return "<closure>"
    return "<native function>"


#==============================================================================
# Default Native Table
#==============================================================================

def parse_float_prefix(text: str) -> float:
    """
    Parse the longest leading decimal number, ignoring anything after it.

    Leading whitespace is skipped. "Infinity" is the only spelling of
    infinity; "nan", "inf" and digit separators are not numbers.

    Returns:
        The parsed number, or NaN when the text does not start with one
    """
    match = FLOAT_PREFIX_PATTERN.match(text.lstrip())
    if match is None:
        return math.nan
    literal = match.group(0)
    if literal.endswith("Infinity"):
        return -math.inf if literal.startswith("-") else math.inf
    return float(literal)


def _parse_num(arg: Value) -> dict:
    parsed = parse_float_prefix(arg.value) if is_string(arg) else math.nan
    if math.isnan(parsed):
        return {"isValid": bool_val(False)}
    return {"isValid": bool_val(True), "value": number_val(parsed)}


def _build_natives(
    read_line: Callable[[], str],
    output: Optional[TextIO],
) -> List[NativeFunctionVal]:
    def _print(arg: Value) -> None:
        stream = output if output is not None else sys.stdout
        stream.write(display_value(arg) + "\n")

    return [
        define_native("print").params("any").returns("null").impl(_print).build(),
        define_native("clock").returns("number").impl(lambda: time.time() * 1000).build(),
        define_native("parseNum").params("string").returns("object").impl(_parse_num).build(),
        define_native("readString").returns("string").impl(read_line).build(),
    ]


def create_default_natives(
    output: Optional[TextIO] = None,
    input_lines: Optional[Iterable[str]] = None,
) -> List[NativeFunctionVal]:
    """
    Create the default native table.

    Args:
        output: Stream print writes to (default: sys.stdout at call time)
        input_lines: Lines readString consumes (default: sys.stdin)

    Returns:
        Native functions print, clock, parseNum and readString
    """
    lines: Optional[Iterator[str]] = iter(input_lines) if input_lines is not None else None

    def _read_string() -> str:
        if lines is None:
            line = sys.stdin.readline()
        else:
            line = next(lines, "")
        return line.rstrip("\r\n")

    return _build_natives(_read_string, output)


def create_queued_natives(
    inputs: List[str],
    output: Optional[TextIO] = None,
) -> List[NativeFunctionVal]:
    """
    Create a native table whose readString consumes a fixed input queue.

    Used for deterministic runs; readString returns "" once the queue is empty.

    Args:
        inputs: Input lines, consumed front to back
        output: Stream print writes to
    """
    input_queue = list(inputs)

    def _queued_read_string() -> str:
        if not input_queue:
            return ""
        return input_queue.pop(0)

    return _build_natives(_queued_read_string, output)
