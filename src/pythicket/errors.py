# Thicket Error Types
# Error domain for runtime failures and malformed module documents

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence, Tuple

from pythicket.types import Identifier, ValueKind


#==============================================================================
# Error Codes
#==============================================================================

class ErrorCodes(str, Enum):
    """Error code constants for Thicket runtime failures"""

    # Scope errors
    NOT_IN_SCOPE = "NotInScope"
    UNASSIGNED_VARIABLE = "UnassignedVariable"

    # Type errors
    NOT_FUNCTION = "NotFunction"
    NOT_OBJECT = "NotObject"
    TYPE_MISMATCH = "TypeMismatch"
    ARITY_MISMATCH = "ArityMismatch"
    NATIVE_FUNCTION_RETURNED_FUNC = "NativeFunctionReturnedFunc"

    # Module errors
    NO_SUCH_MODULE = "NoSuchModule"
    NO_SUCH_EXPORT = "NoSuchExport"
    NO_MAIN = "NoMain"
    MULTIPLE_MAINS = "MultipleMains"
    CIRCULAR_DEPENDENCY = "CircularDependency"


#==============================================================================
# Runtime Failure
#==============================================================================

@dataclass(frozen=True)
class RuntimeFailure:
    """
    A terminal runtime failure with the context needed to report it.

    Only the fields relevant to the code are set:
        NotInScope, UnassignedVariable: identifier
        NotFunction, NotObject: actual_kind
        TypeMismatch: expected_kinds, actual_kind
        ArityMismatch: expected_args, actual_args
        NativeFunctionReturnedFunc: identifier (native function name)
        NoSuchModule: module
        NoSuchExport: module, identifier (export name)
        CircularDependency: modules (names on the cycle, when known)
    """
    code: ErrorCodes
    identifier: Optional[Identifier] = None
    module: Optional[Identifier] = None
    expected_kinds: Optional[Tuple[ValueKind, ...]] = None
    actual_kind: Optional[ValueKind] = None
    expected_args: Optional[int] = None
    actual_args: Optional[int] = None
    modules: Optional[Tuple[Identifier, ...]] = None

    @property
    def message(self) -> str:
        """Human-readable description of the failure"""
        code = self.code
        if code == ErrorCodes.NOT_IN_SCOPE:
            return f"Not in scope: {self.identifier}"
        if code == ErrorCodes.UNASSIGNED_VARIABLE:
            return f"Variable used before assignment: {self.identifier}"
        if code == ErrorCodes.NOT_FUNCTION:
            return f"Cannot call a value of kind {self.actual_kind}"
        if code == ErrorCodes.NOT_OBJECT:
            return f"Cannot access a field on a value of kind {self.actual_kind}"
        if code == ErrorCodes.TYPE_MISMATCH:
            expected = " | ".join(self.expected_kinds or ())
            return f"Type mismatch: expected {expected}, got {self.actual_kind}"
        if code == ErrorCodes.ARITY_MISMATCH:
            return (
                f"Arity mismatch: expected {self.expected_args} arguments, "
                f"got {self.actual_args}"
            )
        if code == ErrorCodes.NATIVE_FUNCTION_RETURNED_FUNC:
            return f"Native function {self.identifier} is declared to return a function"
        if code == ErrorCodes.NO_SUCH_MODULE:
            return f"No such module: {self.module}"
        if code == ErrorCodes.NO_SUCH_EXPORT:
            return f"Module {self.module} has no export named {self.identifier}"
        if code == ErrorCodes.NO_MAIN:
            return "No module named Main"
        if code == ErrorCodes.MULTIPLE_MAINS:
            return "More than one module named Main"
        if code == ErrorCodes.CIRCULAR_DEPENDENCY:
            if self.modules:
                path = self.modules + self.modules[:1]
                return f"Circular dependency: {' -> '.join(path)}"
            return "Circular dependency between modules"
        exhaustive(code)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


#==============================================================================
# Thicket Error Class
#==============================================================================

class ThicketError(Exception):
    """
    Raised inside the evaluator when a runtime failure occurs.

    The first failure aborts the run; the program entry point catches it and
    hands the carried RuntimeFailure back to the caller.
    """

    def __init__(self, failure: RuntimeFailure):
        super().__init__(failure.message)
        self.failure = failure

    @property
    def code(self) -> ErrorCodes:
        return self.failure.code

    def __str__(self) -> str:
        return str(self.failure)

    #---------------------------------------------------------------------------
    # Static factory methods
    #---------------------------------------------------------------------------

    @staticmethod
    def not_in_scope(name: Identifier) -> "ThicketError":
        return ThicketError(RuntimeFailure(ErrorCodes.NOT_IN_SCOPE, identifier=name))

    @staticmethod
    def unassigned_variable(name: Identifier) -> "ThicketError":
        return ThicketError(RuntimeFailure(ErrorCodes.UNASSIGNED_VARIABLE, identifier=name))

    @staticmethod
    def not_function(actual: ValueKind) -> "ThicketError":
        return ThicketError(RuntimeFailure(ErrorCodes.NOT_FUNCTION, actual_kind=actual))

    @staticmethod
    def not_object(actual: ValueKind) -> "ThicketError":
        return ThicketError(RuntimeFailure(ErrorCodes.NOT_OBJECT, actual_kind=actual))

    @staticmethod
    def type_mismatch(expected: Sequence[ValueKind], actual: ValueKind) -> "ThicketError":
        return ThicketError(RuntimeFailure(
            ErrorCodes.TYPE_MISMATCH,
            expected_kinds=tuple(expected),
            actual_kind=actual,
        ))

    @staticmethod
    def arity_mismatch(expected: int, actual: int) -> "ThicketError":
        return ThicketError(RuntimeFailure(
            ErrorCodes.ARITY_MISMATCH,
            expected_args=expected,
            actual_args=actual,
        ))

    @staticmethod
    def native_returned_func(name: Identifier) -> "ThicketError":
        return ThicketError(RuntimeFailure(
            ErrorCodes.NATIVE_FUNCTION_RETURNED_FUNC, identifier=name,
        ))

    @staticmethod
    def no_such_module(module: Identifier) -> "ThicketError":
        return ThicketError(RuntimeFailure(ErrorCodes.NO_SUCH_MODULE, module=module))

    @staticmethod
    def no_such_export(module: Identifier, name: Identifier) -> "ThicketError":
        return ThicketError(RuntimeFailure(
            ErrorCodes.NO_SUCH_EXPORT, module=module, identifier=name,
        ))

    @staticmethod
    def no_main() -> "ThicketError":
        return ThicketError(RuntimeFailure(ErrorCodes.NO_MAIN))

    @staticmethod
    def multiple_mains() -> "ThicketError":
        return ThicketError(RuntimeFailure(ErrorCodes.MULTIPLE_MAINS))

    @staticmethod
    def circular_dependency(modules: Optional[Sequence[Identifier]] = None) -> "ThicketError":
        return ThicketError(RuntimeFailure(
            ErrorCodes.CIRCULAR_DEPENDENCY,
            modules=tuple(modules) if modules else None,
        ))


#==============================================================================
# Module Document Errors
#==============================================================================

class ModuleFormatError(ValueError):
    """A JSON module document does not describe a valid module"""

    def __init__(self, path: str, message: str, value: Any | None = None):
        value_str = f" (value: {value!r})" if value is not None else ""
        super().__init__(f"Invalid module document at {path}: {message}{value_str}")
        self.path = path
        self.message = message
        self.value = value


#==============================================================================
# Exhaustiveness Checking
#==============================================================================

def exhaustive(value: Any) -> None:
    """
    Asserts that a value is unreachable, ensuring exhaustive handling.

    Raises:
        AssertionError: If called (indicating unhandled case)
    """
    raise AssertionError(f"Unexpected value: {value!r}")
