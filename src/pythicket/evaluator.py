"""
Thicket Evaluator
Executes statements and evaluates expressions against chained environments

Expressions evaluate to a Value or raise ThicketError. Statements produce an
explicit outcome, Completed or Returned(value); a Returned outcome travels
up through nested if/while bodies until the enclosing call (or module body)
takes it. Runtime failures are terminal: the first one aborts the run and
evaluate_program hands it back to the caller as a RuntimeFailure.
"""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, TypeVar, Union

from pythicket.types import (
    MAIN_MODULE_NAME,
    Block,
    ClosureVal,
    Expression,
    Identifier,
    Module,
    NativeFunctionVal,
    Statement,
    Value,
    ValueKind,
    bool_val,
    closure_val,
    is_bool,
    is_closure,
    is_native,
    is_object,
    null_val,
    number_val,
    object_val,
    string_val,
)
from pythicket.env import UNASSIGNED, Environment
from pythicket.errors import RuntimeFailure, ThicketError, exhaustive
from pythicket.exports import ExportRegistry
from pythicket.operators import apply_binary, apply_unary

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Each language call or nested module import costs about seven Python frames.
# These allow roughly 10,000 nested calls.
RECURSION_LIMIT = 100_000
EVAL_STACK_SIZE = 512 * 1024 * 1024


#==============================================================================
# Statement Outcomes
#==============================================================================

@dataclass(frozen=True)
class Completed:
    """Statement finished normally; continue with the next one"""
    kind: Literal["completed"]


@dataclass(frozen=True)
class Returned:
    """A return statement ran; unwind to the enclosing call"""
    kind: Literal["returned"]
    value: Value


StatementOutcome = Union[Completed, Returned]

COMPLETED = Completed(kind="completed")


def returned(value: Value) -> Returned:
    return Returned(kind="returned", value=value)


#==============================================================================
# Evaluator Class
#==============================================================================

class Evaluator:
    """
    Statement and expression evaluator.

    Scoping is lexical: a call runs in a fresh scope whose parent is the
    closure's captured environment, never the caller's. Every execution of an
    if branch or while body gets its own child scope.
    """

    def __init__(self, registry: ExportRegistry):
        """
        Initialize the evaluator.

        Args:
            registry: Export registry used to resolve import statements
        """
        self._registry = registry

    @property
    def registry(self) -> ExportRegistry:
        return self._registry

    #---------------------------------------------------------------------------
    # Statements
    #---------------------------------------------------------------------------

    def execute_block(self, block: Block, env: Environment) -> StatementOutcome:
        """
        Execute statements in order until one returns.

        Args:
            block: Statements to execute
            env: Scope the statements run in (not copied)

        Returns:
            The first Returned outcome, or COMPLETED if the block ran out
        """
        for statement in block:
            outcome = self._exec_stmt(statement, env)
            if outcome.kind == "returned":
                return outcome
        return COMPLETED

    def _exec_stmt(self, stmt: Statement, env: Environment) -> StatementOutcome:
        kind = stmt.kind

        if kind == "expression":
            self.evaluate(stmt.expression, env)
            return COMPLETED
        elif kind == "return":
            if stmt.value is None:
                return returned(null_val())
            return returned(self.evaluate(stmt.value, env))
        elif kind == "varDecl":
            env.declare(stmt.name)
            return COMPLETED
        elif kind == "assignment":
            value = self.evaluate(stmt.value, env)
            if not env.assign(stmt.name, value):
                raise ThicketError.not_in_scope(stmt.name)
            return COMPLETED
        elif kind == "funcDecl":
            # The closure captures env and is then stored in env: recursion
            # works because the name is visible from inside the body.
            closure = closure_val(stmt.name, stmt.params, stmt.body, env)
            env.declare(stmt.name)
            env.assign(stmt.name, closure)
            return COMPLETED
        elif kind == "if":
            condition = self._eval_condition(stmt.condition, env)
            branch = stmt.true_body if condition else stmt.false_body
            return self.execute_block(branch, env.child())
        elif kind == "while":
            return self._exec_while(stmt, env)
        elif kind == "set":
            return self._exec_set(stmt, env)
        elif kind == "import":
            for name in stmt.names:
                env.define(name, self._registry.get_exported_value(stmt.module, name))
            return COMPLETED
        else:
            exhaustive(stmt)

    def _exec_while(self, stmt: Statement, env: Environment) -> StatementOutcome:
        """
        Loop while the condition holds.

        Each pass runs in a newly created child scope, so declarations in
        one iteration are gone by the next.
        """
        while self._eval_condition(stmt.condition, env):
            outcome = self.execute_block(stmt.body, env.child())
            if outcome.kind == "returned":
                return outcome
        return COMPLETED

    def _exec_set(self, stmt: Statement, env: Environment) -> StatementOutcome:
        target = self.evaluate(stmt.object, env)
        value = self.evaluate(stmt.value, env)
        if not is_object(target):
            raise ThicketError.not_object(target.kind)
        target.fields[stmt.field] = value
        return COMPLETED

    def _eval_condition(self, condition: Expression, env: Environment) -> bool:
        value = self.evaluate(condition, env)
        if not is_bool(value):
            raise ThicketError.type_mismatch(["boolean"], value.kind)
        return value.value

    #---------------------------------------------------------------------------
    # Expressions
    #---------------------------------------------------------------------------

    def evaluate(self, expr: Expression, env: Environment) -> Value:
        """
        Evaluate an expression.

        Args:
            expr: Expression to evaluate
            env: Scope used to resolve variable references

        Returns:
            Result value

        Raises:
            ThicketError: On the first runtime failure
        """
        kind = expr.kind

        if kind == "numberLit":
            return number_val(expr.value)
        elif kind == "booleanLit":
            return bool_val(expr.value)
        elif kind == "stringLit":
            return string_val(expr.value)
        elif kind == "nullLit":
            return null_val()
        elif kind == "objectLit":
            fields: Dict[Identifier, Value] = {}
            for object_field in expr.fields:
                fields[object_field.name] = self.evaluate(object_field.value, env)
            return object_val(fields)
        elif kind == "variableRef":
            return self._eval_variable(expr.name, env)
        elif kind == "get":
            target = self.evaluate(expr.object, env)
            if not is_object(target):
                raise ThicketError.not_object(target.kind)
            return target.fields.get(expr.field, null_val())
        elif kind == "binOp":
            left = self.evaluate(expr.left, env)
            right = self.evaluate(expr.right, env)
            return apply_binary(expr.op, left, right)
        elif kind == "unaryOp":
            return apply_unary(expr.op, self.evaluate(expr.operand, env))
        elif kind == "funcCall":
            callee = self.evaluate(expr.callee, env)
            args = [self.evaluate(arg, env) for arg in expr.args]
            return self.apply(callee, args)
        else:
            exhaustive(expr)

    def _eval_variable(self, name: Identifier, env: Environment) -> Value:
        binding = env.lookup(name)
        if binding is None:
            raise ThicketError.not_in_scope(name)
        if binding is UNASSIGNED:
            raise ThicketError.unassigned_variable(name)
        return binding

    #---------------------------------------------------------------------------
    # Function Application
    #---------------------------------------------------------------------------

    def apply(self, fn: Value, args: Sequence[Value]) -> Value:
        """
        Call a closure or native function with evaluated arguments.

        Raises:
            ThicketError: NotFunction, ArityMismatch, NativeFunctionReturnedFunc,
                or any failure raised by the function body
        """
        if is_closure(fn):
            return self._apply_closure(fn, args)
        if is_native(fn):
            return self._apply_native(fn, args)
        raise ThicketError.not_function(fn.kind)

    def _apply_closure(self, fn: ClosureVal, args: Sequence[Value]) -> Value:
        if len(args) != len(fn.params):
            raise ThicketError.arity_mismatch(len(fn.params), len(args))

        call_env = Environment(fn.env)
        for param, arg in zip(fn.params, args):
            call_env.define(param, arg)

        outcome = self.execute_block(fn.body, call_env)
        if outcome.kind == "returned":
            return outcome.value
        return null_val()

    def _apply_native(self, fn: NativeFunctionVal, args: Sequence[Value]) -> Value:
        if len(args) != len(fn.params):
            raise ThicketError.arity_mismatch(len(fn.params), len(args))
        # Natives may never hand out callables, whatever the host returns
        if fn.returns in ("closure", "nativeFunc"):
            raise ThicketError.native_returned_func(fn.name)

        raw = fn.impl(*args)
        return wrap_native_result(fn.returns, raw)


def wrap_native_result(kind: ValueKind, raw: object) -> Value:
    """Wrap a host result into a Value of the native's declared return kind"""
    if kind == "number":
        return number_val(raw)
    elif kind == "boolean":
        return bool_val(bool(raw))
    elif kind == "string":
        return string_val(str(raw))
    elif kind == "null":
        return null_val()
    elif kind == "object":
        return object_val(dict(raw) if raw is not None else {})
    # Function kinds are rejected before the host callable runs
    exhaustive(kind)


#==============================================================================
# Module Evaluation
#==============================================================================

@dataclass
class ModuleResult:
    """Outcome of running a module's top level"""
    exports: Dict[Identifier, Value] = field(default_factory=dict)
    result: Optional[Value] = None  # Value of a top-level return, if any


def evaluate_module(registry: ExportRegistry, module: Module) -> ModuleResult:
    """
    Run a module's top level in a fresh root environment.

    Args:
        registry: Registry that resolves this module's own imports
        module: Module to run

    Returns:
        The module's exports and its top-level return value

    Raises:
        ThicketError: On a runtime failure, or when an exported name was
            never declared (NotInScope) or never assigned (UnassignedVariable)
    """
    logger.debug("Evaluating module %s", module.name)
    root = Environment()
    evaluator = Evaluator(registry)
    outcome = evaluator.execute_block(module.body, root)

    result = ModuleResult()
    if outcome.kind == "returned":
        result.result = outcome.value

    for name in module.exports:
        if name not in root:
            raise ThicketError.not_in_scope(name)
        binding = root.lookup(name)
        if binding is UNASSIGNED:
            raise ThicketError.unassigned_variable(name)
        result.exports[name] = binding

    logger.debug("Finished module %s (%d exports)", module.name, len(result.exports))
    return result


def select_main(modules: Sequence[Module]) -> Module:
    """
    Find the single module named Main.

    Raises:
        ThicketError: NoMain or MultipleMains
    """
    mains = [m for m in modules if m.name == MAIN_MODULE_NAME]
    if not mains:
        raise ThicketError.no_main()
    if len(mains) > 1:
        raise ThicketError.multiple_mains()
    return mains[0]


#==============================================================================
# Program Evaluation (High-Level API)
#==============================================================================

def run_with_deep_stack(fn: Callable[[], T]) -> T:
    """
    Call fn on a worker thread with a large stack and a raised recursion limit.

    Evaluation recurses on the Python stack for every call and every nested
    module import. Whatever fn raises is re-raised on the calling thread.
    """
    outcome: Dict[str, Any] = {}

    def target() -> None:
        try:
            outcome["value"] = fn()
        except BaseException as e:
            outcome["error"] = e

    previous_limit = sys.getrecursionlimit()
    previous_stack = threading.stack_size(EVAL_STACK_SIZE)
    sys.setrecursionlimit(max(previous_limit, RECURSION_LIMIT))
    try:
        worker = threading.Thread(target=target, name="thicket-eval")
        worker.start()
        worker.join()
    finally:
        threading.stack_size(previous_stack)
        sys.setrecursionlimit(previous_limit)

    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]


def evaluate_program(
    modules: Sequence[Module],
    natives: Optional[List[NativeFunctionVal]] = None,
    check_dependencies: bool = True,
) -> Union[Value, RuntimeFailure]:
    """
    Evaluate a whole program, starting from its Main module.

    This is a high-level API that:
    1. Selects the Main module
    2. Rejects imports of unknown modules and import cycles (unless
       check_dependencies is False)
    3. Builds a fresh export registry for this run
    4. Runs Main on a deep-stack worker thread and returns its top-level result

    Args:
        modules: Every module of the program
        natives: Native functions importable from the Native module
        check_dependencies: Run the static module checks first. Without
            them an import cycle makes evaluation recurse without bound.

    Returns:
        Main's returned value (null if it never returns), or the
        RuntimeFailure that stopped the run
    """
    from pythicket.cycles import find_cycle, find_missing_imports

    try:
        main = select_main(modules)

        if check_dependencies:
            missing = find_missing_imports(modules)
            if missing:
                importer, missing_module = missing[0]
                logger.debug("Module %s imports unknown module %s", importer, missing_module)
                raise ThicketError.no_such_module(missing_module)
            cycle = find_cycle(modules)
            if cycle is not None:
                raise ThicketError.circular_dependency(cycle)

        registry = ExportRegistry(modules, natives)
        logger.debug("Running program with %d modules", len(modules))
        result = run_with_deep_stack(lambda: evaluate_module(registry, main))
    except ThicketError as e:
        logger.debug("Program failed: %s", e)
        return e.failure

    if result.result is None:
        return null_val()
    return result.result
