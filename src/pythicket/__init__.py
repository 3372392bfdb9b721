"""
Thicket Python Implementation

The evaluation core of Thicket, a small modular language with first-class
closures, mutable objects and module imports. Programs arrive as parsed
modules (Python AST objects or JSON documents) and are run from Main.
"""

from __future__ import annotations

#==============================================================================
# Types
#==============================================================================

from pythicket.types import (
    # AST
    Identifier,
    Expression,
    Statement,
    Block,
    Module,
    BinaryOperator,
    UnaryOperator,
    NATIVE_MODULE_NAME,
    MAIN_MODULE_NAME,
    # Values
    Value,
    ValueKind,
    NumberVal,
    BoolVal,
    StringVal,
    NullVal,
    ObjectVal,
    ClosureVal,
    NativeFunctionVal,
    # Guards
    is_number,
    is_bool,
    is_string,
    is_null,
    is_object,
    is_closure,
    is_native,
    is_callable,
    # Value constructors
    number_val,
    bool_val,
    string_val,
    null_val,
    object_val,
    closure_val,
    native_val,
    # Expression constructors
    binary_op,
    unary_op,
    number_lit,
    boolean_lit,
    string_lit,
    null_lit,
    object_lit,
    func_call,
    variable_ref,
    get_field,
    # Statement constructors
    func_decl,
    return_stmt,
    var_decl,
    assignment,
    if_stmt,
    while_stmt,
    set_stmt,
    expression_stmt,
    import_stmt,
    module,
)

#==============================================================================
# Errors
#==============================================================================

from pythicket.errors import (
    ErrorCodes,
    RuntimeFailure,
    ThicketError,
    ModuleFormatError,
)

#==============================================================================
# Evaluation
#==============================================================================

from pythicket.env import Environment, UNASSIGNED
from pythicket.operators import apply_binary, apply_unary, values_equal
from pythicket.exports import ExportRegistry
from pythicket.evaluator import (
    Evaluator,
    evaluate_module,
    evaluate_program,
)
from pythicket.cycles import (
    ModuleGraph,
    find_cycle,
    find_missing_imports,
    is_cyclic_dependency_present,
)

#==============================================================================
# Natives and Loading
#==============================================================================

from pythicket.natives import (
    NativeBuilder,
    define_native,
    display_value,
    create_default_natives,
    create_queued_natives,
)
from pythicket.loader import load_module, load_modules, load_module_file


__all__ = [
    #==========================================================================
    # Types
    #==========================================================================
    "Identifier",
    "Expression",
    "Statement",
    "Block",
    "Module",
    "BinaryOperator",
    "UnaryOperator",
    "NATIVE_MODULE_NAME",
    "MAIN_MODULE_NAME",
    "Value",
    "ValueKind",
    "NumberVal",
    "BoolVal",
    "StringVal",
    "NullVal",
    "ObjectVal",
    "ClosureVal",
    "NativeFunctionVal",
    "is_number",
    "is_bool",
    "is_string",
    "is_null",
    "is_object",
    "is_closure",
    "is_native",
    "is_callable",
    "number_val",
    "bool_val",
    "string_val",
    "null_val",
    "object_val",
    "closure_val",
    "native_val",
    "binary_op",
    "unary_op",
    "number_lit",
    "boolean_lit",
    "string_lit",
    "null_lit",
    "object_lit",
    "func_call",
    "variable_ref",
    "get_field",
    "func_decl",
    "return_stmt",
    "var_decl",
    "assignment",
    "if_stmt",
    "while_stmt",
    "set_stmt",
    "expression_stmt",
    "import_stmt",
    "module",

    #==========================================================================
    # Errors
    #==========================================================================
    "ErrorCodes",
    "RuntimeFailure",
    "ThicketError",
    "ModuleFormatError",

    #==========================================================================
    # Evaluation
    #==========================================================================
    "Environment",
    "UNASSIGNED",
    "apply_binary",
    "apply_unary",
    "values_equal",
    "ExportRegistry",
    "Evaluator",
    "evaluate_module",
    "evaluate_program",
    "ModuleGraph",
    "find_cycle",
    "find_missing_imports",
    "is_cyclic_dependency_present",

    #==========================================================================
    # Natives and Loading
    #==========================================================================
    "NativeBuilder",
    "define_native",
    "display_value",
    "create_default_natives",
    "create_queued_natives",
    "load_module",
    "load_modules",
    "load_module_file",
]
