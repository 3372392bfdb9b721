"""
Thicket Module Export Registry
Lazily evaluates imported modules and memoizes their exports

One registry is built per program run and passed explicitly to the
evaluator. A module's top level runs the first time something imports from
it; afterwards its exports come from the memo, so top-level side effects
happen at most once per run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence, Union

from pythicket.types import (
    NATIVE_MODULE_NAME,
    Identifier,
    Module,
    NativeFunctionVal,
    Value,
)
from pythicket.errors import ThicketError

logger = logging.getLogger(__name__)


#==============================================================================
# Registry Entries
#==============================================================================

@dataclass(frozen=True)
class NotEvaluated:
    """Module whose top level has not run yet"""
    kind: Literal["notEvaluated"]
    module: Module


@dataclass(frozen=True)
class Evaluated:
    """Module whose top level ran; exports are final"""
    kind: Literal["evaluated"]
    module: Module
    exports: Dict[Identifier, Value]


RegistryEntry = Union[NotEvaluated, Evaluated]


#==============================================================================
# Export Registry
#==============================================================================

class ExportRegistry:
    """
    Resolves (module, export name) pairs to values for import statements.

    The reserved Native module is served from the native function table;
    every other module is evaluated on demand.
    """

    def __init__(
        self,
        modules: Sequence[Module],
        natives: Optional[Sequence[NativeFunctionVal]] = None,
    ):
        """
        Create a registry over a program's modules.

        Args:
            modules: Modules of the program (the first of a repeated name wins)
            natives: Native functions importable from the Native module
        """
        self._entries: Dict[Identifier, RegistryEntry] = {}
        for mod in modules:
            if mod.name not in self._entries:
                self._entries[mod.name] = NotEvaluated(kind="notEvaluated", module=mod)

        self._natives: Dict[Identifier, NativeFunctionVal] = {}
        for native in natives or []:
            self._natives.setdefault(native.name, native)

    @property
    def module_names(self) -> List[Identifier]:
        return list(self._entries)

    def entry(self, module_name: Identifier) -> Optional[RegistryEntry]:
        return self._entries.get(module_name)

    def is_evaluated(self, module_name: Identifier) -> bool:
        entry = self._entries.get(module_name)
        return entry is not None and entry.kind == "evaluated"

    def get_exported_value(self, module_name: Identifier, export_name: Identifier) -> Value:
        """
        Look up one exported value, evaluating the module first if needed.

        Args:
            module_name: Module to import from (or the Native sentinel)
            export_name: Name to import

        Returns:
            The exported value

        Raises:
            ThicketError: NoSuchModule, NoSuchExport, or any failure raised
                while evaluating the module's top level. Nothing is memoized
                when evaluation fails.
        """
        if module_name == NATIVE_MODULE_NAME:
            native = self._natives.get(export_name)
            if native is None:
                raise ThicketError.no_such_export(module_name, export_name)
            return native

        entry = self._entries.get(module_name)
        if entry is None:
            raise ThicketError.no_such_module(module_name)

        if entry.kind == "notEvaluated":
            entry = self._evaluate(entry)

        if export_name not in entry.exports:
            raise ThicketError.no_such_export(module_name, export_name)
        return entry.exports[export_name]

    def _evaluate(self, entry: NotEvaluated) -> Evaluated:
        from pythicket.evaluator import evaluate_module

        result = evaluate_module(self, entry.module)
        evaluated = Evaluated(
            kind="evaluated",
            module=entry.module,
            exports=result.exports,
        )
        self._entries[entry.module.name] = evaluated
        logger.debug("Memoized exports of %s: %s", entry.module.name, sorted(result.exports))
        return evaluated
