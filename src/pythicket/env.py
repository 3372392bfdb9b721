"""
Thicket Environment
Chained lexical scopes for evaluation

Each Environment is one scope mapping names to either a value or the
UNASSIGNED marker, plus a reference to its parent scope. Declaration only
touches the innermost scope; lookup and assignment walk outward.
"""

from __future__ import annotations
from typing import Dict, Iterator, Optional, Union

from pythicket.types import Identifier, Value


#==============================================================================
# Unassigned marker
#==============================================================================

class _Unassigned:
    """Singleton marking a name that is declared but has no value yet"""

    _instance: Optional[_Unassigned] = None

    def __new__(cls) -> _Unassigned:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNASSIGNED"

    def __bool__(self) -> bool:
        return False


UNASSIGNED = _Unassigned()

Binding = Union[Value, _Unassigned]


#==============================================================================
# Environment
#==============================================================================

class Environment:
    """
    One lexical scope in a chain of scopes.

    Environments are shared, never copied: closures keep a reference to the
    scope they were declared in and see later assignments made to it.
    """

    def __init__(self, parent: Optional[Environment] = None):
        """
        Create a new scope.

        Args:
            parent: Enclosing scope, or None for a module's root scope
        """
        self._values: Dict[Identifier, Binding] = {}
        self._parent = parent

    @property
    def parent(self) -> Optional[Environment]:
        return self._parent

    def child(self) -> Environment:
        """Create a new scope nested inside this one"""
        return Environment(self)

    def declare(self, name: Identifier) -> None:
        """
        Declare a name in this scope only, leaving it unassigned.

        Redeclaring a name already in this scope resets it to unassigned.
        """
        self._values[name] = UNASSIGNED

    def lookup(self, name: Identifier) -> Optional[Binding]:
        """
        Resolve a name, innermost scope first.

        Args:
            name: Identifier to resolve

        Returns:
            None if no scope in the chain declares the name, UNASSIGNED if
            the nearest declaring scope has no value for it, else the value
        """
        for scope in self._chain():
            if name in scope._values:
                return scope._values[name]
        return None

    def assign(self, name: Identifier, value: Value) -> bool:
        """
        Set the value of a name in the nearest scope that declares it.

        Never creates a binding.

        Returns:
            True if some scope in the chain declared the name
        """
        for scope in self._chain():
            if name in scope._values:
                scope._values[name] = value
                return True
        return False

    def define(self, name: Identifier, value: Value) -> None:
        """Declare a name in this scope and assign it in one step"""
        self._values[name] = value

    def _chain(self) -> Iterator[Environment]:
        scope: Optional[Environment] = self
        while scope is not None:
            yield scope
            scope = scope._parent

    def __contains__(self, name: Identifier) -> bool:
        """Check if this scope itself (not its parents) declares a name"""
        return name in self._values

    def __repr__(self) -> str:
        return f"Environment({sorted(self._values)}, parent={self._parent is not None})"
