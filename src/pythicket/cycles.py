"""
Thicket Module Dependency Checks
Static checks over a program's import graph, run before evaluation

Imports are collected from anywhere in a module's statement tree, including
function bodies, both branches of an if and while bodies. Imports of the
Native module are not edges.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from pythicket.types import NATIVE_MODULE_NAME, Block, Identifier, Module, Statement

logger = logging.getLogger(__name__)

# DFS node colours
_WHITE = 0
_GRAY = 1
_BLACK = 2


#==============================================================================
# Import Collection
#==============================================================================

def collect_imports(body: Block) -> List[Identifier]:
    """
    List the modules imported anywhere in a statement tree.

    Args:
        body: Top-level statements of a module

    Returns:
        Imported module names in first-seen order, without duplicates and
        without the Native module
    """
    seen: Dict[Identifier, None] = {}
    # Statements are pushed reversed so they pop in source order
    pending: List[Statement] = list(reversed(body))
    while pending:
        stmt = pending.pop()
        if stmt.kind == "import":
            if stmt.module != NATIVE_MODULE_NAME:
                seen.setdefault(stmt.module, None)
        elif stmt.kind == "funcDecl":
            pending.extend(reversed(stmt.body))
        elif stmt.kind == "if":
            pending.extend(reversed(stmt.false_body))
            pending.extend(reversed(stmt.true_body))
        elif stmt.kind == "while":
            pending.extend(reversed(stmt.body))
    return list(seen)


#==============================================================================
# Module Graph
#==============================================================================

class ModuleGraph:
    """
    Reverse dependency graph: an edge N -> M means "N is imported by M".

    A cycle in this graph is exactly a cycle in the forward depends-on graph.
    """

    def __init__(self, modules: Sequence[Module]):
        """
        Build the graph.

        Raises:
            ValueError: If a module imports a module that is not in the list.
                Callers check with find_missing_imports first.
        """
        self._edges: Dict[Identifier, List[Identifier]] = {}
        for mod in modules:
            self._edges.setdefault(mod.name, [])

        for mod in modules:
            for imported in collect_imports(mod.body):
                if imported not in self._edges:
                    raise ValueError(
                        f"Module {mod.name} imports {imported}, which is not in the module list"
                    )
                importers = self._edges[imported]
                if mod.name not in importers:
                    importers.append(mod.name)

    @property
    def nodes(self) -> List[Identifier]:
        return list(self._edges)

    def importers_of(self, name: Identifier) -> List[Identifier]:
        return list(self._edges.get(name, []))

    def find_cycle(self) -> Optional[List[Identifier]]:
        """
        Search for a cycle with an iterative three-colour depth-first search.

        Returns:
            Module names on the first cycle found, in depends-on order (each
            imports the next, the last imports the first), or None
        """
        colour: Dict[Identifier, int] = {name: _WHITE for name in self._edges}

        for start in self._edges:
            if colour[start] != _WHITE:
                continue

            colour[start] = _GRAY
            stack: List[Identifier] = [start]
            while stack:
                top = stack[-1]
                targets = self._edges[top]

                gray = next((t for t in targets if colour[t] == _GRAY), None)
                if gray is not None:
                    # Gray nodes are exactly the ones on the stack
                    cycle = stack[stack.index(gray):]
                    cycle.reverse()
                    return cycle

                white = next((t for t in targets if colour[t] == _WHITE), None)
                if white is not None:
                    colour[white] = _GRAY
                    stack.append(white)
                else:
                    colour[top] = _BLACK
                    stack.pop()

        return None

    def has_cycle(self) -> bool:
        return self.find_cycle() is not None


#==============================================================================
# Public Checks
#==============================================================================

def find_missing_imports(modules: Sequence[Module]) -> List[Tuple[Identifier, Identifier]]:
    """
    List imports that name a module absent from the program.

    Returns:
        (importing module, missing module) pairs, in module order
    """
    known: Set[Identifier] = {mod.name for mod in modules}
    missing: List[Tuple[Identifier, Identifier]] = []
    for mod in modules:
        for imported in collect_imports(mod.body):
            if imported not in known:
                missing.append((mod.name, imported))
    return missing


def find_cycle(modules: Sequence[Module]) -> Optional[List[Identifier]]:
    """
    Find an import cycle among the modules.

    Raises:
        ValueError: If an import names a module missing from the list
    """
    cycle = ModuleGraph(modules).find_cycle()
    if cycle is None:
        logger.debug("No import cycle among %d modules", len(modules))
    else:
        logger.debug("Import cycle found: %s", " -> ".join(cycle))
    return cycle


def is_cyclic_dependency_present(modules: Sequence[Module]) -> bool:
    """Check whether any chain of imports leads back to where it started"""
    return find_cycle(modules) is not None
