"""Per-target lookup tables and the two-level (local, then global) resolution rule."""

from dataclasses import dataclass, field
from typing import Dict, Optional

from .constants import PROCEDURE_PROTOTYPE
from .errors import UnresolvedReference
from .nodes import ListDecl, VariableDecl
from .raw_model import RawTarget
from .resources import Interner, ResourcePath


@dataclass
class Scope:
    """Handles declared by one target, keyed by the ids blocks use to refer to them.

    ``parent`` is the stage scope for sprites and None for the stage itself.
    """
    target_name: str
    variables: Dict[str, ResourcePath] = field(default_factory=dict)
    lists: Dict[str, ResourcePath] = field(default_factory=dict)
    broadcasts: Dict[str, ResourcePath] = field(default_factory=dict)
    variable_decls: Dict[str, VariableDecl] = field(default_factory=dict)
    list_decls: Dict[str, ListDecl] = field(default_factory=dict)
    broadcast_names: Dict[str, ResourcePath] = field(default_factory=dict)
    definitions: Dict[str, ResourcePath] = field(default_factory=dict)
    parent: Optional["Scope"] = None

    def resolve_variable(self, name: str, variable_id: str) -> ResourcePath:
        return self._resolve("variables", name, variable_id)

    def resolve_list(self, name: str, list_id: str) -> ResourcePath:
        return self._resolve("lists", name, list_id)

    def resolve_broadcast(self, name: str, broadcast_id: str) -> ResourcePath:
        return self._resolve("broadcasts", name, broadcast_id)

    def _resolve(self, table: str, name: str, ref_id: str) -> ResourcePath:
        local = getattr(self, table)
        if ref_id in local:
            return local[ref_id]
        if self.parent is not None:
            inherited = getattr(self.parent, table)
            if ref_id in inherited:
                return inherited[ref_id]
        raise UnresolvedReference(name, ref_id, self.target_name)


def collect_definitions(target: RawTarget, interner: Interner) -> Dict[str, ResourcePath]:
    """Intern one handle per custom block prototype, keyed by its proccode."""
    definitions: Dict[str, ResourcePath] = {}
    for block in target.blocks.values():
        if block.opcode != PROCEDURE_PROTOTYPE or not block.mutation:
            continue
        proccode = block.mutation.get("proccode")
        if isinstance(proccode, str) and proccode not in definitions:
            definitions[proccode] = interner.intern(proccode)
    return definitions


def build_scope(target: RawTarget, interner: Interner, parent: Optional[Scope] = None) -> Scope:
    """Intern every variable, list and broadcast a target declares."""
    scope = Scope(target_name=target.name, parent=parent)

    for var_id, var in target.variables.items():
        path = interner.intern(var.name)
        scope.variables[var_id] = path
        scope.variable_decls[var.name] = (path, var.value)

    for list_id, lst in target.lists.items():
        path = interner.intern(lst.name)
        scope.lists[list_id] = path
        scope.list_decls[lst.name] = (path, lst.items)

    for broadcast_id, name in target.broadcasts.items():
        path = interner.intern(name)
        scope.broadcasts[broadcast_id] = path
        scope.broadcast_names[name] = path

    scope.definitions = collect_definitions(target, interner)
    return scope
