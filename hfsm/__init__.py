"""hfsm: hierarchical finite state machine for application mode logic

Independent modules contribute subtrees through a ConstructionRegistry; the
Machine assembles them once into a frozen tree and then moves between any two
states with the minimal exit/enter sequence, synchronously or with asyncio.

Quick start:
    from hfsm import ConstructionRegistry, Machine, StateBuilderNode

    registry = ConstructionRegistry()

    @registry.constructor()
    def build_menus(root):
        root.add_state(StateBuilderNode("MainMenu"))

    machine = Machine(registry)
    machine.assemble()
    machine.change_state("MainMenu")
"""

from hfsm.core.builder import StateBuilderNode
from hfsm.core.config import ROOT_STATE_ID, MachineConfig
from hfsm.core.errors import (
    AlreadyAssembledError,
    ConstructionError,
    DuplicateStateIdError,
    HookError,
    HSMError,
    NoCommonAncestorError,
    TransitionError,
    TransitionInProgressError,
    UnknownStateError,
    UnresolvedDependencyError,
)
from hfsm.core.hooks import LoggingErrorSink
from hfsm.core.machine import Machine
from hfsm.core.registry import BuilderDescriptor, ConstructionRegistry
from hfsm.core.states import State, StateInfo
from hfsm.runtime.inspection import format_tree

__version__ = "0.1.0"

__all__ = [
    "ROOT_STATE_ID",
    "AlreadyAssembledError",
    "BuilderDescriptor",
    "ConstructionError",
    "ConstructionRegistry",
    "DuplicateStateIdError",
    "HSMError",
    "HookError",
    "LoggingErrorSink",
    "Machine",
    "MachineConfig",
    "NoCommonAncestorError",
    "State",
    "StateBuilderNode",
    "StateInfo",
    "TransitionError",
    "TransitionInProgressError",
    "UnknownStateError",
    "UnresolvedDependencyError",
    "format_tree",
]
