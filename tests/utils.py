# tests/utils.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Common test utilities and data for hfsm tests.
"""

import asyncio
import sys
from typing import Dict, List, Optional, Tuple, Type

from hfsm.core.builder import StateBuilderNode
from hfsm.core.config import ROOT_STATE_ID
from hfsm.core.errors import HSMError
from hfsm.core.registry import ConstructionRegistry

# -----------------------------------------------------------------------------
# COMMON TEST DATA
# -----------------------------------------------------------------------------

TEST_PRIORITY = -sys.maxsize - 1

#
# ROOT:  A
# A:     A_1  A_2  B
# B:     B_1  C
# C:     C_1
#
A = "TEST STATE: A"
A_1 = "TEST STATE: A_1"
A_2 = "TEST STATE: A_2"
B = "TEST STATE: B"
B_1 = "TEST STATE: B_1"
C = "TEST STATE: C"
C_1 = "TEST STATE: C_1"

TREE_STATES = [ROOT_STATE_ID, A, A_1, A_2, B, B_1, C, C_1]

# -----------------------------------------------------------------------------
# MOCK IMPLEMENTATIONS
# -----------------------------------------------------------------------------


class RecordingSink:
    """Error sink that keeps every report for later assertions."""

    def __init__(self) -> None:
        self.reports: List[Tuple[str, HSMError]] = []

    def __call__(self, source: str, error: HSMError) -> None:
        self.reports.append((source, error))

    def of_type(self, error_type: Type[HSMError]) -> List[HSMError]:
        return [error for _, error in self.reports if isinstance(error, error_type)]

    def clear(self) -> None:
        self.reports.clear()


class HookRecorder:
    """
    Creates builder nodes whose hooks append ``(kind, from_id, to_id)`` to a shared trace.
    Async hooks wait on an optional per-state gate before returning.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Optional[str], str]] = []
        self.gates: Dict[str, asyncio.Event] = {}

    def node(self, state_id: str, sync_hooks: bool = True, async_hooks: bool = False) -> StateBuilderNode:
        node = StateBuilderNode(state_id)
        if sync_hooks:
            node.on_enter = self._record("enter")
            node.on_exit = self._record("exit")
        if async_hooks:
            node.on_enter_async = self._record_async("enter_async", gate_key=state_id)
            node.on_exit_async = self._record_async("exit_async", gate_key=state_id)
        return node

    def gate(self, state_id: str) -> asyncio.Event:
        """Hold async hooks of ``state_id`` until the returned event is set."""
        return self.gates.setdefault(state_id, asyncio.Event())

    def _record(self, kind: str):
        def hook(from_id: Optional[str], to_id: str) -> None:
            self.calls.append((kind, from_id, to_id))

        return hook

    def _record_async(self, kind: str, gate_key: str):
        async def hook(from_id: Optional[str], to_id: str) -> None:
            self.calls.append((kind, from_id, to_id))
            gate = self.gates.get(gate_key)
            if gate is not None:
                await gate.wait()

        return hook

    @property
    def exited(self) -> List[str]:
        return [from_id for kind, from_id, _ in self.calls if kind.startswith("exit")]

    @property
    def entered(self) -> List[str]:
        return [to_id for kind, _, to_id in self.calls if kind.startswith("enter")]

    def clear(self) -> None:
        self.calls.clear()


# -----------------------------------------------------------------------------
# TEST HELPERS
# -----------------------------------------------------------------------------


def build_tree_registry(recorder: HookRecorder, async_hooks: bool = False) -> ConstructionRegistry:
    """Registry that builds the A/B/C test tree from three independent builders."""
    registry = ConstructionRegistry()

    @registry.constructor()
    def construct_a(root: StateBuilderNode) -> None:
        a = root.add_state(recorder.node(A, async_hooks=async_hooks))
        a.add_state(recorder.node(A_1, async_hooks=async_hooks))
        a.add_state(recorder.node(A_2, async_hooks=async_hooks))

    @registry.constructor(C, priority=TEST_PRIORITY)
    def construct_c_children(parent: StateBuilderNode) -> None:
        parent.add_state(recorder.node(C_1, async_hooks=async_hooks))

    @registry.constructor(B, priority=TEST_PRIORITY)
    def construct_c(parent: StateBuilderNode) -> None:
        parent.add_state(recorder.node(C, async_hooks=async_hooks))

    @registry.constructor(A, priority=TEST_PRIORITY)
    def construct_b(parent: StateBuilderNode) -> None:
        b = parent.add_state(recorder.node(B, async_hooks=async_hooks))
        b.add_state(recorder.node(B_1, async_hooks=async_hooks))

    return registry


def expected_hooks(path_from: List[str], path_to: List[str]) -> Tuple[List[str], List[str]]:
    """Exit and enter sequences predicted from two root paths (state first, root last)."""
    common = next(s for s in path_from if s in path_to)
    exits = path_from[: path_from.index(common)]
    enters = list(reversed(path_to[: path_to.index(common)]))
    return exits, enters
