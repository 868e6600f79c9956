# hfsm/runtime/graph.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""Frozen state tree and the path queries transitions are planned from."""

import logging
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

from hfsm.core.builder import StateBuilderNode
from hfsm.core.errors import DuplicateStateIdError
from hfsm.core.hooks import ErrorSink
from hfsm.core.states import State

logger = logging.getLogger(__name__)


def freeze_tree(root: StateBuilderNode, sink: ErrorSink, source: str = "StateGraph") -> Dict[str, State]:
    """
    Convert a builder tree into an ``id -> State`` map.

    Nodes are visited in pre-order, so the first node to claim an id is never deeper
    than a later duplicate on the same branch and the root id cannot be shadowed.
    Duplicates are dropped and reported. Their children are still converted and are
    adopted by the node that was kept, so every child list agrees with the parent ids.
    """
    kept: Dict[str, StateBuilderNode] = {}
    children: Dict[str, List[str]] = {}
    for node in root.walk():
        if node.id in kept:
            sink(source, DuplicateStateIdError(node.id))
            continue
        kept[node.id] = node
        children[node.id] = []
        if node.parent is not None:
            # A dropped parent shares its id with the kept node, visited earlier.
            children[node.parent.id].append(node.id)

    states = {state_id: State.from_builder(node, tuple(children[state_id])) for state_id, node in kept.items()}
    logger.debug("Froze %d states under '%s'", len(states), root.id)
    return states


class StateGraph:
    """
    Read-only view of the frozen states. Provides hierarchy lookups by id.
    """

    def __init__(self, states: Mapping[str, State], root_id: str) -> None:
        self._states = MappingProxyType(dict(states))
        self._root_id = root_id

    @classmethod
    def from_builder(cls, root: StateBuilderNode, sink: ErrorSink, source: str = "StateGraph") -> "StateGraph":
        return cls(freeze_tree(root, sink, source), root.id)

    @property
    def root_id(self) -> str:
        return self._root_id

    @property
    def states(self) -> Mapping[str, State]:
        return self._states

    def get(self, state_id: str) -> Optional[State]:
        return self._states.get(state_id)

    def __contains__(self, state_id: object) -> bool:
        return state_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def get_parent(self, state: State) -> Optional[State]:
        if not state.parent:
            return None
        return self._states.get(state.parent)

    def get_path(self, state: State) -> List[State]:
        """
        Return ``[state, parent(state), ..., root]``.

        Stops early if a parent id does not resolve or a state repeats, which only
        happens when the map was built by hand rather than frozen from a tree.
        """
        path: List[State] = []
        seen = set()
        current: Optional[State] = state
        while current is not None and current.id not in seen:
            seen.add(current.id)
            path.append(current)
            current = self.get_parent(current)
        return path

    def iter_subtree(self, state_id: str, depth: int = 0) -> Iterator[tuple]:
        """Yield ``(depth, state)`` pairs in pre-order, children in declaration order."""
        state = self._states.get(state_id)
        if state is None:
            return
        yield depth, state
        for child_id in dict.fromkeys(state.children):
            # Hand-built maps may list a child that points elsewhere.
            child = self._states.get(child_id)
            if child is not None and child.parent == state.id:
                yield from self.iter_subtree(child_id, depth + 1)
