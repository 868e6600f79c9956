# hfsm/core/states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from hfsm.core.builder import StateBuilderNode
from hfsm.core.hooks import AsyncEnterHook, AsyncExitHook, EnterHook, ExitHook


@dataclass(frozen=True, eq=False)
class State:
    """
    Immutable runtime node, produced once from a StateBuilderNode when the tree is frozen.

    Hierarchy is held as ids only; the StateGraph resolves them. States compare by
    identity, ids are what callers compare.
    """

    id: str
    parent: str = ""
    children: Tuple[str, ...] = ()
    on_enter: Optional[EnterHook] = None
    on_exit: Optional[ExitHook] = None
    on_enter_async: Optional[AsyncEnterHook] = None
    on_exit_async: Optional[AsyncExitHook] = None

    @classmethod
    def from_builder(cls, node: StateBuilderNode, children: Optional[Tuple[str, ...]] = None) -> State:
        """:param children: Child ids to record instead of the node's own children."""
        return cls(
            id=node.id,
            parent=node.parent.id if node.parent is not None else "",
            children=children if children is not None else tuple(child.id for child in node.children),
            on_enter=node.on_enter,
            on_exit=node.on_exit,
            on_enter_async=node.on_enter_async,
            on_exit_async=node.on_exit_async,
        )

    @property
    def is_root(self) -> bool:
        return not self.parent

    @property
    def is_async(self) -> bool:
        """True if the state defines any hook that asynchronous transitions await."""
        return self.on_enter_async is not None or self.on_exit_async is not None


@dataclass(frozen=True)
class StateInfo:
    """Read-only snapshot of a state for inspectors. The default value stands for "no such state"."""

    name: str = ""
    parent: str = ""
    children: Tuple[str, ...] = ()
    is_async: bool = False

    @classmethod
    def from_state(cls, state: State) -> StateInfo:
        return cls(name=state.id, parent=state.parent, children=state.children, is_async=state.is_async)
