# hfsm/core/builder.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from collections import deque
from typing import Iterator, List, Optional, Sequence

from hfsm.core.hooks import AsyncEnterHook, AsyncExitHook, EnterHook, ExitHook


class StateBuilderNode:
    """
    Mutable state-to-be, used only while the tree is assembled.

    Builder functions create nodes and hang them under the node they were given.
    Once the machine freezes the tree, builder nodes are discarded and never
    touched again.
    """

    def __init__(
        self,
        state_id: str,
        on_enter: Optional[EnterHook] = None,
        on_exit: Optional[ExitHook] = None,
        on_enter_async: Optional[AsyncEnterHook] = None,
        on_exit_async: Optional[AsyncExitHook] = None,
    ) -> None:
        """
        :param state_id: Id of the state, unique within the machine.
        :param on_enter: Called as ``on_enter(previous_id, state_id)`` when the state is entered.
        :param on_exit: Called as ``on_exit(state_id, next_id)`` when the state is exited.
        :param on_enter_async: Awaited instead of ``on_enter`` by asynchronous transitions.
        :param on_exit_async: Awaited instead of ``on_exit`` by asynchronous transitions.
        """
        if not isinstance(state_id, str) or not state_id:
            raise ValueError("State id must be a non-empty string")

        self._id = state_id
        self._parent: Optional[StateBuilderNode] = None
        self._children: List[StateBuilderNode] = []

        self.on_enter = on_enter
        self.on_exit = on_exit
        self.on_enter_async = on_enter_async
        self.on_exit_async = on_exit_async

    @property
    def id(self) -> str:
        return self._id

    @property
    def parent(self) -> Optional[StateBuilderNode]:
        return self._parent

    @property
    def children(self) -> Sequence[StateBuilderNode]:
        return tuple(self._children)

    def add_state(self, child: StateBuilderNode) -> StateBuilderNode:
        """
        Attach ``child`` as the last child of this node and return it, so calls can be chained
        when building deeper subtrees.

        :raises ValueError: If the child already has a parent, or attaching it would create a cycle.
        """
        if child._parent is not None:
            raise ValueError(
                f"State '{child.id}' is already attached to '{child._parent.id}'. Re-parenting is disallowed."
            )
        for ancestor in self.iter_ancestors(include_self=True):
            if ancestor is child:
                raise ValueError(f"Adding state '{child.id}' to '{self.id}' would create a cycle")

        child._parent = self
        self._children.append(child)
        return child

    def iter_ancestors(self, include_self: bool = False) -> Iterator[StateBuilderNode]:
        node = self if include_self else self._parent
        while node is not None:
            yield node
            node = node._parent

    def find(self, state_id: str) -> Optional[StateBuilderNode]:
        """
        Breadth-first search of this subtree for the first node with ``state_id``.
        """
        queue = deque([self])
        while queue:
            node = queue.popleft()
            if node.id == state_id:
                return node
            queue.extend(node._children)
        return None

    def walk(self) -> Iterator[StateBuilderNode]:
        """Pre-order traversal: every node before its children, children in attachment order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node._children))

    def __repr__(self) -> str:
        return f"StateBuilderNode({self._id!r}, children={len(self._children)})"
