# hfsm/core/machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import List, Optional

from hfsm.core.builder import StateBuilderNode
from hfsm.core.config import MachineConfig
from hfsm.core.errors import (
    AlreadyAssembledError,
    HSMError,
    NoCommonAncestorError,
    TransitionInProgressError,
    UnknownStateError,
)
from hfsm.core.hooks import ErrorSink, LoggingErrorSink, TransitionListener, _HookInvoker
from hfsm.core.registry import ConstructionRegistry
from hfsm.core.states import State, StateInfo
from hfsm.core.transitions import TransitionPlan, plan_transition
from hfsm.runtime.graph import StateGraph

logger = logging.getLogger(__name__)


class Machine:
    """
    Hierarchical state machine for an application's high-level modes.

    The tree is assembled once from the descriptors of a ConstructionRegistry and
    frozen. After that the only thing that changes is which state is current.
    Changing state exits every state between the current one and the lowest common
    ancestor of current and target, then enters every state from that ancestor down
    to the target.

    Every failure is reported to the error sink and absorbed: operations return a
    default value instead of raising. At most one transition runs at a time; a
    request made while another is in progress is rejected.
    """

    _SOURCE = "Machine"

    def __init__(
        self,
        registry: Optional[ConstructionRegistry] = None,
        config: Optional[MachineConfig] = None,
        error_sink: Optional[ErrorSink] = None,
    ) -> None:
        """
        :param registry: Builder descriptors to assemble the tree from.
        :param config: Machine settings; defaults to ``MachineConfig()``.
        :param error_sink: Receives ``(source, error)`` reports; defaults to logging them.
        """
        self._config = config or MachineConfig()
        self._registry = registry if registry is not None else ConstructionRegistry()
        self._sink: ErrorSink = error_sink or LoggingErrorSink()
        self._hooks = _HookInvoker(self._SOURCE, self._sink)

        self._graph = StateGraph({}, self._config.root_id)
        self._current: Optional[State] = None
        self._assembled = False
        self._initialized = False
        self._active_target: Optional[str] = None
        self._listeners: List[TransitionListener] = []

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @property
    def config(self) -> MachineConfig:
        return self._config

    @property
    def registry(self) -> ConstructionRegistry:
        return self._registry

    @property
    def graph(self) -> StateGraph:
        return self._graph

    @property
    def error_sink(self) -> ErrorSink:
        return self._sink

    @property
    def initialized(self) -> bool:
        return self._initialized

    def assemble(self) -> bool:
        """
        Build the state tree from the registry, freeze it, and enter the root state.

        Runs once; later calls are reported and ignored. Descriptors that cannot be
        resolved and duplicate ids are reported, but the rest of the tree is still built.

        :return: True if this call assembled the tree.
        """
        if self._assembled:
            self._report(AlreadyAssembledError("State machine has already been assembled."))
            return False

        root = StateBuilderNode(self._config.root_id)
        self._registry.resolve(root, self._sink, test_mode=self._config.test_mode, source=self._SOURCE)
        self._graph = StateGraph.from_builder(root, self._sink, source=self._SOURCE)
        self._assembled = True
        logger.info("Assembled state machine with %d states", len(self._graph))

        if self._config.enter_root_on_assemble:
            self.change_state(self._graph.root_id)
        self._initialized = True
        return True

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    @property
    def current_state_id(self) -> str:
        """Id of the current state, or an empty string before the first transition."""
        return self._current.id if self._current is not None else ""

    @property
    def in_transition(self) -> bool:
        return self._active_target is not None

    def change_state(self, state_id: str) -> bool:
        """
        Move to ``state_id``, running only synchronous hooks.

        :return: True if the transition completed.
        """
        plan = self._begin(state_id)
        if plan is None:
            return False

        try:
            for exiting, next_state in plan.exits:
                self._skip_async_only(exiting, exiting.on_exit, exiting.on_exit_async, "exit")
                self._hooks.call(exiting.on_exit, exiting.id, exiting.id, next_state.id)
                self._current = next_state

            for entering in plan.enters:
                previous = self._move_to(entering)
                self._skip_async_only(entering, entering.on_enter, entering.on_enter_async, "enter")
                self._hooks.call(entering.on_enter, entering.id, previous, entering.id)
        finally:
            self._active_target = None

        self._notify(plan)
        return True

    async def change_state_async(self, state_id: str) -> bool:
        """
        Move to ``state_id``, awaiting asynchronous hooks where a state defines them.

        Steps run strictly one after another. An exiting state's hook finishes before
        the current pointer moves to its parent; an entering state becomes current
        before its enter hook is awaited, so ``current_state_id`` shows the target
        while its enter hook is still running.

        :return: True if the transition completed.
        """
        plan = self._begin(state_id)
        if plan is None:
            return False

        try:
            for exiting, next_state in plan.exits:
                if exiting.on_exit_async is not None:
                    await self._hooks.call_async(exiting.on_exit_async, exiting.id, exiting.id, next_state.id)
                else:
                    self._hooks.call(exiting.on_exit, exiting.id, exiting.id, next_state.id)
                self._current = next_state

            for entering in plan.enters:
                previous = self._move_to(entering)
                if entering.on_enter_async is not None:
                    await self._hooks.call_async(entering.on_enter_async, entering.id, previous, entering.id)
                else:
                    self._hooks.call(entering.on_enter, entering.id, previous, entering.id)
        finally:
            self._active_target = None

        self._notify(plan)
        return True

    def shutdown(self) -> bool:
        """Return to the root state, exiting everything below it."""
        return self.change_state(self._graph.root_id)

    async def shutdown_async(self) -> bool:
        return await self.change_state_async(self._graph.root_id)

    def subscribe(self, listener: TransitionListener) -> None:
        """Call ``listener(from_id, to_id)`` after every completed transition, in subscription order."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: TransitionListener) -> bool:
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    def _begin(self, state_id: str) -> Optional[TransitionPlan]:
        target = self._graph.get(state_id)
        if target is None:
            self._report(UnknownStateError(state_id, f"Changing state but could not find state '{state_id}'."))
            return None

        if self._active_target is not None:
            self._report(TransitionInProgressError(state_id, self._active_target))
            return None

        plan = plan_transition(self._graph, self._current, target)
        if plan is None:
            self._report(NoCommonAncestorError(self.current_state_id, state_id))
            return None

        logger.debug(
            "Transition %s -> %s: %d exits, %d enters",
            plan.from_id,
            plan.to_id,
            len(plan.exits),
            len(plan.enters),
        )
        self._active_target = state_id
        return plan

    def _move_to(self, state: State) -> Optional[str]:
        previous = self._current.id if self._current is not None else None
        self._current = state
        return previous

    @staticmethod
    def _skip_async_only(state: State, hook, async_hook, direction: str) -> None:
        if hook is None and async_hook is not None:
            logger.debug("Skipping async %s hook of '%s' in synchronous transition", direction, state.id)

    def _notify(self, plan: TransitionPlan) -> None:
        for listener in tuple(self._listeners):
            self._hooks.call(listener, plan.to_id, plan.from_id, plan.to_id)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def state_exists(self, state_id: str) -> bool:
        return state_id in self._graph

    def get_all_states(self) -> List[str]:
        return list(self._graph)

    def get_child_count(self, state_id: str) -> int:
        state = self._lookup(state_id)
        return len(state.children) if state is not None else 0

    def get_state_info(self, state_id: str) -> StateInfo:
        state = self._lookup(state_id)
        return StateInfo.from_state(state) if state is not None else StateInfo()

    def get_parent(self, state_id: str) -> str:
        """Parent id of ``state_id``; empty for the root and for unknown ids."""
        state = self._lookup(state_id)
        return state.parent if state is not None else ""

    def get_path(self, state_id: str) -> List[str]:
        """Ids from ``state_id`` up to and including the root."""
        state = self._lookup(state_id)
        if state is None:
            return []
        return [s.id for s in self._graph.get_path(state)]

    def is_in_state(self, state_id: str) -> bool:
        """True if ``state_id`` is the current state or one of its ancestors."""
        if self._lookup(state_id) is None or self._current is None:
            return False
        return any(s.id == state_id for s in self._graph.get_path(self._current))

    def _lookup(self, state_id: str) -> Optional[State]:
        state = self._graph.get(state_id)
        if state is None:
            self._report(UnknownStateError(state_id))
        return state

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def _report(self, error: HSMError) -> None:
        self._sink(self._SOURCE, error)

    def __repr__(self) -> str:
        return f"Machine(states={len(self._graph)}, current={self.current_state_id!r})"
