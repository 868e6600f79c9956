# hfsm/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Iterable, Optional, Tuple


class HSMError(Exception):
    """
    Base exception class for errors within the hierarchical state machine library.

    Machine operations never raise these. They are built as values and handed to
    the machine's error sink, so a bad request cannot halt the host's main loop.
    """


class ConstructionError(HSMError):
    """
    Raised when a builder descriptor fails while the state tree is assembled.
    """


class UnresolvedDependencyError(ConstructionError):
    """
    One or more descriptors targeted a parent id that never materialized.
    """

    def __init__(self, parent_ids: Iterable[str]) -> None:
        self.parent_ids: Tuple[str, ...] = tuple(parent_ids)
        super().__init__(f"Missing dependencies: {', '.join(self.parent_ids)}")


class DuplicateStateIdError(ConstructionError):
    """
    A second state claimed an id that is already registered. The first one is kept.
    """

    def __init__(self, state_id: str) -> None:
        self.state_id = state_id
        super().__init__(f"Tried to register state with id '{state_id}', but it is already registered.")


class AlreadyAssembledError(ConstructionError):
    """
    The machine was asked to assemble its tree a second time.
    """


class UnknownStateError(HSMError):
    """
    A query or transition referenced a state id that does not exist in the machine.
    """

    def __init__(self, state_id: str, message: Optional[str] = None) -> None:
        self.state_id = state_id
        super().__init__(message or f"No state with id '{state_id}' registered.")


class TransitionError(HSMError):
    """
    Raised when an attempted state transition is invalid or cannot be completed.
    """


class NoCommonAncestorError(TransitionError):
    """
    Two states share no ancestor. Only possible if the frozen tree is corrupt.
    """

    def __init__(self, from_id: str, to_id: str) -> None:
        self.from_id = from_id
        self.to_id = to_id
        super().__init__(f"Failed transition. Could not find common parent of '{from_id}' and '{to_id}'.")


class TransitionInProgressError(TransitionError):
    """
    A transition was requested while another one was still running.
    """

    def __init__(self, requested_id: str, active_id: str) -> None:
        self.requested_id = requested_id
        self.active_id = active_id
        super().__init__(
            f"Cannot change state to '{requested_id}' while a transition to '{active_id}' is in progress."
        )


class HookError(TransitionError):
    """
    An enter/exit hook or a transition subscriber raised, or was a coroutine function
    given where a plain callable is called. A raised exception is available as
    ``__cause__``.
    """

    def __init__(self, state_id: str, message: str) -> None:
        self.state_id = state_id
        super().__init__(message)
