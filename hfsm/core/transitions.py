# hfsm/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from hfsm.core.states import State
from hfsm.runtime.graph import StateGraph


@dataclass(frozen=True)
class TransitionPlan:
    """
    The minimal exit/enter sequence between two states of the same tree.

    ``exits`` holds ``(exiting, next)`` pairs, leaf first: each state is exited
    towards its parent, which becomes current. ``enters`` runs from the child of
    the common ancestor down to the target. The common ancestor itself is never
    exited or re-entered.
    """

    source: Optional[State]
    target: State
    common_ancestor: Optional[State]
    exits: Tuple[Tuple[State, State], ...] = ()
    enters: Tuple[State, ...] = ()

    @property
    def from_id(self) -> Optional[str]:
        return self.source.id if self.source is not None else None

    @property
    def to_id(self) -> str:
        return self.target.id

    @property
    def is_initial(self) -> bool:
        return self.source is None

    def __len__(self) -> int:
        return len(self.exits) + len(self.enters)


def plan_transition(graph: StateGraph, source: Optional[State], target: State) -> Optional[TransitionPlan]:
    """
    Work out which states to exit and enter to get from ``source`` to ``target``.

    With no source (the machine has never transitioned) only the target is entered;
    its ancestors are not. Returns None when the two states share no ancestor.
    """
    if source is None:
        return TransitionPlan(source=None, target=target, common_ancestor=None, enters=(target,))

    from_path = graph.get_path(source)
    to_path = graph.get_path(target)
    to_index = {state.id: i for i, state in enumerate(to_path)}

    for from_lca, state in enumerate(from_path):
        if state.id in to_index:
            to_lca = to_index[state.id]
            break
    else:
        return None

    exits = tuple(zip(from_path[:from_lca], from_path[1 : from_lca + 1]))
    enters = tuple(reversed(to_path[:to_lca]))
    return TransitionPlan(
        source=source,
        target=target,
        common_ancestor=from_path[from_lca],
        exits=exits,
        enters=enters,
    )
