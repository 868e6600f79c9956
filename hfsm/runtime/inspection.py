# hfsm/runtime/inspection.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""Text rendering of a machine's tree, for debug consoles and log dumps."""

from typing import List, Optional

from hfsm.core.errors import UnknownStateError
from hfsm.core.machine import Machine


def format_tree(machine: Machine, root_id: Optional[str] = None, indent: str = "  ") -> str:
    """
    Render the subtree under ``root_id`` (default: the machine's root), one state per line.

    The current state is marked ``*`` and its ancestors ``+``; states with async hooks
    are tagged ``[async]``. An unknown ``root_id`` is reported to the machine's error
    sink and renders as an empty string.
    """
    graph = machine.graph
    if root_id is not None and not machine.state_exists(root_id):
        machine.error_sink("format_tree", UnknownStateError(root_id))
        return ""
    start = root_id if root_id is not None else graph.root_id
    active = set(machine.get_path(machine.current_state_id)) if machine.current_state_id else set()

    lines: List[str] = []
    for depth, state in graph.iter_subtree(start):
        if state.id == machine.current_state_id:
            marker = "*"
        elif state.id in active:
            marker = "+"
        else:
            marker = " "
        suffix = " [async]" if state.is_async else ""
        lines.append(f"{marker} {indent * depth}{state.id}{suffix}")
    return "\n".join(lines)
