# hfsm/core/config.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from dataclasses import dataclass, fields
from typing import Any, Mapping

ROOT_STATE_ID = "ROOT"


@dataclass(frozen=True)
class MachineConfig:
    """
    Settings fixed for the lifetime of a machine.

    :param test_mode: Verification mode. Descriptors registered with
        ``skip_in_tests=True`` are left out of the tree.
    :param root_id: Id of the reserved root state created before any descriptor runs.
    :param enter_root_on_assemble: Transition to the root as the last step of ``assemble()``.
    """

    test_mode: bool = False
    root_id: str = ROOT_STATE_ID
    enter_root_on_assemble: bool = True

    def __post_init__(self):
        if not isinstance(self.root_id, str) or not self.root_id:
            raise ValueError(f"root_id must be a non-empty string, got {self.root_id!r}")

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any]) -> "MachineConfig":
        """
        Build a config from plain settings, e.g. a section of an application config file.

        :raises ValueError: If a key is not a known setting.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(settings) - known)
        if unknown:
            raise ValueError(f"Unknown machine settings: {', '.join(unknown)}")
        return cls(**dict(settings))
