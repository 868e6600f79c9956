# tests/unit/test_config.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import dataclasses

import pytest

from hfsm.core.config import ROOT_STATE_ID, MachineConfig


def test_defaults():
    config = MachineConfig()

    assert config.test_mode is False
    assert config.root_id == ROOT_STATE_ID
    assert config.enter_root_on_assemble is True


@pytest.mark.parametrize("root_id", ["", None, 7])
def test_root_id_must_be_non_empty_string(root_id):
    with pytest.raises(ValueError, match="root_id"):
        MachineConfig(root_id=root_id)


def test_config_is_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        MachineConfig().test_mode = True


def test_from_mapping():
    config = MachineConfig.from_mapping({"test_mode": True, "root_id": "Boot"})

    assert config == MachineConfig(test_mode=True, root_id="Boot")


def test_from_mapping_rejects_unknown_keys():
    with pytest.raises(ValueError, match="color, size"):
        MachineConfig.from_mapping({"size": 3, "color": "red", "test_mode": False})
