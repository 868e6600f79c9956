# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import pytest

from hfsm.core.machine import Machine
from tests.utils import HookRecorder, RecordingSink, build_tree_registry


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "property: mark test as a property-based test")


@pytest.fixture
def sink():
    """An error sink that records reports instead of logging them."""
    return RecordingSink()


@pytest.fixture
def recorder():
    """Shared trace of every hook call made by test states."""
    return HookRecorder()


@pytest.fixture
def tree_registry(recorder):
    """Registry for ROOT -> A -> {A_1, A_2, B}, B -> {B_1, C}, C -> {C_1}."""
    return build_tree_registry(recorder)


@pytest.fixture
def machine(tree_registry, recorder, sink):
    """An assembled machine resting on the root, with an empty hook trace."""
    m = Machine(tree_registry, error_sink=sink)
    m.assemble()
    recorder.clear()
    return m


@pytest.fixture
def async_machine(recorder, sink):
    """Same tree, but every state also defines async hooks."""
    m = Machine(build_tree_registry(recorder, async_hooks=True), error_sink=sink)
    m.assemble()
    recorder.clear()
    return m
