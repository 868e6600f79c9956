# hfsm/core/registry.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from hfsm.core.builder import StateBuilderNode
from hfsm.core.config import ROOT_STATE_ID
from hfsm.core.errors import ConstructionError, UnresolvedDependencyError
from hfsm.core.hooks import ErrorSink

logger = logging.getLogger(__name__)

BuilderFunction = Callable[[StateBuilderNode], None]


@dataclass(frozen=True)
class BuilderDescriptor:
    """
    One contribution to the state tree: ``apply`` attaches new subtrees under the
    node with id ``parent_id`` once that node exists.

    :param apply: Builder function, called with the parent node.
    :param parent_id: Id of the node the builder attaches to.
    :param priority: Lower values run first among descriptors that are ready in the same wave.
    :param skip_in_tests: Leave this descriptor out when the machine runs in test mode.
    """

    apply: BuilderFunction
    parent_id: str = ROOT_STATE_ID
    priority: int = 0
    skip_in_tests: bool = False

    @property
    def name(self) -> str:
        return getattr(self.apply, "__qualname__", repr(self.apply))


class ConstructionRegistry:
    """
    Collects builder descriptors from independently written modules so the tree can
    be assembled without a central wiring file.

    Feature modules register at import time::

        registry = ConstructionRegistry()

        @registry.constructor("Gameplay", priority=10)
        def build_pause_menu(gameplay):
            gameplay.add_state(StateBuilderNode("Paused"))
    """

    def __init__(self, descriptors: Optional[List[BuilderDescriptor]] = None) -> None:
        self._descriptors: List[BuilderDescriptor] = list(descriptors or [])

    def add(self, descriptor: BuilderDescriptor) -> BuilderDescriptor:
        self._descriptors.append(descriptor)
        return descriptor

    def register(
        self,
        apply: BuilderFunction,
        parent_id: str = ROOT_STATE_ID,
        priority: int = 0,
        skip_in_tests: bool = False,
    ) -> BuilderDescriptor:
        """Register ``apply`` as a builder for children of ``parent_id``."""
        if not callable(apply):
            raise TypeError("Builder must be callable")
        return self.add(BuilderDescriptor(apply, parent_id, priority, skip_in_tests))

    def constructor(
        self, parent_id: str = ROOT_STATE_ID, priority: int = 0, skip_in_tests: bool = False
    ) -> Callable[[BuilderFunction], BuilderFunction]:
        """Decorator form of :meth:`register`. The decorated function is returned unchanged."""

        def decorator(func: BuilderFunction) -> BuilderFunction:
            self.register(func, parent_id=parent_id, priority=priority, skip_in_tests=skip_in_tests)
            return func

        return decorator

    def extend(self, other: ConstructionRegistry) -> None:
        """Append every descriptor of ``other``, keeping its registration order. ``other`` may be ``self``."""
        self._descriptors.extend(list(other))

    def __iter__(self) -> Iterator[BuilderDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def resolve(
        self,
        root: StateBuilderNode,
        sink: ErrorSink,
        test_mode: bool = False,
        source: str = "ConstructionRegistry",
    ) -> StateBuilderNode:
        """
        Run every descriptor against the tree under ``root``, in waves.

        Each wave applies all descriptors whose parent already exists, lowest priority
        first (ties keep registration order), then readiness is checked again. A
        descriptor waits until its parent has been created by an earlier wave, no
        matter how low its priority is. When a wave finds nothing ready, the remaining
        parent ids are reported as one UnresolvedDependencyError and whatever was built
        is kept.

        :param root: Node created by the machine before any descriptor runs.
        :param sink: Receives construction errors.
        :param test_mode: Skip descriptors flagged ``skip_in_tests``.
        :return: ``root``, with all resolvable subtrees attached.
        """
        remaining = [d for d in self._descriptors if not (test_mode and d.skip_in_tests)]
        wave = 0

        while remaining:
            ready = [d for d in remaining if root.find(d.parent_id) is not None]
            if not ready:
                break

            wave += 1
            logger.debug("Construction wave %d: %d ready, %d waiting", wave, len(ready), len(remaining) - len(ready))
            for descriptor in sorted(ready, key=lambda d: d.priority):
                self._apply(descriptor, root, sink, source)

            applied = set(map(id, ready))
            remaining = [d for d in remaining if id(d) not in applied]

        if remaining:
            sink(source, UnresolvedDependencyError(d.parent_id for d in remaining))

        return root

    @staticmethod
    def _apply(descriptor: BuilderDescriptor, root: StateBuilderNode, sink: ErrorSink, source: str) -> None:
        parent = root.find(descriptor.parent_id)
        try:
            descriptor.apply(parent)
        except Exception as exc:
            logger.exception("Builder %s failed under '%s'", descriptor.name, descriptor.parent_id)
            error = ConstructionError(f"Builder {descriptor.name} failed under '{descriptor.parent_id}': {exc}")
            error.__cause__ = exc
            sink(source, error)
