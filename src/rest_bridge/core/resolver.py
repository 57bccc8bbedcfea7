# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""
Operation resolution for proxy-mode invocation.

The registry is built once per set of resource interfaces and maps
``(operation name, parameter types)`` to the declared operation. Lookup scans
the interfaces in their declared order; the first interface declaring a
match wins.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from rest_bridge.core.models import BridgeError
from rest_bridge.core.resources import ResourceInterface, ResourceOperation

logger = structlog.get_logger(__name__)

Signature = tuple[str, tuple[type, ...]]


class MethodResolutionError(BridgeError, LookupError):
    """Raised when no resource interface declares the requested operation."""

    def __init__(self, name: str, parameter_types: Sequence[type]) -> None:
        self.name = name
        self.parameter_types = tuple(parameter_types)
        super().__init__(
            f"Cannot find method with name: {name} "
            f"having parameters: {_types_to_string(self.parameter_types)}"
        )


class MethodResolver:
    """Resolves operation names against an ordered list of resource interfaces."""

    def __init__(self, interfaces: Sequence[type[ResourceInterface]]) -> None:
        self._interfaces = tuple(interfaces)
        self._registries: list[dict[Signature, ResourceOperation]] = []
        for interface in self._interfaces:
            registry: dict[Signature, ResourceOperation] = {}
            for operation in interface.operations():
                registry.setdefault((operation.name, operation.parameter_types), operation)
            self._registries.append(registry)

    @property
    def interfaces(self) -> tuple[type[ResourceInterface], ...]:
        return self._interfaces

    def operations(self) -> list[ResourceOperation]:
        """All registered operations, in scan order."""
        return [op for registry in self._registries for op in registry.values()]

    def resolve(self, name: str, arguments: Sequence[Any] | None) -> ResourceOperation:
        """
        Find the operation called ``name`` whose parameter types equal the
        runtime types of ``arguments``.

        Raises:
            MethodResolutionError: No interface declares a match.
        """
        parameter_types = argument_types(arguments)
        key = (name, parameter_types)
        for interface, registry in zip(self._interfaces, self._registries, strict=True):
            operation = registry.get(key)
            if operation is not None:
                logger.debug(
                    "bridge.method_resolved",
                    operation=name,
                    interface=interface.__name__,
                )
                return operation
        raise MethodResolutionError(name, parameter_types)


def argument_types(arguments: Sequence[Any] | None) -> tuple[type, ...]:
    """Concrete runtime type of each argument; no arguments gives ``()``."""
    if not arguments:
        return ()
    return tuple(type(arg) for arg in arguments)


def _types_to_string(types: Sequence[type]) -> str:
    return "[" + ",".join(getattr(t, "__name__", str(t)) for t in types) + "]"
