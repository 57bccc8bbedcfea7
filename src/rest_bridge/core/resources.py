# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""
Resource interface model for proxy-mode invocation.

A resource interface is a plain class whose methods are marked with
``@resource_method``. The class-level ``path`` is the resource root and may
contain ``{name}`` template variables filled per call; each method carries
its HTTP verb, a path template relative to the root and the names of the
arguments sent as query parameters. The remaining argument, if any, is the
request body.

Example::

    class CustomerService(ResourceInterface):
        path = "/customerservice"

        @resource_method("GET", "/customers/{id}")
        def get_customer(self, id: str) -> Customer: ...

        @resource_method("GET", "/customers", query=("limit",))
        def list_customers(self, limit: int) -> httpx.Response: ...
"""

from __future__ import annotations

import inspect
import string
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

_OPERATION_ATTR = "__rest_operation__"


@dataclass(frozen=True)
class _OperationSpec:
    http_method: str
    path: str
    query: tuple[str, ...]


@dataclass(frozen=True)
class ResourceOperation:
    """A callable operation declared on a resource interface."""

    name: str
    parameter_names: tuple[str, ...]
    parameter_types: tuple[type, ...]
    http_method: str
    path: str
    query: tuple[str, ...]
    return_type: Any
    interface: type

    @property
    def path_variables(self) -> tuple[str, ...]:
        return template_variables(self.path)

    @property
    def body_parameter(self) -> str | None:
        """Name of the argument sent as request body, if any."""
        bound = set(self.path_variables) | set(self.query)
        for name in self.parameter_names:
            if name not in bound:
                return name
        return None


def resource_method(
    http_method: str,
    path: str = "",
    *,
    query: tuple[str, ...] = (),
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a method of a ``ResourceInterface`` as a remote operation."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        setattr(func, _OPERATION_ATTR, _OperationSpec(http_method.upper(), path, tuple(query)))
        return func

    return decorator


class ResourceInterface:
    """Base class for resource interfaces. Subclasses set ``path``."""

    path: str = ""

    @classmethod
    def operations(cls) -> list[ResourceOperation]:
        """
        Return the declared operations in definition order.

        Operations inherited from parent interfaces are included. A name
        redefined in a subclass takes the subclass definition, and a
        redefinition without ``@resource_method`` hides the inherited one.
        """
        found: dict[str, tuple[Callable[..., Any], _OperationSpec]] = {}
        for klass in reversed(cls.__mro__):
            if klass is ResourceInterface or klass is object:
                continue
            for name, func in vars(klass).items():
                spec = getattr(func, _OPERATION_ATTR, None)
                if spec is not None:
                    found[name] = (func, spec)
                else:
                    found.pop(name, None)
        return [_build_operation(cls, name, func, spec) for name, (func, spec) in found.items()]


def _build_operation(
    cls: type, name: str, func: Callable[..., Any], spec: _OperationSpec
) -> ResourceOperation:
    hints = typing.get_type_hints(func)
    params = list(inspect.signature(func).parameters.values())[1:]

    names: list[str] = []
    types: list[type] = []
    for param in params:
        if param.name not in hints:
            raise TypeError(f"{cls.__name__}.{name}: parameter '{param.name}' has no annotation")
        names.append(param.name)
        types.append(hints[param.name])

    bound = set(template_variables(spec.path)) | set(spec.query)
    unknown = bound - set(names)
    if unknown:
        raise TypeError(f"{cls.__name__}.{name}: unknown parameters {sorted(unknown)}")
    if len([n for n in names if n not in bound]) > 1:
        raise TypeError(f"{cls.__name__}.{name}: more than one body parameter")

    return ResourceOperation(
        name=name,
        parameter_names=tuple(names),
        parameter_types=tuple(types),
        http_method=spec.http_method,
        path=spec.path,
        query=spec.query,
        return_type=hints.get("return", Any),
        interface=cls,
    )


def template_variables(template: str) -> tuple[str, ...]:
    """Return the ``{name}`` variables of a path template, in order."""
    return tuple(
        field_name
        for _, field_name, _, _ in string.Formatter().parse(template)
        if field_name is not None
    )
