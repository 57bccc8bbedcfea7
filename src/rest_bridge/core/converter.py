# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""Value conversion used for error-body rendering and response coercion."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError


class TypeConversionError(ValueError):
    """Raised when a value cannot be converted to the requested type."""


class TypeConverter(ABC):
    """Converts a value to a target type."""

    @abstractmethod
    def convert(self, value: Any, target: Any) -> Any:
        """
        Convert ``value`` to ``target``.

        Raises:
            TypeConversionError: The value cannot be represented as ``target``.
        """
        ...


class DefaultTypeConverter(TypeConverter):
    """Decodes bytes for ``str`` targets, otherwise validates with pydantic."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def convert(self, value: Any, target: Any) -> Any:
        if value is None:
            return None
        if target is str and isinstance(value, bytes | bytearray):
            try:
                return bytes(value).decode(self._encoding)
            except UnicodeDecodeError as e:
                raise TypeConversionError(f"Cannot decode body as {self._encoding}: {e}") from e
        if target is str and not isinstance(value, str):
            return str(value)
        try:
            return TypeAdapter(target).validate_python(value)
        except (PydanticSchemaGenerationError, ValidationError) as e:
            raise TypeConversionError(f"Cannot convert {type(value).__name__} to {target}") from e
