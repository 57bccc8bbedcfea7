# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""
Endpoint configuration.

Configures where a REST endpoint points, which invocation mode it defaults
to, how failures are surfaced and how the HTTP client is set up.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator


class EndpointConfig(BaseModel):
    """Configuration for a rest-bridge endpoint."""

    address: str = Field(
        description="Base address of the target resource (scheme, host, port, base path).",
    )

    # Invocation behavior
    http_client_api: bool = Field(
        default=True,
        description="Use direct HTTP mode unless a message asks otherwise; "
        "False selects proxy mode.",
    )
    throw_exception_on_failure: bool = Field(
        default=True,
        description="Raise RemoteInvocationError for status codes above 207.",
    )
    parameters: dict[str, str] | None = Field(
        default=None,
        description="Default query parameters for direct-mode calls.",
    )

    # Client configuration cache
    max_client_cache_size: int = Field(
        default=10,
        ge=1,
        description="Maximum number of per-address client configurations kept.",
    )

    # HTTP client settings
    timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for outbound calls in seconds.",
    )
    verify_ssl: bool = Field(
        default=True,
        description="Verify TLS certificates.",
    )
    follow_redirects: bool = Field(
        default=False,
        description="Let the HTTP client follow redirects instead of surfacing them.",
    )
    default_headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers sent with every request.",
    )

    @field_validator("address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"address must be an http(s) URL, got {value!r}")
        return value

    @classmethod
    def from_env(cls) -> EndpointConfig:
        """Build config from environment variables."""
        return cls(
            address=os.getenv("REST_BRIDGE_ADDRESS", "http://localhost:8080"),
            http_client_api=os.getenv("REST_BRIDGE_HTTP_CLIENT_API", "true").lower() == "true",
            throw_exception_on_failure=os.getenv("REST_BRIDGE_THROW_ON_FAILURE", "true").lower()
            == "true",
            max_client_cache_size=int(os.getenv("REST_BRIDGE_MAX_CLIENT_CACHE_SIZE", "10")),
            timeout_seconds=float(os.getenv("REST_BRIDGE_TIMEOUT", "30")),
            verify_ssl=os.getenv("REST_BRIDGE_VERIFY_SSL", "true").lower() == "true",
            follow_redirects=os.getenv("REST_BRIDGE_FOLLOW_REDIRECTS", "").lower() == "true",
        )
