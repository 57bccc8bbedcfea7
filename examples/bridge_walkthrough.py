#!/usr/bin/env python3
"""
Walkthrough: rest-bridge direct and proxy modes

Runs both invocation modes against an in-process fake service
(httpx.MockTransport), then shows how a failure status is surfaced.

Usage:
    python examples/bridge_walkthrough.py
"""

from __future__ import annotations

import sys

import httpx
from pydantic import BaseModel

from rest_bridge import (
    EndpointConfig,
    Exchange,
    Header,
    InvocationEngine,
    Message,
    RemoteInvocationError,
    ResourceInterface,
    RestEndpoint,
    resource_method,
)

CUSTOMERS = {"1": {"id": 1, "name": "Ada"}, "2": {"id": 2, "name": "Grace"}}


class Customer(BaseModel):
    id: int
    name: str


class CustomerService(ResourceInterface):
    path = "/customers"

    @resource_method("GET", "/{customer_id}")
    def get_customer(self, customer_id: str) -> Customer: ...


def fake_service(request: httpx.Request) -> httpx.Response:
    customer_id = request.url.path.rsplit("/", 1)[-1]
    if customer_id in CUSTOMERS:
        return httpx.Response(200, json=CUSTOMERS[customer_id])
    return httpx.Response(404, text=f"no customer {customer_id}")


def main() -> int:
    endpoint = RestEndpoint(
        EndpointConfig(address="https://crm.example.com/api"),
        resource_interfaces=[CustomerService],
        transport=httpx.MockTransport(fake_service),
    )

    with InvocationEngine(endpoint) as engine:
        # ── Direct HTTP mode ────────────────────────────────────
        print("\n[1/3] Direct mode: GET /customers/1")
        exchange = Exchange(
            Message(headers={Header.HTTP_METHOD: "GET", Header.HTTP_PATH: "/customers/1"})
        )
        engine.process(exchange)
        print(f"  status: {exchange.out_message.headers[Header.HTTP_RESPONSE_CODE]}")
        print(f"  body:   {exchange.out_message.body}")

        # ── Proxy mode ──────────────────────────────────────────
        print("\n[2/3] Proxy mode: get_customer('2')")
        exchange = Exchange(
            Message(
                headers={Header.USING_HTTP_API: False, Header.OPERATION_NAME: "get_customer"},
                body=["2"],
            )
        )
        engine.process(exchange)
        print(f"  result: {exchange.out_message.body!r}")

        # ── Failure mapping ─────────────────────────────────────
        print("\n[3/3] Failure: GET /customers/99")
        exchange = Exchange(
            Message(headers={Header.HTTP_METHOD: "GET", Header.HTTP_PATH: "/customers/99"})
        )
        try:
            engine.process(exchange)
        except RemoteInvocationError as e:
            print(f"  {e.status_code} {e.status_text}: {e.response_body}")
        else:
            print("  FAIL: expected a RemoteInvocationError")
            return 1

        stats = engine.cache.statistics
        print(f"\nCache: {stats.misses} miss(es), {stats.hits} hit(s)")

    return 0


if __name__ == "__main__":
    sys.exit(main())
