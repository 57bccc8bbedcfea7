# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""
rest-bridge Command Line Interface.

Usage:
    rest-bridge invoke        Send one direct-mode request through the bridge
    rest-bridge operations    List the operations declared by resource interfaces
"""

from __future__ import annotations

import importlib
import json
import os
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="rest-bridge",
    help="Message-to-REST invocation bridge",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


# ============================================================================
# INVOKE COMMAND
# ============================================================================


@app.command()
def invoke(
    address: Annotated[str, typer.Argument(help="Base address, e.g. https://api.example.com/v1")],
    method: Annotated[str, typer.Option("--method", "-X", help="HTTP method")] = "GET",
    path: Annotated[
        str | None, typer.Option("--path", "-p", help="Path appended to the address")
    ] = None,
    query: Annotated[
        str | None, typer.Option("--query", "-q", help="Raw query string, e.g. 'a=1&b=2'")
    ] = None,
    header: Annotated[
        list[str] | None,
        typer.Option("--header", "-H", help="Request header 'Name: value' (repeatable)"),
    ] = None,
    data: Annotated[
        str | None, typer.Option("--data", "-d", help="Request body (JSON or plain text)")
    ] = None,
    no_throw: Annotated[
        bool,
        typer.Option("--no-throw", help="Report failure statuses instead of raising"),
    ] = False,
    timeout: Annotated[float, typer.Option("--timeout", help="Timeout in seconds")] = 30.0,
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
):
    """
    Invoke a REST resource in direct HTTP mode.

    Example:
        rest-bridge invoke https://api.example.com -p /customers/123
        rest-bridge invoke https://api.example.com -X POST -p /customers -d '{"name": "x"}'
    """
    from rest_bridge import EndpointConfig, InvocationEngine, RestEndpoint
    from rest_bridge.core.classifier import RemoteInvocationError
    from rest_bridge.core.models import BridgeError, Exchange, Header, Message

    headers: dict[str, Any] = {}
    for item in header or []:
        name, sep, value = item.partition(":")
        if not sep:
            error_console.print(f"[red]Invalid header (expected 'Name: value'): {item}[/red]")
            raise typer.Exit(1)
        headers[name.strip()] = value.strip()

    headers[Header.HTTP_METHOD] = method.upper()
    if path:
        headers[Header.HTTP_PATH] = path
    if query:
        headers[Header.HTTP_QUERY] = query

    try:
        config = EndpointConfig(
            address=address,
            throw_exception_on_failure=not no_throw,
            timeout_seconds=timeout,
        )
    except ValueError as e:
        error_console.print(f"[red]Invalid address: {e}[/red]")
        raise typer.Exit(1) from None

    exchange = Exchange(in_message=Message(headers=headers, body=_parse_body(data)))

    try:
        with InvocationEngine(RestEndpoint(config)) as engine:
            engine.process(exchange)
    except RemoteInvocationError as e:
        error_console.print(f"[red]✗ {e.status_code} {e.status_text}[/red]")
        if e.redirect_location:
            error_console.print(f"  Location: {e.redirect_location}")
        if e.response_body:
            error_console.print(e.response_body)
        raise typer.Exit(1) from None
    except BridgeError as e:
        error_console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1) from None

    out = exchange.out_message
    status_code = out.headers.pop(Header.HTTP_RESPONSE_CODE, None)
    response_headers = {
        k: v for k, v in out.headers.items() if k not in exchange.in_message.headers
    }

    if json_output:
        output = {
            "status_code": status_code,
            "headers": response_headers,
            "body": out.body,
        }
        console.print_json(json.dumps(output, default=str))
        return

    color = "green" if status_code is not None and status_code < 300 else "yellow"
    console.print(f"[bold {color}]{status_code}[/bold {color}] {method.upper()} {address}")

    if response_headers:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Header", style="cyan")
        table.add_column("Value")
        for name, value in response_headers.items():
            table.add_row(str(name), str(value))
        console.print(table)

    if out.body is not None:
        if isinstance(out.body, dict | list):
            console.print_json(json.dumps(out.body, default=str))
        else:
            console.print(str(out.body))


def _parse_body(data: str | None) -> Any:
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        return data


# ============================================================================
# OPERATIONS COMMAND
# ============================================================================


@app.command()
def operations(
    interfaces: Annotated[
        list[str],
        typer.Argument(help="Resource interfaces as 'package.module:ClassName', in scan order"),
    ],
):
    """
    List the operations a set of resource interfaces declares.

    Operations are shown in resolution order: the first matching row wins.

    Example:
        rest-bridge operations myapp.resources:CustomerService
    """
    from rest_bridge.core.resolver import MethodResolver

    classes = [_load_interface(spec) for spec in interfaces]
    resolver = MethodResolver(classes)

    table = Table(title="Resource operations")
    table.add_column("Interface", style="cyan")
    table.add_column("Operation", style="green")
    table.add_column("Parameters")
    table.add_column("HTTP")

    for op in resolver.operations():
        params = ", ".join(
            f"{n}: {getattr(t, '__name__', t)}"
            for n, t in zip(op.parameter_names, op.parameter_types, strict=True)
        )
        root = op.interface.path.rstrip("/")
        table.add_row(op.interface.__name__, op.name, params, f"{op.http_method} {root}{op.path}")

    console.print(table)


def _load_interface(spec: str) -> type:
    module_name, sep, class_name = spec.partition(":")
    if not sep:
        error_console.print(f"[red]Expected 'module:ClassName', got {spec}[/red]")
        raise typer.Exit(1)
    try:
        module = importlib.import_module(module_name)
        return getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        error_console.print(f"[red]Cannot load {spec}: {e}[/red]")
        raise typer.Exit(1) from None


# ============================================================================
# VERSION
# ============================================================================


def version_callback(value: bool):
    if value:
        from rest_bridge import __version__

        console.print(f"rest-bridge version {__version__}")
        raise typer.Exit()


def quiet_callback(value: bool):
    if value:
        from rest_bridge.utils.logging import silence_logging

        silence_logging()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version"),
    ] = None,
    quiet: Annotated[
        bool | None,
        typer.Option("--quiet", "-q", callback=quiet_callback, is_eager=True, help="Suppress logs"),
    ] = None,
):
    """
    rest-bridge: turn messages into REST calls and back.
    """
    from dotenv import load_dotenv

    load_dotenv()
    if not quiet:
        from rest_bridge.utils.logging import configure_logging

        configure_logging(os.getenv("REST_BRIDGE_LOG_LEVEL", "WARNING"))


if __name__ == "__main__":
    app()
