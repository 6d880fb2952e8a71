"""Command-line interface for issuing service requests."""
from __future__ import annotations

import json
import os
from collections.abc import Mapping, Sequence
from typing import Any
from xml.etree.ElementTree import ParseError

import requests
import typer

try:  # pragma: no cover - exercised in runtime environments
    from rich import box
    from rich.console import Console
    from rich.table import Table
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError(
        "The CLI requires Rich for table rendering. Install the CLI extras via "
        "'pip install servicekit[cli]' to enable this command."
    ) from exc

from .body import FormBody, JSONArrayBody, JSONObjectBody, RequestBody, TextBody
from .exceptions import DecodeError, ServiceError
from .query import encode_query
from .request import HttpMethod
from .response import (
    DecodingResponse,
    JSONArrayResponse,
    JSONDictionaryResponse,
    ServiceResponse,
    StringResponse,
    XMLResponse,
)
from .service import Service

app = typer.Typer(help="Typed HTTP service requests from the command line.", no_args_is_help=True)

DECODERS: dict[str, type[ServiceResponse]] = {
    "text": StringResponse,
    "json": JSONDictionaryResponse,
    "json-array": JSONArrayResponse,
    "xml": XMLResponse,
}

console = Console(force_terminal=False, color_system=None)


def _default_verify() -> bool:
    # Accept common truthy/falsey representations (1/0, true/false, yes/no).
    env_verify = os.getenv("SERVICEKIT_VERIFY_SSL")
    if env_verify is None:
        return True
    return env_verify.strip().lower() not in {"0", "false", "no", "off"}


def parse_pairs(values: Sequence[str], *, option: str) -> dict[str, Any]:
    """Parse repeated name=value options; repeated names collect into a list."""

    out: dict[str, Any] = {}
    for raw in values:
        if "=" not in raw:
            raise typer.BadParameter(f"{option} expects name=value, got {raw!r}.")
        name, value = raw.split("=", 1)
        name = name.strip()
        if name in out:
            existing = out[name]
            out[name] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            out[name] = value
    return out


def parse_headers(values: Sequence[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in values:
        if ":" not in raw:
            raise typer.BadParameter(f"--header expects 'Name: value', got {raw!r}.")
        name, value = raw.split(":", 1)
        headers[name.strip()] = value.strip()
    return headers


def _build_body(data: str | None, form: Sequence[str], json_body: str | None) -> RequestBody | None:
    supplied = [item for item in (data, json_body) if item is not None]
    if form:
        supplied.append("form")
    if len(supplied) > 1:
        raise typer.BadParameter("Use only one of --data, --form or --json-body.")
    if data is not None:
        return TextBody(data)
    if form:
        return FormBody(parse_pairs(form, option="--form"))
    if json_body is not None:
        try:
            payload = json.loads(json_body)
        except ValueError as exc:
            raise typer.BadParameter(f"--json-body is not valid JSON: {exc}") from exc
        if isinstance(payload, list):
            return JSONArrayBody(payload)
        if isinstance(payload, Mapping):
            return JSONObjectBody(payload)
        raise typer.BadParameter("--json-body must be a JSON object or array.")
    return None


def _render_headers(response: ServiceResponse) -> None:
    table = Table(
        title=f"{response.status_code} {response.status.name}",
        box=box.SIMPLE,
        show_lines=False,
        header_style="bold cyan",
    )
    table.add_column("Header")
    table.add_column("Value")
    for name, value in response.headers.items():
        table.add_row(name, value)
    console.print(table)


def _render_body(response: ServiceResponse) -> None:
    if not isinstance(response, DecodingResponse):
        return
    value = response.parse().result()
    if value is None:
        return
    if isinstance(response, XMLResponse):
        try:
            for event, element in value.read_events():
                if event == "start":
                    typer.echo(element.tag)
        except ParseError as exc:
            raise DecodeError("Response did not contain valid XML", details=str(exc)) from exc
        return
    if isinstance(value, str):
        typer.echo(value)
        return
    typer.echo(json.dumps(value, indent=2))


def _handle_error(exc: BaseException) -> None:
    message = f"Request failed: {exc}"
    details = getattr(exc, "details", None)
    if details:
        message += f"\nDetails: {details}"
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


@app.command("request")
def request_command(
    method: str = typer.Argument(..., help="HTTP verb (GET, POST, ...)."),
    url: str = typer.Argument(..., help="Absolute URL, or a path relative to --base-url."),
    base_url: str | None = typer.Option(
        None, "--base-url", envvar="SERVICEKIT_BASE_URL", help="Base URL for relative paths."
    ),
    header: list[str] = typer.Option([], "--header", "-H", help="Header in 'Name: value' form."),
    query: list[str] = typer.Option([], "--query", "-q", help="Query parameter in name=value form."),
    data: str | None = typer.Option(None, "--data", "-d", help="Raw text body."),
    form: list[str] = typer.Option([], "--form", "-f", help="Form field in name=value form."),
    json_body: str | None = typer.Option(None, "--json-body", help="JSON object or array body."),
    decode: str = typer.Option(
        "text",
        "--decode",
        case_sensitive=False,
        help="Body decoder: text, json, json-array or xml.",
        show_default=True,
    ),
    show_headers: bool = typer.Option(False, "--show-headers", "-i", help="Print response headers."),
    verify_ssl: bool = typer.Option(
        _default_verify(),
        "--verify/--no-verify",
        envvar="SERVICEKIT_VERIFY_SSL",
        help="Enable or disable TLS certificate verification.",
        show_default=True,
    ),
    timeout: float = typer.Option(
        30.0, envvar="SERVICEKIT_TIMEOUT", help="Request timeout (seconds).", show_default=True
    ),
) -> None:
    """Send a single request and print the decoded response body."""

    response_class = DECODERS.get(decode.lower())
    if response_class is None:
        raise typer.BadParameter(f"--decode must be one of {', '.join(DECODERS)}.")
    try:
        verb = HttpMethod.coerce(method)
        body = _build_body(data, form, json_body)
        params = parse_pairs(query, option="--query") if query else None
        headers = parse_headers(header) if header else None
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    with Service(base_url=base_url, verify_ssl=verify_ssl, timeout=timeout) as service:
        try:
            response = service.send(
                verb,
                url,
                headers=headers,
                query=params,
                body=body,
                response_class=response_class,
            ).result()
        except (ServiceError, requests.RequestException) as exc:
            _handle_error(exc)
            return

    if show_headers:
        _render_headers(response)
    try:
        _render_body(response)
    except ServiceError as exc:
        _handle_error(exc)
    if response.is_error:
        typer.secho(f"Server responded with status {response.status_code}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)


@app.command("encode-query")
def encode_query_command(
    pairs: list[str] = typer.Argument(..., help="Parameters in name=value form."),
) -> None:
    """Print the query string for the given parameters."""

    typer.echo(encode_query(parse_pairs(pairs, option="PAIRS")) or "")
