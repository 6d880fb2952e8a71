"""Query string encoding for request URLs and form bodies."""

from __future__ import annotations

import json
from collections.abc import Mapping, MutableSequence
from typing import Any
from urllib.parse import quote, urlsplit, urlunsplit

QueryValue = str | int | float | bool | bytes | list | tuple | Mapping[str, Any] | None
QueryParams = Mapping[str, Any]
QueryItems = MutableSequence[tuple[str, str]]

# Reserved characters that stay literal inside a query component.
_QUERY_SAFE = "/:@!$'()*,;?"


def encode_query_value(value: Any) -> str:
    """Render a single (non-sequence) query value as text.

    Scalars use `str()`, so booleans encode as `True`/`False` (the way
    `requests` renders params) rather than as `1`/`0`.
    """

    if value is None:
        return ""
    if isinstance(value, Mapping):
        try:
            return json.dumps(value, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError):
            return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def append_query_value(items: QueryItems, name: str, value: Any) -> None:
    """Append one parameter onto an ordered list of query items.

    Lists and tuples fan out into one item per element, all sharing `name`.
    """

    if isinstance(value, (list, tuple)):
        for element in value:
            append_query_value(items, name, element)
        return
    items.append((name, encode_query_value(value)))


def query_items(params: QueryParams) -> list[tuple[str, str]]:
    items: list[tuple[str, str]] = []
    for name, value in params.items():
        append_query_value(items, str(name), value)
    return items


def format_query(items: list[tuple[str, str]]) -> str:
    return "&".join(
        f"{quote(name, safe=_QUERY_SAFE)}={quote(value, safe=_QUERY_SAFE)}"
        for name, value in items
    )


def encode_query(params: QueryParams | None) -> str | None:
    """Transform a parameter mapping into a query string, if it yields any items."""

    if not params:
        return None
    items = query_items(params)
    if not items:
        return None
    return format_query(items)


def append_query(url: str, params: QueryParams | None) -> str:
    """Return `url` with `params` appended after any query it already carries."""

    encoded = encode_query(params)
    if encoded is None:
        return url
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    query = f"{parts.query}&{encoded}" if parts.query else encoded
    return urlunsplit(parts._replace(query=query))
