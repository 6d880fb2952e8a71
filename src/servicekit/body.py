"""Request body variants."""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

from .query import QueryParams, encode_query

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"


class RequestBody(ABC):
    """Interface each request body must implement.

    Bodies never raise while being built or encoded; a body that cannot be
    encoded reports `None` from `data()` and is sent as no body at all.
    """

    content_type: ClassVar[str | None] = None

    @abstractmethod
    def data(self) -> bytes | None:
        """Return the bytes to send, if any."""


@dataclass(frozen=True, slots=True)
class RawBody(RequestBody):
    """Pass raw bytes through unchanged."""

    value: bytes | None

    def data(self) -> bytes | None:
        return self.value


@dataclass(frozen=True, slots=True)
class TextBody(RequestBody):
    """Send a string using the given text encoding."""

    value: str | None
    encoding: str = "utf-8"

    def data(self) -> bytes | None:
        return _encode_text(self.value, self.encoding)


@dataclass(frozen=True, slots=True)
class FormBody(RequestBody):
    """Send named values, as a web form would."""

    content_type: ClassVar[str | None] = FORM_CONTENT_TYPE

    params: QueryParams
    encoding: str = "utf-8"

    def data(self) -> bytes | None:
        return _encode_text(encode_query(self.params), self.encoding)


@dataclass(frozen=True, slots=True)
class JSONObjectBody(RequestBody):
    """Send a JSON object."""

    content_type: ClassVar[str | None] = JSON_CONTENT_TYPE

    value: Mapping[str, Any]

    def data(self) -> bytes | None:
        return _encode_json(self.value)


@dataclass(frozen=True, slots=True)
class JSONArrayBody(RequestBody):
    """Send a JSON array."""

    content_type: ClassVar[str | None] = JSON_CONTENT_TYPE

    value: Sequence[Any]

    def data(self) -> bytes | None:
        return _encode_json(self.value)


def _encode_text(value: str | None, encoding: str) -> bytes | None:
    if value is None:
        return None
    try:
        return value.encode(encoding)
    except (LookupError, UnicodeEncodeError):
        return None


def _encode_json(value: Any) -> bytes | None:
    try:
        text = json.dumps(value, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError):
        return None
    return text.encode("utf-8")
