"""Typed wrappers around completed HTTP exchanges."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from concurrent.futures import Future
from dataclasses import dataclass
from enum import IntEnum
from io import BytesIO
from typing import Any, ClassVar, Generic, TypeVar
from xml.etree.ElementTree import XMLPullParser

from PIL import Image, UnidentifiedImageError
from requests import Response

from .exceptions import DecodeError
from .futures import fulfilled, settle

T = TypeVar("T")

JSONDictionary = dict[str, Any]
JSONArray = list[Any]


class StatusClass(IntEnum):
    """Coarse classification of an HTTP status code."""

    UNKNOWN = 0
    INFORMATIONAL = 100
    SUCCESSFUL = 200
    REDIRECT = 300
    CLIENT_ERROR = 400
    SERVER_ERROR = 500

    @classmethod
    def from_code(cls, code: int) -> StatusClass:
        if 100 <= code < 600:
            return cls(code // 100 * 100)
        return cls.UNKNOWN

    @property
    def is_informational(self) -> bool:
        return self is StatusClass.INFORMATIONAL

    @property
    def is_successful(self) -> bool:
        return self is StatusClass.SUCCESSFUL

    @property
    def is_redirect(self) -> bool:
        return self is StatusClass.REDIRECT

    @property
    def is_client_error(self) -> bool:
        return self is StatusClass.CLIENT_ERROR

    @property
    def is_server_error(self) -> bool:
        return self is StatusClass.SERVER_ERROR


@dataclass(frozen=True)
class ServiceResponse:
    """A completed exchange: transport response metadata plus the raw body."""

    response: Response
    data: bytes | None = None

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def url(self) -> str | None:
        return self.response.url

    @property
    def headers(self) -> Mapping[str, str]:
        return self.response.headers

    @property
    def status(self) -> StatusClass:
        return StatusClass.from_code(self.status_code)

    @property
    def content_encoding(self) -> str | None:
        return self.headers.get("Content-Encoding")

    @property
    def content_type(self) -> str | None:
        return self.headers.get("Content-Type")

    @property
    def is_error(self) -> bool:
        return self.status.is_client_error or self.status.is_server_error


class DecodingResponse(ServiceResponse, ABC, Generic[T]):
    """A response whose body can be decoded into `T`.

    Subclasses provide `decode`; decoding only happens when `parse` is called
    and may be repeated freely.
    """

    def parse(self) -> Future[T | None]:
        """Decode the body, fulfilling with `None` when there is no body."""

        if self.data is None:
            return fulfilled(None)
        return settle(self.decode, self.data)

    @abstractmethod
    def decode(self, data: bytes) -> T | None:
        """Decode raw body bytes, raising `DecodeError` on malformed input."""


class StringResponse(DecodingResponse[str]):
    """A response with a text body. Defaults to UTF-8."""

    encoding: ClassVar[str] = "utf-8"

    def decode(self, data: bytes) -> str | None:
        try:
            return data.decode(self.encoding)
        except UnicodeDecodeError:
            return None


class UTF16StringResponse(StringResponse):
    """A response with a UTF-16 text body."""

    encoding: ClassVar[str] = "utf-16"


class JSONDictionaryResponse(DecodingResponse[JSONDictionary]):
    """A response with a JSON object body."""

    def decode(self, data: bytes) -> JSONDictionary | None:
        value = _load_json(data)
        return value if isinstance(value, dict) else None


class JSONArrayResponse(DecodingResponse[JSONArray]):
    """A response with a JSON array body."""

    def decode(self, data: bytes) -> JSONArray | None:
        value = _load_json(data)
        return value if isinstance(value, list) else None


class ImageResponse(DecodingResponse[Image.Image]):
    """A response with an image body, decoded with Pillow."""

    def decode(self, data: bytes) -> Image.Image | None:
        try:
            image = Image.open(BytesIO(data))
            image.load()
        except UnidentifiedImageError:
            return None
        except (OSError, SyntaxError) as exc:
            raise DecodeError("Response did not contain a valid image", details=str(exc)) from exc
        return image


class XMLResponse(DecodingResponse[XMLPullParser]):
    """A response with an XML body.

    Decoding yields a pull parser already fed with the body; callers walk it
    with `read_events()`, which is also where XML syntax errors surface.
    """

    events: ClassVar[tuple[str, ...]] = ("start", "end")

    def decode(self, data: bytes) -> XMLPullParser | None:
        parser = XMLPullParser(events=self.events)
        parser.feed(data)
        return parser


def _load_json(data: bytes) -> Any:
    try:
        return json.loads(data)
    except ValueError as exc:
        raise DecodeError("Response did not contain valid JSON", details=str(exc)) from exc
