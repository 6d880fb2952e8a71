"""Request description and canonicalization into transport requests."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from requests import PreparedRequest, Request
from requests.structures import CaseInsensitiveDict

from .body import RequestBody
from .query import QueryParams, append_query

logger = logging.getLogger(__name__)


class HttpMethod(str, Enum):
    """Supported HTTP verbs."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"
    TRACE = "TRACE"
    CONNECT = "CONNECT"

    @property
    def allows_body(self) -> bool:
        return self in _BODY_METHODS

    @classmethod
    def coerce(cls, value: HttpMethod | str) -> HttpMethod:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unsupported HTTP method: {value!r}") from None


_BODY_METHODS = frozenset({HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH})


@dataclass(frozen=True)
class ServiceRequest:
    """Immutable description of an HTTP call before it reaches the transport."""

    method: HttpMethod
    url: str
    headers: Mapping[str, str] | None = None
    query: QueryParams | None = None
    body: RequestBody | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", HttpMethod.coerce(self.method))
        if self.headers is not None:
            object.__setattr__(self, "headers", CaseInsensitiveDict(self.headers))


def build_transport_request(request: ServiceRequest) -> PreparedRequest:
    """Canonicalize a `ServiceRequest` into a prepared `requests` request."""

    final_url = append_query(request.url, request.query) if request.query else request.url

    headers: CaseInsensitiveDict[str] = CaseInsensitiveDict()
    for name, value in (request.headers or {}).items():
        headers[name] = value

    data: bytes | None = None
    if request.body is not None:
        if request.method.allows_body:
            data = request.body.data()
            content_type = request.body.content_type
            if data is not None and content_type and "Content-Type" not in headers:
                headers["Content-Type"] = content_type
        else:
            logger.debug("Dropping body for %s request to %s", request.method.value, final_url)

    return Request(
        method=request.method.value,
        url=final_url,
        headers=headers,
        data=data,
    ).prepare()
