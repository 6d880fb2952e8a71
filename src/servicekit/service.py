"""Service façade: resolve, build, dispatch and wrap HTTP requests."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import TypeVar
from urllib.parse import urljoin

import requests
import urllib3
from requests.structures import CaseInsensitiveDict
from urllib3.exceptions import InsecureRequestWarning, LocationParseError
from urllib3.util import Url, parse_url

from .body import RequestBody
from .config import DEFAULT_MAX_WORKERS, ServiceConfig
from .exceptions import InvalidURLError, NoResponseError
from .futures import rejected
from .query import QueryParams
from .request import HttpMethod, ServiceRequest, build_transport_request
from .response import ServiceResponse

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ServiceResponse)

_INVALID_URL_CHARS = re.compile(r"[\s\x00-\x1f\x7f]")


class Service:
    """Access a web service, optionally rooted at `base_url`.

    Each web service used by a project is usually a `Service` subclass that
    sets `base_url` and wraps `get`/`post`/... in domain-specific methods.
    Every call produces exactly one `concurrent.futures.Future`, settled on the
    service's executor once the transport completes.

    The `requests.Session` belongs to the transport and is shared by every
    call on this service, including its cookie jar. Pass a dedicated
    `session` per service when calls must not share cookies.
    """

    base_url: str | None = None

    def __init__(
        self,
        *,
        base_url: str | None = None,
        verify_ssl: bool | str = True,
        timeout: float = 30.0,
        default_headers: Mapping[str, str] | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        session: requests.Session | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.config = ServiceConfig(
            base_url=base_url if base_url is not None else type(self).base_url,
            verify_ssl=verify_ssl,
            timeout=timeout,
            default_headers=default_headers,
            max_workers=max_workers,
        )
        self.base_url = self.config.base_url
        self._suppress_insecure_warning_if_needed()
        self._session = session or requests.Session()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="servicekit",
        )

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> Service:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Public API --------------------------------------------------------------
    def send(
        self,
        method: HttpMethod | str,
        url: str | Url,
        *,
        headers: Mapping[str, str] | None = None,
        query: QueryParams | None = None,
        body: RequestBody | None = None,
        response_class: type[R] = ServiceResponse,  # type: ignore[assignment]
    ) -> Future[R]:
        """Make a web request and return a future for the typed response."""

        verb = HttpMethod.coerce(method)
        try:
            resolved = self._resolve_url(url)
        except InvalidURLError as exc:
            logger.warning("Service request %s rejected: invalid url %r", verb.value, str(url))
            return rejected(exc)
        request = self.build_request(verb, resolved, headers=headers, query=query, body=body)
        return self.send_request(request, response_class=response_class)

    def build_request(
        self,
        method: HttpMethod,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        query: QueryParams | None = None,
        body: RequestBody | None = None,
    ) -> ServiceRequest:
        """Factory turning request options into a `ServiceRequest`."""

        return ServiceRequest(
            method=method,
            url=url,
            headers=self._prepare_headers(headers),
            query=query,
            body=body,
        )

    def send_request(
        self,
        request: ServiceRequest,
        *,
        response_class: type[R] = ServiceResponse,  # type: ignore[assignment]
    ) -> Future[R]:
        try:
            prepared = build_transport_request(request)
        except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema) as exc:
            logger.warning("Service request %s rejected: invalid url %r", request.method.value, request.url)
            return rejected(InvalidURLError("invalid url", details=str(exc)))
        except requests.RequestException as exc:
            logger.warning("Service request %s rejected: %s", request.method.value, exc)
            return rejected(exc)
        return self.send_prepared(prepared, response_class=response_class)

    def send_prepared(
        self,
        prepared: requests.PreparedRequest,
        *,
        response_class: type[R] = ServiceResponse,  # type: ignore[assignment]
    ) -> Future[R]:
        """Dispatch an already built transport request."""

        self._log_request(prepared)
        return self._executor.submit(self._dispatch, prepared, response_class)

    def get(
        self,
        url: str | Url,
        query: QueryParams | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        response_class: type[R] = ServiceResponse,  # type: ignore[assignment]
    ) -> Future[R]:
        return self.send(HttpMethod.GET, url, headers=headers, query=query, response_class=response_class)

    def head(
        self,
        url: str | Url,
        query: QueryParams | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        response_class: type[R] = ServiceResponse,  # type: ignore[assignment]
    ) -> Future[R]:
        return self.send(HttpMethod.HEAD, url, headers=headers, query=query, response_class=response_class)

    def delete(
        self,
        url: str | Url,
        query: QueryParams | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        response_class: type[R] = ServiceResponse,  # type: ignore[assignment]
    ) -> Future[R]:
        return self.send(HttpMethod.DELETE, url, headers=headers, query=query, response_class=response_class)

    def options(
        self,
        url: str | Url,
        query: QueryParams | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        response_class: type[R] = ServiceResponse,  # type: ignore[assignment]
    ) -> Future[R]:
        return self.send(HttpMethod.OPTIONS, url, headers=headers, query=query, response_class=response_class)

    def trace(
        self,
        url: str | Url,
        query: QueryParams | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        response_class: type[R] = ServiceResponse,  # type: ignore[assignment]
    ) -> Future[R]:
        return self.send(HttpMethod.TRACE, url, headers=headers, query=query, response_class=response_class)

    def connect(
        self,
        url: str | Url,
        query: QueryParams | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        response_class: type[R] = ServiceResponse,  # type: ignore[assignment]
    ) -> Future[R]:
        return self.send(HttpMethod.CONNECT, url, headers=headers, query=query, response_class=response_class)

    def post(
        self,
        url: str | Url,
        body: RequestBody | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        query: QueryParams | None = None,
        response_class: type[R] = ServiceResponse,  # type: ignore[assignment]
    ) -> Future[R]:
        return self.send(
            HttpMethod.POST, url, headers=headers, query=query, body=body, response_class=response_class
        )

    def put(
        self,
        url: str | Url,
        body: RequestBody | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        query: QueryParams | None = None,
        response_class: type[R] = ServiceResponse,  # type: ignore[assignment]
    ) -> Future[R]:
        return self.send(
            HttpMethod.PUT, url, headers=headers, query=query, body=body, response_class=response_class
        )

    def patch(
        self,
        url: str | Url,
        body: RequestBody | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        query: QueryParams | None = None,
        response_class: type[R] = ServiceResponse,  # type: ignore[assignment]
    ) -> Future[R]:
        return self.send(
            HttpMethod.PATCH, url, headers=headers, query=query, body=body, response_class=response_class
        )

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        self._session.close()

    # Internal helpers -------------------------------------------------------
    def _resolve_url(self, url: str | Url) -> str:
        raw = url.url if isinstance(url, Url) else url
        if not isinstance(raw, str) or not raw or _INVALID_URL_CHARS.search(raw):
            raise InvalidURLError("invalid url", details=raw)
        try:
            resolved = urljoin(self.base_url, raw) if self.base_url else raw
            parsed = parse_url(resolved)
        except (ValueError, LocationParseError) as exc:
            raise InvalidURLError("invalid url", details=resolved) from exc
        if not parsed.scheme or not parsed.host:
            raise InvalidURLError("invalid url", details=resolved)
        return resolved

    def _prepare_headers(self, headers: Mapping[str, str] | None) -> CaseInsensitiveDict[str] | None:
        defaults = self.config.resolved_headers()
        if not defaults and headers is None:
            return None
        merged: CaseInsensitiveDict[str] = CaseInsensitiveDict(defaults)
        if headers:
            merged.update(headers)
        return merged

    def _dispatch(self, prepared: requests.PreparedRequest, response_class: type[R]) -> R:
        response = self._session.send(
            prepared,
            timeout=self.config.timeout,
            verify=self.config.verify_ssl,
        )
        if response is None:
            raise NoResponseError("no response")
        logger.debug(
            "Service response %s %s -> %s",
            prepared.method,
            prepared.url,
            response.status_code,
        )
        return response_class(response, response.content)

    def _log_request(self, prepared: requests.PreparedRequest) -> None:
        logger.info("Service request %s %s", prepared.method, prepared.url)

    def _suppress_insecure_warning_if_needed(self) -> None:
        if isinstance(self.config.verify_ssl, bool) and not self.config.verify_ssl:
            urllib3.disable_warnings(InsecureRequestWarning)
