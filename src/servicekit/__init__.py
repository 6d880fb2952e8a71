"""Typed HTTP service requests over requests sessions."""
from .body import FormBody, JSONArrayBody, JSONObjectBody, RawBody, RequestBody, TextBody
from .config import ServiceConfig
from .exceptions import ClientError, DecodeError, InvalidURLError, NoResponseError, ServiceError
from .request import HttpMethod, ServiceRequest, build_transport_request
from .response import (
    DecodingResponse,
    ImageResponse,
    JSONArrayResponse,
    JSONDictionaryResponse,
    ServiceResponse,
    StatusClass,
    StringResponse,
    UTF16StringResponse,
    XMLResponse,
)
from .service import Service

__all__ = [
    "Service",
    "ServiceConfig",
    "ServiceRequest",
    "HttpMethod",
    "build_transport_request",
    "RequestBody",
    "RawBody",
    "TextBody",
    "FormBody",
    "JSONObjectBody",
    "JSONArrayBody",
    "ServiceResponse",
    "DecodingResponse",
    "StringResponse",
    "UTF16StringResponse",
    "JSONDictionaryResponse",
    "JSONArrayResponse",
    "ImageResponse",
    "XMLResponse",
    "StatusClass",
    "ServiceError",
    "ClientError",
    "InvalidURLError",
    "NoResponseError",
    "DecodeError",
]
