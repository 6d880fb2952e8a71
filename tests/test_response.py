import dataclasses
from io import BytesIO
from xml.etree.ElementTree import ParseError

import pytest
import requests
from PIL import Image
from requests.structures import CaseInsensitiveDict

from servicekit.exceptions import DecodeError
from servicekit.response import (
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

DECODERS = [
    StringResponse,
    UTF16StringResponse,
    JSONDictionaryResponse,
    JSONArrayResponse,
    ImageResponse,
    XMLResponse,
]


def make_response(status_code=200, headers=None, url="http://api.example.org/v1/widgets"):
    response = requests.Response()
    response.status_code = status_code
    response.headers = CaseInsensitiveDict(headers or {})
    response.url = url
    return response


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        (0, StatusClass.UNKNOWN),
        (99, StatusClass.UNKNOWN),
        (100, StatusClass.INFORMATIONAL),
        (204, StatusClass.SUCCESSFUL),
        (302, StatusClass.REDIRECT),
        (404, StatusClass.CLIENT_ERROR),
        (503, StatusClass.SERVER_ERROR),
        (600, StatusClass.UNKNOWN),
    ],
)
def test_status_classification(code, expected):
    assert StatusClass.from_code(code) is expected


@pytest.mark.parametrize(("code", "is_error"), [(204, False), (302, False), (404, True), (503, True), (0, False)])
def test_is_error_for_client_and_server_errors(code, is_error):
    assert ServiceResponse(make_response(code)).is_error is is_error


def test_header_accessors():
    response = ServiceResponse(
        make_response(headers={"Content-Type": "application/json", "Content-Encoding": "gzip"})
    )

    assert response.content_type == "application/json"
    assert response.content_encoding == "gzip"
    assert response.status_code == 200
    assert response.status.is_successful
    assert response.url == "http://api.example.org/v1/widgets"


def test_missing_headers_are_none():
    response = ServiceResponse(make_response())

    assert response.content_type is None
    assert response.content_encoding is None


def test_response_is_immutable():
    response = ServiceResponse(make_response(), b"body")

    with pytest.raises(dataclasses.FrozenInstanceError):
        response.data = b"other"  # type: ignore[misc]


@pytest.mark.parametrize("response_class", DECODERS)
def test_parse_without_body_fulfils_with_none(response_class):
    future = response_class(make_response(), None).parse()

    assert future.exception() is None
    assert future.result() is None


def test_abstract_decoder_cannot_be_built():
    with pytest.raises(TypeError):
        DecodingResponse(make_response(), b"x")


def test_custom_decoder_and_failures_reject_parse():
    class UpperResponse(DecodingResponse[str]):
        def decode(self, data):
            if data == b"boom":
                raise DecodeError("boom")
            return data.decode().upper()

    assert UpperResponse(make_response(), b"abc").parse().result() == "ABC"
    assert isinstance(UpperResponse(make_response(), b"boom").parse().exception(), DecodeError)


def test_string_decoders():
    assert StringResponse(make_response(), "héllo".encode()).parse().result() == "héllo"
    assert StringResponse(make_response(), b"\xff\xfe\xfd").parse().result() is None
    assert UTF16StringResponse(make_response(), "hi".encode("utf-16")).parse().result() == "hi"


def test_json_dictionary_decoding():
    assert JSONDictionaryResponse(make_response(), b'{"a":1}').parse().result() == {"a": 1}
    assert JSONDictionaryResponse(make_response(), b"[1,2]").parse().result() is None
    assert isinstance(JSONDictionaryResponse(make_response(), b"{").parse().exception(), DecodeError)


def test_json_array_decoding():
    assert JSONArrayResponse(make_response(), b"[1,2]").parse().result() == [1, 2]
    assert JSONArrayResponse(make_response(), b'{"a":1}').parse().result() is None
    assert isinstance(JSONArrayResponse(make_response(), b"[").parse().exception(), DecodeError)


def test_parse_is_repeatable():
    response = JSONDictionaryResponse(make_response(), b'{"a":1}')

    assert response.parse().result() == response.parse().result()


def test_image_decoding():
    buffer = BytesIO()
    Image.new("RGB", (2, 3), color="red").save(buffer, format="PNG")

    image = ImageResponse(make_response(), buffer.getvalue()).parse().result()

    assert image.size == (2, 3)
    assert ImageResponse(make_response(), b"not an image").parse().result() is None


def test_xml_decoding_returns_pull_parser():
    parser = XMLResponse(make_response(), b"<root><child/></root>").parse().result()

    events = [(event, element.tag) for event, element in parser.read_events()]

    assert events == [("start", "root"), ("start", "child"), ("end", "child"), ("end", "root")]


def test_malformed_xml_surfaces_while_reading_events():
    parser = XMLResponse(make_response(), b"<root></wrong>").parse().result()

    with pytest.raises(ParseError):
        list(parser.read_events())


def test_truncated_image_rejects_parse():
    buffer = BytesIO()
    Image.effect_noise((64, 64), 64).save(buffer, format="PNG")
    png = buffer.getvalue()

    future = ImageResponse(make_response(), png[: len(png) // 2]).parse()

    assert isinstance(future.exception(), DecodeError)
