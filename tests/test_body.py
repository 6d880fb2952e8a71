import dataclasses

import pytest

from servicekit.body import (
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    FormBody,
    JSONArrayBody,
    JSONObjectBody,
    RawBody,
    TextBody,
)


def test_raw_body_is_identity():
    assert RawBody(b"\x00\x01").data() == b"\x00\x01"
    assert RawBody(None).data() is None
    assert RawBody(b"x").content_type is None


def test_text_body_encodes_with_requested_encoding():
    assert TextBody("héllo").data() == "héllo".encode("utf-8")
    assert TextBody("hi", "utf-16").data() == "hi".encode("utf-16")


@pytest.mark.parametrize(
    "body",
    [TextBody(None), TextBody("héllo", "ascii"), TextBody("x", "no-such-codec")],
)
def test_text_body_failures_yield_no_bytes(body):
    assert body.data() is None


def test_form_body_uses_query_encoding():
    body = FormBody({"a": "1", "b": ["x", "y"], "c": "two words"})

    assert body.data() == b"a=1&b=x&b=y&c=two%20words"
    assert body.content_type == FORM_CONTENT_TYPE


def test_empty_form_body_has_no_bytes():
    assert FormBody({}).data() is None


def test_json_object_body_is_compact():
    body = JSONObjectBody({"a": 1, "b": [True, None]})

    assert body.data() == b'{"a":1,"b":[true,null]}'
    assert body.content_type == JSON_CONTENT_TYPE


def test_json_array_body():
    assert JSONArrayBody([1, "x"]).data() == b'[1,"x"]'
    assert JSONArrayBody(("a",)).data() == b'["a"]'


def test_json_bodies_never_raise_on_bad_values():
    circular: list[object] = []
    circular.append(circular)

    assert JSONObjectBody({"when": object()}).data() is None
    assert JSONObjectBody({"nan": float("nan")}).data() is None
    assert JSONArrayBody(circular).data() is None


def test_bodies_are_immutable():
    body = TextBody("x")

    with pytest.raises(dataclasses.FrozenInstanceError):
        body.value = "y"  # type: ignore[misc]
