"""Tests for step payload decoding."""

import pytest

from runledger.contracts.payloads import (
    ABSENT,
    AbsentPayload,
    RawTextPayload,
    StructuredPayload,
    decode_payload,
    from_storage,
    to_wire,
)


def test_none_is_absent():
    assert decode_payload(None) == ABSENT
    assert to_wire(decode_payload(None)) is None


def test_json_null_text_is_absent():
    assert isinstance(decode_payload("null"), AbsentPayload)


@pytest.mark.parametrize("value", [{"a": 1}, [1, 2], 3, True, {"nested": {"k": [None]}}])
def test_structured_values_pass_through(value):
    payload = decode_payload(value)
    assert payload == StructuredPayload(value=value)
    assert to_wire(payload) == value


def test_json_text_is_decoded():
    payload = decode_payload('{"username": "ada.lovelace", "ok": true}')
    assert payload == StructuredPayload(value={"username": "ada.lovelace", "ok": True})


def test_json_scalar_text_is_decoded():
    assert decode_payload('"SUCCESS"') == StructuredPayload(value="SUCCESS")
    assert decode_payload("12") == StructuredPayload(value=12)


def test_undecodable_text_is_kept_verbatim():
    text = "upstream said: 504 Gateway Timeout {"
    payload = decode_payload(text)
    assert payload == RawTextPayload(text=text)
    assert to_wire(payload) == {"_raw": text}


def test_empty_string_is_raw_text():
    assert decode_payload("") == RawTextPayload(text="")


@pytest.mark.parametrize("text", ["NaN", "Infinity", "-Infinity", "[1, NaN]", "{\"ratio\": Infinity}"])
def test_non_standard_json_constants_are_raw_text(text):
    payload = decode_payload(text)
    assert payload == RawTextPayload(text=text)
    assert to_wire(payload) == {"_raw": text}


def test_from_storage_rebuilds_each_shape():
    assert from_storage(None) == ABSENT
    assert from_storage({"_raw": "not json"}) == RawTextPayload(text="not json")
    assert from_storage({"_raw": "x", "other": 1}) == StructuredPayload(value={"_raw": "x", "other": 1})
    assert from_storage([1]) == StructuredPayload(value=[1])
