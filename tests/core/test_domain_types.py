"""Domain Types — FilePayload parsing and enum values.

Tests:
    - Data URIs parse into mime type + base64 text
    - Unsupported types, bad base64, and oversize payloads raise ValidationError
    - ProgressionStatus values are the wire strings
"""

import base64

import pytest

from stepwise.core.domain_types import (
    FilePayload, OracleKind, ProgressionStatus, SUPPORTED_MIME_TYPES,
)
from stepwise.core.errors import ValidationError


def _uri(mime, raw: bytes):
    return f"data:{mime};base64,{base64.b64encode(raw).decode()}"


def test_progression_status_has_four_states():
    assert {s.value for s in ProgressionStatus} == {
        "initial", "step_by_step", "complete", "error",
    }


def test_oracle_kinds():
    assert {k.value for k in OracleKind} == {"generation", "correction", "verification"}


def test_image_data_uri_parses():
    payload = FilePayload.from_data_uri(_uri("image/png", b"\x89PNG fake"))
    assert payload.mime_type == "image/png"
    assert payload.is_image
    assert base64.b64decode(payload.encoded_bytes) == b"\x89PNG fake"


def test_text_payload_decodes():
    payload = FilePayload.from_data_uri(_uri("text/plain", "2x + 5 = 15".encode()))
    assert not payload.is_image
    assert payload.decoded_text() == "2x + 5 = 15"


def test_mime_type_is_lowercased():
    payload = FilePayload.from_data_uri(_uri("IMAGE/JPEG", b"jpeg"))
    assert payload.mime_type == "image/jpeg"


def test_charset_parameter_accepted():
    raw = base64.b64encode(b"hello").decode()
    payload = FilePayload.from_data_uri(f"data:text/plain;charset=utf-8;base64,{raw}")
    assert payload.decoded_text() == "hello"


def test_round_trips_to_data_uri():
    uri = _uri("application/pdf", b"%PDF-1.7")
    assert FilePayload.from_data_uri(uri).to_data_uri() == uri


def test_size_bytes_matches_decoded_length():
    for raw in (b"a", b"ab", b"abc", b"abcd" * 10):
        payload = FilePayload.from_data_uri(_uri("text/plain", raw))
        assert payload.size_bytes == len(raw)


def test_not_a_data_uri_rejected():
    with pytest.raises(ValidationError) as exc:
        FilePayload.from_data_uri("https://example.com/x.png")
    assert exc.value.field == "file_data"


def test_unsupported_mime_rejected():
    with pytest.raises(ValidationError, match="Unsupported file type"):
        FilePayload.from_data_uri(_uri("application/zip", b"PK"))


def test_invalid_base64_rejected():
    with pytest.raises(ValidationError, match="base64"):
        FilePayload.from_data_uri("data:image/png;base64,@@not-base64@@")


def test_oversize_payload_rejected():
    with pytest.raises(ValidationError, match="larger than"):
        FilePayload.from_data_uri(_uri("image/png", b"x" * 100), max_bytes=10)


def test_supported_types_cover_images_and_pdf():
    assert "application/pdf" in SUPPORTED_MIME_TYPES
    assert "image/png" in SUPPORTED_MIME_TYPES
    assert "text/plain" in SUPPORTED_MIME_TYPES
