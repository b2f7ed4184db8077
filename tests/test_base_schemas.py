"""
Tests for the base_schemas module.

Tests cover:
- BaseJSONModel with orjson serialization
- json_size of the compact JSON form
- Binary message encoding by field position
"""

import msgspec
from pydantic import Field, ValidationError
import pytest

from chatgate.base_schemas import (
    BaseJSONModel,
    RPCStruct,
    decode_message,
    encode_message,
    json_size,
)
from chatgate.services.translation.schemas import TranslateRequest, TranslateResponse


class SampleModel(BaseJSONModel):
    """Sample model for testing BaseJSONModel."""

    name: str
    count: int
    active: bool = True
    tags: list[str] = Field(default_factory=list)


class SampleStruct(RPCStruct):
    name: str
    count: int = 0


class TestBaseJSONModel:
    """Tests for BaseJSONModel class."""

    def test_model_validate_json_from_string(self) -> None:
        model = SampleModel.model_validate_json('{"name": "test", "count": 42}')

        assert model.name == "test"
        assert model.count == 42
        assert model.active is True
        assert model.tags == []

    def test_model_validate_json_from_bytes(self) -> None:
        model = SampleModel.model_validate_json(b'{"name": "bytes", "count": 1}')
        assert model.name == "bytes"

    def test_model_validate_json_invalid(self) -> None:
        with pytest.raises(ValidationError):
            SampleModel.model_validate_json('{"name": "missing count"}')

    def test_model_dump_json_is_compact(self) -> None:
        model = SampleModel(name="test", count=1)

        assert model.model_dump_json() == '{"name":"test","count":1,"active":true,"tags":[]}'

    def test_model_dump_json_ignores_indent(self) -> None:
        model = SampleModel(name="test", count=1)
        assert model.model_dump_json(indent=2) == model.model_dump_json()


class TestJsonSize:
    def test_counts_compact_utf8_bytes(self) -> None:
        assert json_size({"a": 1}) == len(b'{"a":1}')

    def test_non_ascii_counts_bytes_not_characters(self) -> None:
        assert json_size({"t": "é"}) == len('{"t":"é"}'.encode())


class TestBinaryMessages:
    """Binary messages travel as MessagePack arrays, not maps."""

    def test_encodes_fields_by_position(self) -> None:
        encoded = encode_message(SampleStruct(name="x", count=3))

        assert msgspec.msgpack.decode(encoded) == ["x", 3]
        assert b"name" not in encoded

    def test_decode_typed(self) -> None:
        message = TranslateRequest(
            text="hello",
            source_language="en",
            target_language="es",
            user_id="u1",
            timestamp=1700000000000,
        )

        assert decode_message(encode_message(message), TranslateRequest) == message

    def test_smaller_than_json_for_same_content(self) -> None:
        fields = {
            "text": "hello",
            "source_language": "en",
            "target_language": "es",
            "user_id": "u1",
            "timestamp": 1700000000000,
        }
        assert len(encode_message(TranslateRequest(**fields))) < json_size(fields)

    def test_missing_trailing_defaults_are_filled(self) -> None:
        encoded = msgspec.msgpack.encode(["hola", "hola", "en", "es", True])

        response = decode_message(encoded, TranslateResponse)

        assert response.error_message == ""
        assert response.processing_time_ms == 0.0

    def test_malformed_payload_raises_decode_error(self) -> None:
        with pytest.raises(msgspec.DecodeError):
            decode_message(b"\xc1not-msgpack", TranslateRequest)

    def test_wrong_shape_raises_decode_error(self) -> None:
        with pytest.raises(msgspec.DecodeError):
            decode_message(msgspec.msgpack.encode([1, 2]), TranslateRequest)
