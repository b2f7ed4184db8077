"""
Base types for the two wire formats.

Client-facing messages are Pydantic models serialized as JSON with orjson.
Worker-facing messages are msgspec Structs encoded as MessagePack arrays,
so every field travels under its position (its tag) instead of its name.
"""

from typing import Any, TypeVar, cast

import msgspec
import orjson
from pydantic import BaseModel, ConfigDict
from typing_extensions import Self


RPC_CONTENT_TYPE = "application/msgpack"

S = TypeVar("S", bound="RPCStruct")


def _orjson_dumps(data: object) -> str:
    return orjson.dumps(data).decode("utf-8")


def json_size(data: object) -> int:
    """Byte length of the compact JSON serialization of ``data``."""
    return len(orjson.dumps(data))


class BaseJSONModel(BaseModel):
    """
    Base Pydantic model for the text protocol.
    """

    model_config = ConfigDict()

    @classmethod
    def model_validate_json(
        cls,
        json_data: str | bytes | bytearray,
        **kwargs: object,
    ) -> Self:
        if isinstance(json_data, str):
            json_data = json_data.encode("utf-8")
        obj = orjson.loads(json_data)
        return cls.model_validate(obj, **cast("dict[str, Any]", kwargs))

    def model_dump_json(self, **kwargs: object) -> str:
        dump_kwargs = kwargs.copy()
        if "indent" in dump_kwargs:
            del dump_kwargs["indent"]

        data = self.model_dump(mode="json", **cast("dict[str, Any]", dump_kwargs))
        return _orjson_dumps(data)


class RPCStruct(msgspec.Struct, array_like=True):
    """
    Base struct for the binary protocol.

    Subclasses must only append new fields; reordering changes the tags.
    """


_encoder = msgspec.msgpack.Encoder()


def encode_message(message: RPCStruct) -> bytes:
    """Encode a struct to its binary wire form."""
    return _encoder.encode(message)


def decode_message(data: bytes, message_type: type[S]) -> S:
    """
    Decode a binary message.

    Raises:
        msgspec.DecodeError: If the payload is malformed or of the wrong shape
    """
    return msgspec.msgpack.decode(data, type=message_type)
