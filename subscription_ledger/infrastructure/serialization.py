"""Serialization utilities for JSON and MessagePack."""

import json
from typing import Any, TypeVar

import msgpack
from pydantic import BaseModel

from ..domain.exceptions import SerializationError

T = TypeVar("T", bound=BaseModel)


def serialize_to_msgpack(obj: BaseModel) -> bytes:
    """Serialize a Pydantic model to MessagePack bytes."""
    try:
        data = obj.model_dump(mode="json")
        return bytes(msgpack.packb(data, use_bin_type=True))
    except Exception as e:
        raise SerializationError(f"Failed to serialize to msgpack: {e}") from e


def deserialize_from_msgpack(data: bytes, model_class: type[T]) -> T:
    """Deserialize MessagePack bytes to a Pydantic model."""
    try:
        unpacked = msgpack.unpackb(data, raw=False)
        return model_class.model_validate(unpacked)
    except Exception as e:
        raise SerializationError(f"Failed to deserialize from msgpack: {e}") from e


def serialize_to_json(obj: BaseModel) -> bytes:
    """Serialize a Pydantic model to JSON bytes."""
    try:
        return obj.model_dump_json().encode()
    except Exception as e:
        raise SerializationError(f"Failed to serialize to JSON: {e}") from e


def deserialize_from_json(data: bytes, model_class: type[T]) -> T:
    """Deserialize JSON bytes to a Pydantic model."""
    try:
        json_str = data.decode() if isinstance(data, bytes) else data
        if not json_str or json_str.isspace():
            raise SerializationError("Empty or whitespace-only JSON data")
        return model_class.model_validate(json.loads(json_str))
    except json.JSONDecodeError as e:
        raise SerializationError(f"Invalid JSON format: {e}") from e
    except SerializationError:
        raise
    except Exception as e:
        raise SerializationError(f"Failed to deserialize from JSON: {e}") from e


def serialize_dict(data: dict[str, Any], use_msgpack: bool = True) -> bytes:
    """Serialize a dictionary of JSON-compatible values."""
    try:
        if use_msgpack:
            return bytes(msgpack.packb(data, use_bin_type=True, default=str))
        return json.dumps(data, separators=(",", ":"), default=str).encode()
    except Exception as e:
        raise SerializationError(f"Failed to serialize dict: {e}") from e


def deserialize_dict(data: bytes, use_msgpack: bool = True) -> dict[str, Any]:
    """Deserialize a dictionary produced by ``serialize_dict``."""
    try:
        if use_msgpack:
            return dict(msgpack.unpackb(data, raw=False))
        return dict(json.loads(data.decode()))
    except Exception as e:
        raise SerializationError(f"Failed to deserialize dict: {e}") from e


def encode_envelope(record: BaseModel, live_until: int | None, use_msgpack: bool = True) -> bytes:
    """Encode a stored record together with its retention horizon."""
    return serialize_dict(
        {"record": record.model_dump(mode="json"), "live_until": live_until}, use_msgpack
    )


def decode_envelope(
    data: bytes, model_class: type[T], use_msgpack: bool = True
) -> tuple[T, int | None]:
    """Decode a record envelope produced by ``encode_envelope``."""
    envelope = deserialize_dict(data, use_msgpack)
    try:
        record = model_class.model_validate(envelope["record"])
    except Exception as e:
        raise SerializationError(f"Invalid {model_class.__name__} envelope: {e}") from e
    return record, envelope.get("live_until")
