"""
Binary encoding of records stored in the bucket store.

Records are packed with msgpack as a map of field name to value. Only the
field types used by the models are supported: str, 64-bit int, 64-bit float
and bool. There is no versioning; changing a model's fields invalidates
existing stores.
"""

import dataclasses
import functools
import typing
from typing import Any, Dict, Type, TypeVar

import msgpack

from .exceptions import EncodeError, DecodeError

T = TypeVar('T')

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

SUPPORTED_TYPES = (str, int, float, bool)


@functools.lru_cache(maxsize=None)
def _field_types(record_cls: type) -> Dict[str, type]:
    """Map of field name to declared type for a record class."""
    if not dataclasses.is_dataclass(record_cls):
        raise TypeError(f"{record_cls!r} is not a record class")
    hints = typing.get_type_hints(record_cls)
    types = {}
    for field in dataclasses.fields(record_cls):
        field_type = hints[field.name]
        if field_type not in SUPPORTED_TYPES:
            raise TypeError(f"{record_cls.__name__}.{field.name} has unsupported type {field_type!r}")
        types[field.name] = field_type
    return types


def _check_value(value: Any, field_type: type) -> bool:
    # bool is a subclass of int, so it has to be excluded explicitly
    if field_type is bool:
        return isinstance(value, bool)
    if field_type is int:
        return isinstance(value, int) and not isinstance(value, bool) and INT64_MIN <= value <= INT64_MAX
    if field_type is float:
        return isinstance(value, float)
    return isinstance(value, str)


def encode(record: Any) -> bytes:
    """
    Encode a record into bytes.

    Args:
        record: A model instance (Airport, Runway, Country or Region)

    Returns:
        The msgpack encoding of the record

    Raises:
        EncodeError: If the record is not a model instance or one of its
            fields cannot be represented
    """
    if not dataclasses.is_dataclass(record) or isinstance(record, type):
        raise EncodeError(f"cannot encode {type(record).__name__}: not a record")
    try:
        types = _field_types(type(record))
    except TypeError as e:
        raise EncodeError(str(e)) from e

    payload = {}
    for name, field_type in types.items():
        value = getattr(record, name)
        if field_type is float and isinstance(value, int) and not isinstance(value, bool):
            try:
                value = float(value)
            except OverflowError as e:
                raise EncodeError(f"{type(record).__name__}.{name}: {value!r} does not fit a float") from e
        if not _check_value(value, field_type):
            raise EncodeError(
                f"{type(record).__name__}.{name}: {value!r} is not a valid {field_type.__name__}"
            )
        payload[name] = value

    try:
        return msgpack.packb(payload, use_bin_type=True, use_single_float=False)
    except (TypeError, ValueError, OverflowError) as e:
        raise EncodeError(f"{type(record).__name__}: {e}") from e


def decode(data: bytes, record_cls: Type[T]) -> T:
    """
    Decode bytes produced by encode() back into a record.

    Args:
        data: Encoded record
        record_cls: Model class to build

    Returns:
        A new instance of record_cls

    Raises:
        DecodeError: If the bytes are truncated, malformed, or do not
            describe a record_cls instance
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise DecodeError(f"cannot decode {type(data).__name__} as {record_cls.__name__}")
    try:
        payload = msgpack.unpackb(bytes(data), raw=False, strict_map_key=True)
    except (msgpack.UnpackException, ValueError, TypeError) as e:
        raise DecodeError(f"malformed {record_cls.__name__} data: {e}") from e

    if not isinstance(payload, dict):
        raise DecodeError(f"malformed {record_cls.__name__} data: expected a map, got {type(payload).__name__}")

    types = _field_types(record_cls)
    values = {}
    for name, field_type in types.items():
        if name not in payload:
            raise DecodeError(f"{record_cls.__name__}: missing field '{name}'")
        value = payload[name]
        if not _check_value(value, field_type):
            raise DecodeError(
                f"{record_cls.__name__}.{name}: {value!r} is not a valid {field_type.__name__}"
            )
        values[name] = value
    return record_cls(**values)


def encode_flag(value: bool) -> bytes:
    """Encode a boolean flag."""
    if not isinstance(value, bool):
        raise EncodeError(f"flag must be a bool, got {type(value).__name__}")
    return msgpack.packb(value)


def decode_flag(data: bytes) -> bool:
    """Decode a boolean flag written by encode_flag()."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise DecodeError(f"cannot decode {type(data).__name__} as a flag")
    try:
        value = msgpack.unpackb(bytes(data))
    except (msgpack.UnpackException, ValueError, TypeError) as e:
        raise DecodeError(f"malformed flag: {e}") from e
    if not isinstance(value, bool):
        raise DecodeError(f"malformed flag: expected a bool, got {type(value).__name__}")
    return value
