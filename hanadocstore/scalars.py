"""Storage encodings of scalar values: bool, double, int32, int64, string and datetime."""

from __future__ import annotations

import json
import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from hanadocstore.values import _encode_string

_WHITESPACE = " \t\n\r"
_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLISECOND = timedelta(milliseconds=1)


class ScalarDecodeError(ValueError):
    """Raised when data is not a valid encoding of the expected scalar."""


def _reject_constant(name: str) -> Any:
    raise ScalarDecodeError(f"invalid character {name[0]!r} looking for beginning of value")


_DECODER = json.JSONDecoder(parse_constant=_reject_constant)


def _text(data: str | bytes) -> str:
    text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
    if text == "null":
        raise ScalarDecodeError("null data")
    return text


def _parse(data: str | bytes, *, allow_trailing_space: bool) -> Any:
    """Decode exactly one JSON value from data."""
    text = _text(data)
    start = len(text) - len(text.lstrip(_WHITESPACE))
    if start == len(text):
        raise ScalarDecodeError("EOF")
    try:
        value, end = _DECODER.raw_decode(text, start)
    except json.JSONDecodeError as exc:
        if exc.pos >= len(text.rstrip(_WHITESPACE)):
            raise ScalarDecodeError("unexpected EOF") from exc
        raise ScalarDecodeError(str(exc)) from exc
    rest = text[end:]
    if allow_trailing_space:
        rest = rest if rest.strip(_WHITESPACE) else ""
    if rest:
        raise ScalarDecodeError(f"{len(rest.encode('utf-8'))} bytes remains in the decoded: {rest}")
    return value


def _kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return f"number {value}"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _unmarshal_error(value: Any, target: str) -> ScalarDecodeError:
    return ScalarDecodeError(f"json: cannot unmarshal {_kind(value)} into Go value of type {target}")


def _as_int(value: Any, low: int, high: int, target: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise _unmarshal_error(value, target)
    return value


def encode_bool(value: bool) -> str:
    """Encode a boolean as a JSON literal."""
    if not isinstance(value, bool):
        raise TypeError(f"expected bool, got {type(value).__name__}")
    return "true" if value else "false"


def decode_bool(data: str | bytes) -> bool:
    """Decode a JSON boolean literal."""
    value = _parse(data, allow_trailing_space=True)
    if not isinstance(value, bool):
        raise _unmarshal_error(value, "bool")
    return value


def encode_double(value: float) -> str:
    """Encode a float as the shortest JSON number that reads back to it."""
    f = float(value)
    if math.isnan(f):
        raise ValueError("json: unsupported value: NaN")
    if math.isinf(f):
        raise ValueError(f"json: unsupported value: {'+' if f > 0 else '-'}Inf")
    shortest = Decimal(repr(f)).normalize()
    magnitude = abs(f)
    if magnitude == 0 or 1e-6 <= magnitude < 1e21:
        return format(shortest, "f")
    sign, digits, exponent = shortest.as_tuple()
    text = "".join(map(str, digits))
    scientific = exponent + len(text) - 1
    mantissa = text[0] + ("." + text[1:] if len(text) > 1 else "")
    if scientific < 0:
        suffix = f"e-{-scientific}"
    else:
        suffix = f"e+{scientific:02d}"
    return ("-" if sign else "") + mantissa + suffix


def decode_double(data: str | bytes) -> float:
    """Decode a JSON number as a float."""
    value = _parse(data, allow_trailing_space=False)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _unmarshal_error(value, "float64")
    try:
        result = float(value)
    except OverflowError as exc:
        raise _unmarshal_error(value, "float64") from exc
    if math.isinf(result):
        raise _unmarshal_error(value, "float64")
    return result


def encode_int32(value: int) -> str:
    """Encode a 32-bit integer as a JSON number."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected int, got {type(value).__name__}")
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ValueError(f"{value} does not fit in int32")
    return str(value)


def decode_int32(data: str | bytes) -> int:
    """Decode a JSON number that fits in 32 bits."""
    return _as_int(_parse(data, allow_trailing_space=False), _INT32_MIN, _INT32_MAX, "int32")


def encode_int64(value: int) -> str:
    """Encode a 64-bit integer as a JSON number."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected int, got {type(value).__name__}")
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"{value} does not fit in int64")
    return str(value)


def decode_int64(data: str | bytes) -> int:
    """Decode a JSON number that fits in 64 bits."""
    return _as_int(_parse(data, allow_trailing_space=False), _INT64_MIN, _INT64_MAX, "int64")


def encode_string(value: str) -> str:
    """Encode a string as a JSON string literal."""
    if not isinstance(value, str):
        raise TypeError(f"expected str, got {type(value).__name__}")
    return _encode_string(value)


def decode_string(data: str | bytes) -> str:
    """Decode a JSON string literal."""
    value = _parse(data, allow_trailing_space=True)
    if not isinstance(value, str):
        raise _unmarshal_error(value, "string")
    return value


def encode_datetime(value: datetime) -> str:
    """Encode a datetime as {"$da": milliseconds since the epoch}; naive values are UTC."""
    if not isinstance(value, datetime):
        raise TypeError(f"expected datetime, got {type(value).__name__}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return '{"$da":' + str((value - _EPOCH) // _MILLISECOND) + "}"


def decode_datetime(data: str | bytes) -> datetime:
    """Decode {"$da": milliseconds since the epoch} into a UTC datetime."""
    obj = _parse(data, allow_trailing_space=False)
    if not isinstance(obj, dict):
        raise _unmarshal_error(obj, "fjson.dateTimeJSON")
    for key in obj:
        if key != "$da":
            raise ScalarDecodeError(f'json: unknown field "{key}"')
    raw = obj.get("$da")
    millis = 0 if raw is None else _as_int(raw, _INT64_MIN, _INT64_MAX, "int64")
    try:
        return _EPOCH + millis * _MILLISECOND
    except OverflowError as exc:
        raise ScalarDecodeError(f"datetime {millis} ms is out of the supported range") from exc