"""Conversion between the stored JSON form of documents and Python values.

Documents are dicts (key order is kept), arrays are lists; scalars are
bool, int, float, str, None, datetime, ObjectID and Regex.
"""

from __future__ import annotations

import json
import math
from datetime import datetime, timedelta, timezone
from typing import Any

from hanadocstore.scalars import (
    encode_bool,
    encode_datetime,
    encode_double,
    encode_int64,
    encode_string,
)
from hanadocstore.values import ObjectID, Regex

_WHITESPACE = " \t\n\r"
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLISECOND = timedelta(milliseconds=1)


class FJSONError(ValueError):
    """Raised when data cannot be converted from or to the stored JSON form."""


class UnsupportedTypeError(FJSONError, TypeError):
    """Raised when a value of an unsupported type is to be encoded."""


class _Pairs(list):
    """Key/value pairs of one JSON object, in document order."""


def _parse_float(text: str) -> float:
    value = float(text)
    if math.isinf(value):
        raise FJSONError(f"json: number {text} does not fit in a float64")
    return value


def _parse_int(text: str) -> int | float:
    value = int(text)
    if _INT64_MIN <= value <= _INT64_MAX:
        return value
    return _parse_float(text)


def _reject_constant(name: str) -> Any:
    raise FJSONError(f"invalid character {name[0]!r} looking for beginning of value")


def _load(data: str | bytes, *, object_pairs_hook: Any = None) -> Any:
    """Decode exactly one JSON value, rejecting anything that follows it."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FJSONError(f"invalid UTF-8 data: {exc}") from exc
    else:
        text = data

    start = len(text) - len(text.lstrip(_WHITESPACE))
    if start == len(text):
        raise FJSONError("EOF")

    decoder = json.JSONDecoder(
        parse_float=_parse_float,
        parse_int=_parse_int,
        parse_constant=_reject_constant,
        object_pairs_hook=object_pairs_hook,
    )
    try:
        value, end = decoder.raw_decode(text, start)
    except FJSONError:
        raise
    except json.JSONDecodeError as exc:
        if exc.pos >= len(text.rstrip(_WHITESPACE)):
            raise FJSONError("unexpected EOF") from exc
        raise FJSONError(str(exc)) from exc
    except (ValueError, RecursionError) as exc:
        raise FJSONError(str(exc)) from exc

    rest = text[end:]
    if rest:
        raise FJSONError(f"{len(rest.encode('utf-8'))} bytes remains in the decoded: {rest}")
    return value


def _json_kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return f"number {value}"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _check_fields(obj: dict[str, Any], allowed: frozenset[str]) -> None:
    for key in obj:
        if key not in allowed:
            raise FJSONError(f'json: unknown field "{key}"')


def _string_field(obj: dict[str, Any], name: str) -> str:
    value = obj.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise FJSONError(f"json: cannot unmarshal {_json_kind(value)} into string field {name!r}")
    return value


def _object_id(obj: dict[str, Any]) -> ObjectID:
    _check_fields(obj, frozenset({"oid"}))
    text = _string_field(obj, "oid")
    try:
        return ObjectID.from_hex(text)
    except ValueError as exc:
        raise FJSONError(f"invalid object id {text!r}: {exc}") from exc


def _datetime(obj: dict[str, Any]) -> datetime:
    _check_fields(obj, frozenset({"$da"}))
    millis = obj["$da"]
    if isinstance(millis, bool) or not isinstance(millis, int):
        raise FJSONError(f"json: cannot unmarshal {_json_kind(millis)} into int64 field '$da'")
    try:
        return _EPOCH + millis * _MILLISECOND
    except OverflowError as exc:
        raise FJSONError(f"datetime {millis} ms is out of the supported range") from exc


def _regex(obj: dict[str, Any]) -> Regex:
    _check_fields(obj, frozenset({"$r", "o"}))
    return Regex(pattern=_string_field(obj, "$r"), options=_string_field(obj, "o"))


def _from_json(value: Any) -> Any:
    if isinstance(value, dict):
        if value.get("oid") is not None:
            return _object_id(value)
        if value.get("$da") is not None:
            return _datetime(value)
        if value.get("$r") is not None:
            return _regex(value)
        return {key: _from_json(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_from_json(item) for item in value]
    return value


def unmarshal(data: str | bytes) -> Any:
    """Decode stored JSON into a Python value.

    Integer literals that fit in 64 bits become int, other numbers float.
    Objects holding "oid", "$da" or "$r" become ObjectID, datetime and Regex.
    """
    return _from_json(_load(data))


def document_keys(data: str | bytes) -> list[str]:
    """Return the top-level keys of a JSON object in the order they appear."""
    top = _load(data, object_pairs_hook=_Pairs)
    if not isinstance(top, _Pairs):
        raise FJSONError(f"expected a JSON object, got {_json_kind(top)}")
    return [key for key, _ in top]


def _encode_int(value: int) -> str:
    try:
        return encode_int64(value)
    except ValueError as exc:
        raise FJSONError(str(exc)) from exc


def _encode_float(value: float) -> str:
    try:
        return encode_double(value)
    except ValueError as exc:
        raise FJSONError(str(exc)) from exc


def _encode_document(doc: dict[str, Any], hana: bool) -> str:
    parts: list[str] = []
    object_id = doc.get("_id")
    id_first = isinstance(object_id, ObjectID)
    if id_first:
        parts.append('"_id":' + _encode(object_id, hana))
    for key, value in doc.items():
        if key == "_id" and id_first:
            continue
        if not isinstance(key, str):
            raise UnsupportedTypeError(f"document key of type {type(key).__name__} is not supported")
        parts.append(encode_string(key) + ":" + _encode(value, hana))
    return "{" + ",".join(parts) + "}"


def _encode(value: Any, hana: bool) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return encode_bool(value)
    if isinstance(value, int):
        return _encode_int(value)
    if isinstance(value, float):
        return _encode_float(value)
    if isinstance(value, str):
        return encode_string(value)
    if isinstance(value, ObjectID):
        return value.to_json()
    if isinstance(value, dict):
        return _encode_document(value, hana)
    if isinstance(value, (list, tuple)):
        # Array elements always use the wire encoding.
        return "[" + ",".join(_encode(item, False) for item in value) + "]"
    if not hana:
        if isinstance(value, datetime):
            return encode_datetime(value)
        if isinstance(value, Regex):
            return value.to_json()
    raise UnsupportedTypeError(f"datatype {type(value).__name__} is not supported")


def marshal(value: Any) -> str:
    """Encode a value into stored JSON as used by the wire protocol.

    A document whose "_id" is an ObjectID has that field written first.
    """
    return _encode(value, False)


def marshal_hana(value: Any) -> str:
    """Encode a value into stored JSON for database operations.

    Datetimes and regular expressions are not supported here.
    """
    return _encode(value, True)