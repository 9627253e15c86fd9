"""Value types that have no native Python counterpart: ObjectID, Regex and Binary."""

from __future__ import annotations

import binascii
import json
from dataclasses import dataclass, field
from typing import Any

_OBJECT_ID_SIZE = 12

_STRING_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _encode_string(text: str) -> str:
    """Encode a string as a compact JSON string literal with HTML-safe escaping."""
    parts = ['"']
    for ch in text:
        escaped = _STRING_ESCAPES.get(ch)
        if escaped is None and ch < " ":
            escaped = f"\\u{ord(ch):04x}"
        parts.append(escaped if escaped is not None else ch)
    parts.append('"')
    return "".join(parts)


def _decode_object(data: str | bytes, allowed: frozenset[str]) -> dict[str, Any]:
    """Decode a single JSON object, rejecting trailing data and unknown fields."""
    text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
    if text == "null":
        raise ValueError("null data")
    if not text.strip():
        raise ValueError("EOF")
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as exc:
        if exc.pos >= len(text.rstrip()):
            raise ValueError("unexpected EOF") from exc
        raise ValueError(str(exc)) from exc
    if not isinstance(obj, dict):
        raise ValueError(f"expected a JSON object, got {type(obj).__name__}")
    unknown = [key for key in obj if key not in allowed]
    if unknown:
        raise ValueError(f'json: unknown field "{unknown[0]}"')
    return obj


def _string_field(obj: dict[str, Any], name: str) -> str:
    value = obj.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class ObjectID:
    """A 12-byte document identifier."""

    raw: bytes = bytes(_OBJECT_ID_SIZE)

    def __post_init__(self) -> None:
        raw = bytes(self.raw)
        if len(raw) != _OBJECT_ID_SIZE:
            raise ValueError(f"object id must be {_OBJECT_ID_SIZE} bytes, got {len(raw)}")
        object.__setattr__(self, "raw", raw)

    def hex(self) -> str:
        """Return the identifier as a 24-character lowercase hex string."""
        return self.raw.hex()

    def to_json(self) -> str:
        """Return the storage form: {"oid":"<hex>"}."""
        return '{"oid":' + _encode_string(self.hex()) + "}"

    @classmethod
    def from_hex(cls, text: str) -> ObjectID:
        """Build an identifier from its hex form."""
        try:
            raw = binascii.unhexlify(text)
        except (binascii.Error, TypeError) as exc:
            raise ValueError(f"invalid object id hex: {text!r}") from exc
        return cls(raw)

    @classmethod
    def from_json(cls, data: str | bytes) -> ObjectID:
        """Parse the storage form {"oid":"<hex>"}."""
        obj = _decode_object(data, frozenset({"oid"}))
        return cls.from_hex(_string_field(obj, "oid"))


@dataclass(frozen=True)
class Regex:
    """A regular expression with its option letters."""

    pattern: str = ""
    options: str = ""

    def to_json(self) -> str:
        """Return the storage form: {"$r":"<pattern>","o":"<options>"}."""
        return '{"$r":' + _encode_string(self.pattern) + ',"o":' + _encode_string(self.options) + "}"

    @classmethod
    def from_json(cls, data: str | bytes) -> Regex:
        """Parse the storage form {"$r":"<pattern>","o":"<options>"}."""
        obj = _decode_object(data, frozenset({"$r", "o"}))
        return cls(pattern=_string_field(obj, "$r"), options=_string_field(obj, "o"))


@dataclass(frozen=True)
class Binary:
    """Binary data with a one-byte subtype."""

    subtype: int = 0
    data: bytes = field(default=b"")

    def __post_init__(self) -> None:
        if not 0 <= self.subtype <= 0xFF:
            raise ValueError(f"binary subtype must fit in one byte, got {self.subtype}")
        object.__setattr__(self, "data", bytes(self.data))