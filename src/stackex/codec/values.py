"""Value codec: domain values <-> JSON-safe trees.

Every leaf is classified once into a closed set of kinds and converted
according to that kind:

- DATE: ``datetime`` <-> integer epoch seconds (sub-second precision is dropped)
- URL: ``urllib.parse.SplitResult`` / ``ParseResult`` <-> absolute string
- RAW_VALUE_ENUM: ``Enum`` with a ``str`` value <-> its raw value
- CONVERTIBLE: any object exposing ``to_dict()`` <-> nested mapping
- PASSTHROUGH: numbers, strings, booleans, None and anything unrecognized

Mappings and sequences are walked recursively. The walk never fails on an
unrecognized leaf; it is left as-is and ``to_json_text`` reports the
failure as an ``EncodingError`` if the serializer cannot represent it.
"""

from __future__ import annotations

import dataclasses
import functools
import json
import logging
import types
import typing
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Self, TypeVar, Union
from urllib.parse import ParseResult, SplitResult, urlsplit

from stackex.core.exceptions import DecodeError, EncodingError

logger = logging.getLogger(__name__)

# Annotation used by models for URL-valued fields
URL = SplitResult

# Dataclass field metadata key naming the JSON key of a field
JSON_KEY = "json_key"

T = TypeVar("T")


class ValueKind(Enum):
    """Closed set of leaf kinds the codec knows how to convert."""

    DATE = "date"
    URL = "url"
    RAW_VALUE_ENUM = "raw_value_enum"
    CONVERTIBLE = "convertible"
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    PASSTHROUGH = "passthrough"


def classify(value: Any) -> ValueKind:
    """Return the codec kind of ``value``."""
    if isinstance(value, datetime):
        return ValueKind.DATE
    if isinstance(value, (SplitResult, ParseResult)):
        return ValueKind.URL
    if isinstance(value, Enum):
        return ValueKind.RAW_VALUE_ENUM if isinstance(value.value, str) else ValueKind.PASSTHROUGH
    if callable(getattr(value, "to_dict", None)):
        return ValueKind.CONVERTIBLE
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    return ValueKind.PASSTHROUGH


def encode_date(value: datetime) -> int:
    """Epoch seconds of ``value``; naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp())


def encode_value(value: Any) -> Any:
    """Recursively convert ``value`` into a JSON-safe tree."""
    kind = classify(value)
    if kind is ValueKind.DATE:
        return encode_date(value)
    if kind is ValueKind.URL:
        return value.geturl()
    if kind is ValueKind.RAW_VALUE_ENUM:
        return value.value
    if kind is ValueKind.CONVERTIBLE:
        return encode_value(value.to_dict())
    if kind is ValueKind.MAPPING:
        return {key: encode_value(item) for key, item in value.items()}
    if kind is ValueKind.SEQUENCE:
        return [encode_value(item) for item in value]
    return value


def to_json_text(value: Any, pretty: bool = True) -> str:
    """Encode ``value`` and serialize it to JSON text.

    Raises:
        EncodingError: If the encoded tree holds a value JSON cannot represent
    """
    encoded = encode_value(value)
    try:
        return json.dumps(encoded, indent=2 if pretty else None, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodingError("Value cannot be represented as JSON", details=str(e), original_error=e) from e


# ==================== DECODING ====================


def _is_optional_union(target_type: Any) -> bool:
    return typing.get_origin(target_type) in (Union, types.UnionType)


def decode_value(raw: Any, target_type: Any, field_name: str | None = None) -> Any:
    """Convert a parsed JSON value into ``target_type``.

    ``None`` always decodes to ``None``. Enum raw values the enum does not
    know decode to ``None`` so the owning field keeps its default.

    Raises:
        DecodeError: If ``raw`` has the wrong JSON shape for ``target_type``
    """
    if raw is None or target_type is Any:
        return raw

    if _is_optional_union(target_type):
        candidates = [arg for arg in typing.get_args(target_type) if arg is not type(None)]
        if len(candidates) == 1:
            return decode_value(raw, candidates[0], field_name)
        return raw

    origin = typing.get_origin(target_type)
    if origin in (list, tuple):
        if not isinstance(raw, list):
            raise DecodeError("Expected a JSON array", field=field_name, details=type(raw).__name__)
        args = typing.get_args(target_type)
        item_type = args[0] if args else Any
        items = [decode_value(item, item_type, field_name) for item in raw]
        return items if origin is list else tuple(items)
    if origin is not None:
        return raw

    if not isinstance(target_type, type):
        return raw

    if issubclass(target_type, datetime):
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise DecodeError("Expected epoch seconds", field=field_name, details=repr(raw))
        return datetime.fromtimestamp(int(raw), UTC)
    if issubclass(target_type, SplitResult):
        if not isinstance(raw, str):
            raise DecodeError("Expected a URL string", field=field_name, details=repr(raw))
        return urlsplit(raw)
    if issubclass(target_type, Enum):
        try:
            return target_type(raw)
        except ValueError:
            logger.debug(f"Unknown {target_type.__name__} value {raw!r} for field {field_name}")
            return None
    if issubclass(target_type, Convertible):
        if not isinstance(raw, Mapping):
            raise DecodeError("Expected a JSON object", field=field_name, details=type(raw).__name__)
        return target_type.from_dict(raw)
    return raw


@functools.cache
def _field_layout(cls: type) -> tuple[tuple[str, str, Any], ...]:
    """(attribute, json key, resolved type) for each init field of ``cls``."""
    hints = typing.get_type_hints(cls)
    return tuple(
        (f.name, f.metadata.get(JSON_KEY, f.name), hints.get(f.name, Any))
        for f in dataclasses.fields(cls)
        if f.init
    )


class Convertible:
    """Mixin for dataclasses that declare their own mapping representation.

    ``to_dict`` emits the non-None fields under their JSON keys (raw values,
    leaving leaf conversion to ``encode_value``). ``from_dict`` ignores
    unknown keys and leaves missing fields at their defaults.
    """

    def to_dict(self) -> dict[str, Any]:
        result = {}
        for name, json_key, _ in _field_layout(type(self)):
            value = getattr(self, name)
            if value is not None:
                result[json_key] = value
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        kwargs = {}
        for name, json_key, field_type in _field_layout(cls):
            if json_key not in data:
                continue
            decoded = decode_value(data[json_key], field_type, field_name=json_key)
            if decoded is not None:
                kwargs[name] = decoded
        return cls(**kwargs)


def decode_items(raw_items: list[Any], item_type: type[T] | None) -> list[T]:
    """Decode the ``items`` array of an envelope into ``item_type`` objects.

    With ``item_type`` None (or ``dict``) the raw mappings are returned.
    """
    if item_type is None or item_type is dict:
        return list(raw_items)
    return [decode_value(item, item_type, field_name="items") for item in raw_items]
