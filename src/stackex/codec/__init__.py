"""Codec module - conversion between domain values and the JSON wire format.

This module provides:
- The value codec (dates, URLs, string-backed enums, convertible objects)
- The response envelope decoder
"""

from stackex.codec.envelope import APIResponse, decode_envelope, parse_body
from stackex.codec.values import (
    JSON_KEY,
    URL,
    Convertible,
    ValueKind,
    classify,
    decode_items,
    decode_value,
    encode_value,
    to_json_text,
)

__all__ = [
    "JSON_KEY",
    "URL",
    "APIResponse",
    "Convertible",
    "ValueKind",
    "classify",
    "decode_envelope",
    "decode_items",
    "decode_value",
    "encode_value",
    "parse_body",
    "to_json_text",
]
