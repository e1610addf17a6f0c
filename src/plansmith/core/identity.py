"""Deterministic resource identifiers.

Every construct the SDK creates is named with :func:`resource_id`, which
appends a short content hash to a human-readable prefix::

    resource_id("sdk.HelmChart", props)  # -> "sdk.HelmChart-1bbec390"
    extract_resource("sdk.HelmChart-1bbec390")  # -> "sdk.HelmChart"

The hash is FNV-1a (64 bit) over a serialized form of the value, so the same
prefix and value produce the same identifier in every process.
"""

from __future__ import annotations

import dataclasses
import json
import re
from enum import Enum
from pathlib import PurePath
from typing import Any

from pydantic import BaseModel

from plansmith.core.errors import IdentityError

RESOURCE = "Resource"
DEFAULT = "Default"
UNKNOWN = "unknown"

RESERVED_PREFIXES = frozenset({RESOURCE, DEFAULT})

HASH_LENGTH = 8
MAX_LABEL_LENGTH = 63

_FNV_OFFSET_BASIS = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_MASK_64 = 0xFFFFFFFFFFFFFFFF

_HASH_RE = re.compile(r"^[0-9a-f]{8}$")
_INVALID_LABEL_CHARS = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUNS = re.compile(r"-{2,}")
_ADDRESS_RE = re.compile(r"\b0x[0-9a-fA-F]{6,}\b")

__all__ = [
    "DEFAULT",
    "RESERVED_PREFIXES",
    "RESOURCE",
    "UNKNOWN",
    "encode",
    "extract_resource",
    "fnv_hash",
    "resource_id",
    "to_dns_label",
]


def fnv_hash(data: bytes) -> str:
    """Return the 64-bit FNV-1a digest of *data* as 16 lowercase hex chars."""
    h = _FNV_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * _FNV_PRIME) & _MASK_64
    return f"{h:016x}"


def resource_id(prefix: str, value: Any = None) -> str:
    """Generate a stable identifier for *prefix* and *value*.

    The reserved prefixes ``Resource`` and ``Default`` are returned untouched;
    they carry special meaning to the synthesis engine.
    """
    prefix = prefix.strip()
    if prefix in RESERVED_PREFIXES:
        return prefix
    if not prefix:
        prefix = UNKNOWN
    return f"{prefix}-{fnv_hash(encode(value))[:HASH_LENGTH]}"


def extract_resource(identifier: str | None) -> str:
    """Strip a trailing hash segment produced by :func:`resource_id`.

    Identifiers without a valid trailing hash are returned unchanged.
    """
    if not identifier:
        return UNKNOWN
    parts = identifier.split("-")
    if len(parts) == 1 or not _is_hash(parts[-1]):
        return identifier
    return "-".join(parts[:-1])


def encode(value: Any) -> bytes:
    """Serialize *value* to bytes, trying progressively looser strategies.

    Order: text and bytes passthrough, canonical JSON (sorted keys, sets
    sorted, pydantic models and dataclasses dumped), the raw bytes of a
    buffer-protocol object, an overridden ``__str__``, and finally ``repr``.
    Every strategy yields the same bytes in every process; a ``repr`` that
    embeds a memory address is rejected.

    Raises:
        IdentityError: If every strategy fails or yields nothing.
    """
    if isinstance(value, str):
        return value.encode()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)

    for strategy in (_encode_json, _encode_buffer, _encode_str, _encode_repr):
        try:
            data = strategy(value)
        except (TypeError, ValueError, AttributeError):
            continue
        if data:
            return data

    raise IdentityError(f"could not encode value of type {type(value).__name__}")


def to_dns_label(identifier: str) -> str:
    """Normalize *identifier* into a valid DNS-1035 label.

    The result matches ``[a-z]([-a-z0-9]*[a-z0-9])?`` and is at most 63
    characters. A trailing hash segment is kept; when the label is too long,
    leading characters are dropped since the tail carries the most meaning.
    """
    identifier = identifier.strip()
    if not identifier:
        return UNKNOWN
    if identifier in RESERVED_PREFIXES:
        return identifier.lower()

    result = _INVALID_LABEL_CHARS.sub("-", identifier.lower())
    result = _HYPHEN_RUNS.sub("-", result.strip("-"))
    if not result:
        return UNKNOWN

    parts = result.split("-")
    if len(parts) == 1 and _is_hash(parts[0]):
        parts = [UNKNOWN, *parts]
    prefix = "-".join(parts[:-1])
    digest = parts[-1]
    if not _is_hash(digest):
        prefix = f"{prefix}-{digest}"
        digest = ""

    if prefix and not "a" <= prefix[0] <= "z":
        first_letter = next((i for i, ch in enumerate(prefix) if "a" <= ch <= "z"), -1)
        if first_letter == -1:
            prefix = f"{UNKNOWN}-{fnv_hash(prefix.encode())}"
        else:
            prefix = prefix[first_letter:]

    result = f"{prefix}-{digest}".strip("-")
    if len(result) <= MAX_LABEL_LENGTH:
        return result

    result = result[-MAX_LABEL_LENGTH:]
    if not "a" <= result[0] <= "z":
        # Substitute a guard prefix instead of re-trimming, which could loop.
        result = "id-" + result[3:].lstrip("-")
    return result


def _is_hash(segment: str) -> bool:
    return bool(_HASH_RE.match(segment))


def _canonical(value: Any) -> Any:
    """``json.dumps`` hook that gives every supported type one stable form."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if isinstance(value, (set, frozenset)):
        # Iteration order of a set depends on the hash seed.
        return sorted(value, key=_dump)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, PurePath):
        return value.as_posix()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def _dump(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=_canonical)


def _encode_json(value: Any) -> bytes:
    return _dump(value).encode()


def _encode_buffer(value: Any) -> bytes:
    return memoryview(value).tobytes()


def _encode_str(value: Any) -> bytes:
    if type(value).__str__ is object.__str__:
        return b""
    return str(value).encode()


def _encode_repr(value: Any) -> bytes:
    text = repr(value)
    if _ADDRESS_RE.search(text):
        return b""
    return text.encode()
