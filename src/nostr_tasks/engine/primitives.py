# src/nostr_tasks/engine/primitives.py

"""
Protocol primitive value types.

URLs, timestamps, public keys and coordinates are the scalar building
blocks the tag codecs consume. Each type is an immutable value object
with a `parse()` classmethod that raises ValueError on malformed input
and a `__str__` that is its exact inverse.

No tag or event handling should happen here.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Final
from urllib.parse import urlsplit


# ---------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------

U16_MAX: Final[int] = 2**16 - 1
U32_MAX: Final[int] = 2**32 - 1
U64_MAX: Final[int] = 2**64 - 1

_UNSIGNED_RE = re.compile(r"\+?[0-9]+")
_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*")
_HEX_KEY_RE = re.compile(r"[0-9a-fA-F]{64}")

# Schemes that are meaningless without a host.
_HOST_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https", "ws", "wss", "ftp"})


def parse_unsigned(raw: str, *, maximum: int) -> int:
    """
    Parse an unsigned decimal integer no larger than `maximum`.

    Accepts ASCII digits with an optional leading '+'. Whitespace, signs
    other than '+', underscores and non-ASCII digits are rejected.
    """
    if not _UNSIGNED_RE.fullmatch(raw):
        raise ValueError(f"not an unsigned integer: {raw!r}")

    value = int(raw)
    if value > maximum:
        raise ValueError(f"integer out of range (max {maximum}): {raw!r}")
    return value


# ---------------------------------------------------------------------
# Url
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True, order=True)
class Url:
    """
    An absolute URL.

    The raw string is kept as-is so that encoding reproduces exactly
    what was decoded.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value or any(ch.isspace() for ch in self.value):
            raise ValueError(f"invalid URL: {self.value!r}")

        parts = urlsplit(self.value)
        if not parts.scheme or not _SCHEME_RE.fullmatch(parts.scheme):
            raise ValueError(f"URL has no valid scheme: {self.value!r}")

        if parts.scheme.lower() in _HOST_SCHEMES and not parts.hostname:
            raise ValueError(f"URL has no host: {self.value!r}")

    @classmethod
    def parse(cls, raw: str) -> Url:
        return cls(raw)

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------
# Timestamp
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True, order=True)
class Timestamp:
    """
    Unix timestamp in whole seconds (unsigned 64-bit).
    """

    secs: int

    def __post_init__(self) -> None:
        if not 0 <= self.secs <= U64_MAX:
            raise ValueError(f"timestamp out of range: {self.secs}")

    @classmethod
    def from_secs(cls, secs: int) -> Timestamp:
        return cls(secs)

    @classmethod
    def parse(cls, raw: str) -> Timestamp:
        return cls(parse_unsigned(raw, maximum=U64_MAX))

    @classmethod
    def now(cls) -> Timestamp:
        return cls(int(time.time()))

    def to_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.secs, tz=timezone.utc)

    def __str__(self) -> str:
        return str(self.secs)


# ---------------------------------------------------------------------
# PublicKey
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True, order=True)
class PublicKey:
    """
    A 32-byte public key, stored as lowercase hex.
    """

    hex: str

    def __post_init__(self) -> None:
        if not _HEX_KEY_RE.fullmatch(self.hex):
            raise ValueError(f"invalid public key: {self.hex!r}")
        # Normalise so that equality does not depend on input case.
        object.__setattr__(self, "hex", self.hex.lower())

    @classmethod
    def from_hex(cls, raw: str) -> PublicKey:
        return cls(raw)

    @classmethod
    def parse(cls, raw: str) -> PublicKey:
        return cls(raw)

    def __str__(self) -> str:
        return self.hex


# ---------------------------------------------------------------------
# Coordinate
# ---------------------------------------------------------------------

@dataclass(frozen=True, slots=True, order=True)
class Coordinate:
    """
    Reference to an addressable object: `<kind>:<pubkey>:<identifier>`.

    The identifier may be empty and may contain ':' itself.
    """

    kind: int
    public_key: PublicKey
    identifier: str = ""

    def __post_init__(self) -> None:
        if not 0 <= self.kind <= U16_MAX:
            raise ValueError(f"coordinate kind out of range: {self.kind}")

    @classmethod
    def parse(cls, raw: str) -> Coordinate:
        parts = raw.split(":", 2)
        if len(parts) != 3:
            raise ValueError(f"invalid coordinate: {raw!r}")

        kind_s, pubkey_s, identifier = parts
        kind = parse_unsigned(kind_s, maximum=U16_MAX)
        return cls(kind=kind, public_key=PublicKey.parse(pubkey_s), identifier=identifier)

    def __str__(self) -> str:
        return f"{self.kind}:{self.public_key}:{self.identifier}"
