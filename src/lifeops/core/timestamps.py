"""
ULID generation and timestamp utilities.

Every persisted lifeops row carries a time-sortable identifier and ISO-8601
UTC timestamps.  Identifiers are ``<prefix>_<ULID>`` with an optional
``_<seq>`` suffix for items generated in the same batch: 48 bits of
millisecond time plus 80 bits from the OS random source, so collisions
between concurrent invocations are negligible rather than merely unlikely.

Tags:
    timestamps, ulid, utc, datetime, lifeops
"""

from __future__ import annotations

import secrets
import time
from datetime import UTC, datetime

# ULID base32 alphabet (Crockford's)
_ENCODING = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_ENCODING_LEN = len(_ENCODING)


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def to_iso8601(dt: datetime | None) -> str | None:
    """Fixed-width ISO 8601 UTC string; naive values are taken as UTC.

    Fixed width keeps lexicographic order equal to time order in the store.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def from_iso8601(s: str | None) -> datetime | None:
    """Parse ISO 8601 string to an aware UTC datetime."""
    if s is None:
        return None
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def generate_ulid() -> str:
    """Generate a 26-char, time-sortable ULID."""
    timestamp_ms = int(time.time() * 1000)
    random_bits = int.from_bytes(secrets.token_bytes(10), "big")
    return _encode_base32(timestamp_ms, 10) + _encode_base32(random_bits, 16)


def new_id(prefix: str, seq: int | None = None) -> str:
    """Build a prefixed identifier, e.g. ``evt_01J..._0``."""
    ident = f"{prefix}_{generate_ulid()}"
    if seq is not None:
        ident = f"{ident}_{seq}"
    return ident


def _encode_base32(value: int, length: int) -> str:
    """Encode integer to base32 string of fixed length."""
    result = []
    for _ in range(length):
        result.append(_ENCODING[value % _ENCODING_LEN])
        value //= _ENCODING_LEN
    return "".join(reversed(result))
