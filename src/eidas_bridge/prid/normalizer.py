"""
Identifier normalizers — pure functions turning the stripped identifier
material of an eIDAS person identifier into a PRID component.

Four interchangeable algorithms:

  default    lowercase, collapse runs of non [a-z0-9] to "-", trim "-",
             require 6 alphanumerics, left-pad with "0" to 10,
             hash (radix 16) when longer than 30
  colresist  as default, but hashes long input in radix 36
  special    require 16 characters, always hash (radix 36)
  test       zero-pad input shorter than 10 first, then as default

Hashing must stay stable across releases since PRIDs are persisted by
relying parties: SHA-256 over the UTF-8 bytes of the stripped input, read as an unsigned big-endian integer, rendered in the
radix with lowercase digits and no leading zeros, truncated to the first 30
characters.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Callable

from railway import ErrorCode
from railway.result import Result

Normalizer = Callable[[str], Result[str]]

DIGEST_LENGTH = 30
MAX_COMPONENT_LENGTH = 30
PADDED_LENGTH = 10
MIN_ALPHANUMERICS = 6
MIN_SPECIAL_CHARACTERS_LENGTH = 16

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_NON_ID_CHARACTERS = re.compile(r"[^a-z0-9]+")


def digest_id(source: str, radix: int, length: int = DIGEST_LENGTH) -> str:
    """
    Deterministic digest of `source` rendered in `radix`, first `length` characters.

    >>> digest_id("1234567890123456789012345678901", 16)
    '3b7184c0ceaf76a9607a31e4e1f87f'
    """
    if not 2 <= radix <= len(_DIGITS):
        raise ValueError(f"Unsupported radix {radix}")
    number = int.from_bytes(hashlib.sha256(source.encode("utf-8")).digest(), "big")
    return _to_radix(number, radix)[:length]


def _to_radix(number: int, radix: int) -> str:
    if number == 0:
        return "0"
    digits: list[str] = []
    while number:
        number, remainder = divmod(number, radix)
        digits.append(_DIGITS[remainder])
    return "".join(reversed(digits))


def _zero_pad(value: str) -> str:
    return value.rjust(PADDED_LENGTH, "0")


def _collapse(stripped: str, long_id_radix: int) -> Result[str]:
    normalized = _NON_ID_CHARACTERS.sub("-", stripped.lower()).strip("-")

    if len(normalized.replace("-", "")) < MIN_ALPHANUMERICS:
        return Result.failure(
            ErrorCode.TOO_SHORT,
            f"Normalized ID '{normalized}' is shorter than {MIN_ALPHANUMERICS} characters",
        )

    normalized = _zero_pad(normalized)

    if len(normalized) > MAX_COMPONENT_LENGTH:
        # Hash the stripped input, not the collapsed form.
        return Result.success(digest_id(stripped, long_id_radix))
    return Result.success(normalized)


def normalize_default(stripped: str) -> Result[str]:
    return _collapse(stripped, 16)


def normalize_colresist(stripped: str) -> Result[str]:
    """Same as default, larger alphabet for long IDs → lower collision probability."""
    return _collapse(stripped, 36)


def normalize_special_characters(stripped: str) -> Result[str]:
    """For identifier schemes where case and punctuation carry information (e.g. base64)."""
    if len(stripped) < MIN_SPECIAL_CHARACTERS_LENGTH:
        return Result.failure(
            ErrorCode.TOO_SHORT,
            f"Input for PRID calculation is shorter than {MIN_SPECIAL_CHARACTERS_LENGTH} characters",
        )
    return Result.success(digest_id(stripped, 36))


def normalize_test(stripped: str) -> Result[str]:
    """Default with the length requirement relaxed for short synthetic test identifiers."""
    return normalize_default(_zero_pad(stripped))
