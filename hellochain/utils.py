"""Generic utility helpers for console number coercion and base58 text."""

import math
import re
from typing import Union

from hellochain.constants import LAMPORTS_PER_SOL

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_INDEX = {char: index for index, char in enumerate(BASE58_ALPHABET)}

_RADIX_PATTERN = re.compile(r"^0([xXoObB])([0-9a-fA-F]+)$")
_DECIMAL_PATTERN = re.compile(r"^[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?$")
_RADIX_BASES = {"x": 16, "o": 8, "b": 2}

Number = Union[int, float]


def parse_number(text: str) -> Number:
    """
    Coerce console text to a number the way a unary plus does in a browser console.

    Surrounding whitespace is ignored and an empty string becomes ``0``. Prefixed
    literals (``0x``, ``0o``, ``0b``) are read in their base, decimal and exponent
    forms are read as floats, and ``Infinity`` is accepted with an optional sign.
    Everything else yields ``NaN`` instead of raising.

    Parameters:
        text (str): Raw text read from the console.

    Returns:
        Number: An ``int`` for integral finite values, otherwise a ``float``
        (possibly ``nan`` or infinite).
    """
    stripped = text.strip()
    if not stripped:
        return 0

    radix_match = _RADIX_PATTERN.match(stripped)
    if radix_match:
        base = _RADIX_BASES[radix_match.group(1).lower()]
        try:
            return int(radix_match.group(2), base)
        except ValueError:
            return math.nan

    unsigned = stripped.lstrip("+-")
    if unsigned == "Infinity" and len(stripped) - len(unsigned) <= 1:
        return -math.inf if stripped.startswith("-") else math.inf

    if not _DECIMAL_PATTERN.match(stripped):
        return math.nan

    value = float(stripped)
    if math.isfinite(value) and value.is_integer():
        return int(value)
    return value


def is_nan(value: Number) -> bool:
    """Return whether ``value`` is the float not-a-number sentinel."""
    return isinstance(value, float) and math.isnan(value)


def base58_encode(data: bytes) -> str:
    """Encode ``data`` with the bitcoin base58 alphabet, keeping leading zero bytes as ``1``."""
    number = int.from_bytes(data, "big")
    result = []
    while number > 0:
        number, remainder = divmod(number, 58)
        result.append(BASE58_ALPHABET[remainder])
    for index, byte in enumerate(data):
        if byte != 0:
            return "1" * index + "".join(reversed(result))
    return "1" * len(data)


def base58_decode(text: str) -> bytes:
    """
    Decode bitcoin-alphabet base58 text into bytes.

    Raises:
        ValueError: If ``text`` contains a character outside the alphabet.
    """
    number = 0
    for char in text:
        try:
            number = number * 58 + _BASE58_INDEX[char]
        except KeyError:
            raise ValueError(f"Invalid base58 character: {char!r}") from None

    leading_zeros = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    return b"\x00" * leading_zeros + body


def lamports_to_sol(lamports: int) -> float:
    """Convert a lamport amount to SOL for display."""
    return lamports / LAMPORTS_PER_SOL
