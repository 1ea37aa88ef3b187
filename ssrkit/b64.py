"""Standard-alphabet Base64 encoding and a lenient decoder."""

from __future__ import annotations

import base64

_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_VALUES = {char: index for index, char in enumerate(_ALPHABET)}
_PAD = "="


class Base64Error(ValueError):
    """The text holds a character outside the Base64 alphabet."""


def encoded_size(length: int) -> int:
    """Return the length of the encoding of *length* bytes."""
    return (length + 2) // 3 * 4


def decoded_size(length: int) -> int:
    """Return the most bytes that *length* characters can decode to."""
    return length // 4 * 3


def encode(data: bytes) -> str:
    """Return the padded Base64 encoding of *data*."""
    return base64.b64encode(bytes(data)).decode("ascii")


def decode(text: str | bytes) -> bytes:
    """Decode *text*, stopping at the first padding character.

    Trailing bits that do not fill a whole byte are dropped.  Raises
    ``Base64Error`` for any character outside the alphabet.
    """
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("latin-1")
    out = bytearray()
    bits = 0
    count = 0
    for char in text:
        if char == _PAD:
            break
        value = _VALUES.get(char)
        if value is None:
            raise Base64Error(f"invalid Base64 character {char!r}")
        bits = (bits << 6) | value
        count += 6
        if count >= 8:
            count -= 8
            out.append((bits >> count) & 0xFF)
            bits &= (1 << count) - 1
    return bytes(out)