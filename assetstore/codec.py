# assetstore/codec.py
"""
Packed path codec.

Path geometry is stored as 12-bit values, two per 3-byte window:

    byte 0: low 8 bits of value A
    byte 1: high nibble of value B | low nibble = high 4 bits of value A
    byte 2: low 8 bits of value B

A value whose high nibble is 0 is an ASCII command letter (M, L, C, Z, ...).
Any other value is a coordinate: stored = coordinate + 1024 + 256, which
covers coordinates -1024..2815.

decode_path() is a one-way decompressor into SVG path text. Non-letter
codes with a zero high nibble are dropped, which also makes them usable as
padding.
"""

import re
from typing import List

from .errors import MalformedInput

MIN_COORDINATE = -1024
MAX_COORDINATE = 2815

_TOKEN_RE = re.compile(r"[A-Za-z]|-?\d+")


def _is_letter(code: int) -> bool:
    return 65 <= code <= 90 or 97 <= code <= 122


def decode_path(body: bytes, strict: bool = True) -> str:
    """
    Decode packed path bytes into SVG path text.

    Args:
        body: Packed path data (length must be even)
        strict: Also reject a dangling byte (length % 3 == 1) that could
            never be read. With strict=False only odd lengths are rejected.

    Returns:
        Path text, e.g. "M-1000 L"

    Raises:
        MalformedInput: On odd length, or a dangling byte in strict mode
    """
    length = len(body)
    if length % 2 != 0:
        raise MalformedInput(f"Path body length must be even, got {length}")
    if strict and length % 3 == 1:
        raise MalformedInput(f"Path body has a dangling byte (length {length})")

    out: List[str] = []
    for i in range(length * 2 // 3):
        offset = (i // 2) * 3
        if i % 2 == 0:
            low = body[offset]
            high = body[offset + 1] % 16
        else:
            low = body[offset + 2]
            high = body[offset + 1] // 16

        if high == 0:
            if _is_letter(low):
                out.append(chr(low))
            continue

        value = high * 256 + low - 256
        if value >= 1024:
            out.append(f"{value - 1024} ")
        else:
            out.append(f"-{1024 - value} ")

    return "".join(out)


def _encode_token(token: str) -> int:
    """Convert one path token to its 12-bit stored value."""
    if token.isalpha():
        return ord(token)
    number = int(token)
    if number < MIN_COORDINATE or number > MAX_COORDINATE:
        raise MalformedInput(
            f"Coordinate {number} outside {MIN_COORDINATE}..{MAX_COORDINATE}"
        )
    return number + 1024 + 256


def encode_path(text: str) -> bytes:
    """
    Pack SVG path text into the stored byte format.

    Only command letters and integer coordinates are supported. Padding
    values (code 0) are appended so the result always decodes in strict
    mode.

    Raises:
        MalformedInput: On unsupported characters or out-of-range numbers
    """
    leftover = _TOKEN_RE.sub("", text).replace(",", "")
    if leftover.strip():
        raise MalformedInput(f"Unsupported path characters: {leftover.strip()!r}")

    values = [_encode_token(t) for t in _TOKEN_RE.findall(text)]
    while len(values) % 4 not in (0, 1):
        values.append(0)

    out = bytearray()
    for i in range(0, len(values), 2):
        first = values[i]
        if i + 1 < len(values):
            second = values[i + 1]
            out.append(first & 0xFF)
            out.append(((second >> 8) << 4) | (first >> 8))
            out.append(second & 0xFF)
        else:
            out.append(first & 0xFF)
            out.append(first >> 8)
    return bytes(out)
