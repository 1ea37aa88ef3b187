"""CRC-32 and Adler-32 checksums as they are laid out in protocol frames."""

from __future__ import annotations

import zlib

_CRC_RESIDUE = 0xFFFFFFFF
_TAIL = 4


def crc32(data: bytes) -> int:
    """Return the standard CRC-32 of *data*."""
    return zlib.crc32(bytes(data)) & 0xFFFFFFFF


def crc32_bytes(data: bytes) -> bytes:
    """Return the CRC-32 of *data* as four little-endian bytes."""
    return crc32(data).to_bytes(4, "little")


def seal_crc32(packet: bytes) -> bytes:
    """Replace the last four bytes of *packet* with its CRC register.

    The stored value is the register before the final inversion, so the
    CRC-32 of the whole sealed packet is always ``0xFFFFFFFF``.
    """
    packet = bytes(packet)
    if len(packet) < _TAIL:
        raise ValueError("packet is too short to hold a checksum")
    body = packet[:-_TAIL]
    return body + (crc32(body) ^ _CRC_RESIDUE).to_bytes(4, "little")


def adler32(data: bytes) -> int:
    """Return the Adler-32 checksum of *data*."""
    return zlib.adler32(bytes(data)) & 0xFFFFFFFF


def seal_adler32(packet: bytes) -> bytes:
    """Replace the last four bytes of *packet* with the little-endian Adler-32 of the rest."""
    packet = bytes(packet)
    if len(packet) < _TAIL:
        raise ValueError("packet is too short to hold a checksum")
    body = packet[:-_TAIL]
    return body + adler32(body).to_bytes(4, "little")


def check_adler32(packet: bytes) -> bool:
    """Tell whether the last four bytes of *packet* are the Adler-32 of the rest."""
    packet = bytes(packet)
    if len(packet) < _TAIL:
        return False
    body, tail = packet[:-_TAIL], packet[-_TAIL:]
    return adler32(body) == int.from_bytes(tail, "little")