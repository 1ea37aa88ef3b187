"""The auth_simple framing protocol and the machinery its successors share."""

from __future__ import annotations

import os
import secrets
import time
from dataclasses import dataclass, field
from typing import Optional

from .checksum import crc32, seal_crc32

_CONNECTION_LIMIT = 0xFF000000
_MAX_FRAME = 8192


class ProtocolError(Exception):
    """Received data is malformed or fails its integrity check."""


@dataclass
class ServerInfo:
    """What a protocol needs to know about the server it talks to."""

    key: bytes
    iv: bytes = b""
    param: str = ""

    @property
    def hmac_key(self) -> bytes:
        """The key for IV-bound HMACs: the IV followed by the cipher key."""
        return bytes(self.iv) + bytes(self.key)


def _new_client_id() -> bytes:
    return os.urandom(8)


def _new_connection_id() -> int:
    return int.from_bytes(os.urandom(4), "little") & 0xFFFFFF


@dataclass
class AuthGlobalState:
    """Client identity shared by all connections of one protocol."""

    local_client_id: bytes = field(default_factory=_new_client_id)
    connection_id: int = field(default_factory=_new_connection_id)

    def next_connection(self) -> int:
        """Advance to the next connection id, picking a new identity when it runs high."""
        self.connection_id = (self.connection_id + 1) & 0xFFFFFFFF
        if self.connection_id > _CONNECTION_LIMIT:
            self.local_client_id = _new_client_id()
            self.connection_id = _new_connection_id()
        return self.connection_id


class AuthSimple:
    """Splits outgoing data into CRC-sealed frames and reassembles incoming ones.

    The first frame carries a timestamp, client id and connection id ahead of
    the start of the data.
    """

    unit_size = 2000
    max_buffer = 16384
    _min_buffer = 2

    def __init__(self, server: ServerInfo, state: Optional[AuthGlobalState] = None) -> None:
        self.server = server
        self.state = state if state is not None else AuthGlobalState()
        self.has_sent_header = False
        self._recv = bytearray()

    @staticmethod
    def _random_word() -> int:
        return secrets.randbits(64)

    @staticmethod
    def _timestamp() -> bytes:
        return (int(time.time()) & 0xFFFFFFFF).to_bytes(4, "little")

    @staticmethod
    def _size_field(size: int) -> bytes:
        return bytes([(size >> 8) & 0xFF, size & 0xFF])

    @staticmethod
    def _check_length(length: int, minimum: int = 7) -> None:
        if length >= _MAX_FRAME or length < minimum:
            raise ProtocolError(f"invalid frame length {length}")

    def client_pre_encrypt(self, data: bytes, head_size: int = 30) -> bytes:
        """Frame *data* for sending; the first call puts up to *head_size* bytes in the auth frame."""
        data = bytes(data)
        out = bytearray()
        pos = 0
        if data and not self.has_sent_header:
            pos = min(head_size, len(data))
            out += self._pack_auth_data(data[:pos])
            self.has_sent_header = True
        while len(data) - pos > self.unit_size:
            out += self._pack_data(data[pos : pos + self.unit_size])
            pos += self.unit_size
        if pos < len(data):
            out += self._pack_data(data[pos:])
        return bytes(out)

    def client_post_decrypt(self, data: bytes) -> bytes:
        """Add received *data* and return the payload of every complete frame.

        Raises ``ProtocolError`` on overflow or a bad frame; after a bad frame
        everything buffered is dropped.
        """
        data = bytes(data)
        if len(self._recv) + len(data) > self.max_buffer:
            raise ProtocolError("receive buffer overflow")
        self._recv += data
        out = bytearray()
        try:
            while len(self._recv) > self._min_buffer:
                frame = self._unpack_frame(bytes(self._recv))
                if frame is None:
                    break
                length, payload = frame
                out += payload
                del self._recv[:length]
        except ProtocolError:
            self._recv.clear()
            raise
        return bytes(out)

    def _pack_data(self, chunk: bytes) -> bytes:
        rand_len = (self._random_word() & 0xF) + 1
        out_size = rand_len + len(chunk) + 6
        packet = (
            self._size_field(out_size)
            + bytes([rand_len])
            + os.urandom(rand_len - 1)
            + chunk
            + bytes(4)
        )
        return seal_crc32(packet)

    def _pack_auth_data(self, chunk: bytes) -> bytes:
        rand_len = (self._random_word() & 0xF) + 1
        out_size = rand_len + len(chunk) + 6 + 12
        connection_id = self.state.next_connection()
        packet = (
            self._size_field(out_size)
            + bytes([rand_len])
            + os.urandom(rand_len - 1)
            + self._timestamp()
            + self.state.local_client_id[:4]
            + connection_id.to_bytes(4, "little")
            + chunk
            + bytes(4)
        )
        return seal_crc32(packet)

    def _unpack_frame(self, buffer: bytes) -> Optional[tuple[int, bytes]]:
        length = int.from_bytes(buffer[:2], "big")
        self._check_length(length)
        if length > len(buffer):
            return None
        frame = buffer[:length]
        if crc32(frame) != 0xFFFFFFFF:
            raise ProtocolError("frame checksum mismatch")
        start, end = 2 + frame[2], length - 4
        if end < start:
            raise ProtocolError("frame padding exceeds its length")
        return length, frame[start:end]