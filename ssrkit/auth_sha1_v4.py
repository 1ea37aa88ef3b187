"""The auth_sha1_v4 framing protocol."""

from __future__ import annotations

from typing import Optional

from .auth_sha1 import HMAC_SHA1_LEN, AuthSha1V2
from .auth_simple import ProtocolError
from .checksum import check_adler32, crc32, crc32_bytes, seal_adler32
from .digests import sha1_hmac


def _header_check(size_field: bytes) -> bytes:
    """Return the two low CRC-32 bytes of a frame's size field, little-endian."""
    return (crc32(size_field) & 0xFFFF).to_bytes(2, "little")


class AuthSha1V4(AuthSha1V2):
    """Like auth_sha1_v2, with the frame size guarded by its own short CRC.

    Each data frame is: 2-byte big-endian size, 2-byte CRC of the size,
    padding, data and an Adler-32 trailer.  The auth frame binds its size to
    a salted CRC of the key and carries a timestamp ahead of the client id.
    """

    _salt = b"auth_sha1_v4"
    _min_buffer = 4

    def _identity(self, connection_id: int) -> bytes:
        return (
            self._timestamp()
            + self.state.local_client_id[:4]
            + connection_id.to_bytes(4, "little")
        )

    def _pack_data(self, chunk: bytes) -> bytes:
        rand_len = self._rand_len(len(chunk))
        out_size = rand_len + len(chunk) + 8
        size_field = self._size_field(out_size)
        packet = (
            size_field
            + _header_check(size_field)
            + self._padding(rand_len)
            + chunk
            + bytes(4)
        )
        return seal_adler32(packet)

    def _pack_auth_data(self, chunk: bytes) -> bytes:
        rand_len = self._rand_len(len(chunk))
        data_offset = rand_len + 4 + 2
        out_size = data_offset + len(chunk) + 12 + HMAC_SHA1_LEN
        size_field = self._size_field(out_size)
        salted = size_field + self._salt + bytes(self.server.key)
        prefix = size_field + crc32_bytes(salted) + self._padding(rand_len)
        connection_id = self.state.next_connection()
        body = prefix + self._identity(connection_id) + chunk
        return body + sha1_hmac(self.server.hmac_key, body)[:HMAC_SHA1_LEN]

    def _unpack_frame(self, buffer: bytes) -> Optional[tuple[int, bytes]]:
        if buffer[2:4] != _header_check(buffer[:2]):
            raise ProtocolError("frame size checksum mismatch")
        length = int.from_bytes(buffer[:2], "big")
        self._check_length(length)
        if length > len(buffer):
            return None
        frame = buffer[:length]
        if not check_adler32(frame):
            raise ProtocolError("frame checksum mismatch")
        if frame[4] < 255:
            start = frame[4] + 4
        else:
            start = int.from_bytes(frame[5:7], "big") + 4
        end = length - 4
        if end < start:
            raise ProtocolError("frame padding exceeds its length")
        return length, frame[start:end]