"""The auth_sha1 and auth_sha1_v2 framing protocols."""

from __future__ import annotations

import os
from typing import Optional

from .auth_simple import AuthSimple, ProtocolError
from .checksum import check_adler32, crc32_bytes, seal_adler32
from .digests import sha1_hmac

HMAC_SHA1_LEN = 10


class AuthSha1(AuthSimple):
    """Adler-32 sealed frames; the auth frame is tagged with an HMAC-SHA1 under IV and key."""

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
        return seal_adler32(packet)

    def _crc_salt(self) -> bytes:
        return bytes(self.server.key)

    def _auth_rand_len(self, size: int) -> int:
        return (self._random_word() & 0x7F) + 1

    def _padding(self, rand_len: int) -> bytes:
        return bytes([rand_len]) + os.urandom(rand_len - 1)

    def _identity(self, connection_id: int) -> bytes:
        return (
            self._timestamp()
            + self.state.local_client_id[:4]
            + connection_id.to_bytes(4, "little")
        )

    def _pack_auth_data(self, chunk: bytes) -> bytes:
        rand_len = self._auth_rand_len(len(chunk))
        data_offset = rand_len + 4 + 2
        out_size = data_offset + len(chunk) + 12 + HMAC_SHA1_LEN
        prefix = crc32_bytes(self._crc_salt()) + self._size_field(out_size) + self._padding(rand_len)
        connection_id = self.state.next_connection()
        body = prefix + self._identity(connection_id) + chunk
        return body + sha1_hmac(self.server.hmac_key, body)[:HMAC_SHA1_LEN]

    def _padding_end(self, frame: bytes) -> int:
        return frame[2] + 2

    def _unpack_frame(self, buffer: bytes) -> Optional[tuple[int, bytes]]:
        length = int.from_bytes(buffer[:2], "big")
        self._check_length(length)
        if length > len(buffer):
            return None
        frame = buffer[:length]
        if not check_adler32(frame):
            raise ProtocolError("frame checksum mismatch")
        start, end = self._padding_end(frame), length - 4
        if end < start:
            raise ProtocolError("frame padding exceeds its length")
        return length, frame[start:end]


class AuthSha1V2(AuthSha1):
    """Like auth_sha1, with size-dependent padding that may exceed 127 bytes."""

    _salt = b"auth_sha1_v2"

    def _rand_len(self, size: int) -> int:
        if size > 1300:
            extra = 0
        elif size > 400:
            extra = self._random_word() & 0x7F
        else:
            extra = self._random_word() & 0x3FF
        return extra + 1

    def _auth_rand_len(self, size: int) -> int:
        return self._rand_len(size)

    def _padding(self, rand_len: int) -> bytes:
        if rand_len < 128:
            return bytes([rand_len]) + os.urandom(rand_len - 1)
        return bytes([0xFF, (rand_len >> 8) & 0xFF, rand_len & 0xFF]) + os.urandom(rand_len - 3)

    def _crc_salt(self) -> bytes:
        return self._salt + bytes(self.server.key)

    def _identity(self, connection_id: int) -> bytes:
        return self.state.local_client_id[:8] + connection_id.to_bytes(4, "little")

    def _pack_data(self, chunk: bytes) -> bytes:
        rand_len = self._rand_len(len(chunk))
        out_size = rand_len + len(chunk) + 6
        packet = self._size_field(out_size) + self._padding(rand_len) + chunk + bytes(4)
        return seal_adler32(packet)

    def _padding_end(self, frame: bytes) -> int:
        if frame[2] < 255:
            return frame[2] + 2
        if len(frame) < 5:
            raise ProtocolError("frame too short for its padding length")
        return int.from_bytes(frame[3:5], "big") + 2