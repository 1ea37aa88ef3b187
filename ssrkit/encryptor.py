"""Password-keyed encryption of whole packets and of continuing streams."""

from __future__ import annotations

import hmac
import os
from typing import Optional, Union

from .cache import Cache
from .ciphers import CipherMethod, StreamCipher, derive_key, iv_size
from .digests import sha1_hmac
from .table import TableCipher

ONETIMEAUTH_FLAG = 0x10
ADDRTYPE_MASK = 0xEF
ONETIMEAUTH_BYTES = 10
CLEN_BYTES = 2
AUTH_BYTES = ONETIMEAUTH_BYTES + CLEN_BYTES

_IV_CACHE_SIZE = 256
_MAX_CHUNK = 0xFFFF


class EncryptionError(Exception):
    """Data could not be encrypted, decrypted or authenticated."""


class CipherContext:
    """The state of one direction of a connection: its IV and running cipher."""

    def __init__(self, encryptor: "Encryptor", encrypt: bool = True) -> None:
        self.encrypt = encrypt
        self.iv = os.urandom(encryptor.iv_len) if encrypt else bytes(encryptor.iv_len)
        self.initialized = False
        self.counter = 0
        self.cipher: Optional[StreamCipher] = None


class ChunkVerifier:
    """Reassembles length-prefixed, HMAC-tagged chunks and checks each tag."""

    def __init__(self, encryptor: "Encryptor", context: CipherContext) -> None:
        self._encryptor = encryptor
        self._context = context
        self._buffer = bytearray()
        self.counter = 0

    def feed(self, data: bytes) -> bytes:
        """Add *data* and return the payload of every complete, verified chunk.

        Raises ``EncryptionError`` when a chunk's tag does not match.
        """
        self._buffer += bytes(data)
        out = bytearray()
        while len(self._buffer) >= CLEN_BYTES:
            length = int.from_bytes(self._buffer[:CLEN_BYTES], "big")
            end = AUTH_BYTES + length
            if len(self._buffer) < end:
                break
            payload = bytes(self._buffer[AUTH_BYTES:end])
            expected = self._encryptor._chunk_tag(self._context.iv, self.counter, payload)
            if not hmac.compare_digest(expected, bytes(self._buffer[CLEN_BYTES:AUTH_BYTES])):
                raise EncryptionError("chunk authentication failed")
            out += payload
            del self._buffer[:end]
            self.counter += 1
        return bytes(out)


class Encryptor:
    """Encrypts and decrypts with the cipher and key derived from a password."""

    def __init__(
        self,
        password: Union[str, bytes],
        method: Union[str, CipherMethod, None] = None,
    ) -> None:
        if isinstance(method, CipherMethod):
            self.method = method
        else:
            self.method = CipherMethod.from_name(method)

        self._table: Optional[TableCipher] = None
        if self.method is CipherMethod.TABLE:
            self._table = TableCipher(password)
            self.key = b""
            self.iv_len = 0
        else:
            self.key = derive_key(self.method, password)
            self.iv_len = iv_size(self.method)
            # Fail early when the cipher cannot be provided.
            StreamCipher(self.method, self.key, bytes(self.iv_len))
        self._iv_cache = Cache(_IV_CACHE_SIZE)

    def new_context(self, encrypt: bool = True) -> CipherContext:
        """Return a fresh context for one direction of a connection."""
        return CipherContext(self, encrypt)

    def _stream(self, iv: bytes, encrypt: bool) -> StreamCipher:
        return StreamCipher(self.method, self.key, iv, encrypt)

    def _auth_key(self, iv: bytes) -> bytes:
        return bytes(iv)[: self.iv_len] + self.key

    def _chunk_tag(self, iv: bytes, counter: int, payload: bytes) -> bytes:
        key = bytes(iv)[: self.iv_len] + (counter & 0xFFFFFFFF).to_bytes(4, "big")
        return sha1_hmac(key, payload)[:ONETIMEAUTH_BYTES]

    def onetimeauth(self, data: bytes, iv: bytes) -> bytes:
        """Return *data* followed by its 10-byte HMAC-SHA1 under IV and key."""
        data = bytes(data)
        return data + sha1_hmac(self._auth_key(iv), data)[:ONETIMEAUTH_BYTES]

    def onetimeauth_verify(self, data: bytes, iv: bytes) -> bool:
        """Tell whether the last 10 bytes of *data* authenticate the rest."""
        data = bytes(data)
        if len(data) < ONETIMEAUTH_BYTES:
            return False
        body, tag = data[:-ONETIMEAUTH_BYTES], data[-ONETIMEAUTH_BYTES:]
        expected = sha1_hmac(self._auth_key(iv), body)[:ONETIMEAUTH_BYTES]
        return hmac.compare_digest(expected, tag)

    def encrypt_all(self, data: bytes, auth: bool = False) -> bytes:
        """Encrypt a self-contained packet under a fresh random IV."""
        data = bytes(data)
        if self._table is not None:
            return self._table.encrypt(data)
        iv = os.urandom(self.iv_len)
        if auth:
            data = self.onetimeauth(data, iv)
        return iv + self._stream(iv, True).update(data)

    def decrypt_all(self, data: bytes, auth: bool = False) -> bytes:
        """Decrypt a packet made by :meth:`encrypt_all`, checking its tag if any."""
        data = bytes(data)
        if self._table is not None:
            return self._table.decrypt(data)
        if len(data) <= self.iv_len:
            raise EncryptionError("packet is too short")
        iv = data[: self.iv_len]
        plain = self._stream(iv, False).update(data[self.iv_len :])
        if auth or plain[0] & ONETIMEAUTH_FLAG:
            if len(plain) <= ONETIMEAUTH_BYTES or not self.onetimeauth_verify(plain, iv):
                raise EncryptionError("packet authentication failed")
            plain = plain[:-ONETIMEAUTH_BYTES]
        return plain

    def encrypt(self, data: bytes, context: Optional[CipherContext]) -> bytes:
        """Encrypt the next piece of a stream; the first piece carries the IV."""
        data = bytes(data)
        if self._table is not None:
            return self._table.encrypt(data)
        if context is None:
            raise EncryptionError("a cipher context is required")
        prefix = b""
        if not context.initialized:
            context.cipher = self._stream(context.iv, True)
            context.counter = 0
            context.initialized = True
            prefix = context.iv
        out = context.cipher.update(data)
        context.counter += len(data)
        return prefix + out

    def decrypt(self, data: bytes, context: Optional[CipherContext]) -> bytes:
        """Decrypt the next piece of a stream; the first piece starts with the IV.

        A repeated IV is refused for every method beyond plain RC4.
        """
        data = bytes(data)
        if self._table is not None:
            return self._table.decrypt(data)
        if context is None:
            raise EncryptionError("a cipher context is required")
        if not context.initialized:
            if len(data) < self.iv_len:
                raise EncryptionError("stream is too short to hold the IV")
            iv = data[: self.iv_len]
            data = data[self.iv_len :]
            context.iv = iv
            context.cipher = self._stream(iv, False)
            context.counter = 0
            context.initialized = True
            if self.method > CipherMethod.RC4:
                if self._iv_cache.contains(iv):
                    raise EncryptionError("repeated IV")
                self._iv_cache.insert(iv, None)
        out = context.cipher.update(data)
        context.counter += len(data)
        return out

    def gen_hash(self, data: bytes, counter: int, context: CipherContext) -> bytes:
        """Return *data* as a chunk: 2-byte length, 10-byte tag, then the data.

        The tag is keyed by the context's IV and *counter*; the caller
        advances the counter for the next chunk.
        """
        data = bytes(data)
        if len(data) > _MAX_CHUNK:
            raise ValueError("chunk is too long")
        tag = self._chunk_tag(context.iv, counter, data)
        return len(data).to_bytes(CLEN_BYTES, "big") + tag + data