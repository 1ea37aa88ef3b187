"""Hash, HMAC and key-derivation helpers shared by the ciphers and protocols."""

from __future__ import annotations

import hashlib
import hmac

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

MD5_SIZE = 16
SHA1_SIZE = 20
AES_BLOCK_SIZE = 16


def md5(data: bytes) -> bytes:
    """Return the MD5 digest of *data*."""
    return hashlib.md5(bytes(data)).digest()


def sha1(data: bytes) -> bytes:
    """Return the SHA-1 digest of *data*."""
    return hashlib.sha1(bytes(data)).digest()


def md5_hmac(key: bytes, data: bytes) -> bytes:
    """Return the 16-byte HMAC-MD5 of *data* under *key*."""
    return hmac.new(bytes(key), bytes(data), hashlib.md5).digest()


def sha1_hmac(key: bytes, data: bytes) -> bytes:
    """Return the 20-byte HMAC-SHA1 of *data* under *key*."""
    return hmac.new(bytes(key), bytes(data), hashlib.sha1).digest()


def bytes_to_key(password: bytes | str, size: int) -> bytes:
    """Derive *size* bytes of key material from *password*.

    The first block is MD5(password); each further block is
    MD5(previous block + password).
    """
    if size < 0:
        raise ValueError("key size must not be negative")
    if isinstance(password, str):
        password = password.encode()
    password = bytes(password)

    block = md5(password)
    blocks = [block]
    produced = len(block)
    while produced < size:
        block = md5(block + password)
        blocks.append(block)
        produced += len(block)
    return b"".join(blocks)[:size]


def aes_128_cbc_block(block: bytes, key: bytes) -> bytes:
    """Encrypt one 16-byte block with AES-128-CBC and an all-zero IV."""
    block = bytes(block)
    key = bytes(key)
    if len(block) != AES_BLOCK_SIZE:
        raise ValueError("block must be exactly 16 bytes")
    if len(key) != 16:
        raise ValueError("AES-128 key must be exactly 16 bytes")
    encryptor = Cipher(algorithms.AES(key), modes.CBC(bytes(AES_BLOCK_SIZE))).encryptor()
    return encryptor.update(block) + encryptor.finalize()