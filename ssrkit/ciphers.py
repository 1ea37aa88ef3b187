"""Stream ciphers selectable by name, with their key and IV sizes."""

from __future__ import annotations

import logging
import warnings
from enum import IntEnum
from typing import Callable, Optional, Union

from Crypto.Cipher import ARC2, ARC4, CAST, DES, Blowfish, ChaCha20, Salsa20
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .digests import bytes_to_key, md5

logger = logging.getLogger(__name__)

_NAMES = (
    "table",
    "rc4",
    "rc4-md5-6",
    "rc4-md5",
    "aes-128-cfb",
    "aes-192-cfb",
    "aes-256-cfb",
    "aes-128-ctr",
    "aes-192-ctr",
    "aes-256-ctr",
    "bf-cfb",
    "camellia-128-cfb",
    "camellia-192-cfb",
    "camellia-256-cfb",
    "cast5-cfb",
    "des-cfb",
    "idea-cfb",
    "rc2-cfb",
    "seed-cfb",
    "salsa20",
    "chacha20",
    "chacha20-ietf",
)

_IV_SIZES = (0, 0, 6, 16, 16, 16, 16, 16, 16, 16, 8, 16, 16, 16, 8, 8, 8, 8, 16, 8, 8, 12)
_KEY_SIZES = (0, 16, 16, 16, 16, 24, 32, 16, 24, 32, 16, 16, 24, 32, 16, 8, 16, 16, 16, 32, 32, 32)


class CipherMethod(IntEnum):
    TABLE = 0
    RC4 = 1
    RC4_MD5_6 = 2
    RC4_MD5 = 3
    AES_128_CFB = 4
    AES_192_CFB = 5
    AES_256_CFB = 6
    AES_128_CTR = 7
    AES_192_CTR = 8
    AES_256_CTR = 9
    BF_CFB = 10
    CAMELLIA_128_CFB = 11
    CAMELLIA_192_CFB = 12
    CAMELLIA_256_CFB = 13
    CAST5_CFB = 14
    DES_CFB = 15
    IDEA_CFB = 16
    RC2_CFB = 17
    SEED_CFB = 18
    SALSA20 = 19
    CHACHA20 = 20
    CHACHA20IETF = 21

    @property
    def cipher_name(self) -> str:
        return _NAMES[self]

    @classmethod
    def from_name(cls, name: Optional[str]) -> "CipherMethod":
        """Return the method called *name*.

        No name selects the table cipher; an unknown name falls back to
        ``rc4-md5`` with a warning.
        """
        if name is None:
            return cls.TABLE
        for method in cls:
            if method.cipher_name == name:
                return method
        logger.warning("Invalid cipher name: %s, use rc4-md5 instead", name)
        return cls.RC4_MD5


class UnsupportedCipherError(ValueError):
    """The method is not a stream cipher or no backend can provide it."""


MethodLike = Union[CipherMethod, int]


def iv_size(method: MethodLike) -> int:
    """Return the IV length in bytes used by *method*."""
    return _IV_SIZES[CipherMethod(method)]


def key_size(method: MethodLike) -> int:
    """Return the key length in bytes used by *method*."""
    return _KEY_SIZES[CipherMethod(method)]


def derive_key(method: MethodLike, password: Union[str, bytes]) -> bytes:
    """Derive the key for *method* from *password* with the MD5 key schedule."""
    method = CipherMethod(method)
    if method is CipherMethod.TABLE:
        raise UnsupportedCipherError("the table method has no derived key")
    return bytes_to_key(password, key_size(method))


def _legacy_algorithm(name: str):
    try:
        from cryptography.hazmat.decrepit.ciphers import algorithms as decrepit
    except ImportError:
        decrepit = None
    if decrepit is not None and hasattr(decrepit, name):
        return getattr(decrepit, name)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        return getattr(algorithms, name, None)


class _Cfb:
    """Full-block cipher feedback over a raw block-encryption function."""

    def __init__(self, encrypt_block: Callable[[bytes], bytes], iv: bytes, encrypt: bool) -> None:
        self._encrypt_block = encrypt_block
        self._register = bytearray(iv)
        self._stream = b""
        self._pos = len(iv)
        self._encrypt = encrypt

    def update(self, data: bytes) -> bytes:
        out = bytearray()
        size = len(self._register)
        for byte in data:
            if self._pos == size:
                self._stream = self._encrypt_block(bytes(self._register))
                self._pos = 0
            result = byte ^ self._stream[self._pos]
            out.append(result)
            self._register[self._pos] = result if self._encrypt else byte
            self._pos += 1
        return bytes(out)


_AES_CFB = {CipherMethod.AES_128_CFB, CipherMethod.AES_192_CFB, CipherMethod.AES_256_CFB}
_AES_CTR = {CipherMethod.AES_128_CTR, CipherMethod.AES_192_CTR, CipherMethod.AES_256_CTR}
_CAMELLIA = {
    CipherMethod.CAMELLIA_128_CFB,
    CipherMethod.CAMELLIA_192_CFB,
    CipherMethod.CAMELLIA_256_CFB,
}


class StreamCipher:
    """One direction of a stream cipher; successive updates continue the stream."""

    def __init__(self, method: MethodLike, key: bytes, iv: bytes, encrypt: bool = True) -> None:
        method = CipherMethod(method)
        if method is CipherMethod.TABLE:
            raise UnsupportedCipherError("the table method is not a stream cipher")
        key, iv = bytes(key), bytes(iv)
        if len(key) != key_size(method):
            raise ValueError(f"{method.cipher_name} needs a {key_size(method)}-byte key")
        if len(iv) != iv_size(method):
            raise ValueError(f"{method.cipher_name} needs a {iv_size(method)}-byte IV")
        self.method = method
        self.iv = iv
        self.encrypt = encrypt
        self._update = self._build(method, key, iv, encrypt)

    def update(self, data: bytes) -> bytes:
        """Transform *data* and return the result."""
        return self._update(bytes(data))

    @staticmethod
    def _openssl(algorithm, mode, encrypt: bool) -> Callable[[bytes], bytes]:
        try:
            cipher = Cipher(algorithm, mode)
            context = cipher.encryptor() if encrypt else cipher.decryptor()
        except UnsupportedAlgorithm as exc:
            raise UnsupportedCipherError(str(exc)) from exc
        return context.update

    @classmethod
    def _build(cls, method: CipherMethod, key: bytes, iv: bytes, encrypt: bool):
        if method in (CipherMethod.RC4_MD5, CipherMethod.RC4_MD5_6):
            return ARC4.new(md5(key + iv)).encrypt
        if method is CipherMethod.RC4:
            return ARC4.new(key).encrypt
        if method is CipherMethod.SALSA20:
            return Salsa20.new(key=key, nonce=iv).encrypt
        if method in (CipherMethod.CHACHA20, CipherMethod.CHACHA20IETF):
            return ChaCha20.new(key=key, nonce=iv).encrypt
        if method in _AES_CTR:
            return cls._openssl(algorithms.AES(key), modes.CTR(iv), encrypt)
        if method in _AES_CFB:
            return cls._openssl(algorithms.AES(key), modes.CFB(iv), encrypt)
        if method in _CAMELLIA:
            return cls._openssl(algorithms.Camellia(key), modes.CFB(iv), encrypt)
        if method in (CipherMethod.IDEA_CFB, CipherMethod.SEED_CFB):
            name = "IDEA" if method is CipherMethod.IDEA_CFB else "SEED"
            algorithm = _legacy_algorithm(name)
            if algorithm is None:
                raise UnsupportedCipherError(f"{method.cipher_name} is not available")
            return cls._openssl(algorithm(key), modes.CFB(iv), encrypt)
        if method is CipherMethod.BF_CFB:
            block = Blowfish.new(key, Blowfish.MODE_ECB).encrypt
        elif method is CipherMethod.CAST5_CFB:
            block = CAST.new(key, CAST.MODE_ECB).encrypt
        elif method is CipherMethod.DES_CFB:
            block = DES.new(key, DES.MODE_ECB).encrypt
        elif method is CipherMethod.RC2_CFB:
            block = ARC2.new(key, ARC2.MODE_ECB, effective_keylen=len(key) * 8).encrypt
        else:
            raise UnsupportedCipherError(f"{method.cipher_name} is not supported")
        return _Cfb(block, iv, encrypt).update