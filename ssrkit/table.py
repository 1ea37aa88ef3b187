"""The legacy substitution ("table") cipher keyed by a password."""

from __future__ import annotations

from .digests import md5

_ROUNDS = 1024


def build_tables(password: bytes | str) -> tuple[bytes, bytes]:
    """Return the ``(encrypt, decrypt)`` substitution tables for *password*.

    The key is the first eight bytes of MD5(password) read as a little-endian
    integer.  The identity table is then stably sorted 1023 times, round *i*
    ordering each byte value ``x`` by ``key % (x + i)``.
    """
    if isinstance(password, str):
        password = password.encode()
    key = int.from_bytes(md5(bytes(password))[:8], "little")

    table = list(range(256))
    for salt in range(1, _ROUNDS):
        table.sort(key=lambda value, salt=salt: key % (value + salt))

    decrypt = bytearray(256)
    for position, value in enumerate(table):
        decrypt[value] = position
    return bytes(table), bytes(decrypt)


class TableCipher:
    """Byte-for-byte substitution using tables derived from a password."""

    def __init__(self, password: bytes | str) -> None:
        self.encrypt_table, self.decrypt_table = build_tables(password)

    def encrypt(self, data: bytes) -> bytes:
        """Substitute every byte of *data* through the encryption table."""
        return bytes(data).translate(self.encrypt_table)

    def decrypt(self, data: bytes) -> bytes:
        """Substitute every byte of *data* through the decryption table."""
        return bytes(data).translate(self.decrypt_table)