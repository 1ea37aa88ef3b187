import pytest

from ssrkit.ciphers import CipherMethod
from ssrkit.encryptor import (
    AUTH_BYTES,
    ChunkVerifier,
    EncryptionError,
    Encryptor,
)

PASSWORD = "password"


@pytest.mark.parametrize(
    "name", ["aes-256-cfb", "aes-128-ctr", "rc4-md5", "chacha20-ietf", "salsa20", "table"]
)
def test_stream_round_trip(name):
    enc = Encryptor(PASSWORD, name)
    sender = enc.new_context(True)
    receiver = enc.new_context(False)
    pieces = [b"first piece", b"", b"second", b"x" * 100]
    received = b"".join(enc.decrypt(enc.encrypt(piece, sender), receiver) for piece in pieces)
    assert received == b"".join(pieces)


def test_first_piece_carries_iv():
    enc = Encryptor(PASSWORD, "aes-256-cfb")
    sender = enc.new_context(True)
    wire = enc.encrypt(b"hello", sender)
    assert len(wire) == enc.iv_len + 5
    assert wire[: enc.iv_len] == sender.iv
    assert len(enc.encrypt(b"hello", sender)) == 5


@pytest.mark.parametrize("name", ["aes-128-cfb", "rc4-md5", "chacha20", "table"])
def test_packet_round_trip(name):
    enc = Encryptor(PASSWORD, name)
    data = b"\x03packet payload"
    assert enc.decrypt_all(enc.encrypt_all(data)) == data


def test_packet_round_trip_with_auth():
    enc = Encryptor(PASSWORD, "aes-256-cfb")
    data = b"\x13authenticated"
    packet = enc.encrypt_all(data, auth=True)
    assert len(packet) == enc.iv_len + len(data) + 10
    assert enc.decrypt_all(packet, auth=True) == data


def test_tampered_packet_is_refused():
    enc = Encryptor(PASSWORD, "aes-256-cfb")
    packet = bytearray(enc.encrypt_all(b"\x01authenticated", auth=True))
    packet[-1] ^= 0xFF
    with pytest.raises(EncryptionError):
        enc.decrypt_all(bytes(packet), auth=True)


def test_short_packet_is_refused():
    enc = Encryptor(PASSWORD, "aes-256-cfb")
    with pytest.raises(EncryptionError):
        enc.decrypt_all(b"\x00" * enc.iv_len)


def test_repeated_iv_is_refused():
    enc = Encryptor(PASSWORD, "aes-256-cfb")
    wire = enc.encrypt(b"data", enc.new_context(True))
    assert enc.decrypt(wire, enc.new_context(False)) == b"data"
    with pytest.raises(EncryptionError):
        enc.decrypt(wire, enc.new_context(False))


def test_unknown_name_falls_back_to_rc4_md5():
    enc = Encryptor(PASSWORD, "no-such-cipher")
    assert enc.method is CipherMethod.RC4_MD5


def test_no_name_selects_table():
    enc = Encryptor(PASSWORD)
    assert enc.method is CipherMethod.TABLE
    assert enc.decrypt(enc.encrypt(b"abc", None), None) == b"abc"


def test_onetimeauth_round_trip():
    enc = Encryptor(PASSWORD, "aes-128-cfb")
    iv = bytes(range(enc.iv_len))
    tagged = enc.onetimeauth(b"message", iv)
    assert tagged[:7] == b"message"
    assert enc.onetimeauth_verify(tagged, iv)
    assert not enc.onetimeauth_verify(tagged, bytes(enc.iv_len))


def test_gen_hash_layout():
    enc = Encryptor(PASSWORD, "aes-128-cfb")
    context = enc.new_context(True)
    chunk = enc.gen_hash(b"hello", 0, context)
    assert len(chunk) == AUTH_BYTES + 5
    assert int.from_bytes(chunk[:2], "big") == 5
    assert chunk[AUTH_BYTES:] == b"hello"
    assert enc.gen_hash(b"hello", 1, context)[2:AUTH_BYTES] != chunk[2:AUTH_BYTES]


def _connected(enc):
    sender = enc.new_context(True)
    receiver = enc.new_context(False)
    enc.decrypt(enc.encrypt(b"x", sender), receiver)
    return sender, receiver


def test_chunk_verifier_reassembles_split_chunks():
    enc = Encryptor(PASSWORD, "aes-128-cfb")
    sender, receiver = _connected(enc)
    assert receiver.iv == sender.iv
    wire = enc.gen_hash(b"hello", 0, sender) + enc.gen_hash(b"world", 1, sender)
    verifier = ChunkVerifier(enc, receiver)
    received = b"".join(verifier.feed(wire[i : i + 1]) for i in range(len(wire)))
    assert received == b"helloworld"
    assert verifier.counter == 2


def test_chunk_verifier_rejects_bad_tag():
    enc = Encryptor(PASSWORD, "aes-128-cfb")
    sender, receiver = _connected(enc)
    chunk = bytearray(enc.gen_hash(b"hello", 0, sender))
    chunk[5] ^= 0x01
    with pytest.raises(EncryptionError):
        ChunkVerifier(enc, receiver).feed(bytes(chunk))


def test_chunk_verifier_rejects_wrong_counter():
    enc = Encryptor(PASSWORD, "aes-128-cfb")
    sender, receiver = _connected(enc)
    with pytest.raises(EncryptionError):
        ChunkVerifier(enc, receiver).feed(enc.gen_hash(b"hello", 7, sender))