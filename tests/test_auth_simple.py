import pytest

from ssrkit.auth_simple import AuthGlobalState, AuthSimple, ProtocolError, ServerInfo
from ssrkit.checksum import crc32

KEY = b"k" * 16
IV = b"i" * 16


def make_protocol(state=None):
    return AuthSimple(ServerInfo(key=KEY, iv=IV), state)


def started_protocol():
    proto = make_protocol()
    proto.client_pre_encrypt(b"h")
    return proto


def split_frames(stream):
    frames = []
    while stream:
        length = int.from_bytes(stream[:2], "big")
        frames.append(stream[:length])
        stream = stream[length:]
    return frames


def test_server_info_hmac_key():
    assert ServerInfo(key=b"key", iv=b"iv").hmac_key == b"ivkey"


def test_next_connection_increments():
    state = AuthGlobalState(local_client_id=b"\x01" * 8, connection_id=5)
    assert state.next_connection() == 6
    assert state.local_client_id == b"\x01" * 8


def test_next_connection_reseeds_when_high():
    state = AuthGlobalState(local_client_id=b"\x01" * 8, connection_id=0xFF000000)
    result = state.next_connection()
    assert result <= 0xFFFFFF
    assert state.connection_id == result


def test_empty_data_sends_nothing():
    proto = make_protocol()
    assert proto.client_pre_encrypt(b"") == b""
    assert proto.has_sent_header is False


def test_auth_frame_layout():
    state = AuthGlobalState(local_client_id=b"ABCDEFGH", connection_id=100)
    proto = make_protocol(state)
    head = b"0123456789"
    out = proto.client_pre_encrypt(head)
    assert proto.has_sent_header is True
    assert int.from_bytes(out[:2], "big") == len(out)
    assert crc32(out) == 0xFFFFFFFF
    start = 2 + out[2]
    meta = out[start : start + 12]
    assert meta[4:8] == b"ABCD"
    assert int.from_bytes(meta[8:12], "little") == 101
    assert out[start + 12 : -4] == head


def test_auth_frame_holds_only_head_size_bytes():
    proto = make_protocol()
    data = b"x" * 50
    out = proto.client_pre_encrypt(data, head_size=30)
    frames = split_frames(out)
    assert len(frames) == 2
    assert frames[0][2 + frames[0][2] + 12 : -4] == b"x" * 30


def test_decoding_auth_frame_yields_meta_and_head():
    proto = make_protocol()
    out = proto.client_pre_encrypt(b"head")
    decoded = make_protocol().client_post_decrypt(out)
    assert decoded[12:] == b"head"
    assert len(decoded) == 16


@pytest.mark.parametrize("size", [1, 100, 2000, 2001, 5000])
def test_data_frames_round_trip(size):
    proto = started_protocol()
    data = bytes(i % 251 for i in range(size))
    encoded = proto.client_pre_encrypt(data)
    assert make_protocol().client_post_decrypt(encoded) == data


def test_large_data_is_split_into_units():
    proto = started_protocol()
    frames = split_frames(proto.client_pre_encrypt(b"z" * 5000))
    assert len(frames) == 3
    assert all(crc32(frame) == 0xFFFFFFFF for frame in frames)


def test_partial_frame_is_buffered():
    proto = started_protocol()
    encoded = proto.client_pre_encrypt(b"partial payload")
    receiver = make_protocol()
    assert receiver.client_post_decrypt(encoded[:5]) == b""
    assert receiver.client_post_decrypt(encoded[5:]) == b"partial payload"


def test_bad_length_raises_and_clears_buffer():
    receiver = make_protocol()
    with pytest.raises(ProtocolError):
        receiver.client_post_decrypt(b"\x00\x03\x00\x00")
    good = started_protocol().client_pre_encrypt(b"after error")
    assert receiver.client_post_decrypt(good) == b"after error"


def test_corrupted_frame_raises():
    encoded = bytearray(started_protocol().client_pre_encrypt(b"payload"))
    encoded[-5] ^= 0xFF
    with pytest.raises(ProtocolError):
        make_protocol().client_post_decrypt(bytes(encoded))


def test_overflow_raises():
    receiver = make_protocol()
    with pytest.raises(ProtocolError):
        receiver.client_post_decrypt(b"\x00" * 16385)