import base64

import pytest

from ssrkit.b64 import Base64Error, decode, decoded_size, encode, encoded_size


def test_encode_known_value():
    assert encode(b"Man") == "TWFu"


@pytest.mark.parametrize("data", [b"", b"f", b"fo", b"foo", b"foob", b"fooba", bytes(range(256))])
def test_round_trip(data):
    assert decode(encode(data)) == data


@pytest.mark.parametrize("data", [b"a", b"ab", b"abc", b"abcd", bytes(range(100))])
def test_matches_standard_library(data):
    assert encode(data) == base64.b64encode(data).decode("ascii")


@pytest.mark.parametrize("length", [0, 1, 2, 3, 4, 5, 31, 32, 33])
def test_encoded_size_matches_output(length):
    assert encoded_size(length) == len(encode(bytes(length)))


@pytest.mark.parametrize("length", [0, 3, 6, 30, 99])
def test_decoded_size_matches_output(length):
    data = bytes(range(length))
    assert decoded_size(len(encode(data))) == len(decode(encode(data)))


def test_decode_stops_at_padding():
    assert decode("TWE=TWFu") == decode("TWE=")
    assert decode("TWE=") == b"Ma"


def test_decode_accepts_bytes():
    assert decode(encode(b"secret").encode("ascii")) == b"secret"


def test_decode_drops_partial_bits():
    assert decode("TWF") == decode("TWE=")


@pytest.mark.parametrize("text", ["@@@@", "TW-u", "TWF u", "TWF\u00e9"])
def test_invalid_character_raises(text):
    with pytest.raises(Base64Error):
        decode(text)