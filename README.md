# ssrkit

Building blocks for a ShadowsocksR-style proxy: password-keyed stream
ciphers, one-time auth, per-chunk hashes and the client side of several
`auth_*` framing protocols.

- `ssrkit.encryptor` — `Encryptor`, `CipherContext`, `ChunkVerifier` and
  `EncryptionError`: whole-packet and streaming encryption, one-time auth
  tags and length-prefixed, HMAC-tagged chunks.
- `ssrkit.ciphers` — `CipherMethod` (from `table` to `chacha20-ietf`),
  `StreamCipher`, `derive_key`, `iv_size`, `key_size` and
  `UnsupportedCipherError`.
- `ssrkit.table` — `TableCipher` and `build_tables`, the legacy
  password-derived substitution cipher.
- `ssrkit.auth_simple` — `AuthSimple`, `ServerInfo`, `AuthGlobalState` and
  `ProtocolError`: CRC-32 sealed frames.
- `ssrkit.auth_sha1` — `AuthSha1` and `AuthSha1V2`: Adler-32 sealed frames
  with an HMAC-SHA1 tagged first frame.
- `ssrkit.auth_sha1_v4` — `AuthSha1V4`: as v2, with the frame size guarded by
  its own short CRC.
- `ssrkit.cache` — `Cache`, a bounded cache whose entries carry a timestamp
  and are dropped oldest first.
- `ssrkit.checksum`, `ssrkit.b64` and `ssrkit.digests` — CRC-32 / Adler-32
  sealing, Base64, MD5 / SHA-1 / HMAC, the MD5 key schedule and one-block
  AES-128-CBC.

## Install

```
pip install ssrkit
```

## Encrypting a stream

```python
from ssrkit.encryptor import Encryptor

password = "password"
encryptor = Encryptor(password, "aes-256-cfb")

sender = encryptor.new_context(True)
receiver = encryptor.new_context(False)

wire = encryptor.encrypt(b"hello", sender)
assert encryptor.decrypt(wire, receiver) == b"hello"
```

The first call to `encrypt` puts the IV in front of the data and the first
call to `decrypt` reads it from there. For every method beyond plain `rc4`
the decrypting side refuses an IV it has seen before and raises
`EncryptionError`. An unknown method name falls back to `rc4-md5` with a
logged warning; no name at all selects the `table` cipher.

For single datagrams use `encrypt_all` and `decrypt_all`. With `auth=True` a
ten-byte one-time-auth tag is appended and then checked.

`gen_hash(data, counter, context)` wraps data as a chunk (two-byte length,
ten-byte tag, data); a `ChunkVerifier` built for the same context reassembles
such chunks from arbitrary pieces with `feed` and checks each tag.

## Framing protocols

```python
from ssrkit.auth_simple import AuthSimple, ServerInfo

server = ServerInfo(key=encryptor.key)
client = AuthSimple(server)

frames = client.client_pre_encrypt(b"header and first data")
```

The first call puts up to `head_size` bytes (30 by default) in an auth frame
carrying a timestamp, client id and connection id; the rest is cut into
frames of at most 2000 bytes. `client_post_decrypt` buffers received bytes
(up to 16384) and returns the payload of every complete frame, raising
`ProtocolError` on a bad length or checksum and dropping what was buffered.
`AuthSha1`, `AuthSha1V2` and `AuthSha1V4` take the same arguments.

## Checksums

```python
from ssrkit.checksum import crc32, seal_crc32, seal_adler32, check_adler32

packet = seal_crc32(b"payload" + bytes(4))
assert crc32(packet) == 0xFFFFFFFF
assert check_adler32(seal_adler32(b"payload" + bytes(4)))
```

## What this package does not do

It holds no server, no command and no network code: it transforms bytes
handed to it. It does not read access-control files, keep a per-address
block list or set firewall rules, and it does not provide the
`auth_aes128_md5` / `auth_aes128_sha1` protocols.

## Tests

```
pip install -e ".[test]"
pytest
```