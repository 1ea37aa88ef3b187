"""Stream ciphers, one-time auth, auth_* framing protocols and their helpers for a ShadowsocksR-style proxy."""

__version__ = "0.1.0"