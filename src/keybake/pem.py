"""PEM armor for raw key bytes.

Armoring goes through ``cryptography``: the DER bytes are loaded back into a
key object and written out in the algorithm's traditional PEM form, which is
what OpenSSL writes (64-column base64 body, BEGIN/END lines, trailing
newline).
"""
from __future__ import annotations

from cryptography import exceptions as crypto_exceptions

from .algorithms import Algorithm
from .errors import EncodingError
from .generate import RawKey

_LOAD_ERRORS = (ValueError, TypeError, UnicodeError, crypto_exceptions.UnsupportedAlgorithm)


def encode(raw: RawKey) -> str:
    try:
        return raw.algorithm.variant.to_pem(raw.der)
    except _LOAD_ERRORS as e:
        raise EncodingError(f"cannot armor {raw.algorithm.value} key: {e}") from e


def decode(text: str, algorithm: Algorithm = Algorithm.RSA) -> bytes:
    """Return the canonical DER bytes of the key in a PEM block."""
    try:
        return algorithm.variant.from_pem(text)
    except _LOAD_ERRORS as e:
        raise EncodingError(f"invalid {algorithm.value} PEM block: {e}") from e


__all__ = ["encode", "decode"]
