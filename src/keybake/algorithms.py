"""Algorithm registry for key specs.

Supported algorithms:
  - rsa (parameter: modulus size in bits)

Each algorithm tag maps to a Variant holding everything the pipeline needs
for that family:
  parse_parameter(text) -> int      parameter field of a key spec
  generate(parameter) -> key        fresh private key from the primitive
  matches(key, parameter) -> bool   the key is what the key spec asked for
  to_der(key) -> bytes              canonical binary form (RawKey bytes)
  to_pem(der) -> str                armored form of those bytes
  from_pem(text) -> bytes           inverse of to_pem

plus the import/type the emitted module uses to declare its variables.

Adding an algorithm means one new Algorithm member and one Variant entry.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from .errors import UnsupportedAlgorithm

RSA_PUBLIC_EXPONENT = 65537

_INT_RE = re.compile(r"[+-]?[0-9]+")


class Algorithm(str, Enum):
    RSA = "rsa"

    @classmethod
    def from_tag(cls, tag: str) -> "Algorithm":
        try:
            return cls(tag)
        except ValueError:
            raise UnsupportedAlgorithm(f"unsupported key type '{tag}'") from None

    @property
    def variant(self) -> "Variant":
        return _VARIANTS[self]


@dataclass(frozen=True)
class Variant:
    key_import: str
    key_type: str
    parse_parameter: Callable[[str], int]
    generate: Callable[[int], Any]
    matches: Callable[[Any, int], bool]
    to_der: Callable[[Any], bytes]
    to_pem: Callable[[bytes], str]
    from_pem: Callable[[str], bytes]


def _parse_int(raw: str) -> int:
    # base 10 only; int() alone would also take "1_024" and surrounding blanks
    if not _INT_RE.fullmatch(raw):
        raise ValueError(f"invalid literal for key size: {raw!r}")
    return int(raw, 10)


def _rsa_generate(bits: int) -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=RSA_PUBLIC_EXPONENT, key_size=bits)


def _rsa_matches(key: Any, bits: int) -> bool:
    return isinstance(key, rsa.RSAPrivateKey) and key.key_size == bits


def _rsa_der(key: rsa.RSAPrivateKey) -> bytes:
    # TraditionalOpenSSL + DER is the PKCS#1 RSAPrivateKey structure
    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _rsa_pem(der: bytes) -> str:
    key = serialization.load_der_private_key(der, password=None)
    if not isinstance(key, rsa.RSAPrivateKey):
        raise TypeError(f"expected an RSA key, got {type(key).__name__}")
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


def _rsa_from_pem(text: str) -> bytes:
    key = serialization.load_pem_private_key(text.encode("ascii"), password=None)
    if not isinstance(key, rsa.RSAPrivateKey):
        raise TypeError(f"expected an RSA key, got {type(key).__name__}")
    return _rsa_der(key)


_VARIANTS = {
    Algorithm.RSA: Variant(
        key_import="from cryptography.hazmat.primitives.asymmetric import rsa",
        key_type="rsa.RSAPrivateKey",
        parse_parameter=_parse_int,
        generate=_rsa_generate,
        matches=_rsa_matches,
        to_der=_rsa_der,
        to_pem=_rsa_pem,
        from_pem=_rsa_from_pem,
    ),
}


def supported_tags() -> list[str]:
    return [a.value for a in Algorithm]


__all__ = ["Algorithm", "Variant", "RSA_PUBLIC_EXPONENT", "supported_tags"]
