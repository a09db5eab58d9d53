import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from keybake.algorithms import Algorithm
from keybake.errors import GenerationError
from keybake.generate import KeyGenerator, RawKey, generate
from keybake.spec import parse

# Fixed key for tests that do not care about randomness
_KEY = rsa.generate_private_key(public_exponent=65537, key_size=1024)


def _fixed(alg, bits):
    return _KEY


def test_generate_bit_length():
    raw = generate(parse("k:rsa:2048"))
    assert raw.algorithm is Algorithm.RSA
    key = serialization.load_der_private_key(raw.der, password=None)
    assert isinstance(key, rsa.RSAPrivateKey)
    assert key.key_size == 2048
    assert key.private_numbers().public_numbers.e == 65537


def test_generate_is_not_deterministic():
    spec = parse("k:rsa:1024")
    a = generate(spec)
    b = generate(spec)
    assert a.der != b.der


def test_der_is_pkcs1():
    raw = KeyGenerator(_fixed).generate(parse("k:rsa:1024"))
    assert raw == RawKey(
        algorithm=Algorithm.RSA,
        der=_KEY.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        ),
    )


def test_injected_keygen_receives_spec():
    calls = []

    def keygen(alg, bits):
        calls.append((alg, bits))
        return _KEY

    KeyGenerator(keygen).generate(parse("k:rsa:1024"))
    assert calls == [(Algorithm.RSA, 1024)]


@pytest.mark.parametrize("bits", [0, -1, 16])
def test_degenerate_size_rejected(bits):
    with pytest.raises(GenerationError) as ei:
        generate(parse(f"k:rsa:{bits}"))
    assert f"k:rsa:{bits}" in str(ei.value)
    assert ei.value.__cause__ is not None


def test_primitive_failure_wrapped():
    def broken(alg, bits):
        raise OSError("entropy source unavailable")

    with pytest.raises(GenerationError) as ei:
        KeyGenerator(broken).generate(parse("k:rsa:1024"))
    assert "entropy source unavailable" in str(ei.value)
    assert isinstance(ei.value.__cause__, OSError)


def test_wrong_size_from_primitive_rejected():
    with pytest.raises(GenerationError):
        KeyGenerator(_fixed).generate(parse("k:rsa:2048"))


def test_wrong_type_from_primitive_rejected():
    with pytest.raises(GenerationError):
        KeyGenerator(lambda a, b: ec.generate_private_key(ec.SECP256R1())).generate(parse("k:rsa:1024"))
