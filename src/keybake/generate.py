"""Key generation.

The randomness behind a key lives entirely in the key-generation primitive,
so the primitive is what gets injected: ``keygen(algorithm, parameter)``
returns a private key object. The default defers to the algorithm's own
generator (OpenSSL's CSPRNG through ``cryptography``). Tests pass a fixed
primitive to exercise everything except unpredictability.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from .algorithms import Algorithm
from .errors import GenerationError
from .spec import KeySpec
from .utils.logging import get_logger

log = get_logger()

KeyGen = Callable[[Algorithm, int], Any]


@dataclass(frozen=True)
class RawKey:
    algorithm: Algorithm
    der: bytes


def default_keygen(alg: Algorithm, parameter: int) -> Any:
    return alg.variant.generate(parameter)


class KeyGenerator:
    def __init__(self, keygen: Optional[KeyGen] = None) -> None:
        self.keygen = keygen or default_keygen

    def generate(self, spec: KeySpec) -> RawKey:
        variant = spec.algorithm.variant
        label = spec.source or spec.identifier
        try:
            key = self.keygen(spec.algorithm, spec.parameter)
        except Exception as e:
            # the primitive reports bad sizes as ValueError and RNG trouble as
            # whatever its backend raises; all of it is fatal for this spec
            raise GenerationError(f"failed to generate key '{label}': {e}") from e
        if not variant.matches(key, spec.parameter):
            raise GenerationError(
                f"failed to generate key '{label}': primitive returned "
                f"{type(key).__name__} not matching {spec.algorithm.value}/{spec.parameter}"
            )
        raw = RawKey(algorithm=spec.algorithm, der=variant.to_der(key))
        log.info("generated %s key %s (%d)", spec.algorithm.value, spec.identifier, spec.parameter)
        return raw


_DEFAULT = KeyGenerator()


def generate(spec: KeySpec) -> RawKey:
    return _DEFAULT.generate(spec)


__all__ = ["RawKey", "KeyGen", "KeyGenerator", "default_keygen", "generate"]
