"""Key spec parsing.

A key spec is ``identifier:algorithm:parameter``, e.g. ``k1:rsa:2048``.
Exactly three colon-separated fields; colons cannot be escaped.
"""
from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from typing import Iterable, List

from .algorithms import Algorithm
from .errors import InvalidParameter, MalformedSpec


@dataclass(frozen=True)
class KeySpec:
    identifier: str
    algorithm: Algorithm
    parameter: int
    source: str = field(default="", compare=False)


def normalize_identifier(name: str) -> str:
    """Return the name Python actually binds for ``name`` (NFKC form)."""
    return unicodedata.normalize("NFKC", name)


def parse(spec: str) -> KeySpec:
    """Parse ``identifier:algorithm:parameter`` into a KeySpec.

    The identifier is taken as-is; whether it is a usable Python name is
    checked when the module is rendered.
    """
    parts = spec.split(":")
    if len(parts) != 3:
        raise MalformedSpec(f"invalid key spec '{spec}'")
    name, tag, raw_param = parts
    alg = Algorithm.from_tag(tag)
    try:
        param = alg.variant.parse_parameter(raw_param)
    except ValueError as e:
        raise InvalidParameter(f"invalid key size in '{spec}': {e}") from e
    return KeySpec(identifier=name, algorithm=alg, parameter=param, source=spec)


def parse_all(specs: Iterable[str]) -> List[KeySpec]:
    return [parse(s) for s in specs]


__all__ = ["KeySpec", "normalize_identifier", "parse", "parse_all"]
