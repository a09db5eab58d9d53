"""Straight-line pipeline: specs -> KeySpecs -> RawKeys -> PEM -> module.

Every stage is fail-fast. Nothing is returned for a run in which any spec
fails, since a partially rendered module is worse than none.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from .emit import EmissionRecord, emit
from .errors import DuplicateIdentifier
from .generate import KeyGenerator, RawKey
from .spec import KeySpec, normalize_identifier, parse_all
from .utils.logging import get_logger

log = get_logger()

DEFAULT_PACKAGE = "testkeys"


def check_unique(specs: Sequence[KeySpec]) -> None:
    # compared as Python binds them, so "fi" and "\ufb01" collide
    seen = {}
    for s in specs:
        key = normalize_identifier(s.identifier)
        if key in seen:
            raise DuplicateIdentifier(
                f"identifier '{s.identifier}' used by both '{seen[key]}' and '{s.source}'"
            )
        seen[key] = s.source


def generate_all(specs: Sequence[KeySpec], generator: KeyGenerator, jobs: int = 1) -> List[RawKey]:
    """Generate one key per spec, results in spec order.

    With ``jobs > 1`` generation runs on a thread pool; the first failure
    propagates and keys not yet started are cancelled.
    """
    if jobs <= 1 or len(specs) <= 1:
        return [generator.generate(s) for s in specs]
    with ThreadPoolExecutor(max_workers=min(jobs, len(specs))) as pool:
        futures = [pool.submit(generator.generate, s) for s in specs]
        try:
            return [f.result() for f in futures]
        except BaseException:
            for f in futures:
                f.cancel()
            raise


def bake(
    specs: Sequence[str],
    package: str = DEFAULT_PACKAGE,
    *,
    generator: Optional[KeyGenerator] = None,
    jobs: int = 1,
    strict_load: bool = False,
) -> str:
    parsed = parse_all(specs)
    check_unique(parsed)
    log.debug("parsed %d key spec(s) for package %s", len(parsed), package)
    raws = generate_all(parsed, generator or KeyGenerator(), jobs=jobs)
    records = [EmissionRecord.from_raw(s.identifier, raw) for s, raw in zip(parsed, raws)]
    return emit(package, records, strict_load=strict_load)


__all__ = ["DEFAULT_PACKAGE", "bake", "check_unique", "generate_all"]
