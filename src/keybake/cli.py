"""Command-line front end: ``keybake [-o OUT] [-p PACKAGE] SPEC...``.

Exit status is 0 on success, 1 when any key spec, generation, render or
write step fails, and 2 for usage errors.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from .algorithms import supported_tags
from .config import load_config
from .errors import KeybakeError, OutputError
from .pipeline import DEFAULT_PACKAGE, bake
from .utils.logging import get_logger, set_verbose

log = get_logger()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        "keybake",
        description="Generate a Python module holding pre-baked private keys for tests",
    )
    p.add_argument("-o", "--output", help="output file (defaults to stdout)")
    p.add_argument("-p", "--package", help=f"output package name (default {DEFAULT_PACKAGE})")
    p.add_argument("-c", "--config", help="YAML config file (default ./keybake.yml if present)")
    p.add_argument("-j", "--jobs", type=int, help="generate keys on this many threads")
    p.add_argument(
        "--strict-load",
        dest="strict_load",
        action="store_true",
        default=None,
        help="generated module raises on import if an embedded key does not load",
    )
    p.add_argument("-v", "--verbose", action="store_true")
    p.add_argument(
        "specs",
        nargs="*",
        metavar="SPEC",
        help=f"key spec name:alg:param, e.g. k1:rsa:2048 (algs: {', '.join(supported_tags())})",
    )
    return p


def write_output(src: str, output: Optional[str]) -> None:
    if not output or output == "-":
        sys.stdout.write(src)
        sys.stdout.flush()
        return
    try:
        Path(output).write_text(src, encoding="utf-8")
    except OSError as e:
        raise OutputError(f"cannot write {output}: {e}") from e


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    try:
        cfg = load_config(args.config)
    except KeybakeError as e:
        log.error("%s", e)
        return 1

    specs = args.specs or cfg.keys
    if not specs:
        parser.error("must specify at least one key spec")
    jobs = args.jobs if args.jobs is not None else cfg.jobs
    if jobs < 1:
        parser.error("--jobs must be at least 1")
    package = args.package or cfg.package
    output = args.output if args.output is not None else cfg.output
    strict_load = cfg.strict_load if args.strict_load is None else args.strict_load

    try:
        src = bake(specs, package, jobs=jobs, strict_load=strict_load)
        write_output(src, output)
    except KeybakeError as e:
        log.error("%s", e)
        return 1
    log.info("wrote %d key(s) for package %s to %s", len(specs), package, output or "stdout")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
