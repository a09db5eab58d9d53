"""Render the Python module that carries baked keys.

The module declares one ``<name>: <KeyType> | None`` variable per record and
an ``_init()`` that loads every embedded PEM block when the module is
imported. Output depends only on the arguments, so re-rendering the same
records yields the same text.

Load-time policy: the embedded blocks come from the same run that renders
them, so by default a block that fails to load leaves its variable None.
With ``strict_load`` the module raises ValueError on import instead.
"""
from __future__ import annotations

import keyword
from dataclasses import dataclass
from typing import List, Sequence

from .algorithms import Algorithm
from .errors import RenderError
from .generate import RawKey
from .pem import encode
from .spec import normalize_identifier

HEADER = "# Code generated by keybake. DO NOT EDIT."

SERIALIZATION_IMPORT = "from cryptography.hazmat.primitives import serialization"
EXCEPTIONS_IMPORT = "from cryptography.exceptions import UnsupportedAlgorithm"

# names the rendered module binds itself
_OWN_NAMES = {"annotations", "parse", "_init"}

MODULE_TEMPLATE = '''\
{header}
"""Private keys for the ``{package}`` package.

Each PEM block below was generated once by keybake and is loaded when this
module is imported. {policy}
"""
from __future__ import annotations

{imports}

__all__ = [
{exports}
]

{declarations}


def _init() -> None:
    global {names}

{parse}
{assignments}

_init()
'''

_TOLERANT_POLICY = "A block that fails to load leaves its name set to None."
_STRICT_POLICY = "A block that fails to load raises ValueError on import."

_TOLERANT_PARSE = '''\
    def parse(name: str, enc: str):
        try:
            return serialization.load_pem_private_key(enc.encode(), password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm):
            return None
'''

_STRICT_PARSE = '''\
    def parse(name: str, enc: str):
        try:
            return serialization.load_pem_private_key(enc.encode(), password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise ValueError(f"embedded key {name!r} does not load: {e}") from e
'''


@dataclass(frozen=True)
class EmissionRecord:
    identifier: str
    algorithm: Algorithm
    block: str

    @classmethod
    def from_raw(cls, identifier: str, raw: RawKey) -> "EmissionRecord":
        return cls(identifier=identifier, algorithm=raw.algorithm, block=encode(raw))


def _imported_name(line: str) -> str:
    return line.rsplit(" ", 1)[-1]


def _check_package(package: str) -> None:
    if not package or not all(p.isidentifier() and not keyword.iskeyword(p) for p in package.split(".")):
        raise RenderError(f"invalid package name '{package}'")


def _check_identifiers(records: Sequence[EmissionRecord], reserved: set) -> None:
    seen = set()
    for r in records:
        name = r.identifier
        if not name.isidentifier() or keyword.iskeyword(name):
            raise RenderError(f"'{name}' is not a valid Python identifier")
        if normalize_identifier(name) != name:
            # the compiler would bind the NFKC form, not the name we export
            raise RenderError(
                f"'{name}' is not in NFKC form; use '{normalize_identifier(name)}'"
            )
        if name in reserved or (name.startswith("__") and name.endswith("__")):
            raise RenderError(f"'{name}' clashes with a name the generated module uses")
        if name in seen:
            raise RenderError(f"duplicate identifier '{name}'")
        seen.add(name)


def _assignment(r: EmissionRecord) -> str:
    block = r.block if r.block.endswith("\n") else r.block + "\n"
    return (
        f"    {r.identifier} = parse(\n"
        f'        "{r.identifier}",\n'
        '        """\\\n'
        f'{block}""",\n'
        "    )\n"
    )


def emit(package_name: str, records: Sequence[EmissionRecord], *, strict_load: bool = False) -> str:
    _check_package(package_name)
    if not records:
        raise RenderError("no keys to render")
    imports: List[str] = sorted(
        {SERIALIZATION_IMPORT, EXCEPTIONS_IMPORT} | {r.algorithm.variant.key_import for r in records}
    )
    _check_identifiers(records, _OWN_NAMES | {_imported_name(i) for i in imports})
    for r in records:
        if '"""' in r.block or "\\" in r.block:
            raise RenderError(f"block for '{r.identifier}' cannot be embedded")

    src = MODULE_TEMPLATE.format(
        header=HEADER,
        package=package_name,
        policy=_STRICT_POLICY if strict_load else _TOLERANT_POLICY,
        imports="\n".join(imports),
        exports="\n".join(f'    "{r.identifier}",' for r in records),
        declarations="\n".join(
            f"{r.identifier}: {r.algorithm.variant.key_type} | None = None" for r in records
        ),
        names=", ".join(r.identifier for r in records),
        parse=_STRICT_PARSE if strict_load else _TOLERANT_PARSE,
        assignments="".join(_assignment(r) for r in records),
    )
    try:
        compile(src, f"<keybake:{package_name}>", "exec")
    except (SyntaxError, ValueError) as e:
        raise RenderError(f"rendered module for '{package_name}' does not compile: {e}") from e
    return src


__all__ = ["EmissionRecord", "emit", "HEADER"]
