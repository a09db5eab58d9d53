"""Exception hierarchy for keybake.

Library code raises these; only the CLI catches them and turns them into an
exit status.
"""


class KeybakeError(Exception):
    """Base exception for all keybake errors."""


class SpecError(KeybakeError):
    """Raised when a key spec string cannot be turned into a KeySpec."""


class MalformedSpec(SpecError):
    """Raised when a key spec does not have exactly three fields."""


class UnsupportedAlgorithm(SpecError):
    """Raised when a key spec names an algorithm tag that is not registered."""


class InvalidParameter(SpecError):
    """Raised when the algorithm parameter of a key spec cannot be parsed."""


class DuplicateIdentifier(SpecError):
    """Raised when two key specs in one run bind the same identifier."""


class GenerationError(KeybakeError):
    """Raised when the key-generation primitive refuses or fails."""


class EncodingError(KeybakeError):
    """Raised when key material cannot be armored or de-armored."""


class RenderError(KeybakeError):
    """Raised when the output module cannot be rendered."""


class ConfigError(KeybakeError):
    """Raised when configuration is unreadable or invalid."""


class OutputError(KeybakeError):
    """Raised when the rendered module cannot be written."""


__all__ = [
    "KeybakeError",
    "SpecError",
    "MalformedSpec",
    "UnsupportedAlgorithm",
    "InvalidParameter",
    "DuplicateIdentifier",
    "GenerationError",
    "EncodingError",
    "RenderError",
    "ConfigError",
    "OutputError",
]
