from dataclasses import dataclass
from typing import Any


class QuillError(Exception):
    """Base type for every error raised by the quill core.

    Errors carry a human-readable message and render as ``Kind: message``.
    The first violated rule aborts the whole pass; nothing is collected.
    """
    kind = 'QuillError'

    def __init__(self, message: str):
        super().__init__(f"{self.kind}: {message}")
        self.message = message


class ConfigurationError(QuillError):
    """Duplicate registration of a type or symbol."""
    kind = 'ConfigurationError'


class DuplicateDefinitionError(ConfigurationError):
    """A name (or name/arity pair) redefined within one scope."""
    kind = 'DuplicateDefinitionError'


class UnknownSymbolError(QuillError):
    kind = 'UnknownSymbolError'


class TypeMismatchError(QuillError):
    kind = 'TypeMismatchError'


class LiteralOverflowError(QuillError):
    """A numeric literal outside the range of its type."""
    kind = 'LiteralOverflowError'


class ArityError(QuillError):
    """No overload of a known function matches the argument count."""
    kind = 'ArityError'


class DivisionByZeroError(QuillError):
    kind = 'DivisionByZeroError'


class MissingEntryPointError(QuillError):
    kind = 'MissingEntryPointError'


class InternalConsistencyError(QuillError):
    """An invariant of the core itself was broken (never a user error)."""
    kind = 'InternalConsistencyError'


class BoundsError(QuillError):
    kind = 'BoundsError'


class ParseError(QuillError):
    kind = 'ParseError'


@dataclass
class ReturnSignal:
    """Result of executing a RETURN; propagated up to the call boundary."""
    value: Any
