"""Type lattice and runtime values for quill.

This module defines the nominal `Type` descriptor, the runtime `Value`
wrapper and the `TypeRegistry` that owns the built-in lattice::

    Any
     |- Nil
     |- IntegerIterable
     |- Boolean
     `- Comparable
         |- Integer
         |- Decimal
         |- Character
         `- String

Types are compared by identity. Each type carries a member `Scope` whose
parent is the member scope of its supertype, so members declared on `Any`
(such as `stringify`) are visible on every type.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .errors import ConfigurationError, TypeMismatchError, UnknownSymbolError
from .scope import Function, Scope, Variable

INTEGER_MIN = -2 ** 31
INTEGER_MAX = 2 ** 31 - 1
# Decimal(float) is exact, so this is the largest finite double to the digit.
DECIMAL_MAX = Decimal(sys.float_info.max)

# (name, target spelling, supertype)
BUILTIN_TYPES = (
    ('Any', 'Object', None),
    ('Nil', 'Void', 'Any'),
    ('IntegerIterable', 'Iterable<Integer>', 'Any'),
    ('Comparable', 'Comparable', 'Any'),
    ('Boolean', 'boolean', 'Any'),
    ('Integer', 'int', 'Comparable'),
    ('Decimal', 'double', 'Comparable'),
    ('Character', 'char', 'Comparable'),
    ('String', 'String', 'Comparable'),
)


class Char(str):
    """A single character.

    Python has no character type, so Character literals and values use this
    `str` subclass. Checks that care about the difference test `Char` before
    `str`.
    """
    def __new__(cls, value: str):
        if len(value) != 1:
            raise TypeMismatchError(f'a Character holds exactly one character, got {value!r}')
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"Char({str.__repr__(self)})"


@dataclass(eq=False)
class Type:
    """A nominal type: unique name, target-language spelling, member scope."""
    name: str
    target_name: str
    scope: Scope

    def get_field(self, name: str) -> Variable:
        return self.scope.lookup_variable(name)

    def get_method(self, name: str, arity: int) -> Function:
        # Methods are stored with the receiver as an extra leading parameter.
        return self.scope.lookup_function(name, arity + 1)

    def __repr__(self) -> str:
        return self.name


@dataclass(eq=False)
class Value:
    """A runtime value: owning type, native datum and member scope."""
    type: Type
    datum: Any
    scope: Optional[Scope] = None

    def __post_init__(self):
        if self.scope is None:
            self.scope = self.type.scope

    def get_field(self, name: str) -> Variable:
        return self.scope.lookup_variable(name)

    def set_field(self, name: str, value: 'Value'):
        self.scope.lookup_variable(name).value = value

    def call_method(self, name: str, args: List['Value']) -> 'Value':
        method = self.scope.lookup_function(name, len(args) + 1)
        return method.invoke([self] + list(args))

    def __repr__(self) -> str:
        return f"Value({self.type.name}, {self.datum!r})"


def to_string(datum: Any) -> str:
    """Return the display form of a native datum, as `print` writes it."""
    if datum is None:
        return 'nil'
    if isinstance(datum, bool):
        return 'true' if datum else 'false'
    if isinstance(datum, (list, tuple)):
        return '[' + ', '.join(to_string(item.datum) for item in datum) + ']'
    return str(datum)


class TypeRegistry:
    """Registry of every type known to one analyzer/interpreter/generator run.

    A new registry already holds the built-in lattice, reachable both by name
    (`get`) and as attributes (`registry.integer`, `registry.any`, ...). It is
    populated before any pass starts and treated as read-only afterwards.
    """
    def __init__(self):
        self.types: Dict[str, Type] = {}
        for name, target_name, supertype in BUILTIN_TYPES:
            parent = self.types[supertype].scope if supertype else None
            self.register(Type(name, target_name, Scope(parent)))
        self.any = self.types['Any']
        self.nil = self.types['Nil']
        self.integer_iterable = self.types['IntegerIterable']
        self.comparable = self.types['Comparable']
        self.boolean = self.types['Boolean']
        self.integer = self.types['Integer']
        self.decimal = self.types['Decimal']
        self.character = self.types['Character']
        self.string = self.types['String']
        self.comparable_types = (self.integer, self.decimal, self.character, self.string)
        self.nil_value = Value(self.nil, None)

    def register(self, type: Type) -> Type:
        if type.name in self.types:
            raise ConfigurationError(f'duplicate registration of type {type.name}')
        self.types[type.name] = type
        return type

    def get(self, name: str) -> Type:
        if name not in self.types:
            raise UnknownSymbolError(f'unknown type {name}')
        return self.types[name]

    def is_assignable(self, target: Type, source: Type) -> bool:
        if target is source or target is self.any:
            return True
        if target is self.comparable:
            return any(source is t for t in self.comparable_types)
        return False

    def require_assignable(self, target: Type, source: Type):
        if not self.is_assignable(target, source):
            raise TypeMismatchError(f'expected {target.name}, received {source.name}')

    def type_of(self, datum: Any) -> Type:
        """Return the built-in type for a native datum."""
        if datum is None:
            return self.nil
        if isinstance(datum, bool):
            return self.boolean
        if isinstance(datum, int):
            return self.integer
        if isinstance(datum, Decimal):
            return self.decimal
        if isinstance(datum, Char):
            return self.character
        if isinstance(datum, str):
            return self.string
        if isinstance(datum, (list, tuple)):
            return self.integer_iterable
        raise TypeMismatchError(f'no quill type for native {type(datum).__name__}')

    def create(self, datum: Any) -> Value:
        """Wrap a native datum as a Value of its built-in type."""
        if datum is None:
            return self.nil_value
        value_type = self.type_of(datum)
        if value_type is self.string:
            members = Scope(self.string.scope)
            members.define_variable('length', self.integer, Value(self.integer, len(datum)), 'length()')
            return Value(value_type, datum, members)
        return Value(value_type, datum)
