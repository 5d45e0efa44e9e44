"""Lexical scopes for the quill analyzer and interpreter.

A `Scope` maps names to `Variable` objects and (name, arity) pairs to
`Function` objects. Scopes form a tree through their parent reference and
lookups walk that chain outward. The analyzer and the interpreter each build
their own tree; the two never share Scope objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple

from .errors import ArityError, DuplicateDefinitionError, UnknownSymbolError

if TYPE_CHECKING:
    from .types import Type


@dataclass(eq=False)
class Variable:
    name: str
    type: 'Type'
    value: Any
    target_name: str = ''

    def __post_init__(self):
        if not self.target_name:
            self.target_name = self.name

    def __repr__(self) -> str:
        return f"<variable {self.name}: {self.type.name}>"


@dataclass(eq=False)
class Function:
    name: str
    parameter_types: List['Type']
    return_type: 'Type'
    body: Callable[[List[Any]], Any]
    target_name: str = ''

    def __post_init__(self):
        if not self.target_name:
            self.target_name = self.name

    @property
    def arity(self) -> int:
        return len(self.parameter_types)

    def invoke(self, args: List[Any]) -> Any:
        return self.body(args)

    def __repr__(self) -> str:
        return f"<function {self.name}/{self.arity}>"


class Scope:
    """A single lexical environment with a non-owning parent reference."""
    def __init__(self, parent: Optional['Scope'] = None):
        self.parent = parent
        self.variables: Dict[str, Variable] = {}
        self.functions: Dict[Tuple[str, int], Function] = {}

    def define_variable(self, name: str, type: 'Type', value: Any, target_name: str = '') -> Variable:
        if name in self.variables:
            raise DuplicateDefinitionError(f'variable {name} is already defined in this scope')
        variable = Variable(name, type, value, target_name)
        self.variables[name] = variable
        return variable

    def lookup_variable(self, name: str) -> Variable:
        scope: Optional[Scope] = self
        while scope is not None:
            if name in scope.variables:
                return scope.variables[name]
            scope = scope.parent
        raise UnknownSymbolError(f'variable {name} is not defined')

    def define_function(self, name: str, parameter_types: List['Type'], return_type: 'Type',
                        body: Callable[[List[Any]], Any], target_name: str = '') -> Function:
        key = (name, len(parameter_types))
        if key in self.functions:
            raise DuplicateDefinitionError(f'function {name}/{key[1]} is already defined in this scope')
        function = Function(name, list(parameter_types), return_type, body, target_name)
        self.functions[key] = function
        return function

    def lookup_function(self, name: str, arity: int) -> Function:
        other_arities: List[int] = []
        scope: Optional[Scope] = self
        while scope is not None:
            if (name, arity) in scope.functions:
                return scope.functions[(name, arity)]
            other_arities.extend(a for (n, a) in scope.functions if n == name)
            scope = scope.parent
        if other_arities:
            expected = ', '.join(str(a) for a in sorted(set(other_arities)))
            raise ArityError(f'function {name} takes {expected} arguments, not {arity}')
        raise UnknownSymbolError(f'function {name}/{arity} is not defined')

    def __repr__(self) -> str:
        return f"Scope(variables={sorted(self.variables)}, functions={sorted(self.functions)})"
