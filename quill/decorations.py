"""Write-once side table holding the analyzer's results.

The analyzer records the inferred `Type` of every expression and the
resolved `Variable` or `Function` of every declaration, access and call.
Entries are keyed by node identity. Each slot may be written exactly once,
and reading a slot that was never written is an internal error: it means a
consumer ran on a tree the analyzer did not finish.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from .ast import Node
from .errors import InternalConsistencyError
from .scope import Function, Variable
from .types import Type


class Decorations:
    def __init__(self):
        # id(node) -> (node, annotation); holding the node keeps its id stable
        self._types: Dict[int, Tuple[Node, Type]] = {}
        self._variables: Dict[int, Tuple[Node, Variable]] = {}
        self._functions: Dict[int, Tuple[Node, Function]] = {}

    @staticmethod
    def _write(table: Dict[int, Tuple[Node, Any]], slot: str, node: Node, annotation: Any):
        if id(node) in table:
            raise InternalConsistencyError(f'{slot} of {type(node).__name__} written twice')
        table[id(node)] = (node, annotation)

    @staticmethod
    def _read(table: Dict[int, Tuple[Node, Any]], slot: str, node: Node) -> Any:
        entry = table.get(id(node))
        if entry is None or entry[0] is not node:
            raise InternalConsistencyError(f'{slot} of {type(node).__name__} read before it was set')
        return entry[1]

    def set_type(self, node: Node, type: Type) -> Type:
        self._write(self._types, 'type', node, type)
        return type

    def type_of(self, node: Node) -> Type:
        return self._read(self._types, 'type', node)

    def set_variable(self, node: Node, variable: Variable) -> Variable:
        self._write(self._variables, 'variable', node, variable)
        return variable

    def variable_of(self, node: Node) -> Variable:
        return self._read(self._variables, 'variable', node)

    def set_function(self, node: Node, function: Function) -> Function:
        self._write(self._functions, 'function', node, function)
        return function

    def function_of(self, node: Node) -> Function:
        return self._read(self._functions, 'function', node)

