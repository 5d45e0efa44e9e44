"""Static analysis for quill.

The analyzer walks an untyped `Source` once, resolving every name against a
tree of analysis scopes, inferring the type of every expression and checking
the language's typing rules. Results are written to a `Decorations` table
that the interpreter-independent consumers (the generator in particular)
read afterwards.

The first violated rule raises; the analyzer never returns a partially
decorated tree.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Optional, Union

from .ast import (
    Access, Assignment, Binary, Call, Declaration, Expr, ExpressionStmt,
    Field, For, Group, If, Literal, Method, Return, Source, Stmt, While,
)
from .debug import DebugLog
from .decorations import Decorations
from .errors import (
    InternalConsistencyError, LiteralOverflowError, MissingEntryPointError,
    TypeMismatchError,
)
from .scope import Function, Scope
from .std import populate_globals
from .types import DECIMAL_MAX, INTEGER_MAX, INTEGER_MIN, Char, Type, TypeRegistry

LOGICAL_OPS = ('AND', 'OR')
RELATIONAL_OPS = ('<', '<=', '>', '>=', '==', '!=')
ARITHMETIC_OPS = ('+', '-', '*', '/')


def is_entry_point(method: Method) -> bool:
    """True for `DEF main(): Integer`, the method every program starts in."""
    return (method.name == 'main' and not method.parameters
            and not method.parameter_type_names and method.return_type_name == 'Integer')


def _analysis_only(args: List[Any]) -> Any:
    raise InternalConsistencyError('a function declared during analysis was invoked')


class Analyzer:
    """Type-checks and decorates one `Source`.

    `parent` may supply extra global bindings; the analyzer's own root scope
    is a child of it and holds the fixed globals such as `print`.
    """
    def __init__(self, registry: TypeRegistry, parent: Optional[Scope] = None,
                 debug_level: int = 0, debug_file: Optional[str] = 'debug.txt'):
        self.types = registry
        self.scope = populate_globals(Scope(parent), registry)
        self.decorations = Decorations()
        self.log = DebugLog(debug_level, debug_file)
        self.method: Optional[Function] = None

    def analyze(self, source: Source) -> Decorations:
        try:
            self.visit_source(source)
        finally:
            self.log.close()
        return self.decorations

    def visit_source(self, source: Source):
        if not any(is_entry_point(method) for method in source.methods):
            raise MissingEntryPointError('a method main() with return type Integer is required')
        for field in source.fields:
            self.declare(field, self.scope)
        for method in source.methods:
            self.visit_method(method, self.scope)

    def declare(self, node: Union[Field, Declaration], scope: Scope):
        """Shared rule for fields and LET statements."""
        if node.type_name is None and node.value is None:
            raise TypeMismatchError(f'declaration of {node.name} needs a type or an initial value')
        declared = self.types.get(node.type_name) if node.type_name is not None else None
        if node.value is not None:
            value_type = self.infer(node.value, scope)
            if declared is None:
                declared = value_type
            else:
                self.types.require_assignable(declared, value_type)
        variable = scope.define_variable(node.name, declared, self.types.nil_value)
        self.decorations.set_variable(node, variable)
        self.log.debug(2, f"declare {node.name}: {declared.name}")

    def visit_method(self, method: Method, scope: Scope):
        if len(method.parameters) != len(method.parameter_type_names):
            raise TypeMismatchError(f'method {method.name} needs one type name per parameter')
        parameter_types = [self.types.get(name) for name in method.parameter_type_names]
        return_type = self.types.nil
        if method.return_type_name is not None:
            return_type = self.types.get(method.return_type_name)
        # defined before the body is visited so the body may call itself
        function = scope.define_function(method.name, parameter_types, return_type, _analysis_only)
        self.decorations.set_function(method, function)
        self.log.debug(1, f"analyze method {method.name}/{function.arity}")

        body_scope = Scope(scope)
        for name, parameter_type in zip(method.parameters, parameter_types):
            body_scope.define_variable(name, parameter_type, self.types.nil_value)
        enclosing, self.method = self.method, function
        try:
            self.check_block(method.statements, body_scope)
        finally:
            self.method = enclosing

    def check_block(self, statements: List[Stmt], scope: Scope):
        for stmt in statements:
            self.check(stmt, scope)

    def check(self, node: Stmt, scope: Scope):
        if isinstance(node, ExpressionStmt):
            if not isinstance(node.expression, Call):
                raise TypeMismatchError('only function or method calls may be used as statements')
            self.infer(node.expression, scope)
            return
        if isinstance(node, Declaration):
            self.declare(node, scope)
            return
        if isinstance(node, Assignment):
            if not isinstance(node.receiver, Access):
                raise TypeMismatchError('the target of an assignment must be a variable or field')
            target = self.infer(node.receiver, scope)
            self.types.require_assignable(target, self.infer(node.value, scope))
            return
        if isinstance(node, If):
            self.require_condition(node.condition, scope, 'IF')
            if not node.then_statements:
                raise TypeMismatchError('IF requires at least one statement')
            self.check_block(node.then_statements, Scope(scope))
            self.check_block(node.else_statements, Scope(scope))
            return
        if isinstance(node, For):
            source_type = self.infer(node.value, scope)
            if source_type is not self.types.integer_iterable:
                raise TypeMismatchError(f'FOR requires an IntegerIterable, received {source_type.name}')
            if not node.statements:
                raise TypeMismatchError('FOR requires at least one statement')
            body_scope = Scope(scope)
            body_scope.define_variable(node.name, self.types.integer, self.types.nil_value)
            self.check_block(node.statements, body_scope)
            return
        if isinstance(node, While):
            self.require_condition(node.condition, scope, 'WHILE')
            self.check_block(node.statements, Scope(scope))
            return
        if isinstance(node, Return):
            if self.method is None:
                raise TypeMismatchError('RETURN outside of a method')
            value_type = self.infer(node.value, scope)
            if value_type is not self.method.return_type:
                raise TypeMismatchError(
                    f'{self.method.name} returns {self.method.return_type.name}, received {value_type.name}')
            return
        raise InternalConsistencyError(f'check: unexpected node type {type(node).__name__}')

    def require_condition(self, condition: Expr, scope: Scope, keyword: str):
        condition_type = self.infer(condition, scope)
        if condition_type is not self.types.boolean:
            raise TypeMismatchError(f'{keyword} condition must be Boolean, received {condition_type.name}')

    def infer(self, node: Expr, scope: Scope) -> Type:
        """Infer, check and record the type of an expression."""
        return self.decorations.set_type(node, self._infer(node, scope))

    def _infer(self, node: Expr, scope: Scope) -> Type:
        if isinstance(node, Literal):
            return self.literal_type(node.literal)
        if isinstance(node, Group):
            if not isinstance(node.expression, Binary):
                raise TypeMismatchError('parentheses may only group a binary expression')
            return self.infer(node.expression, scope)
        if isinstance(node, Binary):
            left = self.infer(node.left, scope)
            right = self.infer(node.right, scope)
            result = self.binary_type(node.operator, left, right)
            self.log.debug(3, f"{left.name} {node.operator} {right.name} -> {result.name}")
            return result
        if isinstance(node, Access):
            if node.receiver is not None:
                variable = self.infer(node.receiver, scope).get_field(node.name)
            else:
                variable = scope.lookup_variable(node.name)
            return self.decorations.set_variable(node, variable).type
        if isinstance(node, Call):
            offset = 0
            if node.receiver is not None:
                function = self.infer(node.receiver, scope).get_method(node.name, len(node.arguments))
                offset = 1  # parameter 0 is the receiver
            else:
                function = scope.lookup_function(node.name, len(node.arguments))
            for index, argument in enumerate(node.arguments):
                self.types.require_assignable(function.parameter_types[index + offset], self.infer(argument, scope))
            return self.decorations.set_function(node, function).return_type
        raise InternalConsistencyError(f'infer: unexpected node type {type(node).__name__}')

    def literal_type(self, literal: Any) -> Type:
        if literal is None:
            return self.types.nil
        if isinstance(literal, bool):
            return self.types.boolean
        if isinstance(literal, Char):
            return self.types.character
        if isinstance(literal, str):
            return self.types.string
        if isinstance(literal, int):
            if not INTEGER_MIN <= literal <= INTEGER_MAX:
                raise LiteralOverflowError(f'{literal} does not fit in an Integer')
            return self.types.integer
        if isinstance(literal, Decimal):
            if not literal.is_finite() or abs(literal) > DECIMAL_MAX:
                raise LiteralOverflowError(f'{literal} does not fit in a Decimal')
            return self.types.decimal
        raise TypeMismatchError(f'unsupported literal {literal!r}')

    def binary_type(self, operator: str, left: Type, right: Type) -> Type:
        types = self.types
        if operator in LOGICAL_OPS:
            if left is types.boolean and right is types.boolean:
                return types.boolean
            raise TypeMismatchError(f'{operator} requires Boolean operands, received {left.name} and {right.name}')
        if operator in RELATIONAL_OPS:
            types.require_assignable(types.comparable, left)
            types.require_assignable(types.comparable, right)
            if left is not right:
                raise TypeMismatchError(f'cannot compare {left.name} with {right.name}')
            return types.boolean
        if operator == '+' and (left is types.string or right is types.string):
            return types.string
        if operator in ARITHMETIC_OPS:
            if (left is types.integer or left is types.decimal) and right is left:
                return left
            raise TypeMismatchError(f'{operator} requires matching Integer or Decimal operands, '
                                    f'received {left.name} and {right.name}')
        raise TypeMismatchError(f'unknown operator {operator}')
