"""Tree-walking interpreter for quill.

The interpreter executes an untyped `Source` directly. It does not read the
analyzer's decorations: every operation re-checks the native classes of its
operands and raises on anything it cannot carry out, so a tree that was never
analyzed still fails loudly rather than silently misbehaving.

Statements return `None`, or a `ReturnSignal` when a RETURN was executed;
statement sequences stop at the first signal and hand it outward until the
enclosing method call unwraps it.
"""

from __future__ import annotations

from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, Context, Decimal
from fractions import Fraction
from typing import List, Optional, Union

from .analyzer import is_entry_point
from .ast import (
    Access, Assignment, Binary, Call, Declaration, Expr, ExpressionStmt,
    Field, For, Group, If, Literal, Method, Return, Source, Stmt, While,
)
from .debug import DebugLog
from .errors import (
    DivisionByZeroError, InternalConsistencyError, MissingEntryPointError,
    ReturnSignal, TypeMismatchError,
)
from .scope import Scope
from .std import populate_globals
from .types import Char, TypeRegistry, Value, to_string

# Wide enough that +, - and * on Decimals never round.
DECIMAL_CONTEXT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN)
ORDERED_CLASSES = (int, Decimal, str, Char, bool)


def divide_decimal(a: Decimal, b: Decimal) -> Decimal:
    """Divide keeping the dividend's scale, rounding half to even."""
    exponent = a.as_tuple().exponent
    quotient = Fraction(a) / Fraction(b) / Fraction(10) ** exponent
    # round() on a Fraction rounds half to even
    return Decimal(f"{round(quotient)}E{exponent}")


class Interpreter:
    """Core interpreter that executes a quill `Source`."""
    def __init__(self, registry: TypeRegistry, parent: Optional[Scope] = None,
                 debug_level: int = 0, debug_file: Optional[str] = 'debug.txt'):
        self.types = registry
        self.scope = populate_globals(Scope(parent), registry)
        self.log = DebugLog(debug_level, debug_file)

    # Public API
    def run(self, source: Source) -> Value:
        """Define the program's fields and methods, then call `main()`."""
        if not any(is_entry_point(method) for method in source.methods):
            raise MissingEntryPointError('a method main() with return type Integer is required')
        try:
            program = Scope(self.scope)
            for field in source.fields:
                self.declare(field, program)
            for method in source.methods:
                self.define_method(method, program)
            self.log.debug(1, 'call main')
            return program.lookup_function('main', 0).invoke([])
        finally:
            self.log.close()

    def declare(self, node: Union[Field, Declaration], scope: Scope):
        value = self.evaluate(node.value, scope) if node.value is not None else self.types.nil_value
        scope.define_variable(node.name, self.types.any, value)
        self.log.debug(2, f"declare {node.name} = {to_string(value.datum)}")

    def define_method(self, method: Method, scope: Scope):
        # `scope` is captured: method bodies resolve free names where they were defined
        def invoke(args: List[Value]) -> Value:
            call_scope = Scope(scope)
            for name, arg in zip(method.parameters, args):
                call_scope.define_variable(name, self.types.any, arg)
            self.log.debug(1, f"enter {method.name}/{len(args)}")
            result = self.execute_block(method.statements, call_scope)
            if isinstance(result, ReturnSignal):
                return result.value
            return self.types.nil_value

        parameter_types = [self.types.any] * len(method.parameters)
        scope.define_function(method.name, parameter_types, self.types.any, invoke)

    def execute_block(self, statements: List[Stmt], scope: Scope) -> Optional[ReturnSignal]:
        for stmt in statements:
            result = self.execute(stmt, scope)
            if isinstance(result, ReturnSignal):
                return result
        return None

    def execute(self, node: Stmt, scope: Scope) -> Optional[ReturnSignal]:
        if isinstance(node, ExpressionStmt):
            self.evaluate(node.expression, scope)
            return None
        if isinstance(node, Declaration):
            self.declare(node, scope)
            return None
        if isinstance(node, Assignment):
            self.assign(node.receiver, node.value, scope)
            return None
        if isinstance(node, If):
            condition = self.require_boolean(self.evaluate(node.condition, scope), 'IF')
            self.log.debug(3, f"if condition -> {to_string(condition)}")
            branch = node.then_statements if condition else node.else_statements
            return self.execute_block(branch, Scope(scope))
        if isinstance(node, For):
            items = self.evaluate(node.value, scope).datum
            if not isinstance(items, (list, tuple)):
                raise TypeMismatchError(f'FOR cannot iterate over {to_string(items)}')
            for item in items:
                if not isinstance(item, Value):
                    raise TypeMismatchError(f'FOR item {item!r} is not a quill value')
                body_scope = Scope(scope)
                body_scope.define_variable(node.name, self.types.any, item)
                result = self.execute_block(node.statements, body_scope)
                if isinstance(result, ReturnSignal):
                    return result
            return None
        if isinstance(node, While):
            while self.require_boolean(self.evaluate(node.condition, scope), 'WHILE'):
                result = self.execute_block(node.statements, Scope(scope))
                if isinstance(result, ReturnSignal):
                    return result
            return None
        if isinstance(node, Return):
            return ReturnSignal(self.evaluate(node.value, scope))
        raise InternalConsistencyError(f'execute: unexpected node type {type(node).__name__}')

    def assign(self, target: Expr, value_node: Expr, scope: Scope):
        if not isinstance(target, Access):
            raise TypeMismatchError('the target of an assignment must be a variable or field')
        if target.receiver is not None:
            receiver = self.evaluate(target.receiver, scope)
            receiver.set_field(target.name, self.evaluate(value_node, scope))
        else:
            variable = scope.lookup_variable(target.name)
            variable.value = self.evaluate(value_node, scope)

    def require_boolean(self, value: Value, keyword: str) -> bool:
        if type(value.datum) is not bool:
            raise TypeMismatchError(f'{keyword} requires a Boolean, got {to_string(value.datum)}')
        return value.datum

    def evaluate(self, node: Expr, scope: Scope) -> Value:
        if isinstance(node, Literal):
            return self.types.create(node.literal)
        if isinstance(node, Group):
            return self.evaluate(node.expression, scope)
        if isinstance(node, Binary):
            left = self.evaluate(node.left, scope)
            # short-circuit for AND and OR
            if node.operator == 'AND':
                if not self.require_boolean(left, 'AND'):
                    return self.types.create(False)
                return self.types.create(self.require_boolean(self.evaluate(node.right, scope), 'AND'))
            if node.operator == 'OR':
                if self.require_boolean(left, 'OR'):
                    return self.types.create(True)
                return self.types.create(self.require_boolean(self.evaluate(node.right, scope), 'OR'))
            right = self.evaluate(node.right, scope)
            result = self.apply_binary_op(node.operator, left, right)
            self.log.debug(3, f"{to_string(left.datum)} {node.operator} {to_string(right.datum)} "
                              f"-> {to_string(result.datum)}")
            return result
        if isinstance(node, Access):
            if node.receiver is not None:
                return self.evaluate(node.receiver, scope).get_field(node.name).value
            return scope.lookup_variable(node.name).value
        if isinstance(node, Call):
            if node.receiver is not None:
                receiver = self.evaluate(node.receiver, scope)
                args = [self.evaluate(arg, scope) for arg in node.arguments]
                return receiver.call_method(node.name, args)
            function = scope.lookup_function(node.name, len(node.arguments))
            args = [self.evaluate(arg, scope) for arg in node.arguments]
            return function.invoke(args)
        raise InternalConsistencyError(f'evaluate: unexpected node type {type(node).__name__}')

    def apply_binary_op(self, op: str, left: Value, right: Value) -> Value:
        a, b = left.datum, right.datum
        if op == '+' and (type(a) is str or type(b) is str):
            return self.types.create(to_string(a) + to_string(b))
        if op in ('+', '-', '*', '/'):
            if type(a) is int and type(b) is int:
                return self.types.create(self.integer_op(op, a, b))
            if type(a) is Decimal and type(b) is Decimal:
                return self.types.create(self.decimal_op(op, a, b))
            raise TypeMismatchError(f'unsupported {op} for {left.type.name} and {right.type.name}')
        if op in ('==', '!='):
            equal = type(a) is type(b) and a == b
            if equal and type(a) is Decimal:
                # decimals are equal only at the same scale
                equal = a.as_tuple().exponent == b.as_tuple().exponent
            return self.types.create(equal if op == '==' else not equal)
        if op in ('<', '<=', '>', '>='):
            if type(a) is not type(b) or type(a) not in ORDERED_CLASSES:
                raise TypeMismatchError(f'cannot order {left.type.name} and {right.type.name}')
            if op == '<': return self.types.create(a < b)
            if op == '<=': return self.types.create(a <= b)
            if op == '>': return self.types.create(a > b)
            return self.types.create(a >= b)
        raise TypeMismatchError(f'unknown operator {op}')

    @staticmethod
    def integer_op(op: str, a: int, b: int) -> int:
        if op == '+': return a + b
        if op == '-': return a - b
        if op == '*': return a * b
        if b == 0:
            raise DivisionByZeroError(f'{a} / 0')
        # integer division truncating toward zero
        quotient = abs(a) // abs(b)
        return quotient if (a < 0) == (b < 0) else -quotient

    @staticmethod
    def decimal_op(op: str, a: Decimal, b: Decimal) -> Decimal:
        if op == '+': return DECIMAL_CONTEXT.add(a, b)
        if op == '-': return DECIMAL_CONTEXT.subtract(a, b)
        if op == '*': return DECIMAL_CONTEXT.multiply(a, b)
        if b.is_zero():
            raise DivisionByZeroError(f'{a} / {b}')
        return divide_decimal(a, b)
