"""Java source generator for quill.

`Generator.generate` renders an analyzed `Source` as a single Java class.
Every type, variable and function spelling comes from the `target_name`
recorded in the analyzer's decorations, so the generator never guesses: a
node the analyzer did not decorate raises `InternalConsistencyError`.
"""

from __future__ import annotations

import io
from typing import List

from .ast import (
    Access, Assignment, Binary, Call, Declaration, Expr, ExpressionStmt,
    Field, For, Group, If, Literal, Method, Node, Return, Source, Stmt, While,
)
from .decorations import Decorations
from .errors import InternalConsistencyError
from .types import TypeRegistry

OPERATOR_SPELLINGS = {'AND': '&&', 'OR': '||'}
ESCAPES = {
    '\\': '\\\\', '"': '\\"', "'": "\\'",
    '\b': '\\b', '\n': '\\n', '\r': '\\r', '\t': '\\t',
}


def escape(text: str, quote: str) -> str:
    """Escape `text` for a Java literal delimited by `quote`."""
    out = []
    for ch in text:
        if ch in ('"', "'") and ch != quote:
            out.append(ch)
        else:
            out.append(ESCAPES.get(ch, ch))
    return ''.join(out)


class Generator:
    def __init__(self, registry: TypeRegistry, decorations: Decorations,
                 class_name: str = 'Main', indent_width: int = 4):
        self.types = registry
        self.decorations = decorations
        self.class_name = class_name
        self.indent_width = indent_width
        self.out = io.StringIO()
        self.indent = 0

    def generate(self, source: Source) -> str:
        self.out = io.StringIO()
        self.indent = 0
        self.visit_source(source)
        return self.out.getvalue()

    def render(self, node: Node) -> str:
        """Render a single statement or expression; used for fragments."""
        self.out = io.StringIO()
        self.indent = 0
        self.emit(node)
        return self.out.getvalue()

    def print(self, *objects):
        for obj in objects:
            if isinstance(obj, Node):
                self.emit(obj)
            else:
                self.out.write(str(obj))

    def newline(self, indent: int):
        self.out.write('\n' + ' ' * (self.indent_width * indent))

    def emit(self, node: Node):
        if isinstance(node, Stmt):
            self.visit_stmt(node)
        elif isinstance(node, Expr):
            self.visit_expr(node)
        elif isinstance(node, Field):
            self.visit_declaration(node)
        elif isinstance(node, Method):
            self.visit_method(node)
        else:
            raise InternalConsistencyError(f'generate: unexpected node type {type(node).__name__}')

    def visit_source(self, source: Source):
        self.print(f'public class {self.class_name} {{')
        self.newline(0)
        self.indent = 1
        if source.fields:
            for field in source.fields:
                self.newline(self.indent)
                self.emit(field)
            self.newline(0)
        self.newline(self.indent)
        self.print('public static void main(String[] args) {')
        self.newline(self.indent + 1)
        self.print(f'System.exit(new {self.class_name}().main());')
        self.newline(self.indent)
        self.print('}')
        for method in source.methods:
            self.newline(0)
            self.newline(self.indent)
            self.emit(method)
        self.newline(0)
        self.newline(0)
        self.print('}')
        self.indent = 0

    def visit_method(self, method: Method):
        function = self.decorations.function_of(method)
        parameters = ', '.join(
            f'{parameter_type.target_name} {name}'
            for parameter_type, name in zip(function.parameter_types, method.parameters))
        # Java methods without a result need the `void` keyword, not the boxed type.
        return_type = 'void' if function.return_type is self.types.nil else function.return_type.target_name
        self.print(return_type, ' ', function.target_name, '(', parameters, ') {')
        self.block(method.statements)

    def block(self, statements: List[Stmt], close: bool = True):
        """Emit statements one level deeper; an empty block stays `{}`."""
        if statements:
            self.indent += 1
            for stmt in statements:
                self.newline(self.indent)
                self.emit(stmt)
            self.indent -= 1
            self.newline(self.indent)
        if close:
            self.print('}')

    def visit_declaration(self, node):
        variable = self.decorations.variable_of(node)
        self.print(variable.type.target_name, ' ', variable.target_name)
        if node.value is not None:
            self.print(' = ', node.value)
        self.print(';')

    def visit_stmt(self, node: Stmt):
        if isinstance(node, ExpressionStmt):
            self.print(node.expression, ';')
        elif isinstance(node, Declaration):
            self.visit_declaration(node)
        elif isinstance(node, Assignment):
            self.print(node.receiver, ' = ', node.value, ';')
        elif isinstance(node, If):
            self.print('if (', node.condition, ') {')
            if node.else_statements:
                self.block(node.then_statements, close=False)
                if not node.then_statements:
                    self.newline(self.indent)
                self.print('} else {')
                self.block(node.else_statements)
            else:
                self.block(node.then_statements)
        elif isinstance(node, For):
            self.print('for (int ', node.name, ' : ', node.value, ') {')
            self.block(node.statements)
        elif isinstance(node, While):
            self.print('while (', node.condition, ') {')
            self.block(node.statements)
        elif isinstance(node, Return):
            self.print('return ', node.value, ';')
        else:
            raise InternalConsistencyError(f'generate: unexpected statement {type(node).__name__}')

    def visit_expr(self, node: Expr):
        if isinstance(node, Literal):
            self.print(self.literal(node))
        elif isinstance(node, Group):
            self.print('(', node.expression, ')')
        elif isinstance(node, Binary):
            operator = OPERATOR_SPELLINGS.get(node.operator, node.operator)
            self.print(node.left, f' {operator} ', node.right)
        elif isinstance(node, Access):
            variable = self.decorations.variable_of(node)
            if node.receiver is not None:
                self.print(node.receiver, '.')
            self.print(variable.target_name)
        elif isinstance(node, Call):
            function = self.decorations.function_of(node)
            if node.receiver is not None:
                self.print(node.receiver, '.')
            self.print(function.target_name, '(')
            for index, argument in enumerate(node.arguments):
                if index:
                    self.print(', ')
                self.print(argument)
            self.print(')')
        else:
            raise InternalConsistencyError(f'generate: unexpected expression {type(node).__name__}')

    def literal(self, node: Literal) -> str:
        literal_type = self.decorations.type_of(node)
        value = node.literal
        if literal_type is self.types.nil:
            return 'null'
        if literal_type is self.types.boolean:
            return 'true' if value else 'false'
        if literal_type is self.types.character:
            return "'" + escape(value, "'") + "'"
        if literal_type is self.types.string:
            return '"' + escape(value, '"') + '"'
        if literal_type is self.types.integer or literal_type is self.types.decimal:
            return str(value)
        raise InternalConsistencyError(f'literal of type {literal_type.name} cannot be generated')
