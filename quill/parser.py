"""Parser for the quill language.

Source text is parsed with a Lark LALR parser and the resulting parse tree
is transformed into the untyped AST of `quill.ast`. The grammar is
statement-terminated by semicolons and block-structured by keywords::

    LET greeting: String = "Hello";
    DEF main(): Integer DO
        print(greeting + ", World!");
        RETURN 0;
    END

`parse_source` is the public entry point. Every syntax error, whether raised
by the lexer or the parser, surfaces as a `quill.errors.ParseError`.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Optional

from lark import Lark, Transformer
from lark.exceptions import LarkError, VisitError

from .ast import (
    Access, Assignment, Binary, Call, Declaration, ExpressionStmt, Field,
    For, Group, If, Literal, Method, Return, Source, While,
)
from .errors import ParseError, QuillError
from .types import Char


QUILL_GRAMMAR = r"""
    start: field* method*

    field: "LET" NAME [":" NAME] ["=" expression] ";"
    method: "DEF" NAME "(" [parameters] ")" [":" NAME] "DO" block "END"
    parameters: parameter ("," parameter)*
    parameter: NAME ":" NAME

    block: statement*
    ?statement: declaration
              | if_stmt
              | for_stmt
              | while_stmt
              | return_stmt
              | expression_stmt

    declaration: "LET" NAME [":" NAME] ["=" expression] ";"
    if_stmt: "IF" expression "DO" block ["ELSE" block] "END"
    for_stmt: "FOR" NAME "IN" expression "DO" block "END"
    while_stmt: "WHILE" expression "DO" block "END"
    return_stmt: "RETURN" expression ";"
    expression_stmt: expression ["=" expression] ";"

    // Expressions, loosest binding first
    ?expression: logical_expr
    ?logical_expr: comparison_expr
                 | logical_expr "AND" comparison_expr -> and_expr
                 | logical_expr "OR" comparison_expr -> or_expr
    ?comparison_expr: additive_expr
                    | comparison_expr COMPARISON_OP additive_expr -> binary
    ?additive_expr: multiplicative_expr
                  | additive_expr ADDITIVE_OP multiplicative_expr -> binary
    ?multiplicative_expr: secondary_expr
                        | multiplicative_expr MULTIPLICATIVE_OP secondary_expr -> binary
    ?secondary_expr: primary_expr
                   | secondary_expr "." NAME -> field_access
                   | secondary_expr "." NAME "(" [arguments] ")" -> method_call
    ?primary_expr: "NIL" -> nil
                 | "TRUE" -> true
                 | "FALSE" -> false
                 | INTEGER -> integer
                 | DECIMAL -> decimal
                 | CHARACTER -> character
                 | STRING -> string
                 | "(" expression ")" -> group
                 | NAME -> access
                 | NAME "(" [arguments] ")" -> call
    arguments: expression ("," expression)*

    // Tokens
    COMPARISON_OP: "<=" | ">=" | "==" | "!=" | "<" | ">"
    ADDITIVE_OP: "+" | "-"
    MULTIPLICATIVE_OP: "*" | "/"
    NAME: /[A-Za-z_][A-Za-z0-9_]*/
    DECIMAL.2: /[+-]?[0-9]+\.[0-9]+/
    INTEGER: /[+-]?[0-9]+/
    CHARACTER: /'(?:[^'\\\n\r]|\\[bnrt'"\\])'/
    STRING: /"(?:[^"\\\n\r]|\\[bnrt'"\\])*"/

    %import common.WS
    %ignore WS
"""


QUILL_PARSER = Lark(
    QUILL_GRAMMAR,
    parser='lalr',
    propagate_positions=True,
    maybe_placeholders=True,
)

ESCAPE_SEQUENCE = re.compile(r'\\(.)')
UNESCAPES = {'b': '\b', 'n': '\n', 'r': '\r', 't': '\t', "'": "'", '"': '"', '\\': '\\'}


def unescape(body: str) -> str:
    return ESCAPE_SEQUENCE.sub(lambda m: UNESCAPES[m.group(1)], body)


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def start(self, items):
        fields = [item for item in items if isinstance(item, Field)]
        methods = [item for item in items if isinstance(item, Method)]
        return Source(fields=fields, methods=methods)

    def field(self, items):
        name, type_name, value = items
        return Field(str(name), self._optional_name(type_name), value)

    def method(self, items):
        name, parameters, return_type_name, statements = items
        parameters = parameters or []
        return Method(
            name=str(name),
            parameters=[p_name for p_name, _ in parameters],
            parameter_type_names=[p_type for _, p_type in parameters],
            return_type_name=self._optional_name(return_type_name),
            statements=statements,
        )

    def parameters(self, items):
        return list(items)

    def parameter(self, items):
        return str(items[0]), str(items[1])

    def block(self, items):
        return list(items)

    def declaration(self, items):
        name, type_name, value = items
        return Declaration(str(name), self._optional_name(type_name), value)

    def if_stmt(self, items):
        condition, then_statements, else_statements = items
        return If(condition, then_statements, else_statements or [])

    def for_stmt(self, items):
        name, value, statements = items
        return For(str(name), value, statements)

    def while_stmt(self, items):
        return While(items[0], items[1])

    def return_stmt(self, items):
        return Return(items[0])

    def expression_stmt(self, items):
        expression, value = items
        if value is None:
            return ExpressionStmt(expression)
        return Assignment(expression, value)

    # Expressions
    def and_expr(self, items):
        return Binary('AND', items[0], items[1])

    def or_expr(self, items):
        return Binary('OR', items[0], items[1])

    def binary(self, items):
        left, operator, right = items
        return Binary(str(operator), left, right)

    def field_access(self, items):
        return Access(items[0], str(items[1]))

    def method_call(self, items):
        receiver, name, arguments = items
        return Call(receiver, str(name), arguments or [])

    def access(self, items):
        return Access(None, str(items[0]))

    def call(self, items):
        name, arguments = items
        return Call(None, str(name), arguments or [])

    def arguments(self, items):
        return list(items)

    def group(self, items):
        return Group(items[0])

    def nil(self, items):
        return Literal(None)

    def true(self, items):
        return Literal(True)

    def false(self, items):
        return Literal(False)

    def integer(self, items):
        return Literal(int(items[0]))

    def decimal(self, items):
        return Literal(Decimal(str(items[0])))

    def character(self, items):
        return Literal(Char(unescape(items[0][1:-1])))

    def string(self, items):
        return Literal(unescape(items[0][1:-1]))

    @staticmethod
    def _optional_name(token) -> Optional[str]:
        return str(token) if token is not None else None


def parse_source(source: str) -> Source:
    """Parse quill source text into a `Source` AST."""
    try:
        tree = QUILL_PARSER.parse(source)
        return ASTTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, QuillError):
            raise e.orig_exc
        raise ParseError(str(e.orig_exc)) from e
    except LarkError as e:
        raise ParseError(str(e)) from e


def parse_file(file_path: str) -> Source:
    """Read and parse a quill source file."""
    with open(file_path, 'r', encoding='utf-8') as f:
        return parse_source(f.read())
