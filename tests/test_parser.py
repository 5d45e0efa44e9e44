from decimal import Decimal

import pytest

from quill.ast import (
    Access, Assignment, Binary, Call, Declaration, ExpressionStmt, Field, For,
    Group, If, Literal, Method, Return, Source, While,
)
from quill.errors import ParseError
from quill.parser import parse_file, parse_source
from quill.types import Char


def body(statements):
    return parse_source('DEF main(): Integer DO ' + statements + ' END').methods[0].statements


def expr(text):
    return body('RETURN ' + text + ';')[0].value


def test_fields_and_methods():
    source = parse_source('LET x: Integer = 1; LET y; DEF f(a: Integer, b: String): Decimal DO END DEF g() DO END')
    assert source == Source(
        fields=[Field('x', 'Integer', Literal(1)), Field('y')],
        methods=[
            Method('f', ['a', 'b'], ['Integer', 'String'], 'Decimal', []),
            Method('g'),
        ],
    )


def test_statements():
    statements = body('LET a = 1; a = 2; print(a); IF TRUE DO a = 3; ELSE a = 4; END '
                      'FOR i IN items DO print(i); END WHILE FALSE DO END RETURN a;')
    assert statements == [
        Declaration('a', None, Literal(1)),
        Assignment(Access(None, 'a'), Literal(2)),
        ExpressionStmt(Call(None, 'print', [Access(None, 'a')])),
        If(Literal(True), [Assignment(Access(None, 'a'), Literal(3))], [Assignment(Access(None, 'a'), Literal(4))]),
        For('i', Access(None, 'items'), [ExpressionStmt(Call(None, 'print', [Access(None, 'i')]))]),
        While(Literal(False), []),
        Return(Access(None, 'a')),
    ]


def test_literals():
    assert expr('NIL') == Literal(None)
    assert expr('FALSE') == Literal(False)
    assert expr('-12') == Literal(-12)
    assert expr('+3.50') == Literal(Decimal('3.50'))
    literal = expr("'\\t'").literal
    assert isinstance(literal, Char) and literal == '\t'
    assert expr('"a\\"b\\\\c\\n"') == Literal('a"b\\c\n')


def test_precedence_and_associativity():
    assert expr('1 + 2 * 3') == Binary('+', Literal(1), Binary('*', Literal(2), Literal(3)))
    assert expr('1 - 2 - 3') == Binary('-', Binary('-', Literal(1), Literal(2)), Literal(3))
    assert expr('a < b AND c OR d') == Binary(
        'OR', Binary('AND', Binary('<', Access(None, 'a'), Access(None, 'b')), Access(None, 'c')), Access(None, 'd'))
    assert expr('(1 + 2) * 3') == Binary('*', Group(Binary('+', Literal(1), Literal(2))), Literal(3))


def test_subtraction_without_spaces():
    assert expr('x-1') == Binary('-', Access(None, 'x'), Literal(1))


def test_member_access_and_calls():
    assert expr('"s".slice(1, 2).length') == Access(
        Call(Literal('s'), 'slice', [Literal(1), Literal(2)]), 'length')
    assert expr('obj.field') == Access(Access(None, 'obj'), 'field')
    assert expr('f()') == Call(None, 'f', [])


def test_names_may_start_with_keywords():
    assert expr('LETTER') == Access(None, 'LETTER')
    assert expr('ENDING + 1') == Binary('+', Access(None, 'ENDING'), Literal(1))


def test_syntax_errors():
    for text in ('LET x = 1', 'DEF main(): Integer DO RETURN 0; ', 'DEF main() DO 1 +; END', 'LET s = "open;'):
        with pytest.raises(ParseError):
            parse_source(text)


def test_parse_file(tmp_path):
    path = tmp_path / 'hello.quill'
    path.write_text('DEF main(): Integer DO print("héllo"); RETURN 0; END', encoding='utf-8')
    assert parse_file(str(path)) == Source(methods=[Method('main', [], [], 'Integer', [
        ExpressionStmt(Call(None, 'print', [Literal('héllo')])),
        Return(Literal(0)),
    ])])
