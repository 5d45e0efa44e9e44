from decimal import Decimal

import pytest

from quill.ast import Access, Binary, Call, Literal
from quill.errors import (
    BoundsError, DivisionByZeroError, MissingEntryPointError, TypeMismatchError,
    UnknownSymbolError,
)
from quill.interpreter import Interpreter, divide_decimal
from quill.parser import parse_source
from quill.scope import Scope
from quill.std import create_registry
from quill.types import Char


def run(source, registry=None, parent=None):
    registry = registry or create_registry()
    return Interpreter(registry, parent).run(parse_source(source))


def main_returning(statements):
    return 'DEF main(): Integer DO ' + statements + ' END'


def evaluate(expr):
    interpreter = Interpreter(create_registry())
    return interpreter.evaluate(expr, Scope(interpreter.scope)).datum


def test_main_value_is_returned():
    assert run(main_returning('RETURN 1 + 1;')).datum == 2


def test_missing_main():
    with pytest.raises(MissingEntryPointError):
        run('DEF helper(): Integer DO RETURN 1; END')


def test_integer_division_truncates_toward_zero():
    assert evaluate(Binary('/', Literal(7), Literal(2))) == 3
    assert evaluate(Binary('/', Literal(-7), Literal(2))) == -3
    assert evaluate(Binary('/', Literal(7), Literal(-2))) == -3
    with pytest.raises(DivisionByZeroError):
        evaluate(Binary('/', Literal(5), Literal(0)))


def test_decimal_arithmetic():
    assert evaluate(Binary('+', Literal(Decimal('0.1')), Literal(Decimal('0.2')))) == Decimal('0.3')
    assert evaluate(Binary('*', Literal(Decimal('1.5')), Literal(Decimal('2.0')))) == Decimal('3.00')
    assert str(evaluate(Binary('/', Literal(Decimal('1.2')), Literal(Decimal('3.4'))))) == '0.4'
    with pytest.raises(DivisionByZeroError):
        evaluate(Binary('/', Literal(Decimal('1.0')), Literal(Decimal('0.0'))))


def test_decimal_division_rounds_half_even_at_dividend_scale():
    assert str(divide_decimal(Decimal('3.75'), Decimal('2'))) == '1.88'
    assert str(divide_decimal(Decimal('0.5'), Decimal('2'))) == '0.2'
    assert str(divide_decimal(Decimal('10'), Decimal('4'))) == '2'


def test_mixed_arithmetic_fails():
    with pytest.raises(TypeMismatchError):
        evaluate(Binary('+', Literal(1), Literal(Decimal('1.0'))))
    with pytest.raises(TypeMismatchError):
        evaluate(Binary('-', Literal('a'), Literal(1)))


def test_concatenation_uses_display_forms():
    assert evaluate(Binary('+', Literal('x = '), Literal(True))) == 'x = true'
    assert evaluate(Binary('+', Literal(1), Literal('!'))) == '1!'
    assert evaluate(Binary('+', Literal('v'), Literal(None))) == 'vnil'


def test_equality_requires_same_class():
    assert evaluate(Binary('==', Literal(1), Literal(1))) is True
    assert evaluate(Binary('==', Literal(1), Literal(Decimal('1')))) is False
    assert evaluate(Binary('!=', Literal(Char('a')), Literal('a'))) is True
    assert evaluate(Binary('==', Literal(None), Literal(None))) is True


def test_decimal_equality_includes_scale():
    assert evaluate(Binary('==', Literal(Decimal('2.0')), Literal(Decimal('2.0')))) is True
    assert evaluate(Binary('==', Literal(Decimal('2.0')), Literal(Decimal('2.00')))) is False
    assert evaluate(Binary('!=', Literal(Decimal('2.0')), Literal(Decimal('2.00')))) is True


def test_ordering():
    assert evaluate(Binary('<', Literal('abc'), Literal('abd'))) is True
    assert evaluate(Binary('>=', Literal(Decimal('2.0')), Literal(Decimal('2.00')))) is True
    with pytest.raises(TypeMismatchError):
        evaluate(Binary('<', Literal(1), Literal(Decimal('2.0'))))
    with pytest.raises(TypeMismatchError):
        evaluate(Binary('<', Literal(None), Literal(None)))


def test_logical_operators_short_circuit():
    missing = Access(None, 'undefined')
    assert evaluate(Binary('AND', Literal(False), missing)) is False
    assert evaluate(Binary('OR', Literal(True), missing)) is True
    with pytest.raises(UnknownSymbolError):
        evaluate(Binary('AND', Literal(True), missing))
    with pytest.raises(TypeMismatchError):
        evaluate(Binary('AND', Literal(1), Literal(True)))


def test_print_writes_display_form(capsys):
    run(main_returning('print(TRUE); print(NIL); print(1.50); print(\'c\'); RETURN 0;'))
    assert capsys.readouterr().out == 'true\nnil\n1.50\nc\n'


def test_string_members():
    assert evaluate(Call(Literal('abc'), 'slice', [Literal(1), Literal(2)])) == 'b'
    assert evaluate(Access(Literal('abc'), 'length')) == 3
    assert evaluate(Call(Literal(4), 'stringify', [])) == '4'
    assert evaluate(Call(Literal(2), 'compare', [Literal(5)])) == -1
    with pytest.raises(BoundsError):
        evaluate(Call(Literal('abc'), 'slice', [Literal(2), Literal(5)]))


def test_for_loop_over_integer_iterable(capsys):
    registry = create_registry()
    parent = Scope()
    parent.define_function('range', [registry.integer, registry.integer], registry.integer_iterable,
                           lambda args: registry.create([registry.create(i) for i in range(args[0].datum, args[1].datum)]))
    result = run(main_returning('LET sum = 0; FOR i IN range(1, 4) DO sum = sum + i; print(i); END RETURN sum;'),
                 registry, parent)
    assert result.datum == 6
    assert capsys.readouterr().out == '1\n2\n3\n'


def test_return_from_inside_loops():
    source = main_returning('LET n = 0; WHILE TRUE DO n = n + 1; IF n == 3 DO RETURN n; END END RETURN -1;')
    assert run(source).datum == 3


def test_falling_off_a_method_yields_nil():
    registry = create_registry()
    result = run('DEF nothing() DO print("x"); END DEF main(): Integer DO RETURN nothing(); END', registry)
    assert result is registry.nil_value


def test_fields_are_shared_by_methods():
    source = ('LET counter = 0; '
              'DEF bump() DO counter = counter + 1; END '
              + main_returning('bump(); bump(); RETURN counter;'))
    assert run(source).datum == 2


def test_block_scopes_are_fresh_each_iteration():
    source = main_returning('LET n = 0; WHILE n < 2 DO LET local = n; n = n + 1; END RETURN n;')
    assert run(source).datum == 2


def test_methods_resolve_names_where_they_were_defined():
    source = ('LET x = 1; '
              'DEF read(): Integer DO RETURN x; END '
              + main_returning('LET x = 99; RETURN read();'))
    assert run(source).datum == 1


def test_condition_must_be_boolean_at_runtime():
    with pytest.raises(TypeMismatchError):
        run(main_returning('IF 1 DO RETURN 1; END RETURN 0;'))


def test_debug_trace(tmp_path):
    trace = tmp_path / 'trace.txt'
    registry = create_registry()
    Interpreter(registry, debug_level=3, debug_file=str(trace)).run(parse_source(main_returning('RETURN 2 * 3;')))
    lines = trace.read_text(encoding='utf-8').splitlines()
    assert lines[0] == 'call main'
    assert '2 * 3 -> 6' in lines
