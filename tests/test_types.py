from decimal import Decimal

import pytest

from quill.errors import ConfigurationError, TypeMismatchError, UnknownSymbolError
from quill.scope import Scope
from quill.std import create_registry
from quill.types import Char, Type, TypeRegistry, to_string


def test_every_type_is_assignable_to_itself_and_any():
    registry = TypeRegistry()
    for t in registry.types.values():
        assert registry.is_assignable(t, t)
        assert registry.is_assignable(registry.any, t)


def test_any_is_not_assignable_to_concrete_types():
    registry = TypeRegistry()
    assert not registry.is_assignable(registry.integer, registry.any)
    with pytest.raises(TypeMismatchError):
        registry.require_assignable(registry.string, registry.any)


def test_comparable_accepts_only_the_ordered_types():
    registry = TypeRegistry()
    for t in (registry.integer, registry.decimal, registry.character, registry.string):
        assert registry.is_assignable(registry.comparable, t)
    assert not registry.is_assignable(registry.comparable, registry.boolean)
    assert not registry.is_assignable(registry.comparable, registry.nil)
    assert not registry.is_assignable(registry.integer, registry.comparable)


def test_decimal_is_not_assignable_to_integer():
    registry = TypeRegistry()
    with pytest.raises(TypeMismatchError):
        registry.require_assignable(registry.integer, registry.decimal)


def test_register_and_lookup_custom_type():
    registry = TypeRegistry()
    point = registry.register(Type('Point', 'Point', Scope(registry.any.scope)))
    assert registry.get('Point') is point
    with pytest.raises(ConfigurationError):
        registry.register(Type('Point', 'Point', Scope(None)))
    with pytest.raises(UnknownSymbolError):
        registry.get('Vector')


def test_create_infers_builtin_types():
    registry = TypeRegistry()
    assert registry.create(None) is registry.nil_value
    assert registry.create(True).type is registry.boolean
    assert registry.create(3).type is registry.integer
    assert registry.create(Decimal('1.5')).type is registry.decimal
    assert registry.create(Char('c')).type is registry.character
    assert registry.create('text').type is registry.string


def test_string_values_expose_length():
    registry = create_registry()
    value = registry.create('hello')
    assert value.get_field('length').value.datum == 5
    assert value.get_field('length').target_name == 'length()'


def test_char_must_hold_one_character():
    with pytest.raises(TypeMismatchError):
        Char('ab')


def test_to_string_display_forms():
    registry = TypeRegistry()
    assert to_string(None) == 'nil'
    assert to_string(True) == 'true'
    assert to_string(Decimal('2.50')) == '2.50'
    assert to_string([registry.create(1), registry.create(2)]) == '[1, 2]'


def test_members_resolve_through_supertype_scopes():
    registry = create_registry()
    # stringify lives on Any, compare on each comparable type
    assert registry.integer.get_method('stringify', 0).target_name == 'toString'
    compare = registry.string.get_method('compare', 1)
    assert compare.parameter_types[1] is registry.string
    assert registry.create(Char('b')).call_method('compare', [registry.create(Char('a'))]).datum == 1
