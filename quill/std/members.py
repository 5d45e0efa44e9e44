from typing import Any, List

from quill.errors import BoundsError, TypeMismatchError
from quill.types import TypeRegistry, Value, to_string


def install_members(registry: TypeRegistry) -> TypeRegistry:
        """Declare the fixed member surface on the built-in types.

        Every method takes the receiver as its first argument, which is why
        the parameter lists below start with an `Any` slot.
        """
        any_t = registry.any
        integer = registry.integer
        string = registry.string

        def std_stringify(args: List[Value]) -> Value:
            return registry.create(to_string(args[0].datum))

        def std_compare(args: List[Value]) -> Value:
            receiver, other = args
            if type(receiver.datum) is not type(other.datum):
                raise TypeMismatchError(f'compare expects {receiver.type.name}, got {other.type.name}')
            if receiver.datum < other.datum:
                return registry.create(-1)
            return registry.create(1 if receiver.datum > other.datum else 0)

        def std_slice(args: List[Value]) -> Value:
            receiver, start, end = args
            if not isinstance(start.datum, int) or not isinstance(end.datum, int):
                raise TypeMismatchError('slice bounds must be Integer')
            text = receiver.datum
            if not 0 <= start.datum <= end.datum <= len(text):
                raise BoundsError(f'slice({start.datum}, {end.datum}) outside string of length {len(text)}')
            return registry.create(text[start.datum:end.datum])

        any_t.scope.define_function('stringify', [any_t], string, std_stringify, 'toString')
        registry.comparable.scope.define_function(
            'compare', [any_t, registry.comparable], registry.comparable, std_compare, 'compareTo')
        for member_type in registry.comparable_types:
            member_type.scope.define_function('compare', [any_t, member_type], member_type, std_compare, 'compareTo')
        string.scope.define_variable('length', integer, registry.nil_value, 'length()')
        string.scope.define_function('slice', [any_t, integer, integer], string, std_slice, 'substring')
        return registry
