from typing import List

from quill.scope import Scope
from quill.types import TypeRegistry, Value, to_string
from .members import install_members


def create_registry() -> TypeRegistry:
    """Build a registry holding the built-in lattice and its members."""
    return install_members(TypeRegistry())


def populate_globals(scope: Scope, registry: TypeRegistry) -> Scope:
        """Define the fixed global functions in `scope`."""

        def std_print(args: List[Value]) -> Value:
            print(to_string(args[0].datum))
            return registry.nil_value

        scope.define_function('print', [registry.any], registry.nil, std_print, 'System.out.println')
        return scope
