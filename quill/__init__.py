# quill language package
# This package provides the analyzer, interpreter and Java generator for quill.
from .analyzer import Analyzer
from .errors import QuillError
from .generator import Generator
from .interpreter import Interpreter
from .parser import parse_file, parse_source
from .std import create_registry


def run_program(source: str, debug_level: int = 0):
    """Parse, analyze and run a quill program, returning main's Value."""
    registry = create_registry()
    tree = parse_source(source)
    Analyzer(registry, debug_level=debug_level).analyze(tree)
    return Interpreter(registry, debug_level=debug_level).run(tree)


def compile_program(source: str, class_name: str = 'Main') -> str:
    """Parse and analyze a quill program, returning the generated Java."""
    registry = create_registry()
    tree = parse_source(source)
    decorations = Analyzer(registry).analyze(tree)
    return Generator(registry, decorations, class_name=class_name).generate(tree)


__all__ = [
    'Analyzer',
    'Generator',
    'Interpreter',
    'QuillError',
    'compile_program',
    'create_registry',
    'parse_file',
    'parse_source',
    'run_program',
]
