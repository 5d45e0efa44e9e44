"""Abstract Syntax Tree (AST) definitions for quill.

The node classes below are the untyped tree produced by a front end (see
`quill.parser`). Nodes are immutable; the analyzer records inferred types and
resolved bindings in a separate `quill.decorations.Decorations` table keyed
by node identity, so one tree can be analyzed, interpreted and generated
without being modified. Because of that key, a tree must not reuse one node
object in two places: build a fresh node for each occurrence, as the parser
and `quill.ast_json` do. A shared node is decorated twice and the analyzer
reports it as an `InternalConsistencyError`.

Literal values are tagged by their native class: `None`, `bool`, `int`,
`decimal.Decimal`, `quill.types.Char` and `str`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass(frozen=True)
class Stmt(Node):
    pass


@dataclass(frozen=True)
class Expr(Node):
    pass


@dataclass(frozen=True)
class Field(Node):
    name: str
    type_name: Optional[str] = None
    value: Optional[Expr] = None


@dataclass(frozen=True)
class Method(Node):
    name: str
    parameters: List[str] = field(default_factory=list)
    parameter_type_names: List[str] = field(default_factory=list)
    return_type_name: Optional[str] = None
    statements: List[Stmt] = field(default_factory=list)


@dataclass(frozen=True)
class Source(Node):
    fields: List[Field] = field(default_factory=list)
    methods: List[Method] = field(default_factory=list)


@dataclass(frozen=True)
class ExpressionStmt(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Declaration(Stmt):
    name: str
    type_name: Optional[str] = None
    value: Optional[Expr] = None


@dataclass(frozen=True)
class Assignment(Stmt):
    receiver: Expr
    value: Expr


@dataclass(frozen=True)
class If(Stmt):
    condition: Expr
    then_statements: List[Stmt]
    else_statements: List[Stmt] = field(default_factory=list)


@dataclass(frozen=True)
class For(Stmt):
    name: str
    value: Expr
    statements: List[Stmt]


@dataclass(frozen=True)
class While(Stmt):
    condition: Expr
    statements: List[Stmt]


@dataclass(frozen=True)
class Return(Stmt):
    value: Expr


@dataclass(frozen=True)
class Literal(Expr):
    literal: Any


@dataclass(frozen=True)
class Group(Expr):
    expression: Expr


@dataclass(frozen=True)
class Binary(Expr):
    operator: str  # 'AND', 'OR', '<', '<=', '>', '>=', '==', '!=', '+', '-', '*', '/'
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Access(Expr):
    receiver: Optional[Expr]
    name: str


@dataclass(frozen=True)
class Call(Expr):
    receiver: Optional[Expr]
    name: str
    arguments: List[Expr] = field(default_factory=list)
