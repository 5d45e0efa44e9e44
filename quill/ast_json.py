"""JSON serialization/deserialization for the quill AST.

This module converts between the untyped AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Each node becomes a dict
tagged with `"__node__"`; decimals and characters, which JSON cannot tell
apart from floats and strings, are tagged as well so a round trip yields an
equal tree.
"""

from __future__ import annotations

import json
from dataclasses import fields
from decimal import Decimal
from typing import Any, Dict

from .ast import (
    Access, Assignment, Binary, Call, Declaration, ExpressionStmt, Field,
    For, Group, If, Literal, Method, Node, Return, Source, While,
)
from .errors import ParseError
from .types import Char

NODE_KINDS: Dict[str, type] = {
    cls.__name__: cls
    for cls in (
        Source, Field, Method,
        ExpressionStmt, Declaration, Assignment, If, For, While, Return,
        Literal, Group, Binary, Access, Call,
    )
}


def ast_to_obj(node: Any) -> Any:
    if node is None or isinstance(node, (bool, int)):
        return node
    # Char before str: it is a str subclass
    if isinstance(node, Char):
        return {"__char__": str(node)}
    if isinstance(node, str):
        return node
    if isinstance(node, Decimal):
        return {"__decimal__": str(node)}
    if isinstance(node, list):
        return [ast_to_obj(item) for item in node]
    if isinstance(node, Node) and type(node).__name__ in NODE_KINDS:
        obj: Dict[str, Any] = {"__node__": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj
    raise ParseError(f"unsupported value for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(item) for item in obj]
    if not isinstance(obj, dict):
        raise ParseError(f"invalid AST object: {obj!r}")
    if "__char__" in obj:
        return Char(obj["__char__"])
    if "__decimal__" in obj:
        return Decimal(obj["__decimal__"])
    kind = obj.get("__node__")
    if kind not in NODE_KINDS:
        raise ParseError(f"unknown AST node kind: {kind}")
    attrs = {key: ast_from_obj(value) for key, value in obj.items() if key != "__node__"}
    try:
        return NODE_KINDS[kind](**attrs)
    except TypeError as e:
        raise ParseError(f"malformed {kind} node: {e}") from e


def dumps(node: Node, **kwargs) -> str:
    return json.dumps(ast_to_obj(node), **kwargs)


def loads(text: str) -> Node:
    return ast_from_obj(json.loads(text))
