"""JSON serialization/deserialization for the Para scope tree.

This module converts between `Scope`/`Variable` objects and plain Python
dict structures suitable for JSON encoding:

    {"variables": {name: {"type", "value", "mutable", "temp"}},
     "scopes": {name: {...}}}

Values are stored as JSON natives, with `null` for the Para null value.
"""

from __future__ import annotations

from typing import Any, Dict

from .scope import Scope, ScopeTree, Variable
from .types import from_python, to_python


def variable_to_obj(variable: Variable) -> Dict[str, Any]:
    return {
        "type": variable.type,
        "value": to_python(variable.value),
        "mutable": variable.mutable,
        "temp": variable.temp,
    }


def variable_from_obj(name: str, o: Dict[str, Any]) -> Variable:
    var_type = o["type"]
    return Variable(
        name,
        from_python(o.get("value"), var_type),
        var_type,
        bool(o.get("mutable", False)),
        bool(o.get("temp", False)),
    )


def scope_to_obj(scope: Scope, include_temp: bool = False) -> Dict[str, Any]:
    return {
        "variables": {
            name: variable_to_obj(v)
            for name, v in scope.variables.items()
            if include_temp or not v.temp
        },
        "scopes": {
            name: scope_to_obj(child, include_temp)
            for name, child in scope.nested_scopes.items()
        },
    }


def scope_from_obj(o: Dict[str, Any]) -> Scope:
    scope = Scope()
    for name, v in o.get("variables", {}).items():
        scope.variables[name] = variable_from_obj(name, v)
    for name, child in o.get("scopes", {}).items():
        scope.nested_scopes[name] = scope_from_obj(child)
    return scope


def tree_from_obj(o: Dict[str, Any]) -> ScopeTree:
    tree = ScopeTree()
    tree.root = scope_from_obj(o)
    return tree
