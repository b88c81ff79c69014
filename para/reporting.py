"""Text output for Para: inspect lines, re-serialized sources and state dumps."""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

from . import tokens as tk
from .tokens import AnnotatedToken
from .paths import build_path_backward, format_path, read_path_forward
from .scope import Scope, ScopeTree, Variable
from .types import to_display

UNDEFINED = 'undefined'
NOTHING = '(nothing)'


def format_inspect(line: int, token: int, path: Optional[str],
                   type_name: str = UNDEFINED, value: str = NOTHING) -> str:
    """One inspect line: `[line:token] path : type = value`."""
    if path is None:
        return f"[{line}:{token}] {UNDEFINED}"
    return f"[{line}:{token}] {path} : {type_name} = {value}"


def format_variable(prefix: str, variable: Variable) -> str:
    text = f"{prefix}{variable.name} : {variable.type} = {to_display(variable.value)}"
    if variable.mutable:
        text += ' [muta]'
    if variable.temp:
        text += ' [temp]'
    return text


def dump_scope(tree: ScopeTree, include_temp: bool = False) -> str:
    """List every variable, root scope first, then each nested scope depth first."""
    def visible(scope: Scope) -> List[Variable]:
        return [v for v in scope.variables.values() if include_temp or not v.temp]

    lines = ['// Root scope variables']
    lines.extend(format_variable('', v) for v in visible(tree.root))
    for path, scope in tree.root.walk():
        prefix = format_path(path) + '-> '
        lines.append('')
        lines.append(f"// {prefix}scope variables")
        lines.extend(format_variable(prefix, v) for v in visible(scope))
    return '\n'.join(lines) + '\n'


def statements(tokens: Sequence[AnnotatedToken]) -> Iterator[List[AnnotatedToken]]:
    """Split an annotated stream into its non-empty logical statements."""
    current: List[AnnotatedToken] = []
    for token in tokens:
        if token.role in tk.BOUNDARY_ROLES:
            if current:
                yield current
            current = []
        else:
            current.append(token)
    if current:
        yield current


def _render_token(token: AnnotatedToken) -> str:
    role = token.role
    if role == tk.R_GROUP:
        return f"{token.literal}-> "
    if role == tk.R_ARROW:
        return ''
    if role == tk.R_TYPE:
        return f":{token.literal} "
    if role == tk.R_VALUE:
        return to_display(token.value) + ' '
    if role == tk.R_IDENTIFIER:
        flags = [name for name, on in (('muta', token.mutable), ('temp', token.temp),
                                       ('const', token.const)) if on]
        return ' '.join([token.literal] + flags) + ' '
    if role == tk.R_EXPRESSION:
        return ' '.join(item.literal for item in token.expression) + ' '
    return f"{token.literal} "


def render_flat(tokens: Sequence[AnnotatedToken]) -> str:
    """Re-serialize annotated tokens, one fully qualified statement per line."""
    lines = [''.join(_render_token(t) for t in statement).rstrip()
             for statement in statements(tokens)]
    return '\n'.join(lines) + '\n' if lines else ''


def _find_reference(tree: ScopeTree, path: List[str], groups: List[str]) -> Optional[Variable]:
    variable = tree.find(path)
    if variable is None and groups and len(path) > len(groups) and path[:len(groups)] == groups:
        variable = tree.find(path[len(groups):])
    return variable


def _target(statement: List[AnnotatedToken]):
    for i, token in enumerate(statement):
        if token.role == tk.R_IDENTIFIER:
            return token, build_path_backward(statement, i + 1)
    return None, []


def render_baked(tokens: Sequence[AnnotatedToken], tree: ScopeTree) -> str:
    """Like render_flat, with references replaced by their values from `tree`.

    Statements defining a temp variable are left out.
    """
    lines = []
    for statement in statements(tokens):
        ident, target_path = _target(statement)
        if ident is not None:
            variable = tree.find(target_path)
            if ident.temp or (variable is not None and variable.temp):
                continue
        groups = target_path[:-1]
        parts = []
        i = 0
        while i < len(statement):
            token = statement[i]
            after_assign = i > 0 and statement[i - 1].role == tk.R_VALUE_ASSIGN
            if after_assign and token.role in tk.PATH_ROLES:
                path, end = read_path_forward(statement, i)
                variable = _find_reference(tree, path, groups)
                if variable is not None:
                    parts.append(to_display(variable.value) + ' ')
                    i = end
                    continue
            if token.role == tk.R_EXPRESSION:
                items = []
                for item in token.expression:
                    found = tree.root.variables.get(item.literal) if item.role == tk.R_LOOKUP else None
                    items.append(to_display(found.value) if found is not None else item.literal)
                parts.append(' '.join(items) + ' ')
            else:
                parts.append(_render_token(token))
            i += 1
        lines.append(''.join(parts).rstrip())
    return '\n'.join(lines) + '\n' if lines else ''
