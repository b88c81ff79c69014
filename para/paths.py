"""Qualified-path helpers over annotated tokens.

A path in the token stream is a run of GROUP/IDENTIFIER/LOOKUP tokens
linked by ARROW tokens (`a -> b -> c`). It can be read forward from its
first segment, as the resolver does for right-hand sides, or backward from
the token following its last segment, as inspect directives do. Both
directions yield the same segment list.
"""

from typing import List, Sequence, Tuple

from .errors import ErrorVal, ResolutionError
from .tokens import PATH_ROLES, R_ARROW, AnnotatedToken


def read_path_forward(tokens: Sequence[AnnotatedToken], start: int) -> Tuple[List[str], int]:
    """Read the path starting at `start`; returns it with the index just past it."""
    if start >= len(tokens) or tokens[start].role not in PATH_ROLES:
        where = tokens[start] if start < len(tokens) else None
        raise ResolutionError(ErrorVal(
            'InvalidLookupPath',
            'expected a name to look up',
            line=where.line if where else None,
            token=where.token_number if where else None,
        ))
    path = [tokens[start].literal]
    i = start + 1
    while i + 1 < len(tokens) and tokens[i].role == R_ARROW and tokens[i + 1].role in PATH_ROLES:
        path.append(tokens[i + 1].literal)
        i += 2
    return path, i


def build_path_forward(tokens: Sequence[AnnotatedToken], start: int) -> List[str]:
    return read_path_forward(tokens, start)[0]


def build_path_backward(tokens: Sequence[AnnotatedToken], index: int) -> List[str]:
    """Read the path that ends just before `index`. Empty if there is none."""
    if index <= 0 or index > len(tokens):
        return []
    j = index - 1
    if tokens[j].role not in PATH_ROLES:
        return []
    path = [tokens[j].literal]
    while j >= 2 and tokens[j - 1].role == R_ARROW and tokens[j - 2].role in PATH_ROLES:
        j -= 2
        path.insert(0, tokens[j].literal)
    return path


def format_path(path: Sequence[str]) -> str:
    return '-> '.join(path)
