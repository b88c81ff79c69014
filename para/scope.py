"""The Para scope tree: variables, scopes and path-addressed assignment."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Sequence, Tuple

from .errors import ErrorVal, MutabilityError, ResolutionError
from .types import Value, coerce, type_name


@dataclass
class Variable:
    """A named, typed scalar binding held directly in one scope."""
    name: str
    value: Value
    type: str
    mutable: bool = False
    temp: bool = False


@dataclass
class Scope:
    """One node of the scope tree; owns its variables and child scopes."""
    variables: Dict[str, Variable] = field(default_factory=dict)
    nested_scopes: Dict[str, 'Scope'] = field(default_factory=dict)

    def walk(self, prefix: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], 'Scope']]:
        """Yield (path, scope) for every nested scope, depth first, in insertion order."""
        for name, child in self.nested_scopes.items():
            path = prefix + (name,)
            yield path, child
            yield from child.walk(path)


class ScopeTree:
    """The rooted tree of scopes built by the interpreter."""
    def __init__(self):
        self.root = Scope()

    def assign(self, path: Sequence[str], value: Value, declared_type: Optional[str] = None,
               mutable: bool = False, temp: bool = False,
               line: Optional[int] = None, token: Optional[int] = None) -> Variable:
        """Write `value` at `path`, creating missing scopes on the way.

        An existing variable keeps its own mutable/temp flags; if it is not
        mutable the assignment fails and the variable is left untouched.
        """
        if not path:
            raise ResolutionError(ErrorVal('InvalidAssignment', 'nothing to assign to', line, token))
        *groups, name = path
        scope = self.find_scope(groups)
        current = scope.variables.get(name) if scope is not None else None
        if current is not None and not current.mutable:
            raise MutabilityError(ErrorVal(
                'ImmutableVariable', 'cannot reassign an immutable variable', line, token, list(path)))
        try:
            value = coerce(value, declared_type)
        except TypeError as e:
            raise ResolutionError(ErrorVal('TypeMismatch', str(e), line, token, list(path)))
        var_type = declared_type or type_name(value)

        if current is not None:
            current.value = value
            current.type = var_type
            return current
        scope = self.root
        for group in groups:
            if group not in scope.nested_scopes:
                scope.nested_scopes[group] = Scope()
            scope = scope.nested_scopes[group]
        variable = Variable(name, value, var_type, mutable, temp)
        scope.variables[name] = variable
        return variable

    def find_scope(self, groups: Sequence[str]) -> Optional[Scope]:
        scope = self.root
        for group in groups:
            scope = scope.nested_scopes.get(group)
            if scope is None:
                return None
        return scope

    def resolve(self, path: Sequence[str], line: Optional[int] = None,
                token: Optional[int] = None) -> Variable:
        """Fetch the variable at `path`; every leading segment names a scope."""
        if not path:
            raise ResolutionError(ErrorVal('InvalidLookupPath', 'empty lookup path', line, token))
        *groups, name = path
        scope = self.root
        for group in groups:
            child = scope.nested_scopes.get(group)
            if child is None:
                raise ResolutionError(ErrorVal(
                    'ScopeNotFound', f"scope '{group}' not found", line, token, list(path)))
            scope = child
        variable = scope.variables.get(name)
        if variable is None:
            raise ResolutionError(ErrorVal(
                'VariableNotFoundInScope', f"variable '{name}' not found in scope", line, token, list(path)))
        return variable

    def find(self, path: Sequence[str]) -> Optional[Variable]:
        """Like resolve, but returns None instead of raising."""
        if not path:
            return None
        scope = self.find_scope(path[:-1])
        if scope is None:
            return None
        return scope.variables.get(path[-1])

    def __eq__(self, other) -> bool:
        return isinstance(other, ScopeTree) and self.root == other.root

    def __repr__(self) -> str:
        count = len(self.root.variables) + sum(len(s.variables) for _, s in self.root.walk())
        return f"<ScopeTree {count} variables>"
