"""Interpreter for Para.

The interpreter takes the annotated token stream and walks it once, top
to bottom. Each `=` forms an assignment target from the tokens before it
(groups, identifier, optional type) and a value from the tokens after it:
a literal, a reference to an earlier variable, or an extracted expression
which is evaluated and then committed. `?` prints what the path or literal
before it currently holds.

Nothing is carried from one statement to the next except the scope tree
itself and, between an `=` and the expression token that follows it, the
pending assignment target. Any error aborts the run and leaves the
interpreter's previous tree untouched; inspect lines are written out only
after the run has succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, TextIO

from .annotator import annotate
from .errors import ErrorVal, EvaluationError, ResolutionError
from .evaluator import evaluate_expression
from .lexer import tokenize
from . import tokens as tk
from .tokens import AnnotatedToken
from .paths import build_path_backward, format_path, read_path_forward
from .reporting import format_inspect
from .scope import ScopeTree, Variable
from .types import Value, to_display, type_name


@dataclass
class AssignmentTarget:
    """Where an assignment writes: the qualified path plus the statement's flags."""
    path: List[str]
    declared_type: Optional[str] = None
    mutable: bool = False
    temp: bool = False
    line: Optional[int] = None
    token_number: Optional[int] = None

    @property
    def groups(self) -> List[str]:
        return self.path[:-1]


# Roles that end the statement an assignment belongs to
STATEMENT_BOUNDARIES = tk.BOUNDARY_ROLES | {tk.R_INSPECT}


class Interpreter:
    """Builds a scope tree from annotated Para tokens."""
    def __init__(self, debug_level: int = 0, out: Optional[TextIO] = None,
                 debug_sink: Optional[TextIO] = None):
        self.debug_level = debug_level
        self.out = out
        self.debug_sink = debug_sink
        self.tree = ScopeTree()
        self.inspections: List[str] = []

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_sink:
                self.debug_sink.write(msg + '\n')
                self.debug_sink.flush()
            else:
                print(msg)

    # Public API
    def interpret(self, tokens: Sequence[AnnotatedToken]) -> ScopeTree:
        tree = ScopeTree()
        inspections: List[str] = []
        # Results of evaluated expressions by token index, for inspects
        results: Dict[int, Value] = {}
        pending: Optional[AssignmentTarget] = None

        if self.debug_level >= 3:
            self.debug('tokens: ' + ' '.join(f"{t.role}({t.literal})" for t in tokens))

        for index, token in enumerate(tokens):
            role = token.role
            if role == tk.R_VALUE_ASSIGN:
                target = self.build_assignment_target(tokens, index)
                if index + 1 < len(tokens) and tokens[index + 1].role == tk.R_EXPRESSION:
                    pending = target
                    continue
                value = self.resolve_value(tree, tokens, index + 1, target)
                self.commit(tree, target, value)
            elif role == tk.R_EXPRESSION:
                if pending is None:
                    raise EvaluationError(ErrorVal(
                        'InvalidExpression', 'expression without an assignment',
                        token.line, token.token_number))
                debug = self.debug if self.debug_level >= 3 else None
                value = evaluate_expression(token.expression, tree.root, debug)
                results[index] = value
                self.commit(tree, pending, value)
                pending = None
            elif role == tk.R_INSPECT:
                inspections.append(self.inspect(tree, tokens, index, results))

        self.tree = tree
        self.inspections = inspections
        # printed only once the whole run has succeeded
        for line in inspections:
            print(line, file=self.out)
        return tree

    def lookup(self, path: Sequence[str]) -> Variable:
        """Read-only query against the last successfully built tree."""
        return self.tree.resolve(list(path))

    # Assignments

    def build_assignment_target(self, tokens: Sequence[AnnotatedToken], index: int) -> AssignmentTarget:
        assign = tokens[index]
        start = index
        while start > 0 and tokens[start - 1].role not in STATEMENT_BOUNDARIES:
            start -= 1

        declared_type = None
        ident_at = index - 1
        if ident_at >= start and tokens[ident_at].role == tk.R_TYPE:
            declared_type = tokens[ident_at].value_type
            ident_at -= 1
        if ident_at < start or tokens[ident_at].role != tk.R_IDENTIFIER:
            raise ResolutionError(ErrorVal(
                'InvalidAssignment', "no identifier before '='", assign.line, assign.token_number))
        ident = tokens[ident_at]
        path = build_path_backward(tokens, ident_at + 1)
        return AssignmentTarget(path, declared_type, ident.mutable, ident.temp,
                                ident.line, ident.token_number)

    def resolve_value(self, tree: ScopeTree, tokens: Sequence[AnnotatedToken], index: int,
                      target: AssignmentTarget) -> Value:
        token = tokens[index] if index < len(tokens) else None
        if token is not None and token.role == tk.R_VALUE:
            return token.value
        if token is not None and token.role in tk.PATH_ROLES:
            path, _ = read_path_forward(tokens, index)
            return self.resolve_reference(tree, path, target, token).value
        where = token or tokens[index - 1]
        raise ResolutionError(ErrorVal(
            'NoValueFoundAfterAssignment', "no value after '='",
            where.line, where.token_number, target.path))

    def resolve_reference(self, tree: ScopeTree, path: List[str], target: AssignmentTarget,
                          token: AnnotatedToken) -> Variable:
        if self.debug_level >= 2:
            self.debug(f"resolve {format_path(path)} for {format_path(target.path)}")
        try:
            return tree.resolve(path, token.line, token.token_number)
        except ResolutionError as e:
            groups = target.groups
            if e.kind not in ('ScopeNotFound', 'VariableNotFoundInScope') or not groups \
                    or len(path) <= len(groups) or path[:len(groups)] != groups:
                raise
            suffix = path[len(groups):]
            if self.debug_level >= 2:
                self.debug(f"fallback {format_path(path)} -> {format_path(suffix)}")
            return tree.resolve(suffix, token.line, token.token_number)

    def commit(self, tree: ScopeTree, target: AssignmentTarget, value: Value) -> Variable:
        variable = tree.assign(target.path, value, target.declared_type, target.mutable,
                               target.temp, target.line, target.token_number)
        if self.debug_level >= 1:
            flags = ''.join(f" [{flag}]" for flag, on in
                            (('muta', variable.mutable), ('temp', variable.temp)) if on)
            self.debug(f"assign {format_path(target.path)} : {variable.type} = "
                       f"{to_display(variable.value)}{flags}")
        return variable

    # Inspect

    def inspect(self, tree: ScopeTree, tokens: Sequence[AnnotatedToken], index: int,
                results: Dict[int, Value]) -> str:
        token = tokens[index]
        previous = tokens[index - 1] if index > 0 else None
        if previous is not None and previous.role == tk.R_VALUE:
            value = previous.value
            return format_inspect(token.line, token.token_number, 'value', type_name(value), to_display(value))
        if previous is not None and previous.role == tk.R_EXPRESSION and index - 1 in results:
            value = results[index - 1]
            return format_inspect(token.line, token.token_number, 'value', type_name(value), to_display(value))
        path = build_path_backward(tokens, index)
        if not path:
            return format_inspect(token.line, token.token_number, None)
        variable = tree.find(path)
        if variable is None:
            return format_inspect(token.line, token.token_number, format_path(path))
        return format_inspect(token.line, token.token_number, format_path(path),
                              variable.type, to_display(variable.value))


def run_program(source: str, debug_level: int = 0, out: Optional[TextIO] = None) -> ScopeTree:
    """Convenience function to tokenize, annotate and interpret Para source."""
    interpreter = Interpreter(debug_level=debug_level, out=out)
    return interpreter.interpret(annotate(tokenize(source)))


def compile_module(file_path: str, debug_level: int = 0, out: Optional[TextIO] = None,
                   debug_sink: Optional[TextIO] = None) -> Interpreter:
    """Interpret a Para file, returning the interpreter instance."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    interpreter = Interpreter(debug_level=debug_level, out=out, debug_sink=debug_sink)
    interpreter.interpret(annotate(tokenize(source)))
    return interpreter
