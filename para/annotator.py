"""Annotation pass for Para.

The annotator walks the lexer's token list once and tags every token with
the role it plays: a group segment, the identifier a statement defines, a
lookup, a type, a value, and so on. Along the way it

* keeps a stack of open `{ }` blocks and splices the block path in front
  of every path that starts inside one, so each statement carries its
  fully qualified context;
* collapses `: [modifiers] type` into one TYPE token and folds `muta`,
  `temp` and `const` into the flags of the statement's identifier;
* gives members of typed groups (`name -> : int {`) their member type;
* extracts right-hand sides that contain arithmetic into a single
  EXPRESSION token owning its own token run, inserting `*` where a value
  and a parenthesis are juxtaposed.

Structural problems raise `ParseError`; there is no partial output.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from .errors import ErrorVal, ParseError
from . import tokens as tk
from .tokens import AnnotatedToken, GroupFrame, Token
from .types import NullVal, parse_bool, parse_number, parse_string

# Tokens that end a right-hand side
RHS_TERMINATORS = frozenset({tk.NEWLINE, tk.EOF, tk.RBRACE, tk.INSPECT})
# Raw tokens after which a new statement starts
STATEMENT_STARTS = frozenset({tk.NEWLINE, tk.LBRACE, tk.RBRACE})

MODIFIER_FLAGS = {tk.MUTA: 'mutable', tk.TEMP: 'temp', tk.CONST: 'const'}


def _line_positions(tokens: Sequence[Token]) -> List[int]:
    """1-based position of each token within its logical line."""
    numbers = []
    count = 0
    for token in tokens:
        count += 1
        numbers.append(count)
        if token.kind == tk.NEWLINE:
            count = 0
    return numbers


class Annotator:
    def __init__(self, tokens: Sequence[Token]):
        if not tokens or tokens[-1].kind != tk.EOF:
            raise ParseError(ErrorVal('MissingEOF', 'token stream must end with EOF'))
        self.tokens = tokens
        self.numbers = _line_positions(tokens)
        self.out: List[AnnotatedToken] = []
        self.frames: List[GroupFrame] = []
        self._reset_statement()

    def _reset_statement(self):
        self.assigned = False
        self.ident_index: Optional[int] = None  # index into self.out
        self.has_type = False

    def error(self, name: str, message: str, index: int) -> ParseError:
        token = self.tokens[index]
        return ParseError(ErrorVal(name, message, line=token.line, token=self.numbers[index]))

    def emit(self, role: str, index: int, **fields) -> AnnotatedToken:
        token = self.tokens[index]
        fields.setdefault('literal', token.literal)
        fields.setdefault('kind', token.kind)
        annotated = AnnotatedToken(
            role=role,
            line=token.line,
            token_number=self.numbers[index],
            **fields,
        )
        self.out.append(annotated)
        return annotated

    def annotate(self) -> Tuple[AnnotatedToken, ...]:
        i = 0
        while True:
            token = self.tokens[i]
            kind = token.kind
            if kind == tk.EOF:
                if self.frames:
                    raise self.error('MalformedGroup', f"block '{self.frames[-1].name}' is never closed", i)
                self.emit(tk.R_EOF, i)
                break
            if kind == tk.NEWLINE:
                self.emit(tk.R_NEWLINE, i)
                self._reset_statement()
                i += 1
            elif kind == tk.IDENT:
                i = self.identifier(i)
            elif kind == tk.ARROW:
                self.arrow(i)
                i += 1
            elif kind == tk.TYPE_ASSIGN:
                i = self.type_annotation(i)
            elif kind in tk.MODIFIER_KINDS:
                self.modifier(i)
                i += 1
            elif kind == tk.VALUE_ASSIGN:
                i = self.assignment(i)
            elif kind in tk.LITERAL_KINDS:
                self.value(i)
                i += 1
            elif kind == tk.INSPECT:
                self.emit(tk.R_INSPECT, i)
                self.ident_index = None
                self.has_type = False
                i += 1
            elif kind == tk.LBRACE:
                self.open_block(i)
                i += 1
            elif kind == tk.RBRACE:
                self.close_block(i)
                i += 1
            else:
                raise self.error('UnexpectedToken', f"unexpected {token.literal!r}", i)
        return tuple(self.out)

    # Blocks

    def header_brace(self, i: int) -> Optional[int]:
        """Index of the `{` if tokens from `i` form a block header."""
        t = self.tokens
        j = i
        while t[j].kind == tk.IDENT and t[j + 1].kind == tk.ARROW:
            after = t[j + 2]
            if after.kind == tk.LBRACE:
                return j + 2
            if after.kind == tk.TYPE_ASSIGN:
                if t[j + 3].kind == tk.TYPE and t[j + 4].kind == tk.LBRACE:
                    return j + 4
                return None
            if after.kind != tk.IDENT:
                return None
            j += 2
        return None

    def open_block(self, i: int):
        t = self.tokens
        member_type = None
        if i >= 4 and t[i - 1].kind == tk.TYPE and t[i - 2].kind == tk.TYPE_ASSIGN \
                and t[i - 3].kind == tk.ARROW and t[i - 4].kind == tk.IDENT:
            name_at = i - 4
            member_type = t[i - 1].literal
        elif i >= 2 and t[i - 1].kind == tk.ARROW and t[i - 2].kind == tk.IDENT:
            name_at = i - 2
        else:
            raise self.error('MalformedGroup', "'{' must follow 'name ->' or 'name -> : type'", i)
        names = [t[name_at].literal]
        j = name_at
        while j >= 2 and t[j - 1].kind == tk.ARROW and t[j - 2].kind == tk.IDENT:
            j -= 2
            names.insert(0, t[j].literal)
        for name in names[:-1]:
            self.frames.append(GroupFrame(name, closes_block=False))
        self.frames.append(GroupFrame(names[-1], member_type))
        self.emit(tk.R_BLOCK_OPEN, i, literal='-> '.join(names), value_type=member_type)
        self._reset_statement()

    def close_block(self, i: int):
        if not self.frames:
            raise self.error('MalformedGroup', "'}' without an open block", i)
        # the brace owner, then the leading segments of its header
        self.frames.pop()
        while self.frames and not self.frames[-1].closes_block:
            self.frames.pop()
        self.emit(tk.R_BLOCK_CLOSE, i)
        self._reset_statement()

    def member_type(self) -> Optional[str]:
        for frame in reversed(self.frames):
            if frame.member_type is not None:
                return frame.member_type
        return None

    # Identifiers and paths

    def starts_path(self) -> bool:
        return not self.out or self.out[-1].role != tk.R_ARROW

    def splice(self, i: int):
        for frame in self.frames:
            self.emit(tk.R_GROUP, i, literal=frame.name, kind=tk.IDENT, synthetic=True)
            self.emit(tk.R_ARROW, i, literal='->', kind=tk.ARROW, synthetic=True)

    def identifier(self, i: int) -> int:
        t = self.tokens
        if i > 0 and t[i - 1].kind == tk.IDENT or \
                self.ident_index is not None and not self.assigned and self.starts_path():
            raise self.error('DoubleIdentifier', f"'{t[i].literal}' follows another name without an operator", i)
        if i > 0 and t[i - 1].kind in tk.LITERAL_KINDS:
            raise self.error('UnexpectedToken', f"unexpected name '{t[i].literal}' after a value", i)
        at_start = i == 0 or t[i - 1].kind in STATEMENT_STARTS
        if at_start and not self.assigned:
            brace = self.header_brace(i)
            if brace is not None:
                return brace
        if t[i + 1].kind == tk.ARROW:
            if t[i + 2].kind != tk.IDENT:
                raise self.error('MalformedGroup', "'->' must be followed by a name", i + 1)
            role = tk.R_GROUP
        elif self.assigned:
            role = tk.R_LOOKUP
        else:
            role = tk.R_IDENTIFIER
        if self.starts_path():
            self.splice(i)
        self.emit(role, i)
        if role == tk.R_IDENTIFIER:
            self.ident_index = len(self.out) - 1
        return i + 1

    def arrow(self, i: int):
        if not self.out or self.out[-1].role != tk.R_GROUP:
            raise self.error('MalformedGroup', "'->' must follow a group name", i)
        self.emit(tk.R_ARROW, i)

    # Types and modifiers

    def set_flag(self, kind: str, i: int):
        if self.ident_index is None or self.assigned:
            raise self.error('MisplacedModifier', f"'{self.tokens[i].literal}' must follow the name it modifies", i)
        ident = replace(self.out[self.ident_index], **{MODIFIER_FLAGS[kind]: True})
        if ident.mutable and ident.const:
            raise self.error('ConflictingModifiers', f"'{ident.literal}' cannot be both muta and const", i)
        self.out[self.ident_index] = ident

    def modifier(self, i: int):
        self.set_flag(self.tokens[i].kind, i)

    def type_annotation(self, i: int) -> int:
        if self.ident_index is None or self.assigned or self.has_type:
            raise self.error('UnexpectedToken', "unexpected ':'", i)
        type_at = None
        j = i + 1
        while self.tokens[j].kind in tk.MODIFIER_KINDS or self.tokens[j].kind == tk.TYPE:
            if self.tokens[j].kind == tk.TYPE:
                if type_at is not None:
                    raise self.error('UnexpectedToken', 'a statement takes a single type', j)
                type_at = j
            else:
                self.set_flag(self.tokens[j].kind, j)
            j += 1
        if type_at is None:
            raise self.error('MissingType', "':' must be followed by a type name", i)
        type_name = self.tokens[type_at].literal
        self.emit(tk.R_TYPE, i, literal=type_name, kind=tk.TYPE, value_type=type_name)
        self.has_type = True
        return j

    # Values

    def literal_value(self, i: int):
        token = self.tokens[i]
        if token.kind in (tk.INT, tk.FLOAT):
            try:
                return parse_number(token.literal)
            except OverflowError as e:
                raise self.error('IntegerOverflow', str(e), i)
        if token.kind == tk.STRING:
            return parse_string(token.literal)
        if token.kind == tk.BOOL:
            return parse_bool(token.literal)
        return NullVal()

    def annotate_value(self, i: int) -> dict:
        # INT -> 'int', STRING -> 'string', NULL -> 'null', ...
        return {'value': self.literal_value(i), 'value_type': self.tokens[i].kind.lower()}

    def value(self, i: int):
        previous = self.tokens[i - 1].kind if i > 0 else None
        if previous == tk.IDENT or previous in tk.LITERAL_KINDS or \
                self.ident_index is not None and not self.assigned:
            raise self.error('UnexpectedToken', f"unexpected value {self.tokens[i].literal}", i)
        self.emit(tk.R_VALUE, i, **self.annotate_value(i))

    # Assignments and expressions

    def assignment(self, i: int) -> int:
        if self.assigned:
            raise self.error('MultipleAssignments', "a statement takes a single '='", i)
        self.assigned = True
        if not self.has_type and self.ident_index is not None:
            member_type = self.member_type()
            if member_type is not None:
                self.emit(tk.R_TYPE, i, literal=member_type, kind=tk.TYPE,
                          value_type=member_type, synthetic=True)
                self.has_type = True
        self.emit(tk.R_VALUE_ASSIGN, i)
        end = i + 1
        while self.tokens[end].kind not in RHS_TERMINATORS:
            if self.tokens[end].kind == tk.VALUE_ASSIGN:
                raise self.error('MultipleAssignments', "a statement takes a single '='", end)
            end += 1
        if end == i + 1:
            raise self.error('EmptyExpression', "nothing to assign after '='", i)
        run = range(i + 1, end)
        if any(self.tokens[j].kind in tk.OPERATOR_KINDS or self.tokens[j].kind in (tk.LPAREN, tk.RPAREN)
               for j in run):
            self.expression(i + 1, end)
            return end
        return i + 1

    def expression(self, start: int, end: int):
        items: List[AnnotatedToken] = []
        for j in range(start, end):
            token = self.tokens[j]
            kind = token.kind
            fields = {}
            if kind in tk.LITERAL_KINDS:
                role = tk.R_VALUE
                fields = self.annotate_value(j)
            elif kind == tk.IDENT:
                role = tk.R_LOOKUP
            elif kind in tk.OPERATOR_KINDS:
                role = tk.R_OPERATOR
            elif kind == tk.LPAREN:
                role = tk.R_LPAREN
            elif kind == tk.RPAREN:
                role = tk.R_RPAREN
            elif kind == tk.ARROW:
                role = tk.R_ARROW
            else:
                raise self.error('UnexpectedToken', f"{token.literal!r} cannot appear in an expression", j)
            current = AnnotatedToken(role=role, literal=token.literal, kind=kind, line=token.line,
                                     token_number=self.numbers[j], **fields)
            if items and juxtaposed(items[-1], current):
                items.append(replace(current, role=tk.R_OPERATOR, literal='*', kind=tk.STAR,
                                     value=None, value_type=None, synthetic=True))
            items.append(current)
        source = ' '.join(self.tokens[j].literal for j in range(start, end))
        self.emit(tk.R_EXPRESSION, start, literal=source, expression=tuple(items))


def juxtaposed(left: AnnotatedToken, right: AnnotatedToken) -> bool:
    """True where an implicit multiplication belongs between two tokens."""
    operand = (tk.R_VALUE, tk.R_LOOKUP)
    if right.role == tk.R_LPAREN:
        return left.role in operand or left.role == tk.R_RPAREN
    if left.role == tk.R_RPAREN:
        return right.role in operand
    return False


def annotate(tokens: Sequence[Token]) -> Tuple[AnnotatedToken, ...]:
    """Annotate a lexer token list. Raises ParseError on structural failure."""
    return Annotator(tokens).annotate()
