"""Token definitions for Para.

`Token` is what the lexer produces. `AnnotatedToken` is what the
annotator produces: the same token tagged with the role it plays in its
statement, plus the parsed value, modifier flags and, for extracted
expressions, the owned run of expression tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .types import Value

# Lexer token kinds
IDENT = 'IDENT'
ARROW = 'ARROW'
TYPE_ASSIGN = 'TYPE_ASSIGN'
VALUE_ASSIGN = 'VALUE_ASSIGN'
INSPECT = 'INSPECT'
PLUS = 'PLUS'
MINUS = 'MINUS'
STAR = 'STAR'
SLASH = 'SLASH'
PERCENT = 'PERCENT'
POWER = 'POWER'
LPAREN = 'LPAREN'
RPAREN = 'RPAREN'
LBRACE = 'LBRACE'
RBRACE = 'RBRACE'
TYPE = 'TYPE'
INT = 'INT'
FLOAT = 'FLOAT'
STRING = 'STRING'
BOOL = 'BOOL'
NULL = 'NULL'
MUTA = 'MUTA'
TEMP = 'TEMP'
CONST = 'CONST'
NEWLINE = 'NEWLINE'
EOF = 'EOF'

OPERATOR_KINDS = frozenset({PLUS, MINUS, STAR, SLASH, PERCENT, POWER})
LITERAL_KINDS = frozenset({INT, FLOAT, STRING, BOOL, NULL})
MODIFIER_KINDS = frozenset({MUTA, TEMP, CONST})

KEYWORDS = {
    'int': TYPE,
    'float': TYPE,
    'string': TYPE,
    'bool': TYPE,
    'true': BOOL,
    'false': BOOL,
    'null': NULL,
    'muta': MUTA,
    'temp': TEMP,
    'const': CONST,
}

# Annotated roles
R_GROUP = 'GROUP'
R_IDENTIFIER = 'IDENTIFIER'
R_LOOKUP = 'LOOKUP'
R_TYPE = 'TYPE'
R_VALUE = 'VALUE'
R_OPERATOR = 'OPERATOR'
R_LPAREN = 'LPAREN'
R_RPAREN = 'RPAREN'
R_ARROW = 'ARROW'
R_VALUE_ASSIGN = 'VALUE_ASSIGN'
R_INSPECT = 'INSPECT'
R_EXPRESSION = 'EXPRESSION'
R_BLOCK_OPEN = 'BLOCK_OPEN'
R_BLOCK_CLOSE = 'BLOCK_CLOSE'
R_NEWLINE = 'NEWLINE'
R_EOF = 'EOF'

# Roles that can make up a qualified path
PATH_ROLES = frozenset({R_GROUP, R_IDENTIFIER, R_LOOKUP})
# Roles that end a statement
BOUNDARY_ROLES = frozenset({R_NEWLINE, R_EOF, R_BLOCK_OPEN, R_BLOCK_CLOSE})


@dataclass(frozen=True)
class Token:
    kind: str
    literal: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.literal!r}, {self.line}:{self.column})"


@dataclass(frozen=True)
class AnnotatedToken:
    role: str
    literal: str
    kind: str  # lexer kind of the source token
    line: int
    token_number: int  # 1-based position within the logical line
    value_type: Optional[str] = None
    value: Optional[Value] = None
    mutable: bool = False
    temp: bool = False
    const: bool = False
    synthetic: bool = False  # spliced or inserted, not present in source
    expression: Optional[Tuple['AnnotatedToken', ...]] = None

    def __repr__(self) -> str:
        extra = ''
        if self.value is not None:
            extra = f" {self.value!r}"
        elif self.value_type is not None:
            extra = f" :{self.value_type}"
        return f"<{self.role} {self.literal!r}{extra} @{self.line}:{self.token_number}>"


@dataclass
class GroupFrame:
    """An open `{ }` block while annotating.

    `member_type` is set for typed groups (`name -> : int {`). `closes_block`
    is false for the leading segments of a multi-segment header, which are
    popped together with the segment that owns the brace.
    """
    name: str
    member_type: Optional[str] = None
    closes_block: bool = True
