"""Lexer for the Para language.

Splitting text into tokens is delegated to Lark: the grammar below only
declares terminals (the single rule exists so that Lark keeps every
terminal), and `Lark.lex` runs its basic lexer over the source. The
resulting Lark tokens are then mapped onto Para token kinds:

* identifiers are checked against the keyword table (`int`, `true`,
  `muta`, ...);
* numbers become `INT` or `FLOAT` depending on a decimal point;
* runs of newlines collapse into a single `NEWLINE`, and no `NEWLINE`
  precedes the first real token;
* an `EOF` token always closes the list.

`tokenize` is the public entry point.
"""

from __future__ import annotations

from typing import List

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import ErrorVal, LexError
from . import tokens as tk
from .tokens import Token


PARA_TERMINALS = r"""
    start: _item*
    _item: NAME | NUMBER | STRING
         | ARROW | COLON | EQUAL | QMARK
         | PLUS | MINUS | STAR | SLASH | PERCENT | CARET
         | LPAR | RPAR | LBRACE | RBRACE
         | NEWLINE

    NAME: /[A-Za-z_][A-Za-z0-9_]*/
    NUMBER: /[0-9]+(\.[0-9]+)?/
    STRING: /"(?:[^"\\\n]|\\.)*"/

    ARROW: "->"
    COLON: ":"
    EQUAL: "="
    QMARK: "?"
    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"
    PERCENT: "%"
    CARET: "^"
    LPAR: "("
    RPAR: ")"
    LBRACE: "{"
    RBRACE: "}"

    NEWLINE: /(\r?\n)+/

    // Comments and inline whitespace
    LINE_COMMENT: /\/\/[^\n]*/
    BLOCK_COMMENT: /\/\*[\s\S]*?\*\//
    WS_INLINE: /[ \t\r]+/
    %ignore WS_INLINE
    %ignore LINE_COMMENT
    %ignore BLOCK_COMMENT
"""


PARA_LEXER = Lark(
    PARA_TERMINALS,
    parser='lalr',
    lexer='basic',
)


# Lark terminal name -> Para token kind (NAME and NUMBER are decided per token)
TERMINAL_KINDS = {
    'STRING': tk.STRING,
    'ARROW': tk.ARROW,
    'COLON': tk.TYPE_ASSIGN,
    'EQUAL': tk.VALUE_ASSIGN,
    'QMARK': tk.INSPECT,
    'PLUS': tk.PLUS,
    'MINUS': tk.MINUS,
    'STAR': tk.STAR,
    'SLASH': tk.SLASH,
    'PERCENT': tk.PERCENT,
    'CARET': tk.POWER,
    'LPAR': tk.LPAREN,
    'RPAR': tk.RPAREN,
    'LBRACE': tk.LBRACE,
    'RBRACE': tk.RBRACE,
    'NEWLINE': tk.NEWLINE,
}


def _kind_of(terminal) -> str:
    if terminal.type == 'NAME':
        return tk.KEYWORDS.get(terminal.value, tk.IDENT)
    if terminal.type == 'NUMBER':
        return tk.FLOAT if '.' in terminal.value else tk.INT
    return TERMINAL_KINDS[terminal.type]


def tokenize(source: str) -> List[Token]:
    """Convert Para source text into a list of tokens ending with EOF."""
    result: List[Token] = []
    line, column = 1, 1
    try:
        for terminal in PARA_LEXER.lex(source):
            kind = _kind_of(terminal)
            if kind == tk.NEWLINE:
                # No leading newline, and never two in a row
                if not result or result[-1].kind == tk.NEWLINE:
                    continue
                result.append(Token(tk.NEWLINE, '\n', terminal.line, terminal.column))
                continue
            result.append(Token(kind, terminal.value, terminal.line, terminal.column))
            line = terminal.end_line or terminal.line
            column = (terminal.end_column or terminal.column)
    except UnexpectedCharacters as e:
        raise LexError(ErrorVal(
            'UnexpectedCharacter',
            f"unexpected character {e.char!r}",
            line=e.line,
            token=e.column,
        ))
    result.append(Token(tk.EOF, '', line, column))
    return result
