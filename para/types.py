"""Value types for Para.

Para values form a closed sum over five scalar kinds. Each kind is a small
frozen dataclass; `Value` is the union of them. Helpers here parse
literals, coerce values to a declared type and format values for
diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1

# Declared scalar type names, as written in source after ':'
INT = 'int'
FLOAT = 'float'
STRING = 'string'
BOOL = 'bool'
NULL = 'null'

SCALAR_TYPES = (INT, FLOAT, STRING, BOOL)


@dataclass(frozen=True)
class IntVal:
    value: int

    def __repr__(self) -> str:
        return f"Int({self.value})"


@dataclass(frozen=True)
class FloatVal:
    value: float

    def __repr__(self) -> str:
        return f"Float({self.value!r})"


@dataclass(frozen=True)
class StrVal:
    value: str

    def __repr__(self) -> str:
        return f"Str({self.value!r})"


@dataclass(frozen=True)
class BoolVal:
    value: bool

    def __repr__(self) -> str:
        return f"Bool({self.value})"


@dataclass(frozen=True)
class NullVal:
    """Marker for the Para `null` value."""

    def __repr__(self) -> str:
        return 'Null'


Value = Union[IntVal, FloatVal, StrVal, BoolVal, NullVal]


def in_int_range(n: int) -> bool:
    return INT_MIN <= n <= INT_MAX


def type_name(value: Value) -> str:
    """Return the Para type name of a value."""
    if isinstance(value, IntVal):
        return INT
    if isinstance(value, FloatVal):
        return FLOAT
    if isinstance(value, StrVal):
        return STRING
    if isinstance(value, BoolVal):
        return BOOL
    if isinstance(value, NullVal):
        return NULL
    raise TypeError(f"not a Para value: {value!r}")


def is_numeric(value: Value) -> bool:
    return isinstance(value, (IntVal, FloatVal))


def parse_number(text: str) -> Value:
    """Parse a numeric literal. Raises OverflowError outside the i32 range."""
    if '.' in text:
        return FloatVal(float(text))
    n = int(text)
    if not in_int_range(n):
        raise OverflowError(f"integer literal {text} does not fit in 32 bits")
    return IntVal(n)


# Escapes a string literal may carry; any other backslash pair is kept as written
ESCAPES = {'n': '\n', 't': '\t', '"': '"', '\\': '\\'}


def parse_string(text: str) -> StrVal:
    """Unquote a string literal, processing escapes.

    The lexer hands over the literal with its double quotes. Only the pairs
    in ESCAPES are decoded; `\\q` stays a backslash followed by `q`.
    """
    chars = []
    body = text[1:-1]
    i = 0
    while i < len(body):
        c = body[i]
        if c == '\\' and i + 1 < len(body):
            nxt = body[i + 1]
            chars.append(ESCAPES.get(nxt, c + nxt))
            i += 2
            continue
        chars.append(c)
        i += 1
    return StrVal(''.join(chars))


def escape_string(text: str) -> str:
    return text.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n').replace('\t', '\\t')


def parse_bool(text: str) -> BoolVal:
    return BoolVal(text == 'true')


def coerce(value: Value, declared: Optional[str]) -> Value:
    """Convert a value to a declared scalar type.

    Same type and null always pass; an int widens to float. Anything else
    raises TypeError, which callers turn into a Para error.
    """
    if declared is None or isinstance(value, NullVal):
        return value
    actual = type_name(value)
    if actual == declared:
        return value
    if declared == FLOAT and isinstance(value, IntVal):
        return FloatVal(float(value.value))
    raise TypeError(f"expected {declared}, got {actual}")


def to_display(value: Value) -> str:
    """Format a value the way inspect lines and dumps show it."""
    if isinstance(value, IntVal):
        return str(value.value)
    if isinstance(value, FloatVal):
        return repr(value.value)
    if isinstance(value, StrVal):
        return '"' + escape_string(value.value) + '"'
    if isinstance(value, BoolVal):
        return 'TRUE' if value.value else 'FALSE'
    if isinstance(value, NullVal):
        return '(nothing)'
    raise TypeError(f"not a Para value: {value!r}")


def to_python(value: Value):
    """Unwrap a value into the matching plain Python object."""
    if isinstance(value, (IntVal, FloatVal, StrVal, BoolVal)):
        return value.value
    if isinstance(value, NullVal):
        return None
    raise TypeError(f"not a Para value: {value!r}")


def from_python(obj, declared: Optional[str] = None) -> Value:
    """Wrap a plain Python object (as found in JSON) into a Para value."""
    if obj is None:
        return NullVal()
    if isinstance(obj, bool):
        return BoolVal(obj)
    if isinstance(obj, int):
        if declared == FLOAT:
            return FloatVal(float(obj))
        return IntVal(obj)
    if isinstance(obj, float):
        return FloatVal(obj)
    if isinstance(obj, str):
        return StrVal(obj)
    raise TypeError(f"cannot convert {type(obj).__name__} to a Para value")
