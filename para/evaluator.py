"""Expression evaluation for Para.

An extracted expression is a flat run of annotated tokens. It is turned
into postfix order with the shunting-yard algorithm and then evaluated on
a value stack. Precedence, highest first:

    ^        right associative
    unary -  prefix
    * / %    left associative
    + -      left associative

Operands are literals or bare names looked up in the root scope. If either
operand of an operator is a float the operation is done in floating point,
otherwise in 32-bit integer arithmetic.
"""

from __future__ import annotations

import math
from typing import Callable, List, Optional, Sequence

from .errors import ErrorVal, EvaluationError, ResolutionError
from . import tokens as tk
from .tokens import AnnotatedToken
from .scope import Scope
from .types import FloatVal, IntVal, Value, in_int_range, is_numeric, type_name

NEG = 'u-'

PRECEDENCE = {
    '+': 1,
    '-': 1,
    '*': 2,
    '/': 2,
    '%': 2,
    NEG: 3,
    '^': 4,
}
RIGHT_ASSOCIATIVE = frozenset({'^', NEG})


def _error(name: str, message: str, token: Optional[AnnotatedToken]) -> EvaluationError:
    if token is None:
        return EvaluationError(ErrorVal(name, message))
    return EvaluationError(ErrorVal(name, message, token.line, token.token_number))


def to_postfix(tokens: Sequence[AnnotatedToken]) -> List[AnnotatedToken]:
    """Convert an infix token run to postfix order."""
    output: List[AnnotatedToken] = []
    stack: List[AnnotatedToken] = []
    previous: Optional[AnnotatedToken] = None
    for token in tokens:
        role = token.role
        if role in (tk.R_VALUE, tk.R_LOOKUP):
            output.append(token)
        elif role == tk.R_OPERATOR:
            prefix = previous is None or previous.role in (tk.R_OPERATOR, tk.R_LPAREN)
            if prefix and token.literal == '+':
                pass
            elif prefix and token.literal == '-':
                stack.append(AnnotatedToken(
                    role=tk.R_OPERATOR, literal=NEG, kind=token.kind,
                    line=token.line, token_number=token.token_number))
            else:
                op = token.literal
                while stack and stack[-1].role == tk.R_OPERATOR:
                    top = PRECEDENCE[stack[-1].literal]
                    if top > PRECEDENCE[op] or (top == PRECEDENCE[op] and op not in RIGHT_ASSOCIATIVE):
                        output.append(stack.pop())
                    else:
                        break
                stack.append(token)
        elif role == tk.R_LPAREN:
            stack.append(token)
        elif role == tk.R_RPAREN:
            while stack and stack[-1].role != tk.R_LPAREN:
                output.append(stack.pop())
            if not stack:
                raise _error('InvalidExpression', "unbalanced ')'", token)
            stack.pop()
        elif role == tk.R_ARROW:
            raise _error('InvalidExpression', "'->' is not allowed in an expression", token)
        else:
            raise _error('InvalidExpression', f"unexpected {token.literal!r} in expression", token)
        previous = token

    while stack:
        token = stack.pop()
        if token.role == tk.R_LPAREN:
            raise _error('InvalidExpression', "unbalanced '('", token)
        output.append(token)
    return output


def _check_int(result: int, token: AnnotatedToken) -> IntVal:
    if not in_int_range(result):
        raise _error('IntegerOverflow', f"result {result} does not fit in 32 bits", token)
    return IntVal(result)


def negate(a: Value, token: AnnotatedToken) -> Value:
    if isinstance(a, IntVal):
        return _check_int(-a.value, token)
    if isinstance(a, FloatVal):
        return FloatVal(-a.value)
    raise _error('InvalidExpression', f"cannot negate a {type_name(a)}", token)


def apply_binary_op(op: str, a: Value, b: Value, token: AnnotatedToken) -> Value:
    if not is_numeric(a) or not is_numeric(b):
        raise _error('InvalidExpression',
                     f"unsupported {op} for {type_name(a)} and {type_name(b)}", token)
    if isinstance(a, FloatVal) or isinstance(b, FloatVal):
        x = float(a.value)
        y = float(b.value)
        if op == '+':
            return FloatVal(x + y)
        if op == '-':
            return FloatVal(x - y)
        if op == '*':
            return FloatVal(x * y)
        if op == '/':
            if y == 0.0:
                raise _error('DivisionByZero', 'division by zero', token)
            return FloatVal(x / y)
        if op == '%':
            if y == 0.0:
                raise _error('ModuloByZero', 'modulo by zero', token)
            return FloatVal(x % y)
        if op == '^':
            return FloatVal(_float_power(x, y, token))
        raise _error('InvalidExpression', f"unknown operator {op}", token)

    x = a.value
    y = b.value
    if op == '+':
        return _check_int(x + y, token)
    if op == '-':
        return _check_int(x - y, token)
    if op == '*':
        return _check_int(x * y, token)
    if op == '/':
        if y == 0:
            raise _error('DivisionByZero', 'division by zero', token)
        quotient = abs(x) // abs(y)
        return _check_int(quotient if (x < 0) == (y < 0) else -quotient, token)
    if op == '%':
        if y == 0:
            raise _error('ModuloByZero', 'modulo by zero', token)
        return _check_int(x % y, token)
    if op == '^':
        if y < 0:
            return FloatVal(_float_power(float(x), float(y), token))
        if abs(x) > 1 and y > 31:
            raise _error('IntegerOverflow', f"{x} ^ {y} does not fit in 32 bits", token)
        return _check_int(x ** y, token)
    raise _error('InvalidExpression', f"unknown operator {op}", token)


def _float_power(x: float, y: float, token: AnnotatedToken) -> float:
    if x == 0.0 and y < 0:
        raise _error('DivisionByZero', 'zero raised to a negative power', token)
    try:
        return math.pow(x, y)
    except ValueError:
        raise _error('InvalidExpression', f"{x} ^ {y} has no real result", token)
    except OverflowError:
        raise _error('InvalidExpression', f"{x} ^ {y} is out of range", token)


def evaluate_postfix(postfix: Sequence[AnnotatedToken], root: Scope) -> Value:
    stack: List[Value] = []
    for token in postfix:
        if token.role == tk.R_VALUE:
            stack.append(token.value)
        elif token.role == tk.R_LOOKUP:
            variable = root.variables.get(token.literal)
            if variable is None:
                raise ResolutionError(ErrorVal(
                    'VariableNotFoundInScope',
                    f"variable '{token.literal}' not found in root scope",
                    token.line, token.token_number, [token.literal]))
            stack.append(variable.value)
        elif token.literal == NEG:
            if not stack:
                raise _error('NotEnoughOperands', "not enough operands for '-'", token)
            stack.append(negate(stack.pop(), token))
        else:
            if len(stack) < 2:
                raise _error('NotEnoughOperands', f"not enough operands for '{token.literal}'", token)
            b = stack.pop()
            a = stack.pop()
            stack.append(apply_binary_op(token.literal, a, b, token))
    if not stack:
        raise _error('InvalidExpression', 'expression has no value', postfix[0] if postfix else None)
    if len(stack) > 1:
        raise _error('InvalidExpression', 'expression leaves more than one value', postfix[-1])
    return stack[0]


def evaluate_expression(tokens: Sequence[AnnotatedToken], root: Scope,
                        debug: Optional[Callable[[str], None]] = None) -> Value:
    """Evaluate an extracted expression run against the root scope."""
    postfix = to_postfix(tokens)
    if debug is not None:
        debug('postfix: ' + ' '.join(token.literal for token in postfix))
    return evaluate_postfix(postfix, root)
