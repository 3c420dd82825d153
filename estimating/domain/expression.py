# estimating/domain/expression.py
"""
Arithmetic formula evaluator for quantity takeoffs.

Grammar: decimal literals, identifiers ([A-Za-z_][A-Za-z0-9_]*), binary
+ - * /, parentheses. No unary minus, no functions. Infix is converted to
postfix with an explicit operator stack (shunting-yard) and the postfix
stream is evaluated on a value stack. Arithmetic runs on Decimal in a fixed
local context so identical inputs always give identical results.

Entry points, by call site:

- evaluate / evaluate_quantity: strict. A missing variable raises
  UnknownVariable. Used wherever a formula is committed (applying an
  assembly, generating an estimate).
- evaluate_permissive: a missing variable counts as 0, other errors raise.
- preview_quantity: display-time previews. Missing variables count as 0 and
  any evaluation error falls back to quantity 0.

The *_quantity variants clamp negative results to 0.
"""
import decimal
import string
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Union

from estimating.domain.money import ZERO, to_decimal
from estimating.errors import (
    DivisionByZero,
    ExpressionError,
    InvalidExpression,
    UnknownVariable,
)
from estimating.logger import get_logger

logger = get_logger(__name__)

_PRECEDENCE: Dict[str, int] = {"+": 1, "-": 1, "*": 2, "/": 2}
_IDENT_START = set(string.ascii_letters + "_")
_IDENT_BODY = _IDENT_START | set(string.digits)
_NUMBER_CHARS = set(string.digits + ".")

# prec 28 matches the decimal module default, pinned so caller contexts
# cannot change results
_CONTEXT = decimal.Context(prec=28, rounding=decimal.ROUND_HALF_EVEN)

Variables = Mapping[str, object]


@dataclass(frozen=True)
class Token:
    kind: str  # number | variable | operator | paren
    value: Union[str, Decimal]


def tokenize(expression: str) -> List[Token]:
    tokens: List[Token] = []
    i = 0
    n = len(expression)
    while i < n:
        c = expression[i]
        if c.isspace():
            i += 1
        elif c in "()":
            tokens.append(Token("paren", c))
            i += 1
        elif c in _PRECEDENCE:
            tokens.append(Token("operator", c))
            i += 1
        elif c in _NUMBER_CHARS:
            start = i
            while i < n and expression[i] in _NUMBER_CHARS:
                i += 1
            text = expression[start:i]
            try:
                tokens.append(Token("number", Decimal(text)))
            except decimal.InvalidOperation:
                raise InvalidExpression(f"Invalid number: {text}", expression) from None
        elif c in _IDENT_START:
            start = i
            while i < n and expression[i] in _IDENT_BODY:
                i += 1
            tokens.append(Token("variable", expression[start:i]))
        else:
            raise InvalidExpression(f"Unexpected character: {c!r}", expression)
    return tokens


def to_postfix(tokens: List[Token], expression: Optional[str] = None) -> List[Token]:
    output: List[Token] = []
    operators: List[Token] = []

    for token in tokens:
        if token.kind in ("number", "variable"):
            output.append(token)
        elif token.kind == "operator":
            # left-associative: pop while top binds at least as tight
            while (
                operators
                and operators[-1].kind == "operator"
                and _PRECEDENCE[operators[-1].value] >= _PRECEDENCE[token.value]
            ):
                output.append(operators.pop())
            operators.append(token)
        elif token.value == "(":
            operators.append(token)
        else:
            while operators and operators[-1].value != "(":
                output.append(operators.pop())
            if not operators:
                raise InvalidExpression("Mismatched parentheses", expression)
            operators.pop()

    while operators:
        op = operators.pop()
        if op.kind == "paren":
            raise InvalidExpression("Mismatched parentheses", expression)
        output.append(op)

    return output


def evaluate_postfix(
    postfix: List[Token],
    variables: Variables,
    *,
    missing_as_zero: bool = False,
    expression: Optional[str] = None,
) -> Decimal:
    stack: List[Decimal] = []

    with decimal.localcontext(_CONTEXT):
        for token in postfix:
            if token.kind == "number":
                stack.append(token.value)
            elif token.kind == "variable":
                if token.value in variables:
                    stack.append(to_decimal(variables[token.value]))
                elif missing_as_zero:
                    stack.append(ZERO)
                else:
                    raise UnknownVariable(token.value, expression)
            else:
                if len(stack) < 2:
                    raise InvalidExpression("Invalid expression", expression)
                b = stack.pop()
                a = stack.pop()
                op = token.value
                if op == "+":
                    stack.append(a + b)
                elif op == "-":
                    stack.append(a - b)
                elif op == "*":
                    stack.append(a * b)
                else:
                    if b == 0:
                        raise DivisionByZero(expression)
                    stack.append(a / b)

    if len(stack) != 1:
        raise InvalidExpression("Invalid expression", expression)
    return stack[0]


def _run(expression: Optional[str], variables: Optional[Variables], missing_as_zero: bool) -> Decimal:
    if not expression or not expression.strip():
        return ZERO
    tokens = tokenize(expression)
    postfix = to_postfix(tokens, expression)
    return evaluate_postfix(
        postfix,
        variables or {},
        missing_as_zero=missing_as_zero,
        expression=expression,
    )


def evaluate(expression: Optional[str], variables: Optional[Variables] = None) -> Decimal:
    '''
    Strict evaluation, no clamping.

    :raises InvalidExpression: malformed formula
    :raises UnknownVariable: identifier absent from variables
    :raises DivisionByZero: zero denominator
    '''
    return _run(expression, variables, missing_as_zero=False)


def evaluate_permissive(expression: Optional[str], variables: Optional[Variables] = None) -> Decimal:
    """Like evaluate, but identifiers missing from variables count as 0."""
    return _run(expression, variables, missing_as_zero=True)


def evaluate_quantity(expression: Optional[str], variables: Optional[Variables] = None) -> Decimal:
    """Strict evaluation for committed quantities; negative results become 0."""
    return max(ZERO, evaluate(expression, variables))


def preview_quantity(expression: Optional[str], variables: Optional[Variables] = None) -> Decimal:
    """Display-time quantity. Never raises: a broken formula previews as 0."""
    try:
        return max(ZERO, evaluate_permissive(expression, variables))
    except ExpressionError as e:
        logger.warning("Quantity preview fell back to 0 for %r: %s", expression, e)
        return ZERO


def extract_variables(expression: Optional[str]) -> List[str]:
    '''
    Identifiers used by a formula, in first-seen order.

    :raises InvalidExpression: malformed formula
    '''
    if not expression:
        return []
    names: List[str] = []
    for token in tokenize(expression):
        if token.kind == "variable" and token.value not in names:
            names.append(token.value)
    return names
