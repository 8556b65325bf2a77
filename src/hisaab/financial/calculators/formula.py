"""Payment formula evaluator.

Recurring payment rules store a tiny arithmetic expression such as
``balance * 0.02 + 50`` or ``(balance * interestRate / 100 / 12) + 100``.

Evaluation is a two-step contract:

1. Each variable name is replaced verbatim by its value written as a plain
   decimal literal, and the result may then only contain digits, ``+ - * / ( ) .``
   and spaces. Anything else is rejected.
2. The sanitized string is parsed by a small recursive-descent parser and
   evaluated in ``Decimal``. Nothing is ever handed to ``eval``.

Grammar::

    expr   := term (("+" | "-") term)*
    term   := factor (("*" | "/") factor)*
    factor := ("+" | "-") factor | "(" expr ")" | number
    number := digits ["." digits] | "." digits
"""

from __future__ import annotations

import re
from decimal import Decimal, DivisionByZero, InvalidOperation, Overflow, localcontext

from loguru import logger

from hisaab.core.exceptions import InvalidFormulaError

from ..models import to_decimal

FORMULA_VARIABLES = ("balance", "interestRate")

_ALLOWED = re.compile(r"[0-9+\-*/(). ]+")
_TOKEN = re.compile(r"\s*(?:(\d+\.?\d*|\.\d+)|(.))")
_PRECISION = 28


def _literal(value: Decimal) -> str:
    # Positional notation only: "1E+3" would trip the character whitelist.
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def substitute_variables(expression: str, variables: dict[str, object]) -> str:
    """Replace each known variable name with its decimal literal."""
    processed = expression
    for name in FORMULA_VARIABLES:
        value = variables.get(name)
        processed = processed.replace(name, _literal(to_decimal(value if value is not None else 0)))
    return processed


class _Parser:
    def __init__(self, text: str):
        self.tokens = self._tokenize(text)
        self.pos = 0

    @staticmethod
    def _tokenize(text: str) -> list[tuple[str, str]]:
        tokens = []
        for match in _TOKEN.finditer(text.rstrip()):
            number, op = match.groups()
            if number is not None:
                tokens.append(("num", number))
            else:
                tokens.append(("op", op))
        return tokens

    def _peek(self) -> str | None:
        if self.pos < len(self.tokens):
            kind, value = self.tokens[self.pos]
            return value if kind == "op" else None
        return None

    def parse(self) -> Decimal:
        if not self.tokens:
            raise InvalidFormulaError("Formula is empty")
        result = self._expr()
        if self.pos != len(self.tokens):
            raise InvalidFormulaError(f"Unexpected token {self.tokens[self.pos][1]!r}")
        return result

    def _expr(self) -> Decimal:
        value = self._term()
        while self._peek() in ("+", "-"):
            op = self.tokens[self.pos][1]
            self.pos += 1
            rhs = self._term()
            value = value + rhs if op == "+" else value - rhs
        return value

    def _term(self) -> Decimal:
        value = self._factor()
        while self._peek() in ("*", "/"):
            op = self.tokens[self.pos][1]
            self.pos += 1
            rhs = self._factor()
            value = value * rhs if op == "*" else value / rhs
        return value

    def _factor(self) -> Decimal:
        if self.pos >= len(self.tokens):
            raise InvalidFormulaError("Formula ended unexpectedly")
        kind, value = self.tokens[self.pos]
        self.pos += 1
        if kind == "num":
            return Decimal(value)
        if value == "-":
            return -self._factor()
        if value == "+":
            return self._factor()
        if value == "(":
            inner = self._expr()
            if self._peek() != ")":
                raise InvalidFormulaError("Unbalanced parentheses")
            self.pos += 1
            return inner
        raise InvalidFormulaError(f"Unexpected token {value!r}")


def evaluate_formula(expression: str, variables: dict[str, object]) -> Decimal:
    """Evaluate a payment formula.

    Args:
        expression: Arithmetic over ``balance`` and ``interestRate``.
        variables: Mapping with ``balance`` and ``interestRate`` values.

    Returns:
        The result, clamped to a minimum of 0.

    Raises:
        InvalidFormulaError: Disallowed characters, malformed syntax, or a
            non-finite result (e.g. division by zero).
    """
    processed = substitute_variables(expression, variables)
    if not _ALLOWED.fullmatch(processed):
        logger.warning(f"Rejected formula with disallowed characters: {expression!r}")
        raise InvalidFormulaError(f"Formula contains invalid characters: {expression!r}")

    try:
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            ctx.traps[DivisionByZero] = True
            ctx.traps[InvalidOperation] = True
            ctx.traps[Overflow] = True
            result = _Parser(processed).parse()
    except (ArithmeticError, RecursionError) as e:
        raise InvalidFormulaError(f"Formula did not evaluate to a valid number: {expression!r}") from e

    if not result.is_finite():
        raise InvalidFormulaError(f"Formula did not evaluate to a valid number: {expression!r}")

    logger.debug(f"Formula {expression!r} -> {processed!r} = {result}")
    return max(Decimal("0"), result)


def validate_formula(expression: str) -> None:
    """Check a formula against representative values before it is saved.

    Raises:
        InvalidFormulaError: If the formula cannot be evaluated.
    """
    evaluate_formula(expression, {"balance": Decimal("1000"), "interestRate": Decimal("5")})
