# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Parser for the supported ``$filter`` expression subset.

Grammar
-------
::

    expression := predicate ( "and" predicate )*
    predicate  := FIELD OP literal
                | FUNC "(" FIELD "," literal ")"
    OP         := eq | ne | gt | ge | lt | le
    FUNC       := contains | startswith | endswith
    literal    := 'string' | number | true | false | null

Keywords (``and``, operators, functions, ``true``/``false``/``null``) are
case-insensitive. Field names are passed through untouched. Quoted literals
are always strings; ``''`` inside quotes is an escaped quote.

``or``, ``not`` and parenthesised grouping are rejected rather than
misparsed: a flat AND-chain is the whole language.

Example::

    FilterExpressionParser().parse("name eq 'Electronics' and isActive eq true")
    # (FilterClause("name", EQ, "Electronics"), FilterClause("isActive", EQ, True))
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from stockfly.kernel.exceptions import MalformedQueryException
from stockfly.odata.query import FilterClause, FilterOperator, FilterValue

PARAMETER = "$filter"

_COMPARISON_OPERATORS: dict[str, FilterOperator] = {
    "eq": FilterOperator.EQ,
    "ne": FilterOperator.NE,
    "gt": FilterOperator.GT,
    "ge": FilterOperator.GE,
    "lt": FilterOperator.LT,
    "le": FilterOperator.LE,
}

_FUNCTIONS: dict[str, FilterOperator] = {
    "contains": FilterOperator.CONTAINS,
    "startswith": FilterOperator.STARTSWITH,
    "endswith": FilterOperator.ENDSWITH,
}

_UNSUPPORTED_KEYWORDS = frozenset({"or", "not"})

_NUMBER_RE = re.compile(r"-?\d+(\.\d+)?([eE][+-]?\d+)?")
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class Token:
    kind: str  # IDENT, STRING, NUMBER, LPAREN, RPAREN, COMMA
    text: str
    position: int


def tokenize(expression: str) -> list[Token]:
    """Split a filter expression into tokens."""
    tokens: list[Token] = []
    i = 0
    length = len(expression)
    while i < length:
        char = expression[i]
        if char.isspace():
            i += 1
            continue
        if char == "(":
            tokens.append(Token("LPAREN", char, i))
            i += 1
        elif char == ")":
            tokens.append(Token("RPAREN", char, i))
            i += 1
        elif char == ",":
            tokens.append(Token("COMMA", char, i))
            i += 1
        elif char == "'":
            start = i
            i += 1
            chars: list[str] = []
            while True:
                if i >= length:
                    raise MalformedQueryException(
                        f"Unbalanced quotes in $filter starting at position {start}", parameter=PARAMETER
                    )
                if expression[i] == "'":
                    if i + 1 < length and expression[i + 1] == "'":
                        chars.append("'")
                        i += 2
                        continue
                    i += 1
                    break
                chars.append(expression[i])
                i += 1
            tokens.append(Token("STRING", "".join(chars), start))
        elif (number := _NUMBER_RE.match(expression, i)) is not None:
            tokens.append(Token("NUMBER", number.group(0), i))
            i = number.end()
        elif (ident := _IDENT_RE.match(expression, i)) is not None:
            tokens.append(Token("IDENT", ident.group(0), i))
            i = ident.end()
        else:
            raise MalformedQueryException(
                f"Unexpected character '{char}' in $filter at position {i}", parameter=PARAMETER
            )
    return tokens


class FilterExpressionParser:
    """Parse a ``$filter`` expression into an ordered tuple of :class:`FilterClause`."""

    def parse(self, expression: str | None) -> tuple[FilterClause, ...]:
        if expression is None or not expression.strip():
            return ()
        return _ExpressionReader(tokenize(expression)).read()


class _ExpressionReader:
    """Single-use recursive reader over a token list."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def read(self) -> tuple[FilterClause, ...]:
        clauses = [self._predicate()]
        while not self._at_end():
            token = self._next()
            keyword = token.text.lower() if token.kind == "IDENT" else None
            if keyword == "and":
                clauses.append(self._predicate())
            elif keyword in _UNSUPPORTED_KEYWORDS:
                raise MalformedQueryException(f"'{token.text}' is not supported in $filter", parameter=PARAMETER)
            else:
                raise MalformedQueryException(
                    f"Expected 'and' but found '{token.text}' at position {token.position}", parameter=PARAMETER
                )
        return tuple(clauses)

    def _predicate(self) -> FilterClause:
        token = self._next("a field name")
        if token.kind == "LPAREN":
            raise MalformedQueryException("Grouping with parentheses is not supported in $filter", parameter=PARAMETER)
        if token.kind != "IDENT":
            raise MalformedQueryException(
                f"Expected a field name but found '{token.text}' at position {token.position}", parameter=PARAMETER
            )

        keyword = token.text.lower()
        if keyword in _UNSUPPORTED_KEYWORDS:
            raise MalformedQueryException(f"'{token.text}' is not supported in $filter", parameter=PARAMETER)
        if keyword in _FUNCTIONS and self._peek_kind() == "LPAREN":
            return self._function(_FUNCTIONS[keyword])

        operator_token = self._next(f"an operator after '{token.text}'")
        operator = _COMPARISON_OPERATORS.get(operator_token.text.lower()) if operator_token.kind == "IDENT" else None
        if operator is None:
            raise MalformedQueryException(f"Unknown operator '{operator_token.text}' in $filter", parameter=PARAMETER)

        value = self._literal(f"a value after '{token.text} {operator_token.text}'")
        if value is None and operator not in (FilterOperator.EQ, FilterOperator.NE):
            raise MalformedQueryException(
                f"null can only be compared with eq or ne (got '{operator_token.text}')", parameter=PARAMETER
            )
        return FilterClause(field=token.text, operator=operator, value=value)

    def _function(self, operator: FilterOperator) -> FilterClause:
        self._expect("LPAREN")
        field = self._expect("IDENT")
        self._expect("COMMA")
        value = self._literal(f"a value in {operator.value}()")
        self._expect("RPAREN")
        if not isinstance(value, str):
            raise MalformedQueryException(f"{operator.value}() requires a quoted string value", parameter=PARAMETER)
        return FilterClause(field=field.text, operator=operator, value=value)

    def _literal(self, expected: str) -> FilterValue:
        token = self._next(expected)
        if token.kind == "STRING":
            return token.text
        if token.kind == "NUMBER":
            text = token.text
            if "." in text or "e" in text.lower():
                return float(text)
            return int(text)
        if token.kind == "IDENT":
            keyword = token.text.lower()
            if keyword == "true":
                return True
            if keyword == "false":
                return False
            if keyword == "null":
                return None
        raise MalformedQueryException(
            f"Invalid value '{token.text}' at position {token.position}; strings must be single-quoted",
            parameter=PARAMETER,
        )

    def _expect(self, kind: str) -> Token:
        token = self._next(kind.lower())
        if token.kind != kind:
            raise MalformedQueryException(
                f"Unexpected '{token.text}' at position {token.position} in $filter", parameter=PARAMETER
            )
        return token

    def _next(self, expected: str = "more input") -> Token:
        if self._at_end():
            raise MalformedQueryException(f"Incomplete $filter: expected {expected}", parameter=PARAMETER)
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def _peek_kind(self) -> str | None:
        return None if self._at_end() else self._tokens[self._pos].kind

    def _at_end(self) -> bool:
        return self._pos >= len(self._tokens)
