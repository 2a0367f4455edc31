"""
Formula evaluator for conditional prompt content.

Formulas are small spreadsheet-style expressions used by ``If`` and by
inline ``{...}`` expressions in markup:

    =count>5
    AND(inputs.level="expert", inputs.count>=3)
    inputs.language != "python" && !inputs.skipTests

Identifiers are resolved against an input mapping; ``inputs.`` prefixes are
optional. An identifier with no value resolves to ``UNSET``, which compares
false against everything. Only genuine syntax or arithmetic failures raise
``EvaluationError``.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pupt.core.expressions import INPUTS_ROOT, ValuePlaceholder
from pupt.exceptions import EvaluationError


class _Unset:
    """Sentinel for identifiers that have no value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()

TOKEN_PATTERN = re.compile(
    r"""
    (?P<ws>\s+)
    |(?P<number>\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)
    |(?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
    |(?P<op>===|!==|==|!=|<>|>=|<=|&&|\|\||[=<>+\-*/&!(),])
    |(?P<name>[A-Za-z_$][A-Za-z0-9_$]*(?:\.[A-Za-z_$][A-Za-z0-9_$]*)*)
    """,
    re.VERBOSE,
)

COMPARISON_OPERATORS = {
    "=": "=",
    "==": "=",
    "===": "=",
    "!=": "!=",
    "!==": "!=",
    "<>": "!=",
    ">": ">",
    "<": "<",
    ">=": ">=",
    "<=": "<=",
}


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    position: int


def tokenize(expression: str) -> list[Token]:
    """
    Split formula text into tokens.

    Params:
        expression: Formula text without the leading ``=``

    Returns:
        List of tokens (whitespace dropped)

    Raises:
        EvaluationError: If an unexpected character is found
    """
    tokens = []
    position = 0
    while position < len(expression):
        match = TOKEN_PATTERN.match(expression, position)
        if not match:
            raise EvaluationError(
                expression,
                f"unexpected character {expression[position]!r}",
                position,
            )
        kind = match.lastgroup
        if kind != "ws":
            tokens.append(Token(kind=kind, text=match.group(), position=position))
        position = match.end()
    return tokens


# AST nodes


@dataclass(frozen=True)
class Constant:
    value: Any

    def evaluate(self, scope: "Scope") -> Any:
        return self.value


@dataclass(frozen=True)
class Reference:
    path: tuple[str, ...]

    def evaluate(self, scope: "Scope") -> Any:
        return scope.lookup(self.path)


@dataclass(frozen=True)
class Unary:
    operator: str
    operand: Any

    def evaluate(self, scope: "Scope") -> Any:
        value = self.operand.evaluate(scope)
        if self.operator == "!":
            return not to_boolean(value)
        if value is UNSET:
            return UNSET
        number = _to_number(value, scope.expression)
        return -number


@dataclass(frozen=True)
class Binary:
    operator: str
    left: Any
    right: Any

    def evaluate(self, scope: "Scope") -> Any:
        if self.operator == "&&":
            return to_boolean(self.left.evaluate(scope)) and to_boolean(
                self.right.evaluate(scope)
            )
        if self.operator == "||":
            return to_boolean(self.left.evaluate(scope)) or to_boolean(
                self.right.evaluate(scope)
            )

        left = self.left.evaluate(scope)
        right = self.right.evaluate(scope)

        if self.operator == "&":
            return _to_text(left) + _to_text(right)
        if left is UNSET or right is UNSET:
            return UNSET

        a = _to_number(left, scope.expression)
        b = _to_number(right, scope.expression)
        if self.operator == "+":
            return a + b
        if self.operator == "-":
            return a - b
        if self.operator == "*":
            return a * b
        if b == 0:
            raise EvaluationError(scope.expression, "division by zero")
        return a / b


@dataclass(frozen=True)
class Compare:
    operator: str
    left: Any
    right: Any

    def evaluate(self, scope: "Scope") -> bool:
        return compare_values(
            self.operator, self.left.evaluate(scope), self.right.evaluate(scope)
        )


@dataclass(frozen=True)
class Call:
    name: str
    arguments: tuple[Any, ...]

    def evaluate(self, scope: "Scope") -> Any:
        function = FUNCTIONS.get(self.name.upper())
        if function is None:
            raise EvaluationError(scope.expression, f"unknown function {self.name}()")
        return function(scope, self.arguments)


class Scope:
    """Read-only view of the inputs used while evaluating one formula."""

    def __init__(self, expression: str, inputs: Mapping[str, Any]):
        self.expression = expression
        self._inputs = inputs

    def lookup(self, path: tuple[str, ...]) -> Any:
        if path[0] == INPUTS_ROOT and len(path) > 1 and path[0] not in self._inputs:
            path = path[1:]
        if path[0] not in self._inputs:
            return UNSET
        value = self._inputs[path[0]]
        for segment in path[1:]:
            if isinstance(value, Mapping) and segment in value:
                value = value[segment]
            else:
                return UNSET
        if value is None or isinstance(value, ValuePlaceholder):
            return UNSET
        return value


class FormulaParser:
    """Recursive-descent parser producing an evaluable node tree.

    Precedence, lowest first: ``||``, ``&&``, comparison, ``+ - &``,
    ``* /``, unary ``- !``, primary.
    """

    def __init__(self, expression: str):
        self.expression = expression
        self.tokens = tokenize(expression)
        self.index = 0

    def parse(self):
        if not self.tokens:
            raise EvaluationError(self.expression, "empty formula")
        node = self._parse_or()
        if self.index < len(self.tokens):
            token = self.tokens[self.index]
            raise EvaluationError(
                self.expression, f"unexpected token {token.text!r}", token.position
            )
        return node

    def _peek(self) -> Token | None:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _accept(self, *texts: str) -> Token | None:
        token = self._peek()
        if token is not None and token.kind == "op" and token.text in texts:
            self.index += 1
            return token
        return None

    def _expect(self, text: str) -> Token:
        token = self._accept(text)
        if token is None:
            found = self._peek()
            where = found.position if found else len(self.expression)
            raise EvaluationError(self.expression, f"expected {text!r}", where)
        return token

    def _parse_or(self):
        node = self._parse_and()
        while self._accept("||"):
            node = Binary("||", node, self._parse_and())
        return node

    def _parse_and(self):
        node = self._parse_comparison()
        while self._accept("&&"):
            node = Binary("&&", node, self._parse_comparison())
        return node

    def _parse_comparison(self):
        node = self._parse_additive()
        token = self._accept(*COMPARISON_OPERATORS)
        if token is not None:
            node = Compare(COMPARISON_OPERATORS[token.text], node, self._parse_additive())
            if self._accept(*COMPARISON_OPERATORS):
                raise EvaluationError(
                    self.expression, "comparisons cannot be chained", token.position
                )
        return node

    def _parse_additive(self):
        node = self._parse_term()
        while True:
            token = self._accept("+", "-", "&")
            if token is None:
                return node
            node = Binary(token.text, node, self._parse_term())

    def _parse_term(self):
        node = self._parse_unary()
        while True:
            token = self._accept("*", "/")
            if token is None:
                return node
            node = Binary(token.text, node, self._parse_unary())

    def _parse_unary(self):
        token = self._accept("-", "!")
        if token is not None:
            return Unary(token.text, self._parse_unary())
        return self._parse_primary()

    def _parse_primary(self):
        token = self._peek()
        if token is None:
            raise EvaluationError(
                self.expression, "unexpected end of formula", len(self.expression)
            )

        if self._accept("("):
            node = self._parse_or()
            self._expect(")")
            return node

        self.index += 1
        if token.kind == "number":
            number = float(token.text)
            return Constant(int(number) if number.is_integer() and "." not in token.text else number)
        if token.kind == "string":
            return Constant(_unquote(token.text))
        if token.kind == "name":
            upper = token.text.upper()
            if self._accept("("):
                arguments = []
                if not self._accept(")"):
                    arguments.append(self._parse_or())
                    while self._accept(","):
                        arguments.append(self._parse_or())
                    self._expect(")")
                return Call(token.text, tuple(arguments))
            if upper == "TRUE":
                return Constant(True)
            if upper == "FALSE":
                return Constant(False)
            return Reference(tuple(token.text.split(".")))

        raise EvaluationError(
            self.expression, f"unexpected token {token.text!r}", token.position
        )


def _unquote(text: str) -> str:
    body = text[1:-1]
    return re.sub(r"\\(.)", r"\1", body)


def _to_number(value: Any, expression: str) -> float | int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            raise EvaluationError(expression, f"{value!r} is not a number") from None
        return int(number) if number.is_integer() else number
    raise EvaluationError(
        expression, f"unsupported operand of type {type(value).__name__}"
    )


def _to_text(value: Any) -> str:
    if value is UNSET:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_comparable_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def compare_values(operator: str, left: Any, right: Any) -> bool:
    """
    Compare two formula values.

    Strings compare case-insensitively, numeric strings compare as numbers
    against numbers, and any comparison involving ``UNSET`` is false.

    Params:
        operator: One of ``=``, ``!=``, ``>``, ``<``, ``>=``, ``<=``
        left: Left operand value
        right: Right operand value

    Returns:
        Comparison result
    """
    if left is UNSET or right is UNSET:
        return False

    if isinstance(left, bool) or isinstance(right, bool):
        if isinstance(left, bool) and isinstance(right, bool):
            a, b = int(left), int(right)
        elif operator in ("=", "!="):
            return (operator == "!=") != (to_boolean(left) == to_boolean(right))
        else:
            return False
    else:
        a_num = _as_comparable_number(left)
        b_num = _as_comparable_number(right)
        if (
            a_num is not None
            and b_num is not None
            and (not isinstance(left, str) or not isinstance(right, str))
        ):
            a, b = a_num, b_num
        elif isinstance(left, str) and isinstance(right, str):
            a, b = left.lower(), right.lower()
        elif isinstance(left, (list, tuple)) or isinstance(right, (list, tuple)):
            if operator == "=":
                return left == right
            if operator == "!=":
                return left != right
            return False
        else:
            if operator == "=":
                return False
            if operator == "!=":
                return True
            return False

    if operator == "=":
        return a == b
    if operator == "!=":
        return a != b
    if operator == ">":
        return a > b
    if operator == "<":
        return a < b
    if operator == ">=":
        return a >= b
    return a <= b


def to_boolean(value: Any) -> bool:
    """Convert a formula result to a boolean (UNSET and None are false)."""
    if value is UNSET or value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return len(value) > 0
    return bool(value)


def _fn_and(scope: Scope, arguments: tuple) -> bool:
    if not arguments:
        raise EvaluationError(scope.expression, "AND() needs at least one argument")
    return all(to_boolean(argument.evaluate(scope)) for argument in arguments)


def _fn_or(scope: Scope, arguments: tuple) -> bool:
    if not arguments:
        raise EvaluationError(scope.expression, "OR() needs at least one argument")
    return any(to_boolean(argument.evaluate(scope)) for argument in arguments)


def _fn_not(scope: Scope, arguments: tuple) -> bool:
    _check_arity(scope, "NOT", arguments, 1)
    return not to_boolean(arguments[0].evaluate(scope))


def _fn_if(scope: Scope, arguments: tuple) -> Any:
    if len(arguments) not in (2, 3):
        raise EvaluationError(scope.expression, "IF() takes 2 or 3 arguments")
    if to_boolean(arguments[0].evaluate(scope)):
        return arguments[1].evaluate(scope)
    return arguments[2].evaluate(scope) if len(arguments) == 3 else False


def _fn_isblank(scope: Scope, arguments: tuple) -> bool:
    _check_arity(scope, "ISBLANK", arguments, 1)
    value = arguments[0].evaluate(scope)
    return value is UNSET or value == "" or value == [] or value == ()


def _fn_len(scope: Scope, arguments: tuple) -> int:
    _check_arity(scope, "LEN", arguments, 1)
    value = arguments[0].evaluate(scope)
    if value is UNSET:
        return 0
    if isinstance(value, (list, tuple)):
        return len(value)
    return len(_to_text(value))


def _fn_lower(scope: Scope, arguments: tuple) -> str:
    _check_arity(scope, "LOWER", arguments, 1)
    return _to_text(arguments[0].evaluate(scope)).lower()


def _fn_upper(scope: Scope, arguments: tuple) -> str:
    _check_arity(scope, "UPPER", arguments, 1)
    return _to_text(arguments[0].evaluate(scope)).upper()


def _fn_contains(scope: Scope, arguments: tuple) -> bool:
    _check_arity(scope, "CONTAINS", arguments, 2)
    haystack = arguments[0].evaluate(scope)
    needle = arguments[1].evaluate(scope)
    if haystack is UNSET or needle is UNSET:
        return False
    if isinstance(haystack, (list, tuple)):
        return needle in haystack
    return _to_text(needle).lower() in _to_text(haystack).lower()


def _check_arity(scope: Scope, name: str, arguments: tuple, count: int) -> None:
    if len(arguments) != count:
        raise EvaluationError(
            scope.expression, f"{name}() takes {count} argument(s), got {len(arguments)}"
        )


FUNCTIONS: Mapping[str, Callable[[Scope, tuple], Any]] = {
    "AND": _fn_and,
    "OR": _fn_or,
    "NOT": _fn_not,
    "IF": _fn_if,
    "ISBLANK": _fn_isblank,
    "LEN": _fn_len,
    "LOWER": _fn_lower,
    "UPPER": _fn_upper,
    "CONTAINS": _fn_contains,
}


def _strip_marker(expression: str) -> str:
    text = expression.strip()
    if text.startswith("=") and not text.startswith("=="):
        text = text[1:].lstrip()
        if not text:
            raise EvaluationError(expression, "empty formula after '='")
    return text


@lru_cache(maxsize=512)
def parse_formula(expression: str):
    """
    Parse formula text into an evaluable node tree.

    Params:
        expression: Formula text, optionally starting with ``=``

    Returns:
        Root node of the parsed formula

    Raises:
        EvaluationError: If the formula is syntactically invalid
    """
    return FormulaParser(_strip_marker(expression)).parse()


def evaluate_value(expression: str, inputs: Mapping[str, Any]) -> Any:
    """
    Evaluate a formula and return its raw value.

    Params:
        expression: Formula text, optionally starting with ``=``
        inputs: Name to value mapping; never mutated

    Returns:
        The computed value (may be ``UNSET``)

    Raises:
        EvaluationError: On malformed syntax or arithmetic failure
    """
    node = parse_formula(expression)
    return node.evaluate(Scope(expression, inputs))


def evaluate(expression: str, inputs: Mapping[str, Any] | None = None) -> bool:
    """
    Evaluate a formula to a boolean.

    An empty expression is false.

    Params:
        expression: Formula text, optionally starting with ``=``
        inputs: Name to value mapping; never mutated

    Returns:
        Boolean result of the formula

    Raises:
        EvaluationError: On malformed syntax or arithmetic failure
    """
    if not expression or not expression.strip():
        return False
    return to_boolean(evaluate_value(expression, inputs or {}))
