"""
S-expression reader and writer.

Syntax:
    (+ a b ...)        addition           (* a b ...)     multiplication
    (- a b)            subtraction        (- a)           negation
    (/ a b)            division           (^ a b)         exponentiation
    (= a b)            equality           (complex re im) complex number
    (sin x)            unary function     (log b x)       log/pow/root
    (d f x)            derivative         (d f x 2)       derivative of order 2

Atoms:
    42, 3/4            integer and rational numbers (-5 is a negation)
    pi, e, tau         constants
    i                  the imaginary unit
    x, theta_1         variables
"""

import re
from fractions import Fraction
from typing import List, Tuple, Union

from .expression import (
    Addition, Complex, Constant, Derivative, Division, Equality,
    Exponentiation, Expression, Function, Multiplication, Negation, Number,
    Subtraction, Variable, coerce, imaginary_unit, integer, rational,
)
from .functions import ConstantKind, FunctionKind
from .numeral import Rational

_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_']*$")
_RATIONAL = re.compile(r"^(-?\d+)/(\d+)$")

_BINARY = {
    "/": Division,
    "^": Exponentiation,
    "=": Equality,
    "complex": Complex,
}

RawType = Union[str, List["RawType"]]


# ============================================================
# Expression Builder
# ============================================================

class _ExprBuilder:
    """
    Expression builder for symcalc.

    Examples:
        from symcalc import E

        # Parse s-expression string
        expr = E("(+ x (* 2 y))")

        # Build programmatically with E.op()
        expr = E.op("+", "x", E.op("*", 2, "y"))

        # Create variables
        x, y = E.vars("x", "y")
        expr = E.op("^", x, 2)
    """

    def __call__(self, s: str) -> Expression:
        """
        Parse an s-expression string.

        Examples:
            E("(+ x 1)") -> Addition((Variable("x"), Number(Integer(1))))
        """
        return parse_sexpr(s)

    def op(self, name: str, *args) -> Expression:
        """
        Build a compound expression from an operator name and arguments.

        Arguments may be expressions, ints, Fractions or variable names.

        Examples:
            E.op("+", "x", 1)
            E.op("d", E.op("^", "x", 2), "x")
        """
        if name == "d":
            if len(args) not in (2, 3):
                raise ValueError("d takes an expression, a variable and an optional order")
            order = args[2] if len(args) == 3 else 1
            return _build(name, [_coerce_arg(args[0])], args[1], order)
        return _build(name, [_coerce_arg(a) for a in args])

    def var(self, name: str) -> Variable:
        """
        Create a variable.

        Example:
            E.var("x") -> Variable("x")
        """
        return Variable(name)

    def vars(self, *names: str) -> Tuple[Variable, ...]:
        """
        Create multiple variables for unpacking.

        Example:
            x, y, z = E.vars("x", "y", "z")
        """
        return tuple(Variable(n) for n in names)

    def const(self, value: Union[int, Fraction, str]) -> Expression:
        """
        Create a constant: an int, a Fraction, or one of "pi", "e", "tau".

        Example:
            E.const(5) -> Number(Integer(5))
            E.const("pi") -> Constant(ConstantKind.PI)
        """
        if isinstance(value, str):
            return Constant(ConstantKind(value))
        return _coerce_arg(value)

    def __repr__(self) -> str:
        return "E (expression builder)"


# Singleton instance
E = _ExprBuilder()


def _coerce_arg(value) -> Expression:
    expr = coerce(value)
    if expr is None:
        raise ValueError(f"Cannot build an expression from {value!r}")
    return expr


# ============================================================
# Reader
# ============================================================

def _tokenize(s: str) -> List[str]:
    return s.replace("(", " ( ").replace(")", " ) ").split()


def _read(tokens: List[str], pos: int) -> Tuple[RawType, int]:
    if pos >= len(tokens):
        raise ValueError("Unexpected end of input")
    token = tokens[pos]
    if token == ")":
        raise ValueError("Unexpected ')'")
    if token != "(":
        return token, pos + 1
    parts = []
    pos += 1
    while True:
        if pos >= len(tokens):
            raise ValueError("Missing ')'")
        if tokens[pos] == ")":
            return parts, pos + 1
        part, pos = _read(tokens, pos)
        parts.append(part)


def _atom(token: str) -> Expression:
    if re.match(r"^-?\d+$", token):
        return integer(int(token))
    m = _RATIONAL.match(token)
    if m:
        d = int(m.group(2))
        if d == 0:
            raise ValueError(f"Zero denominator in {token}")
        return rational(int(m.group(1)), d)
    if token == "i":
        return imaginary_unit()
    if token in ("pi", "e", "tau"):
        return Constant(ConstantKind(token))
    if _NAME.match(token):
        return Variable(token)
    raise ValueError(f"Invalid atom: {token}")


def _convert(raw: RawType) -> Expression:
    if isinstance(raw, str):
        return _atom(raw)
    if not raw:
        raise ValueError("Empty list")
    head = raw[0]
    if not isinstance(head, str):
        raise ValueError("Operator must be a symbol")
    if head == "d":
        if len(raw) not in (3, 4):
            raise ValueError("d takes an expression, a variable and an optional order")
        var = raw[2]
        if not isinstance(var, str):
            raise ValueError("Derivative variable must be a symbol")
        order = raw[3] if len(raw) == 4 else "1"
        if not isinstance(order, str) or not re.match(r"^\d+$", order):
            raise ValueError(f"Invalid derivative order: {order}")
        return _build(head, [_convert(raw[1])], var, int(order))
    return _build(head, [_convert(a) for a in raw[1:]])


def _build(head: str, args: List[Expression], var=None, order: int = 1) -> Expression:
    if head == "+":
        if not args:
            raise ValueError("+ needs at least one argument")
        return Addition(args)
    if head == "*":
        if not args:
            raise ValueError("* needs at least one argument")
        return Multiplication(args)
    if head == "-":
        if len(args) == 1:
            return Negation(args[0])
        if len(args) == 2:
            return Subtraction(args[0], args[1])
        raise ValueError("- takes one or two arguments")
    if head in _BINARY:
        if len(args) != 2:
            raise ValueError(f"{head} takes two arguments")
        return _BINARY[head](args[0], args[1])
    if head == "d":
        if isinstance(var, Variable):
            var = var.name
        if not isinstance(var, str) or not _NAME.match(var):
            raise ValueError(f"Invalid derivative variable: {var}")
        return Derivative(args[0], var, order)
    kind = FunctionKind.from_name(head)
    if kind is None:
        raise ValueError(f"Unknown operator: {head}")
    if len(args) != kind.arity:
        raise ValueError(f"{head} takes {kind.arity} argument(s)")
    return Function(kind, args)


def parse_sexpr(s: str) -> Expression:
    """
    Parse an S-expression string into an expression tree.

    Examples:
        "(+ x 1)" -> Addition((Variable("x"), Number(Integer(1))))
        "(d (^ x 2) x)" -> Derivative(Exponentiation(...), "x", 1)

    Raises:
        ValueError: If the text is empty, unbalanced or uses an unknown operator
    """
    tokens = _tokenize(s)
    if not tokens:
        raise ValueError("Empty expression")
    raw, pos = _read(tokens, 0)
    if pos != len(tokens):
        raise ValueError(f"Unexpected trailing input: {' '.join(tokens[pos:])}")
    return _convert(raw)


# ============================================================
# Writer
# ============================================================

def format_sexpr(expr: Expression) -> str:
    """
    Format an expression as an S-expression string.

    Examples:
        Addition((Variable("x"), Number(Integer(1)))) -> "(+ x 1)"
        Negation(Number(Integer(2))) -> "(- 2)"
    """
    if expr is None:
        return "()"
    if isinstance(expr, Number):
        if isinstance(expr.value, Rational):
            return f"{expr.value.numerator}/{expr.value.denominator}"
        return str(expr.value.value)
    if isinstance(expr, (Variable, Constant)):
        return str(expr)
    if isinstance(expr, Negation):
        return f"(- {format_sexpr(expr.inner)})"
    if isinstance(expr, Addition):
        return "(+ " + " ".join(format_sexpr(t) for t in expr.terms) + ")"
    if isinstance(expr, Multiplication):
        return "(* " + " ".join(format_sexpr(t) for t in expr.terms) + ")"
    if isinstance(expr, Function):
        return f"({expr.kind} " + " ".join(format_sexpr(a) for a in expr.args) + ")"
    if isinstance(expr, Derivative):
        order = f" {expr.order}" if expr.order != 1 else ""
        return f"(d {format_sexpr(expr.expr)} {expr.variable}{order})"
    head = {
        Subtraction: "-",
        Division: "/",
        Exponentiation: "^",
        Equality: "=",
        Complex: "complex",
    }[type(expr)]
    left, right = expr.children()
    return f"({head} {format_sexpr(left)} {format_sexpr(right)})"
