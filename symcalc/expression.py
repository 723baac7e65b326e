"""
Expression model.

An expression is an immutable tree built from thirteen node shapes. Each
shape is a frozen dataclass deriving from Expression, so trees are
hashable, never shared mutably, and compare positionally with ``==``.
The rewrite rules use ``is_equal`` instead, which treats the term lists
of Addition and Multiplication as multisets.

Quick Start:
    from symcalc.expression import variable, integer, sin

    x = variable("x")
    expr = x ** 2 + 3 * x - sin(x)     # unsimplified tree
    str(expr)                          # => "x^2 + (3 * x) - sin(x)"
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import Callable, Iterable, Tuple, Union

from .functions import ConstantKind, FunctionKind
from .numeral import Integer, Numeral, Rational


class Expression:
    """Base class of every expression node."""

    __slots__ = ()

    # ------------------------------------------------------------
    # Structural queries
    # ------------------------------------------------------------

    def children(self) -> Tuple["Expression", ...]:
        """Direct sub-expressions, in storage order."""
        return ()

    def is_equal(self, other: "Expression") -> bool:
        """
        Rewrite-rule equality.

        Addition and Multiplication compare their term lists up to
        permutation (recursively); every other shape compares its
        children positionally.
        """
        if type(self) is not type(other):
            return False
        if isinstance(self, (Addition, Multiplication)):
            return compare_expression_vectors(self.terms, other.terms)
        if isinstance(self, (Number, Variable, Constant)):
            return self == other
        if isinstance(self, Function):
            if self.kind is not other.kind or len(self.args) != len(other.args):
                return False
            return all(a.is_equal(b) for a, b in zip(self.args, other.args))
        if isinstance(self, Derivative):
            return (self.variable == other.variable
                    and self.order == other.order
                    and self.expr.is_equal(other.expr))
        return all(a.is_equal(b) for a, b in zip(self.children(), other.children()))

    def contains_var(self, name: str) -> bool:
        """True if the variable ``name`` occurs anywhere in the tree."""
        if isinstance(self, Variable):
            return self.name == name
        return any(child.contains_var(name) for child in self.children())

    def is_single(self) -> bool:
        """True if the node prints as one continuous token."""
        return False

    # ------------------------------------------------------------
    # Engine shortcuts
    # ------------------------------------------------------------

    def simplify(self, **kwargs):
        """Shortcut for ``symcalc.simplify.simplify(self, **kwargs)``."""
        from .simplify import simplify
        return simplify(self, **kwargs)

    def differentiate(self, variable: str, order: int = 1, **kwargs):
        """Shortcut for ``symcalc.differentiation.differentiate``."""
        from .differentiation import differentiate
        return differentiate(self, variable, order, **kwargs)

    # ------------------------------------------------------------
    # Operator sugar: builds unsimplified nodes
    # ------------------------------------------------------------

    def __add__(self, other):
        other = coerce(other)
        return NotImplemented if other is None else Addition((self, other))

    def __radd__(self, other):
        other = coerce(other)
        return NotImplemented if other is None else Addition((other, self))

    def __sub__(self, other):
        other = coerce(other)
        return NotImplemented if other is None else Subtraction(self, other)

    def __rsub__(self, other):
        other = coerce(other)
        return NotImplemented if other is None else Subtraction(other, self)

    def __mul__(self, other):
        other = coerce(other)
        return NotImplemented if other is None else Multiplication((self, other))

    def __rmul__(self, other):
        other = coerce(other)
        return NotImplemented if other is None else Multiplication((other, self))

    def __truediv__(self, other):
        other = coerce(other)
        return NotImplemented if other is None else Division(self, other)

    def __rtruediv__(self, other):
        other = coerce(other)
        return NotImplemented if other is None else Division(other, self)

    def __pow__(self, other):
        other = coerce(other)
        return NotImplemented if other is None else Exponentiation(self, other)

    def __rpow__(self, other):
        other = coerce(other)
        return NotImplemented if other is None else Exponentiation(other, self)

    def __neg__(self):
        return Negation(self)


def _parenthesize(expr: Expression) -> str:
    return str(expr) if expr.is_single() else f"({expr})"


# ============================================================
# Leaves
# ============================================================

@dataclass(frozen=True)
class Number(Expression):
    value: Numeral

    def is_single(self) -> bool:
        return isinstance(self.value, Integer)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Variable(Expression):
    name: str

    def is_single(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Constant(Expression):
    kind: ConstantKind

    def evaluate(self) -> float:
        return self.kind.evaluate()

    def is_single(self) -> bool:
        return True

    def __str__(self) -> str:
        return str(self.kind)


# ============================================================
# Unary and n-ary operators
# ============================================================

@dataclass(frozen=True)
class Negation(Expression):
    inner: Expression

    def children(self):
        return (self.inner,)

    def __str__(self) -> str:
        return f"-{_parenthesize(self.inner)}"


@dataclass(frozen=True)
class Addition(Expression):
    terms: Tuple[Expression, ...]

    def __post_init__(self):
        object.__setattr__(self, "terms", tuple(self.terms))

    def children(self):
        return self.terms

    def __str__(self) -> str:
        return " + ".join(_parenthesize(t) for t in self.terms)


@dataclass(frozen=True)
class Multiplication(Expression):
    terms: Tuple[Expression, ...]

    def __post_init__(self):
        object.__setattr__(self, "terms", tuple(self.terms))

    def children(self):
        return self.terms

    def __str__(self) -> str:
        return " * ".join(_parenthesize(t) for t in self.terms)


# ============================================================
# Binary operators
# ============================================================

@dataclass(frozen=True)
class Subtraction(Expression):
    left: Expression
    right: Expression

    def children(self):
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"{self.left} - {_parenthesize(self.right)}"


@dataclass(frozen=True)
class Division(Expression):
    numerator: Expression
    denominator: Expression

    def children(self):
        return (self.numerator, self.denominator)

    def __str__(self) -> str:
        return f"{_parenthesize(self.numerator)}/{_parenthesize(self.denominator)}"


@dataclass(frozen=True)
class Exponentiation(Expression):
    base: Expression
    exponent: Expression

    def children(self):
        return (self.base, self.exponent)

    def is_single(self) -> bool:
        return self.base.is_single() and self.exponent.is_single()

    def __str__(self) -> str:
        return f"{_parenthesize(self.base)}^{_parenthesize(self.exponent)}"


@dataclass(frozen=True)
class Equality(Expression):
    left: Expression
    right: Expression

    def children(self):
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"{self.left} = {self.right}"


@dataclass(frozen=True)
class Complex(Expression):
    """real + i*imag, where both parts are arbitrary expressions."""

    real: Expression
    imag: Expression

    def children(self):
        return (self.real, self.imag)

    def __str__(self) -> str:
        prefix = "" if is_integer(self.real, 0) else f"{self.real} + "
        return f"{prefix}i*{_parenthesize(self.imag)}"


# ============================================================
# Functions and derivatives
# ============================================================

@dataclass(frozen=True)
class Function(Expression):
    """
    A named function applied to its arguments.

    Two-argument functions store (base_or_order, argument):
    log(b, x), pow(n, x) = x^n, root(n, x) = x^(1/n).
    """

    kind: FunctionKind
    args: Tuple[Expression, ...]

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))
        if len(self.args) != self.kind.arity:
            raise ValueError(
                f"{self.kind} takes {self.kind.arity} argument(s), got {len(self.args)}")

    @property
    def argument(self) -> Expression:
        """The argument the function is applied to (the last one)."""
        return self.args[-1]

    def children(self):
        return self.args

    def is_single(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"{self.kind}({', '.join(str(a) for a in self.args)})"


@dataclass(frozen=True)
class Derivative(Expression):
    """The order-th derivative of expr with respect to variable."""

    expr: Expression
    variable: str
    order: int = 1

    def children(self):
        return (self.expr,)

    def __str__(self) -> str:
        power = f"^{self.order}" if self.order != 1 else ""
        var = self.variable if len(self.variable) == 1 else f"({self.variable})"
        return f"d{power}/d{var}{power} {_parenthesize(self.expr)}"


# ============================================================
# Equality helpers
# ============================================================

def compare_expression_vectors(lhs: Iterable[Expression], rhs: Iterable[Expression]) -> bool:
    """True if rhs is a permutation of lhs under ``is_equal``."""
    lhs = list(lhs)
    remaining = list(rhs)
    if len(lhs) != len(remaining):
        return False
    for expr in lhs:
        for pos, candidate in enumerate(remaining):
            if expr.is_equal(candidate):
                del remaining[pos]
                break
        else:
            return False
    return True


def is_integer(expr: Expression, n: int) -> bool:
    """True if expr is the literal Integer n."""
    return isinstance(expr, Number) and expr.value == Integer(n)


# ============================================================
# Constructors
# ============================================================

ExprLike = Union[Expression, int, Fraction, str]


def coerce(value) -> Union[Expression, None]:
    """Turn an int, Fraction or variable name into an Expression, else None."""
    if isinstance(value, Expression):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return integer(value)
    if isinstance(value, Fraction):
        return rational(value.numerator, value.denominator)
    if isinstance(value, str):
        return Variable(value)
    return None


def integer(n: int) -> Expression:
    """Integer literal; a negative n becomes Negation(Number)."""
    if n < 0:
        return Negation(Number(Integer(-n)))
    return Number(Integer(n))


def rational(n: int, d: int) -> Expression:
    """Rational literal n/d (unreduced); the sign moves into a Negation."""
    if (n < 0) != (d < 0) and n != 0:
        return Negation(Number(Rational(abs(n), abs(d))))
    return Number(Rational(abs(n), abs(d)))


def variable(name: str) -> Variable:
    return Variable(name)


def pi() -> Constant:
    return Constant(ConstantKind.PI)


def e() -> Constant:
    return Constant(ConstantKind.E)


def tau() -> Constant:
    return Constant(ConstantKind.TAU)


def negation(inner: Expression) -> Negation:
    return Negation(inner)


def addition(*terms: Expression) -> Addition:
    return Addition(terms)


def multiplication(*terms: Expression) -> Multiplication:
    return Multiplication(terms)


def subtraction(left: Expression, right: Expression) -> Subtraction:
    return Subtraction(left, right)


def division(numerator: Expression, denominator: Expression) -> Division:
    return Division(numerator, denominator)


def exponentiation(base: Expression, exponent: Expression) -> Exponentiation:
    return Exponentiation(base, exponent)


def equality(left: Expression, right: Expression) -> Equality:
    return Equality(left, right)


def complex_number(real: Expression, imag: Expression) -> Complex:
    return Complex(real, imag)


def imaginary_unit() -> Complex:
    return Complex(integer(0), integer(1))


def derivative(expr: Expression, var: str, order: int = 1) -> Derivative:
    return Derivative(expr, var, order)


def function(kind: FunctionKind, *args: Expression) -> Function:
    return Function(kind, args)


def _unary(kind: FunctionKind) -> Callable[[Expression], Function]:
    def build(arg: Expression) -> Function:
        return Function(kind, (arg,))
    build.__name__ = kind.value
    build.__doc__ = f"Build {kind.value}(arg)."
    return build


sin = _unary(FunctionKind.SIN)
cos = _unary(FunctionKind.COS)
tan = _unary(FunctionKind.TAN)
asin = _unary(FunctionKind.ASIN)
acos = _unary(FunctionKind.ACOS)
atan = _unary(FunctionKind.ATAN)
sinh = _unary(FunctionKind.SINH)
cosh = _unary(FunctionKind.COSH)
tanh = _unary(FunctionKind.TANH)
asinh = _unary(FunctionKind.ASINH)
acosh = _unary(FunctionKind.ACOSH)
atanh = _unary(FunctionKind.ATANH)
sqrt = _unary(FunctionKind.SQRT)
exp = _unary(FunctionKind.EXP)
ln = _unary(FunctionKind.LN)
log2 = _unary(FunctionKind.LOG2)
log10 = _unary(FunctionKind.LOG10)
abs_ = _unary(FunctionKind.ABS)
ceil = _unary(FunctionKind.CEIL)
floor = _unary(FunctionKind.FLOOR)


def log(base: Expression, arg: Expression) -> Function:
    """Logarithm of arg in the given base."""
    return Function(FunctionKind.LOG, (base, arg))


def pow_(order: Expression, arg: Expression) -> Function:
    """pow(order, arg) = arg^order."""
    return Function(FunctionKind.POW, (order, arg))


def root(order: Expression, arg: Expression) -> Function:
    """root(order, arg) = arg^(1/order)."""
    return Function(FunctionKind.ROOT, (order, arg))
