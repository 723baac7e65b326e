"""
Simplification engine.

One pass walks the tree bottom-up: each node's children are simplified
first, then the node is rewritten by the reducer for its shape. The
public ``simplify`` repeats passes until a pass no longer changes the
tree, which makes it idempotent.

Example:
    from symcalc import E, simplify

    simplify(E("(+ a (* 2 a) (* 4 a))"))        # => 7 * a
    simplify(E("(/ (* a a) a)"))                 # => a
    result, trace = simplify(E("(+ 42 42)"), trace=True)
"""

import logging
from typing import Optional

from .addition import simplify_addition
from .config import DEFAULT_LIMITS, Limits
from .errors import DivisionByZero, LimitExceeded, ZeroExponentiationZero
from .expression import (
    Addition, Complex, Constant, Derivative, Division, Equality,
    Exponentiation, Expression, Function, Multiplication, Negation, Number,
    Subtraction, Variable, integer, is_integer,
)
from .functions import FunctionKind
from .multiplication import simplify_multiplication
from .numeral import Integer
from .trace import Observer, RewriteTrace, combine
from .utils import (
    expansion_term_count, gcd, multinomial_expansion, transform_multiplication,
)

logger = logging.getLogger(__name__)


class Context:
    """
    State shared by every reducer during one engine call.

    Holds the observer (or None), the resource limits and the current
    nesting depth.
    """

    def __init__(self, observer: Optional[Observer] = None, limits: Optional[Limits] = None):
        self.observer = observer
        self.limits = limits or DEFAULT_LIMITS
        self.depth = 0

    def enter(self):
        self.depth += 1
        if self.depth > self.limits.max_depth:
            raise LimitExceeded(f"nesting deeper than {self.limits.max_depth} levels")

    def leave(self):
        self.depth -= 1

    def simplify(self, expr: Expression) -> Expression:
        """Run one simplification pass over expr."""
        reducer = _REDUCERS.get(type(expr))
        if reducer is None:
            raise TypeError(f"Cannot simplify {type(expr).__name__}")
        self.enter()
        try:
            if self.observer is not None:
                self.observer.step_started(expr)
            result = reducer(expr, self)
            if self.observer is not None:
                self.observer.step_completed(result)
            return result
        finally:
            self.leave()

    def negate(self, expr: Expression) -> Expression:
        """Negate an already simplified expression."""
        return _negate(expr, self)

    def differentiate(self, expr: Expression, variable: str, order: int) -> Expression:
        from .differentiation import differentiate_n
        return differentiate_n(expr, variable, order, self)

    def rule(self, name: str, before: Expression, after: Expression) -> Expression:
        """Report a rule application and return its result."""
        if self.observer is not None:
            self.observer.rule_applied(name, before, after)
        return after


# ============================================================
# Reducers
# ============================================================

def _identity(expr, ctx):
    return expr


def _simplify_number(expr: Number, ctx) -> Expression:
    reduced = expr.value.simplify()
    if reduced == expr.value:
        return expr
    return ctx.rule("Reduce fraction", expr, Number(reduced))


def _simplify_negation(expr: Negation, ctx) -> Expression:
    return _negate(ctx.simplify(expr.inner), ctx)


def _negate(inner: Expression, ctx) -> Expression:
    before = Negation(inner)
    if isinstance(inner, Negation):
        return ctx.rule("Double negation cancel", before, inner.inner)
    if is_integer(inner, 0):
        return inner
    if isinstance(inner, Multiplication):
        terms = list(inner.terms)
        for pos, term in enumerate(terms):
            if isinstance(term, Number):
                terms[pos] = Negation(term)
                break
            if isinstance(term, Negation) and isinstance(term.inner, Number):
                terms[pos] = term.inner
                break
        else:
            return before
        return ctx.rule("The negative sign goes into the coefficient", before,
                        Multiplication(terms))
    if isinstance(inner, Complex):
        after = ctx.simplify(Complex(Negation(inner.real), Negation(inner.imag)))
        return ctx.rule("Negate a complex expression", before, after)
    if isinstance(inner, Addition):
        after = ctx.simplify(Addition([Negation(t) for t in inner.terms]))
        return ctx.rule("Distribute the negative sign", before, after)
    return before


def _simplify_subtraction(expr: Subtraction, ctx) -> Expression:
    left = ctx.simplify(expr.left)
    right = ctx.simplify(expr.right)
    before = Subtraction(left, right)

    if is_integer(right, 0):
        return ctx.rule("Subtracting zero stay the same", before, left)
    if is_integer(left, 0):
        return ctx.rule("Subtracting from zero", before, _negate(right, ctx))
    if isinstance(left, Number) and isinstance(right, Number):
        return ctx.rule("Subtracting numbers", before, ctx.simplify(left.value.sub(right.value)))
    if isinstance(left, Negation) and isinstance(left.inner, Number) and isinstance(right, Number):
        after = _negate(Number(left.inner.value.add(right.value).simplify()), ctx)
        return ctx.rule("Subtracting numbers", before, after)
    return ctx.simplify(Addition((left, Negation(right))))


def _simplify_division(expr: Division, ctx) -> Expression:
    num = ctx.simplify(expr.numerator)
    den = ctx.simplify(expr.denominator)
    before = Division(num, den)

    if is_integer(den, 0):
        raise DivisionByZero(f"{num} is divided by zero")
    if is_integer(den, 1):
        return ctx.rule("Dividing by one stay the same", before, num)
    if is_integer(num, 0):
        return ctx.rule("Zero divided by anything is zero", before, integer(0))
    if num.is_equal(den):
        return ctx.rule("Dividing by itself is one", before, integer(1))
    if isinstance(num, Number) and isinstance(den, Number):
        after = Number(num.value.div(den.value).simplify())
        return ctx.rule("Dividing numbers", before, after)

    # a/(b/c) => (a*c)/b
    if isinstance(den, Division):
        after = Division(Multiplication((num, den.denominator)), den.numerator)
        return ctx.rule("Dividing by a fraction", before, ctx.simplify(after))
    # (a/b)/c => a/(b*c)
    if isinstance(num, Division):
        after = Division(num.numerator, Multiplication((num.denominator, den)))
        return ctx.rule("Dividing a fraction", before, ctx.simplify(after))
    # (-a)/b => -(a/b)
    if isinstance(num, Negation):
        after = _negate(ctx.simplify(Division(num.inner, den)), ctx)
        return ctx.rule("Moving the negative sign out of the fraction", before, after)
    # a/(-b) => -(a/b)
    if isinstance(den, Negation):
        after = _negate(ctx.simplify(Division(num, den.inner)), ctx)
        return ctx.rule("Moving the negative sign out of the fraction", before, after)
    # c/(a + b i) => c(a - b i)/(a^2 + b^2)
    if isinstance(den, Complex):
        after = Division(
            Multiplication((num, complex_conjugate(den))),
            Addition((Exponentiation(den.real, integer(2)),
                      Exponentiation(den.imag, integer(2)))))
        return ctx.rule("Dividing by a complex expression", before, ctx.simplify(after))
    # a^x / a^y => a^(x-y)
    if isinstance(num, Exponentiation) and isinstance(den, Exponentiation) \
            and num.base.is_equal(den.base):
        after = Exponentiation(num.base, Addition((num.exponent, Negation(den.exponent))))
        return ctx.rule("Dividing powers of the same base", before, ctx.simplify(after))
    # a^x / a => a^(x-1)
    if isinstance(num, Exponentiation) and num.base.is_equal(den):
        after = Exponentiation(num.base, Subtraction(num.exponent, integer(1)))
        return ctx.rule("Dividing powers of the same base", before, ctx.simplify(after))

    cancelled = _cancel_common_factors(num, den, ctx)
    if cancelled is not None:
        return ctx.rule("Cancel common factors", before, cancelled)
    return before


def _factors(expr: Expression):
    return expr.terms if isinstance(expr, Multiplication) else (expr,)


def _power_parts(expr: Expression):
    if isinstance(expr, Exponentiation):
        return expr.base, expr.exponent
    return expr, integer(1)


def _product(negative: bool, coeff: int, rest) -> Expression:
    terms = ([integer(coeff)] if coeff != 1 else []) + list(rest)
    if not terms:
        result = integer(1)
    elif len(terms) == 1:
        result = terms[0]
    else:
        result = Multiplication(terms)
    return Negation(result) if negative else result


def _cancel_common_factors(num: Expression, den: Expression, ctx) -> Optional[Expression]:
    """Cancel factors shared by numerator and denominator, or None."""
    neg_n, coeff_n, rest_n = transform_multiplication(_factors(num))
    neg_d, coeff_d, rest_d = transform_multiplication(_factors(den))
    changed = False

    g = gcd(coeff_n, coeff_d)
    if g > 1:
        coeff_n //= g
        coeff_d //= g
        changed = True

    kept = []
    for factor in rest_n:
        base, exponent = _power_parts(factor)
        for pos, other in enumerate(rest_d):
            if factor.is_equal(other):
                del rest_d[pos]
                changed = True
                break
            other_base, other_exponent = _power_parts(other)
            if base.is_equal(other_base):
                del rest_d[pos]
                changed = True
                if isinstance(exponent, Number) and isinstance(other_exponent, Number) \
                        and isinstance(exponent.value, Integer) \
                        and isinstance(other_exponent.value, Integer):
                    difference = exponent.value.value - other_exponent.value.value
                    if difference > 0:
                        kept.append(Exponentiation(base, integer(difference)))
                    elif difference < 0:
                        rest_d.append(Exponentiation(base, integer(-difference)))
                else:
                    kept.append(Exponentiation(base, Subtraction(exponent, other_exponent)))
                break
        else:
            kept.append(factor)

    if not changed:
        return None
    return ctx.simplify(Division(_product(neg_n, coeff_n, kept),
                                 _product(neg_d, coeff_d, rest_d)))


def _integer_exponent(expr: Expression) -> Optional[int]:
    """The signed value of an Integer or negated Integer, else None."""
    if isinstance(expr, Number) and isinstance(expr.value, Integer):
        return expr.value.value
    if isinstance(expr, Negation) and isinstance(expr.inner, Number) \
            and isinstance(expr.inner.value, Integer):
        return -expr.inner.value.value
    return None


def _simplify_exponentiation(expr: Exponentiation, ctx) -> Expression:
    base = ctx.simplify(expr.base)
    exponent = ctx.simplify(expr.exponent)
    before = Exponentiation(base, exponent)
    n = _integer_exponent(exponent)

    if is_integer(base, 0) and is_integer(exponent, 0):
        raise ZeroExponentiationZero()
    if is_integer(exponent, 0):
        return ctx.rule("Something to the 0th power is one", before, integer(1))
    if is_integer(base, 1) and isinstance(exponent, Number):
        return ctx.rule("One to any power is one", before, integer(1))
    if is_integer(exponent, 1):
        return ctx.rule("Anything to the 1st power stay the same", before, base)
    if isinstance(base, Function) and base.kind is FunctionKind.SQRT and is_integer(exponent, 2):
        return ctx.rule("Square root to the 2nd power cancel", before, base.args[0])
    if isinstance(base, Function) and base.kind is FunctionKind.ROOT \
            and base.args[0].is_equal(exponent):
        return ctx.rule("nth root to the nth power cancel", before, base.args[1])

    # (a^b)^c => a^(b*c)
    if isinstance(base, Exponentiation) and n is not None:
        after = Exponentiation(base.base, Multiplication((base.exponent, exponent)))
        return ctx.rule("Multiply the exponents", before, ctx.simplify(after))
    # (ab)^c => a^c b^c
    if isinstance(base, Multiplication) and n is not None:
        after = Multiplication([Exponentiation(f, exponent) for f in base.terms])
        return ctx.rule("Distribute the exponent", before, ctx.simplify(after))
    # (a + b)^n => multinomial expansion
    if isinstance(base, Addition) and n is not None and n >= 2:
        count = expansion_term_count(len(base.terms), n)
        if count > ctx.limits.max_expansion_terms:
            logger.warning("Not expanding %s: %d terms exceeds the limit of %d",
                           before, count, ctx.limits.max_expansion_terms)
            return before
        after = multinomial_expansion(base.terms, n)
        return ctx.rule("Use the multinomial theorem", before, ctx.simplify(after))

    if n is not None and abs(n) <= ctx.limits.max_power:
        if isinstance(base, Number):
            value = base.value.pow(abs(n))
            if n < 0:
                value = Integer(1).div(value)
            return ctx.rule("Compute the power of a number", before, Number(value.simplify()))
        if isinstance(base, Negation) and isinstance(base.inner, Number):
            after = ctx.simplify(Exponentiation(base.inner, exponent))
            if n % 2:
                after = _negate(after, ctx)
            return ctx.rule("Compute the power of a number", before, after)
        if isinstance(base, Complex) and n >= 2:
            after = ctx.simplify(Multiplication([base] * n))
            return ctx.rule("Expand the power of a complex expression", before, after)

    return before


def _simplify_complex(expr: Complex, ctx) -> Expression:
    real = ctx.simplify(expr.real)
    imag = ctx.simplify(expr.imag)
    if is_integer(imag, 0):
        return ctx.rule("Complex with no imaginary part is real", Complex(real, imag), real)
    return Complex(real, imag)


def _simplify_equality(expr: Equality, ctx) -> Expression:
    return Equality(ctx.simplify(expr.left), ctx.simplify(expr.right))


def _simplify_function(expr: Function, ctx) -> Expression:
    return Function(expr.kind, [ctx.simplify(a) for a in expr.args])


def _simplify_derivative(expr: Derivative, ctx) -> Expression:
    inner = ctx.simplify(expr.expr)
    after = ctx.differentiate(inner, expr.variable, expr.order)
    return ctx.rule("Evaluate the derivative", Derivative(inner, expr.variable, expr.order), after)


_REDUCERS = {
    Number: _simplify_number,
    Variable: _identity,
    Constant: _identity,
    Negation: _simplify_negation,
    Addition: simplify_addition,
    Multiplication: simplify_multiplication,
    Subtraction: _simplify_subtraction,
    Division: _simplify_division,
    Exponentiation: _simplify_exponentiation,
    Equality: _simplify_equality,
    Complex: _simplify_complex,
    Function: _simplify_function,
    Derivative: _simplify_derivative,
}


# ============================================================
# Complex helpers
# ============================================================

def is_complex(expr: Expression) -> bool:
    """True if a Complex node occurs anywhere in expr."""
    if isinstance(expr, Complex):
        return True
    return any(is_complex(child) for child in expr.children())


def complex_conjugate(expr: Expression) -> Expression:
    """a + b i => a - b i; any other expression is returned unchanged."""
    if isinstance(expr, Complex):
        return Complex(expr.real, Negation(expr.imag))
    return expr


# ============================================================
# Public entry point
# ============================================================

def run_to_fixpoint(expr: Expression, ctx: Context) -> Expression:
    """Repeat simplification passes until the tree stops changing."""
    current = expr
    for _ in range(ctx.limits.max_passes):
        try:
            result = ctx.simplify(current)
        except RecursionError as exc:
            raise LimitExceeded("expression nests too deeply") from exc
        if result.is_equal(current):
            return current
        current = result
    logger.warning("simplify stopped after %d passes without reaching a fixpoint",
                   ctx.limits.max_passes)
    return current


def simplify(
    expr: Expression,
    trace: bool = False,
    observer: Optional[Observer] = None,
    limits: Optional[Limits] = None,
):
    """
    Simplify an expression to its normal form.

    Args:
        expr: Expression to simplify
        trace: If True, return (result, trace) tuple
        observer: Optional Observer notified of every rule applied
        limits: Resource limits (default: DEFAULT_LIMITS)

    Returns:
        Simplified expression, or (expression, RewriteTrace) if trace=True

    Raises:
        DivisionByZero: If a division by zero is met
        ZeroExponentiationZero: If 0^0 is met
        Unsupported: If an unsupported derivative is evaluated
        LimitExceeded: If the expression nests too deeply
    """
    recorder = RewriteTrace() if trace else None
    ctx = Context(combine(recorder, observer), limits)
    result = run_to_fixpoint(expr, ctx)
    if recorder is not None:
        recorder.initial = expr
        recorder.final = result
        return result, recorder
    return result
