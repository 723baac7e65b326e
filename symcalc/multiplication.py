"""
Multiplication reducer.

Factors are simplified and spliced, every negation is pulled out into a
single sign, numbers are folded into one leading coefficient, and then
every pair of factors is tried against the combination rules.
"""

from typing import List, Optional

from .expression import (
    Addition, Complex, Division, Exponentiation, Expression, Multiplication,
    Negation, Number, integer, is_integer,
)
from .numeral import Integer, Numeral


class _Product:
    """Running state of one multiplication: sign, coefficient and factors."""

    def __init__(self):
        self.negative = False
        self.coefficient: Numeral = Integer(1)
        self.numbers = 0
        self.factors: List[Expression] = []

    def collect(self, factor: Expression):
        if isinstance(factor, Multiplication):
            for f in factor.terms:
                self.collect(f)
        elif isinstance(factor, Negation):
            self.negative = not self.negative
            self.collect(factor.inner)
        elif isinstance(factor, Number):
            self.coefficient = self.coefficient.mul(factor.value)
            self.numbers += 1
        else:
            self.factors.append(factor)


def simplify_multiplication(expr: Multiplication, ctx) -> Expression:
    product = _Product()
    for term in expr.terms:
        product.collect(ctx.simplify(term))

    if product.coefficient.is_zero():
        return ctx.rule("Multiplying by zero yield zero", expr, integer(0))

    coefficient = product.coefficient.simplify()
    if product.numbers > 1:
        ctx.rule("Multiply numbers", expr, Number(coefficient))
    factors = product.factors
    if not coefficient.is_one():
        factors.insert(0, Number(coefficient))

    i = 0
    while i < len(factors):
        j = i + 1
        while j < len(factors):
            combined = _combine(factors[i], factors[j], ctx)
            if combined is None:
                j += 1
                continue
            if isinstance(combined, Negation):
                product.negative = not product.negative
                combined = combined.inner
            del factors[j]
            if is_integer(combined, 0):
                return ctx.rule("Multiplying by zero yield zero", expr, integer(0))
            if isinstance(combined, Multiplication):
                factors[i:i + 1] = list(combined.terms)
            else:
                factors[i] = combined
            j = i + 1
        i += 1

    if len(factors) <= 3:
        factors = [f for f in factors if not is_integer(f, 1)]

    if not factors:
        result = integer(1)
    elif len(factors) == 1:
        result = factors[0]
    else:
        result = Multiplication(factors)

    if product.negative:
        return ctx.negate(result)
    return result


def _combine(a: Expression, b: Expression, ctx) -> Optional[Expression]:
    """Try to merge two factors; None when the pair does not combine."""
    before = Multiplication((a, b))

    # (a + b i)(c + d i) => ac - bd + i(ad + bc)
    if isinstance(a, Complex) and isinstance(b, Complex):
        after = Complex(
            Addition((Multiplication((a.real, b.real)),
                      Negation(Multiplication((a.imag, b.imag))))),
            Addition((Multiplication((a.real, b.imag)), Multiplication((a.imag, b.real)))))
        return ctx.rule("Multiply two complex expressions", before, ctx.simplify(after))

    # a * a => a^2
    if a.is_equal(b):
        after = ctx.simplify(Exponentiation(a, integer(2)))
        return ctx.rule("Multiply the same expression", before, after)

    if is_integer(a, 1):
        return ctx.rule("Multiply by one stay the same", before, b)
    if is_integer(b, 1):
        return ctx.rule("Multiply by one stay the same", before, a)

    if isinstance(a, Number) and isinstance(b, Number):
        after = Number(a.value.mul(b.value).simplify())
        return ctx.rule("Multiply numbers", before, after)

    # a(b + c i) => ab + ac i
    if isinstance(b, Complex):
        a, b = b, a
    if isinstance(a, Complex):
        after = Complex(Multiplication((b, a.real)), Multiplication((b, a.imag)))
        return ctx.rule("Multiply with a complex expression", before, ctx.simplify(after))

    # (a + b)(c + d) => ac + ad + bc + bd
    if isinstance(a, Addition) and isinstance(b, Addition):
        after = Addition([Multiplication((l, r)) for l in a.terms for r in b.terms])
        return ctx.rule("Multiply additions by distributing each term", before,
                        ctx.simplify(after))

    # a(b + c) => ab + ac
    if isinstance(b, Addition):
        a, b = b, a
    if isinstance(a, Addition):
        after = Addition([Multiplication((t, b)) for t in a.terms])
        return ctx.rule("Multiply by distributing each term", before, ctx.simplify(after))

    # a^x * a^y => a^(x + y)
    if isinstance(a, Exponentiation) and isinstance(b, Exponentiation):
        if a.base.is_equal(b.base):
            after = Exponentiation(a.base, Addition((a.exponent, b.exponent)))
            return ctx.rule("Multiply terms with the same base by adding the exponents",
                            before, ctx.simplify(after))
        return None

    # a^x * a => a^(x + 1)
    if isinstance(b, Exponentiation):
        a, b = b, a
    if isinstance(a, Exponentiation) and a.base.is_equal(b):
        after = Exponentiation(a.base, Addition((a.exponent, integer(1))))
        return ctx.rule("Multiply terms with the same base by adding the exponents",
                        before, ctx.simplify(after))

    # a * (b/c) => (a*b)/c
    if isinstance(b, Division):
        a, b = b, a
    if isinstance(a, Division):
        after = Division(Multiplication((b, a.numerator)), a.denominator)
        return ctx.rule("Multiplying by a fraction", before, ctx.simplify(after))

    return None
