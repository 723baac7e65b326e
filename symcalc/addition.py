"""
Addition reducer.

Terms are simplified, nested additions spliced, integers folded, and
then every pair of terms is tried against the combination rules until
no pair combines.
"""

from typing import List, Optional

from .expression import (
    Addition, Complex, Division, Expression, Multiplication, Negation,
    Number, compare_expression_vectors, integer, is_integer,
)
from .numeral import Integer
from .utils import coefficient_view

# Marker returned by a combination rule when both terms vanish
_CANCEL = object()


def simplify_addition(expr: Addition, ctx) -> Expression:
    terms: List[Expression] = []
    for term in expr.terms:
        simplified = ctx.simplify(term)
        if isinstance(simplified, Addition):
            terms.extend(simplified.terms)
        else:
            terms.append(simplified)

    terms = _fold_integers(terms, ctx)

    i = 0
    while i < len(terms):
        j = i + 1
        while j < len(terms):
            combined = _combine(terms[i], terms[j], ctx)
            if combined is None:
                j += 1
                continue
            del terms[j]
            if combined is _CANCEL or is_integer(combined, 0):
                del terms[i]
            elif isinstance(combined, Addition):
                terms[i:i + 1] = list(combined.terms)
            else:
                terms[i] = combined
            j = i + 1
        i += 1

    if not terms:
        return integer(0)
    if len(terms) == 1:
        return terms[0]
    return Addition(terms)


def _fold_integers(terms: List[Expression], ctx) -> List[Expression]:
    """Sum every Integer and negated Integer term into one signed term."""
    total = 0
    count = 0
    rest = []
    for term in terms:
        if isinstance(term, Number) and isinstance(term.value, Integer):
            total += term.value.value
            count += 1
        elif (isinstance(term, Negation) and isinstance(term.inner, Number)
              and isinstance(term.inner.value, Integer)):
            total -= term.inner.value.value
            count += 1
        else:
            rest.append(term)
    if count == 0:
        return rest
    if total != 0:
        rest.append(integer(total))
    elif not rest:
        rest.append(integer(0))
    if count > 1:
        ctx.rule("Add numbers", Addition(terms), _as_sum(rest))
    return rest


def _as_sum(terms: List[Expression]) -> Expression:
    if not terms:
        return integer(0)
    return terms[0] if len(terms) == 1 else Addition(terms)


def _combine(a: Expression, b: Expression, ctx) -> Optional[object]:
    """
    Try to merge two terms.

    Returns the merged term, _CANCEL when both vanish, or None when the
    pair does not combine.
    """
    before = Addition((a, b))

    # a + a => 2a
    if a.is_equal(b):
        after = ctx.simplify(Multiplication((integer(2), a)))
        return ctx.rule("Add same expression", before, after)

    if isinstance(a, Number) and isinstance(b, Number):
        after = Number(a.value.add(b.value).simplify())
        return ctx.rule("Add numbers", before, after)

    if isinstance(a, Number) and _is_negative_number(b):
        return ctx.rule("Add numbers", before, ctx.simplify(a.value.sub(b.inner.value)))
    if _is_negative_number(a) and isinstance(b, Number):
        return ctx.rule("Add numbers", before, ctx.simplify(b.value.sub(a.inner.value)))
    if _is_negative_number(a) and _is_negative_number(b):
        after = ctx.negate(Number(a.inner.value.add(b.inner.value).simplify()))
        return ctx.rule("Add numbers", before, after)

    # 2a + 3a => 5a
    if isinstance(_strip(a), Multiplication) or isinstance(_strip(b), Multiplication):
        neg_a, coeff_a, rest_a = coefficient_view(a)
        neg_b, coeff_b, rest_b = coefficient_view(b)
        if rest_a and compare_expression_vectors(rest_a, rest_b):
            total = (-coeff_a if neg_a else coeff_a) + (-coeff_b if neg_b else coeff_b)
            if total == 0:
                ctx.rule("Add similar expression", before, integer(0))
                return _CANCEL
            product = Multiplication([integer(abs(total))] + rest_a)
            after = ctx.simplify(Negation(product) if total < 0 else product)
            return ctx.rule("Add similar expression", before, after)

    # a + (-a) => 0
    if (isinstance(b, Negation) and b.inner.is_equal(a)) or \
            (isinstance(a, Negation) and a.inner.is_equal(b)):
        ctx.rule("Add to zero", before, integer(0))
        return _CANCEL

    if isinstance(a, Complex) and isinstance(b, Complex):
        after = ctx.simplify(Complex(Addition((a.real, b.real)), Addition((a.imag, b.imag))))
        return ctx.rule("Add complex expression", before, after)
    if isinstance(b, Complex):
        a, b = b, a
    if isinstance(a, Complex):
        after = ctx.simplify(Complex(Addition((a.real, b)), a.imag))
        return ctx.rule("Add with a complex expression", before, after)

    if isinstance(a, Division) and isinstance(b, Division):
        if a.denominator.is_equal(b.denominator):
            after = Division(Addition((a.numerator, b.numerator)), a.denominator)
        else:
            after = Division(
                Addition((Multiplication((a.numerator, b.denominator)),
                          Multiplication((b.numerator, a.denominator)))),
                Multiplication((a.denominator, b.denominator)))
        return ctx.rule("Add two fractions", before, ctx.simplify(after))
    if isinstance(b, Division):
        a, b = b, a
    if isinstance(a, Division):
        after = Division(Addition((Multiplication((b, a.denominator)), a.numerator)),
                         a.denominator)
        return ctx.rule("Add with a fraction", before, ctx.simplify(after))

    return None


def _strip(term: Expression) -> Expression:
    return term.inner if isinstance(term, Negation) else term


def _is_negative_number(term: Expression) -> bool:
    return isinstance(term, Negation) and isinstance(term.inner, Number)
