"""Integer helpers and the multinomial expansion used by the reducers."""

from math import comb
from typing import Dict, List, Optional, Sequence, Tuple

from .expression import (
    Addition, Exponentiation, Expression, Multiplication, Negation, Number,
    integer,
)
from .numeral import Integer


def gcd(a: int, b: int) -> int:
    """Greatest common divisor; gcd(0, b) is b."""
    if a == 0:
        return b
    while b != 0:
        a, b = b, a % b
    return a


def lcm(a: int, b: int) -> int:
    return a * b // gcd(a, b)


def factorial(n: int) -> int:
    result = 1
    for k in range(2, n + 1):
        result *= k
    return result


_SMALL_PRIMES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47,
                 53, 59, 61, 67, 71, 73, 79, 83, 89, 97)


def prime_factors(n: int) -> Optional[Dict[int, int]]:
    """
    Prime factorization as {prime: multiplicity}.

    Returns None for 0 and 1.

    Example:
        prime_factors(12) -> {2: 2, 3: 1}
    """
    if n in (0, 1):
        return None
    factors: Dict[int, int] = {}
    for p in _SMALL_PRIMES:
        while n % p == 0:
            factors[p] = factors.get(p, 0) + 1
            n //= p
    j = 101
    while j * j <= n:
        while n % j == 0:
            factors[j] = factors.get(j, 0) + 1
            n //= j
        j += 2
    if n > 1:
        factors[n] = factors.get(n, 0) + 1
    return factors


def multinomial_coefficient(n: int, ks: Sequence[int]) -> int:
    """n! / (k1! k2! ... km!)"""
    result = factorial(n)
    for k in ks:
        result //= factorial(k)
    return result


def expansion_term_count(m: int, n: int) -> int:
    """Number of terms in the expansion of (a1 + ... + am)^n."""
    return comb(n + m - 1, m - 1)


def find_permutations_with_sum(m: int, n: int) -> List[List[int]]:
    """
    All length-m lists of non-negative integers summing to n.

    Lists are produced in lexicographic order.
    """
    result: List[List[int]] = []
    current: List[int] = []

    def backtrack(remaining: int):
        if len(current) == m - 1:
            result.append(current + [remaining])
            return
        for i in range(remaining + 1):
            current.append(i)
            backtrack(remaining - i)
            current.pop()

    if m == 0:
        return [[]] if n == 0 else []
    backtrack(n)
    return result


def multinomial_expansion(terms: Sequence[Expression], n: int) -> Addition:
    """
    Expand (t1 + ... + tm)^n by the multinomial theorem.

    Every term of the result is ``Multiplication(coeff, t1^k1, ..., tm^km)``;
    the caller simplifies it.
    """
    cache: Dict[Tuple[int, ...], int] = {}
    result = []
    for exponents in find_permutations_with_sum(len(terms), n):
        # Coefficients only depend on the multiset of exponents
        key = tuple(sorted(exponents))
        if key not in cache:
            cache[key] = multinomial_coefficient(n, key)
        factors = [integer(cache[key])]
        factors.extend(Exponentiation(t, integer(k)) for t, k in zip(terms, exponents))
        result.append(Multiplication(factors))
    return Addition(result)


def transform_multiplication(terms: Sequence[Expression]) -> Tuple[bool, int, List[Expression]]:
    """
    Split the factors of a product into (negative, coefficient, rest).

    Integer and negated-integer factors are folded into the coefficient
    and the sign; every other factor is kept in order.
    """
    negative = False
    coeff = 1
    rest = []
    for term in terms:
        if isinstance(term, Number) and isinstance(term.value, Integer):
            coeff *= term.value.value
        elif (isinstance(term, Negation) and isinstance(term.inner, Number)
              and isinstance(term.inner.value, Integer)):
            coeff *= term.inner.value.value
            negative = not negative
        else:
            rest.append(term)
    return negative, coeff, rest


def coefficient_view(term: Expression) -> Tuple[bool, int, List[Expression]]:
    """
    View any term as sign * coefficient * product(factors).

    A bare term is coefficient 1 of itself; an outer Negation flips the sign.
    """
    negative = False
    if isinstance(term, Negation):
        negative = True
        term = term.inner
    if isinstance(term, Multiplication):
        neg, coeff, rest = transform_multiplication(term.terms)
        return negative != neg, coeff, rest
    return negative, 1, [term]
