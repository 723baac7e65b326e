"""
Exact numeral arithmetic.

A numeral is an unsigned integer or an unsigned rational. Negative
quantities never live in a numeral: the engine wraps a Number in a
Negation instead. Results of add/mul/div are not reduced; call
``simplify()`` to bring a Rational to lowest terms.
"""

from dataclasses import dataclass
from fractions import Fraction
from math import gcd
from typing import Tuple

from .errors import DivisionByZero


class Numeral:
    """Common interface of Integer and Rational."""

    __slots__ = ()

    def as_fraction(self) -> Tuple[int, int]:
        """Return (numerator, denominator); an Integer has denominator 1."""
        raise NotImplementedError

    def is_zero(self) -> bool:
        return self.as_fraction()[0] == 0

    def is_one(self) -> bool:
        n, d = self.as_fraction()
        return n == d and d != 0

    def to_fraction(self) -> Fraction:
        n, d = self.as_fraction()
        if d == 0:
            raise DivisionByZero()
        return Fraction(n, d)

    def simplify(self) -> "Numeral":
        """
        Reduce a Rational to lowest terms.

        Returns:
            Integer(n / g) when the denominator equals the gcd g,
            Integer(0) when the numerator is 0, the reduced Rational
            otherwise. An Integer is returned unchanged.

        Raises:
            DivisionByZero: If the denominator is 0
        """
        if isinstance(self, Integer):
            return self
        n, d = self.as_fraction()
        if d == 0:
            raise DivisionByZero()
        if n == 0:
            return Integer(0)
        g = gcd(n, d)
        if d == g:
            return Integer(n // g)
        if g == 1:
            return self
        return Rational(n // g, d // g)

    def add(self, other: "Numeral") -> "Numeral":
        if isinstance(self, Integer) and isinstance(other, Integer):
            return Integer(self.value + other.value)
        n, d = self.as_fraction()
        m, p = other.as_fraction()
        return Rational(n * p + m * d, d * p)

    def sub(self, other: "Numeral"):
        """
        Subtract two numerals.

        The difference may be negative, so the result is an Expression:
        a Number, or a Negation wrapping a Number.
        """
        from .expression import Negation, Number

        n, d = self.as_fraction()
        m, p = other.as_fraction()
        if isinstance(self, Integer) and isinstance(other, Integer):
            if m > n:
                return Negation(Number(Integer(m - n)))
            return Number(Integer(n - m))
        if m * d > n * p:
            return Negation(Number(Rational(m * d - n * p, d * p)))
        return Number(Rational(n * p - m * d, d * p))

    def mul(self, other: "Numeral") -> "Numeral":
        if isinstance(self, Integer) and isinstance(other, Integer):
            return Integer(self.value * other.value)
        n, d = self.as_fraction()
        m, p = other.as_fraction()
        return Rational(n * m, d * p)

    def div(self, other: "Numeral") -> "Numeral":
        """
        Divide two numerals.

        Raises:
            DivisionByZero: If other is zero
        """
        if other.is_zero():
            raise DivisionByZero()
        n, d = self.as_fraction()
        m, p = other.as_fraction()
        return Rational(n * p, d * m)

    def pow(self, exponent: int) -> "Numeral":
        """Raise to a non-negative integer power."""
        n, d = self.as_fraction()
        if isinstance(self, Integer):
            return Integer(n ** exponent)
        return Rational(n ** exponent, d ** exponent)


@dataclass(frozen=True)
class Integer(Numeral):
    value: int

    def __post_init__(self):
        if self.value < 0:
            raise ValueError(f"numerals are unsigned, got {self.value}")

    def as_fraction(self) -> Tuple[int, int]:
        return self.value, 1

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Rational(Numeral):
    numerator: int
    denominator: int

    def __post_init__(self):
        if self.numerator < 0 or self.denominator < 0:
            raise ValueError(
                f"numerals are unsigned, got {self.numerator}/{self.denominator}")

    def as_fraction(self) -> Tuple[int, int]:
        return self.numerator, self.denominator

    def __str__(self) -> str:
        return f"{self.numerator} / {self.denominator}"


def from_fraction(value: Fraction) -> Tuple[bool, Numeral]:
    """Split a Fraction into (negative, reduced numeral)."""
    negative = value < 0
    value = abs(value)
    if value.denominator == 1:
        return negative, Integer(value.numerator)
    return negative, Rational(value.numerator, value.denominator)
