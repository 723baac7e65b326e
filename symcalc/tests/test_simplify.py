"""Tests for the simplification engine."""

import logging
from math import gcd

import pytest
from symcalc import (
    Addition, Complex, Derivative, Division, Equality, Exponentiation,
    Multiplication, Negation, Number, Rational, Subtraction,
    DivisionByZero, ZeroExponentiationZero, LimitExceeded, Limits,
    E, integer, rational, variable, imaginary_unit, simplify, sin, sqrt, root,
    is_complex, complex_conjugate,
)

a, b, c, x = variable("a"), variable("b"), variable("c"), variable("x")


def two(expr):
    return Multiplication((integer(2), expr))


class TestAddition:
    """Tests for addition rules."""

    def test_same_expression(self):
        """a + a => 2a"""
        assert simplify(a + a) == two(a)

    def test_numbers(self):
        assert simplify(integer(42) + integer(42)) == integer(84)

    def test_similar_terms(self):
        """a + 2a + 4a => 7a"""
        assert simplify(a + 2 * a + 4 * a) == Multiplication((integer(7), a))
        assert simplify(Addition((a, two(a), Multiplication((integer(4), a))))) == \
            Multiplication((integer(7), a))

    def test_similar_terms_cancel(self):
        """-2a + a + a => 0"""
        expr = Addition((Multiplication((integer(-2), a)), a, a))
        assert simplify(expr) == integer(0)

    def test_add_zero(self):
        assert simplify(a + 0) == a

    def test_rationals(self):
        """1/2 + 1/2 => 1"""
        assert simplify(rational(1, 2) + rational(1, 2)) == integer(1)

    def test_mixed_signs(self):
        """3 + (-5) => -2"""
        assert simplify(integer(3) + integer(-5)) == integer(-2)

    def test_opposites(self):
        assert simplify(a + Negation(a)) == integer(0)
        assert simplify(two(a) + Negation(two(a))) == integer(0)

    def test_nested_additions_are_spliced(self):
        expr = Addition((a, Addition((b, Addition((c, integer(1)))))))
        result = simplify(expr)
        assert result.is_equal(Addition((a, b, c, integer(1))))

    def test_common_denominator(self):
        """a/b + c/b => (a + c)/b"""
        assert simplify(a / b + c / b) == Division(Addition((a, c)), b)

    def test_complex(self):
        result = simplify(Complex(integer(1), integer(2)) + Complex(integer(3), integer(4)))
        assert result == Complex(integer(4), integer(6))

    def test_order_does_not_matter(self):
        """Permuted inputs give is_equal results."""
        left = simplify(E("(+ x (* 3 y) 4 x)"))
        right = simplify(E("(+ 4 (* 3 y) x x)"))
        assert left.is_equal(right)


class TestMultiplication:
    """Tests for multiplication rules."""

    def test_numbers(self):
        assert simplify(integer(42) * integer(42)) == integer(1764)

    def test_same_expression(self):
        """a * a => a^2, a * a * a => a^3"""
        assert simplify(a * a) == Exponentiation(a, integer(2))
        assert simplify(Multiplication((a, a, a))) == Exponentiation(a, integer(3))

    def test_by_zero(self):
        assert simplify(integer(0) * a) == integer(0)

    def test_by_one(self):
        assert simplify(integer(1) * a) == a

    def test_coefficients_fold(self):
        assert simplify(Multiplication((integer(2), integer(3), a))) == \
            Multiplication((integer(6), a))

    def test_signs(self):
        """Negations are pulled out of the product."""
        assert simplify(Negation(a) * Negation(b)) == Multiplication((a, b))
        assert simplify(Negation(a) * b) == Negation(Multiplication((a, b)))

    def test_negative_coefficient(self):
        """The sign goes into the leading number."""
        assert simplify(integer(-2) * a) == Multiplication((integer(-2), a))

    def test_distribute(self):
        """2(a + b) => 2a + 2b"""
        assert simplify(2 * (a + b)) == Addition((two(a), two(b)))

    def test_difference_of_squares(self):
        """(a + b)(a - b) => a^2 - b^2"""
        result = simplify((a + b) * (a - b))
        assert result.is_equal(Addition((
            Exponentiation(a, integer(2)),
            Negation(Exponentiation(b, integer(2))),
        )))

    def test_times_fraction(self):
        """a(b/c) => ab/c"""
        assert simplify(a * (b / c)) == Division(Multiplication((a, b)), c)

    def test_same_base(self):
        """x^2 x^3 => x^5"""
        assert simplify(x ** 2 * x ** 3) == Exponentiation(x, integer(5))
        assert simplify(x ** 2 * x) == Exponentiation(x, integer(3))


class TestSubtraction:
    """Tests for subtraction rules."""

    def test_numbers(self):
        assert simplify(integer(2) - integer(4)) == integer(-2)
        assert simplify(integer(7) - integer(4)) == integer(3)

    def test_zero(self):
        assert simplify(a - 0) == a
        assert simplify(0 - a) == Negation(a)

    def test_itself(self):
        assert simplify(a - a) == integer(0)

    def test_negative_minus_number(self):
        """(-2) - 3 => -5"""
        assert simplify(Subtraction(integer(-2), integer(3))) == integer(-5)


class TestDivision:
    """Tests for division rules."""

    def test_by_zero(self):
        with pytest.raises(DivisionByZero):
            simplify(a / 0)

    def test_zero_denominator_after_simplification(self):
        """The denominator is simplified before the check."""
        with pytest.raises(DivisionByZero):
            simplify(a / (b - b))

    def test_numbers(self):
        assert simplify(integer(6) / integer(4)) == Number(Rational(3, 2))
        assert simplify(integer(6) / integer(3)) == integer(2)

    def test_by_one_and_zero(self):
        assert simplify(a / 1) == a
        assert simplify(0 / a) == integer(0)

    def test_by_itself(self):
        assert simplify(a / a) == integer(1)
        assert simplify((a + b) / (b + a)) == integer(1)

    def test_cancel_power(self):
        """aa/a => a, x^5/x^2 => x^3"""
        assert simplify(a * a / a) == a
        assert simplify(x ** 5 / x ** 2) == Exponentiation(x, integer(3))

    def test_cancel_coefficients(self):
        """2a/4b => a/2b"""
        result = simplify((2 * a) / (4 * b))
        assert result == Division(a, Multiplication((integer(2), b)))

    def test_cancel_into_denominator(self):
        """x/x^3 => 1/x^2"""
        assert simplify(x / x ** 3) == Division(integer(1), Exponentiation(x, integer(2)))

    def test_negative_numerator(self):
        assert simplify(Negation(a) / b) == Negation(Division(a, b))

    def test_nested_fractions(self):
        """a/(b/c) => ac/b"""
        assert simplify(a / (b / c)) == Division(Multiplication((a, c)), b)

    def test_complex_denominator(self):
        """1/i => -i"""
        assert simplify(integer(1) / imaginary_unit()) == Complex(integer(0), integer(-1))


class TestExponentiation:
    """Tests for exponentiation rules."""

    def test_zero_to_zero(self):
        with pytest.raises(ZeroExponentiationZero):
            simplify(integer(0) ** 0)

    def test_trivial_exponents(self):
        assert simplify(a ** 0) == integer(1)
        assert simplify(a ** 1) == a
        assert simplify(integer(1) ** 7) == integer(1)

    def test_numbers(self):
        assert simplify(integer(2) ** 10) == integer(1024)
        assert simplify(rational(2, 3) ** 2) == Number(Rational(4, 9))

    def test_negative_exponent(self):
        assert simplify(integer(2) ** -2) == Number(Rational(1, 4))

    def test_negative_base(self):
        assert simplify(integer(-2) ** 3) == integer(-8)
        assert simplify(integer(-2) ** 2) == integer(4)

    def test_power_of_power(self):
        """(x^2)^3 => x^6"""
        assert simplify((x ** 2) ** 3) == Exponentiation(x, integer(6))

    def test_power_of_product(self):
        """(ab)^2 => a^2 b^2"""
        assert simplify((a * b) ** 2) == Multiplication((
            Exponentiation(a, integer(2)), Exponentiation(b, integer(2))))

    def test_binomial(self):
        """(a + b)^2 => a^2 + 2ab + b^2"""
        result = simplify((a + b) ** 2)
        assert result.is_equal(Addition((
            Exponentiation(a, integer(2)),
            Multiplication((integer(2), a, b)),
            Exponentiation(b, integer(2)),
        )))

    def test_expansion_limit(self, caplog):
        """Expansions larger than the limit are left alone."""
        expr = (a + b) ** 2
        with caplog.at_level(logging.WARNING, logger="symcalc.simplify"):
            result = simplify(expr, limits=Limits(max_expansion_terms=2))
        assert result == expr
        assert "Not expanding" in caplog.text

    def test_roots(self):
        assert simplify(sqrt(a) ** 2) == a
        assert simplify(root(integer(3), a) ** 3) == a

    def test_imaginary_unit_squared(self):
        """i^2 => -1"""
        assert simplify(imaginary_unit() ** 2) == integer(-1)


class TestNegation:
    """Tests for negation rules."""

    def test_double_negation(self):
        assert simplify(Negation(Negation(a))) == a

    def test_into_coefficient(self):
        """-(2a) => (-2)a"""
        assert simplify(Negation(two(a))) == Multiplication((integer(-2), a))

    def test_distribute(self):
        """-(a + b) => -a + -b"""
        assert simplify(Negation(a + b)) == Addition((Negation(a), Negation(b)))

    def test_complex(self):
        result = simplify(Negation(Complex(integer(1), integer(2))))
        assert result == Complex(integer(-1), integer(-2))

    def test_zero(self):
        assert simplify(Negation(integer(0))) == integer(0)


class TestComplex:
    """Tests for complex numbers."""

    def test_conjugate_product(self):
        """(a + bi)(a - bi) => a^2 + b^2"""
        z = Complex(a, b)
        result = simplify(z * complex_conjugate(z))
        assert result.is_equal(Addition((
            Exponentiation(a, integer(2)), Exponentiation(b, integer(2)))))

    def test_real_when_imaginary_part_vanishes(self):
        assert simplify(Complex(a, integer(0))) == a

    def test_helpers(self):
        assert is_complex(imaginary_unit())
        assert is_complex(sin(a + imaginary_unit()))
        assert not is_complex(a + b)
        assert not is_complex(simplify(imaginary_unit() ** 2))
        assert complex_conjugate(a) == a
        assert complex_conjugate(Complex(a, b)) == Complex(a, Negation(b))


class TestOtherShapes:
    """Tests for shapes that only simplify their children."""

    def test_function_arguments(self):
        assert simplify(sin(a + a)) == sin(two(a))

    def test_equality(self):
        assert simplify(Equality(a + a, integer(3) - integer(1))) == Equality(two(a), integer(2))

    def test_derivative_is_evaluated(self):
        assert simplify(Derivative(x ** 3, "x", 2)) == Multiplication((integer(6), x))

    def test_reduce_fraction(self):
        assert simplify(rational(4, 8)) == Number(Rational(1, 2))


class TestFixpoint:
    """Tests for idempotence and resource limits."""

    @pytest.mark.parametrize("source", [
        "(+ a a)",
        "(* (+ a b) (- a b))",
        "(^ (+ x 1) 3)",
        "(/ (* 2 a) (* 4 b))",
        "(* (complex a b) (complex a (- b)))",
        "(d (* x (sin x)) x)",
    ])
    def test_idempotent(self, source):
        """simplify(simplify(e)) == simplify(e)"""
        once = simplify(E(source))
        assert simplify(once) == once

    def test_rationals_are_reduced(self):
        """Every Rational left in a simplified tree is in lowest terms."""
        def rationals(expr):
            if isinstance(expr, Number) and isinstance(expr.value, Rational):
                yield expr.value
            for child in expr.children():
                yield from rationals(child)

        result = simplify(E("(+ (* 2/4 x) (* 6/8 y) (^ 4/6 2))"))
        found = list(rationals(result))
        assert found
        for value in found:
            assert gcd(value.numerator, value.denominator) == 1

    def test_pass_limit_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="symcalc.simplify"):
            result = simplify(a + a, limits=Limits(max_passes=1))
        assert result == two(a)
        assert "without reaching a fixpoint" in caplog.text

    def test_depth_limit(self):
        with pytest.raises(LimitExceeded):
            simplify(sin(sin(sin(sin(x)))), limits=Limits(max_depth=3))

    def test_deep_nesting(self):
        """Very deep trees fail cleanly instead of overflowing the stack."""
        expr = x
        for _ in range(300):
            expr = Addition((expr, integer(1)))
        with pytest.raises(LimitExceeded):
            simplify(expr)

    def test_invalid_limits(self):
        with pytest.raises(ValueError):
            Limits(max_depth=0)
