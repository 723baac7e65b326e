"""Tests for the differentiation engine."""

import pytest
from symcalc import (
    Addition, Complex, Derivative, Division, Equality, Exponentiation,
    Multiplication, Negation, InvalidDerivative, Unsupported, SimplifyError,
    E, integer, variable, e, pi, sin, cos, tan, exp, ln, log, pow_, sqrt,
    abs_, ceil, floor, differentiate, simplify,
)

x, y = variable("x"), variable("y")


def times(*terms):
    return Multiplication(terms)


class TestBasicRules:
    """Tests for numbers, variables and sums."""

    def test_constants(self):
        assert differentiate(integer(5), "x") == integer(0)
        assert differentiate(pi(), "x") == integer(0)

    def test_variables(self):
        assert differentiate(x, "x") == integer(1)
        assert differentiate(y, "x") == integer(0)

    def test_power(self):
        """d/dx x^2 => 2x"""
        assert differentiate(x ** 2, "x") == times(integer(2), x)

    def test_sum(self):
        """d/dx (x^2 + x) => 2x + 1"""
        assert differentiate(x ** 2 + x, "x") == Addition((times(integer(2), x), integer(1)))

    def test_difference(self):
        assert differentiate(x ** 2 - x, "x") == Addition((times(integer(2), x), integer(-1)))

    def test_negation(self):
        assert differentiate(Negation(sin(x)), "x") == Negation(cos(x))

    def test_other_variable_is_constant(self):
        """d/dx (xy) => y"""
        assert differentiate(x * y, "x") == y
        assert differentiate(sin(y), "x") == integer(0)


class TestProductAndQuotient:
    """Tests for the product and quotient rules."""

    def test_product(self):
        """d/dx x sin(x) => sin(x) + x cos(x)"""
        result = differentiate(x * sin(x), "x")
        assert result.is_equal(Addition((sin(x), times(x, cos(x)))))

    def test_three_factors(self):
        """d/dx (2 x y) => 2y"""
        assert differentiate(times(integer(2), x, y), "x") == times(integer(2), y)

    def test_quotient(self):
        """d/dx 1/x => -1/x^2"""
        result = differentiate(integer(1) / x, "x")
        assert result == Negation(Division(integer(1), Exponentiation(x, integer(2))))


class TestExponentials:
    """Tests for the exponentiation rules."""

    def test_natural_exponential(self):
        """d/dx e^x => e^x"""
        expr = Exponentiation(e(), x)
        assert differentiate(expr, "x") == expr

    def test_exponential_with_base(self):
        """d/dx 2^x => 2^x ln(2)"""
        result = differentiate(integer(2) ** x, "x")
        assert result == times(Exponentiation(integer(2), x), ln(integer(2)))

    def test_variable_base_and_exponent(self):
        """d/dx x^x goes through e^(x ln x)"""
        assert isinstance(differentiate(x ** x, "x"), Addition)

    def test_constant_power(self):
        assert differentiate(y ** y, "x") == integer(0)


class TestFunctions:
    """Tests for the function table and the chain rule."""

    def test_sin_cos(self):
        assert differentiate(sin(x), "x") == cos(x)
        assert differentiate(cos(x), "x") == Negation(sin(x))

    def test_tan(self):
        assert differentiate(tan(x), "x") == Division(
            integer(1), Exponentiation(cos(x), integer(2)))

    def test_exp_and_ln(self):
        assert differentiate(exp(x), "x") == exp(x)
        assert differentiate(ln(x), "x") == Division(integer(1), x)

    def test_sqrt(self):
        assert differentiate(sqrt(x), "x") == Division(integer(1), times(integer(2), sqrt(x)))

    def test_log_with_base(self):
        """d/dx log(2, x) => 1/(x ln 2)"""
        assert differentiate(log(integer(2), x), "x") == Division(
            integer(1), times(x, ln(integer(2))))

    def test_pow(self):
        """d/dx pow(3, x) => 3 pow(2, x)"""
        assert differentiate(pow_(integer(3), x), "x") == times(
            integer(3), pow_(integer(2), x))

    def test_chain_rule(self):
        """d/dx sin(2x) => 2 cos(2x)"""
        result = differentiate(sin(2 * x), "x")
        assert result == times(integer(2), cos(times(integer(2), x)))

    def test_nested_chain_rule(self):
        """d/dx sin(x^2) => 2x cos(x^2)"""
        result = differentiate(sin(x ** 2), "x")
        assert result.is_equal(times(integer(2), x, cos(Exponentiation(x, integer(2)))))

    def test_function_of_constant(self):
        assert differentiate(sin(integer(2)), "x") == integer(0)

    def test_not_differentiable(self):
        with pytest.raises(Unsupported):
            differentiate(abs_(x), "x")
        with pytest.raises(Unsupported):
            differentiate(floor(2 * x), "x")

    def test_not_differentiable_even_when_constant(self):
        """abs, ceil and floor raise even when free of the variable."""
        with pytest.raises(Unsupported):
            differentiate(abs_(y), "x")
        with pytest.raises(Unsupported):
            differentiate(E("(abs 5)"), "x")
        with pytest.raises(Unsupported):
            differentiate(ceil(integer(2)), "x")


class TestOrders:
    """Tests for higher-order derivatives."""

    def test_second_derivative(self):
        """d^2/dx^2 x^3 => 6x"""
        assert differentiate(x ** 3, "x", 2) == times(integer(6), x)

    def test_order_zero(self):
        """Order 0 returns the expression untouched."""
        expr = x + x
        assert differentiate(expr, "x", 0) == expr

    def test_vanishes(self):
        assert differentiate(x ** 2, "x", 3) == integer(0)

    def test_result_is_simplified(self):
        """Each order's raw rule output is normalized before it is returned."""
        for expr in (x * sin(x), x ** 3 + 2 * x, ln(x) / x):
            for order in (1, 2):
                result = differentiate(expr, "x", order)
                assert simplify(result) == result

    def test_invalid_order(self):
        with pytest.raises(InvalidDerivative):
            differentiate(x, "x", -1)
        with pytest.raises(InvalidDerivative):
            differentiate(x, "x", 1.5)
        with pytest.raises(InvalidDerivative):
            differentiate(x, "x", True)

    def test_empty_variable(self):
        with pytest.raises(InvalidDerivative):
            differentiate(x, "")

    def test_errors_share_a_base(self):
        with pytest.raises(SimplifyError):
            differentiate(x, "x", -1)


class TestOtherShapes:
    """Tests for equalities, complex numbers and nested derivatives."""

    def test_equality(self):
        """Both sides are differentiated."""
        result = differentiate(Equality(x ** 2, integer(1)), "x")
        assert result == Equality(times(integer(2), x), integer(0))

    def test_complex(self):
        """Real and imaginary parts are differentiated separately."""
        result = differentiate(Complex(x ** 2, x), "x")
        assert result == Complex(times(integer(2), x), integer(1))

    def test_nested_derivative(self):
        """d/dx (d/dx x^3) => 6x"""
        assert differentiate(Derivative(x ** 3, "x"), "x") == times(integer(6), x)

    def test_derivative_node_in_simplify(self):
        assert E("(d (^ x 2) x)").simplify() == times(integer(2), x)

    def test_method_shortcut(self):
        assert (x ** 2).differentiate("x") == times(integer(2), x)


class TestTracing:
    """Tests for differentiate(trace=True)."""

    def test_trace_records_rules(self):
        result, trace = differentiate(sin(x), "x", trace=True)
        assert result == cos(x)
        assert "Derivative of sin" in trace.rules_applied()

    def test_trace_initial_is_derivative(self):
        _, trace = differentiate(x ** 2, "x", trace=True)
        assert trace.initial == Derivative(x ** 2, "x", 1)
        assert trace.final == times(integer(2), x)
