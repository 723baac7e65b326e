"""Tests for the s-expression reader, writer and the E builder."""

from fractions import Fraction

import pytest
from symcalc import (
    Addition, Complex, Constant, ConstantKind, Derivative, Division, Equality,
    Exponentiation, Function, FunctionKind, Integer, Multiplication, Negation,
    Number, Rational, Subtraction, Variable,
    E, parse_sexpr, format_sexpr, integer, rational, variable, log, sin,
)

x, y = variable("x"), variable("y")


class TestParse:
    """Tests for parse_sexpr."""

    def test_atoms(self):
        assert parse_sexpr("42") == integer(42)
        assert parse_sexpr("x") == x
        assert parse_sexpr("theta_1") == Variable("theta_1")
        assert parse_sexpr("pi") == Constant(ConstantKind.PI)
        assert parse_sexpr("i") == Complex(integer(0), integer(1))

    def test_negative_numbers(self):
        """Negative literals become negations."""
        assert parse_sexpr("-5") == Negation(Number(Integer(5)))
        assert parse_sexpr("-3/4") == Negation(Number(Rational(3, 4)))

    def test_rational(self):
        """Rationals are read unreduced."""
        assert parse_sexpr("2/4") == Number(Rational(2, 4))

    def test_operators(self):
        assert parse_sexpr("(+ x 1)") == Addition((x, integer(1)))
        assert parse_sexpr("(* 2 x y)") == Multiplication((integer(2), x, y))
        assert parse_sexpr("(- x)") == Negation(x)
        assert parse_sexpr("(- x y)") == Subtraction(x, y)
        assert parse_sexpr("(/ x y)") == Division(x, y)
        assert parse_sexpr("(^ x 2)") == Exponentiation(x, integer(2))
        assert parse_sexpr("(= x 1)") == Equality(x, integer(1))
        assert parse_sexpr("(complex x y)") == Complex(x, y)

    def test_functions(self):
        assert parse_sexpr("(sin x)") == sin(x)
        assert parse_sexpr("(log 2 x)") == log(integer(2), x)

    def test_derivative(self):
        assert parse_sexpr("(d (^ x 2) x)") == Derivative(Exponentiation(x, integer(2)), "x", 1)
        assert parse_sexpr("(d (sin x) x 3)") == Derivative(sin(x), "x", 3)

    def test_whitespace_and_newlines(self):
        assert parse_sexpr("  (+\n x\n  1 )  ") == Addition((x, integer(1)))

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        "(+ x",
        ")",
        "(+ x) y",
        "()",
        "(foo x)",
        "(sin x y)",
        "(log x)",
        "(/ x)",
        "(- x y z)",
        "(+)",
        "((+ x) y)",
        "(d x 1)",
        "(d x x -1)",
        "(d x x y)",
        "1/0",
        "x$",
    ])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_sexpr(text)


class TestFormat:
    """Tests for format_sexpr."""

    def test_leaves(self):
        assert format_sexpr(integer(3)) == "3"
        assert format_sexpr(rational(3, 4)) == "3/4"
        assert format_sexpr(rational(-3, 4)) == "(- 3/4)"
        assert format_sexpr(Constant(ConstantKind.TAU)) == "tau"
        assert format_sexpr(None) == "()"

    def test_operators(self):
        assert format_sexpr(Addition((x, integer(1)))) == "(+ x 1)"
        assert format_sexpr(Negation(integer(2))) == "(- 2)"
        assert format_sexpr(Subtraction(x, y)) == "(- x y)"
        assert format_sexpr(Complex(x, y)) == "(complex x y)"
        assert format_sexpr(log(integer(2), x)) == "(log 2 x)"

    def test_derivative(self):
        assert format_sexpr(Derivative(x, "x")) == "(d x x)"
        assert format_sexpr(Derivative(x, "x", 2)) == "(d x x 2)"

    @pytest.mark.parametrize("text", [
        "(+ x (* 2 y) (- z))",
        "(/ (^ x 2) (sin (ln x)))",
        "(= (root 3 x) (complex 1 (- 2)))",
        "(d (* x y) y 2)",
    ])
    def test_reads_back(self, text):
        """Formatting inverts parsing."""
        assert format_sexpr(parse_sexpr(text)) == text


class TestBuilder:
    """Tests for the E expression builder."""

    def test_call_parses(self):
        assert E("(+ x 1)") == Addition((x, integer(1)))

    def test_op(self):
        assert E.op("+", "x", 1) == Addition((x, integer(1)))
        assert E.op("^", "x", Fraction(1, 2)) == Exponentiation(x, Number(Rational(1, 2)))
        assert E.op("sin", E.op("*", 2, "x")) == sin(Multiplication((integer(2), x)))

    def test_op_derivative(self):
        assert E.op("d", E.op("^", "x", 2), "x") == Derivative(Exponentiation(x, integer(2)), "x")
        assert E.op("d", "x", x, 2) == Derivative(x, "x", 2)

    def test_op_errors(self):
        with pytest.raises(ValueError):
            E.op("nope", "x")
        with pytest.raises(ValueError):
            E.op("+", 1.5)
        with pytest.raises(ValueError):
            E.op("d", "x")

    def test_vars(self):
        a, b = E.vars("a", "b")
        assert a == Variable("a")
        assert b == E.var("b")

    def test_const(self):
        assert E.const(5) == integer(5)
        assert E.const(-2) == integer(-2)
        assert E.const("e") == Constant(ConstantKind.E)

    def test_repr(self):
        assert repr(E) == "E (expression builder)"

    def test_function_kinds_are_closed(self):
        assert FunctionKind.from_name("sin") is FunctionKind.SIN
        assert FunctionKind.from_name("sec") is None
        assert isinstance(E("(sqrt x)"), Function)
