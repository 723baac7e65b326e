#!/usr/bin/env python3
"""
symcalc Feature Demonstration

This script walks through simplification, complex arithmetic,
differentiation, tracing and error handling.
"""

from symcalc import (
    E, simplify, differentiate, format_sexpr, variable, sin, ln, Limits,
    SimplifyError,
)


def section(title: str):
    """Print a section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print('='*60)


def demo_simplification():
    """Demonstrate the normal forms simplify produces."""
    section("Simplification")

    examples = [
        "(+ a a)",
        "(+ a (* 2 a) (* 4 a))",
        "(+ (* -2 a) a a)",
        "(/ (* a a) a)",
        "(/ (* 2 a) (* 4 b))",
        "(* (+ a b) (- a b))",
        "(^ (+ a b) 3)",
        "(+ 1/2 1/3)",
    ]

    for expr_str in examples:
        result = simplify(E(expr_str))
        print(f"  {expr_str} => {format_sexpr(result)}")


def demo_python_operators():
    """Demonstrate building trees with Python operators."""
    section("Python Operators")

    x = variable("x")
    expr = x ** 2 + 3 * x - sin(x) + x
    print(f"  Built:      {expr}")
    print(f"  Simplified: {simplify(expr)}")


def demo_complex():
    """Demonstrate complex arithmetic."""
    section("Complex Numbers")

    examples = [
        ("(^ i 2)", "i squared"),
        ("(/ 1 i)", "reciprocal of i"),
        ("(* (complex a b) (complex a (- b)))", "times the conjugate"),
        ("(+ (complex 1 2) (complex 3 4))", "sum"),
    ]

    for expr_str, desc in examples:
        result = simplify(E(expr_str))
        print(f"  {desc}: {expr_str} => {format_sexpr(result)}")


def demo_derivatives():
    """Demonstrate symbolic differentiation."""
    section("Symbolic Differentiation")

    examples = [
        ("(^ x 3)", 1),
        ("(^ x 3)", 2),
        ("(* x (sin x))", 1),
        ("(sin (* 2 x))", 1),
        ("(/ 1 x)", 1),
        ("(^ 2 x)", 1),
        ("(^ x x)", 1),
        ("(log 2 x)", 1),
    ]

    for expr_str, order in examples:
        result = differentiate(E(expr_str), "x", order)
        print(f"  d^{order}/dx^{order} {expr_str} => {format_sexpr(result)}")

    # Derivative nodes are evaluated by simplify
    print(f"  (d (ln x) x) => {format_sexpr(simplify(E('(d (ln x) x)')))}")


def demo_tracing():
    """Demonstrate rewrite traces."""
    section("Tracing")

    result, trace = simplify(E("(+ a (* 2 a) 3 4)"), trace=True)
    print(f"  Result: {format_sexpr(result)}")
    print(f"  Rules:  {trace.format('rules')}")
    print(f"  {trace.summary()}")

    print("\n  Explanation:")
    for line in trace.format("explain").splitlines():
        print(f"    {line}")

    _, trace = differentiate(ln(variable("x")), "x", trace=True)
    print(f"\n  {trace.format('compact')}")


def demo_errors():
    """Demonstrate engine errors and limits."""
    section("Errors and Limits")

    examples = [
        (E("(/ a (- b b))"), None),
        (E("(^ 0 0)"), None),
        (E("(d (abs x) x)"), None),
        (E("(sin (sin (sin (sin x))))"), Limits(max_depth=3)),
    ]

    for expr, limits in examples:
        try:
            simplify(expr, limits=limits)
        except SimplifyError as e:
            print(f"  {format_sexpr(expr)}: {e.kind.name} ({e})")


def main():
    """Run all demonstrations."""
    print("symcalc - symbolic simplification and differentiation")
    print("Feature Demonstration")

    demo_simplification()
    demo_python_operators()
    demo_complex()
    demo_derivatives()
    demo_tracing()
    demo_errors()

    print("\n" + "="*60)
    print(" Demo complete!")
    print("="*60)


if __name__ == "__main__":
    main()
