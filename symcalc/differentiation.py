"""
Differentiation engine.

Each node shape has one calculus rule. The rule builds an unsimplified
tree which the simplifier then normalizes, so the engine never has to
produce tidy output itself.

Example:
    from symcalc import E, differentiate

    differentiate(E("(^ x 3)"), "x")             # => 3 * x^2
    differentiate(E("(^ x 3)"), "x", order=2)    # => 6 * x
    differentiate(E("(sin x)"), "x")             # => cos(x)
"""

import logging
from typing import Callable, Dict, Optional

from .config import Limits
from .errors import InvalidDerivative, LimitExceeded, Unsupported
from .expression import (
    Addition, Complex, Constant, Derivative, Division, Equality,
    Exponentiation, Expression, Function, Multiplication, Negation, Number,
    Subtraction, Variable, cos, cosh, exp, integer, ln, pow_, root, sin,
    sinh, sqrt,
)
from .functions import ConstantKind, FunctionKind
from .simplify import Context, run_to_fixpoint
from .trace import Observer, RewriteTrace, combine

logger = logging.getLogger(__name__)


def _check(variable: str, order: int):
    if isinstance(order, bool) or not isinstance(order, int) or order < 0:
        raise InvalidDerivative(f"order must be a non-negative integer, got {order!r}")
    if not isinstance(variable, str) or not variable:
        raise InvalidDerivative("the derivation variable must be a non-empty name")


def differentiate_n(expr: Expression, variable: str, order: int, ctx: Context) -> Expression:
    """
    Differentiate ``order`` times within an existing engine call.

    Each intermediate derivative is simplified before the next one is
    taken. Order 0 returns expr unchanged.
    """
    _check(variable, order)
    result = expr
    for _ in range(order):
        result = ctx.simplify(_derive(result, variable, ctx))
    return result


def differentiate(
    expr: Expression,
    variable: str,
    order: int = 1,
    trace: bool = False,
    observer: Optional[Observer] = None,
    limits: Optional[Limits] = None,
):
    """
    Symbolic derivative of expr with respect to variable.

    Args:
        expr: Expression to differentiate
        variable: Name of the derivation variable
        order: Number of times to differentiate (default: 1)
        trace: If True, return (result, trace) tuple
        observer: Optional Observer notified of every rule applied
        limits: Resource limits (default: DEFAULT_LIMITS)

    Returns:
        The simplified derivative, or (derivative, RewriteTrace) if trace=True

    Raises:
        InvalidDerivative: If order is negative or not an integer, or the
            variable name is empty
        Unsupported: If abs, ceil or floor is differentiated, whatever its argument
        DivisionByZero, ZeroExponentiationZero: From the simplifier
    """
    _check(variable, order)
    recorder = RewriteTrace() if trace else None
    ctx = Context(combine(recorder, observer), limits)
    try:
        result = differentiate_n(expr, variable, order, ctx)
    except RecursionError as exc:
        raise LimitExceeded("expression nests too deeply") from exc
    if order > 0:
        result = run_to_fixpoint(result, ctx)
    logger.debug("d^%d/d%s^%d %s = %s", order, variable, order, expr, result)
    if recorder is not None:
        recorder.initial = Derivative(expr, variable, order)
        recorder.final = result
        return result, recorder
    return result


def _derive(expr: Expression, var: str, ctx: Context) -> Expression:
    """One derivative of expr, not yet simplified."""
    rule = _RULES.get(type(expr))
    if rule is None:
        raise TypeError(f"Cannot differentiate {type(expr).__name__}")
    ctx.enter()
    try:
        return rule(expr, var, ctx)
    finally:
        ctx.leave()


def _report(ctx: Context, name: str, expr: Expression, var: str, after: Expression) -> Expression:
    return ctx.rule(name, Derivative(expr, var, 1), after)


# ============================================================
# Node rules
# ============================================================

def _derive_number(expr, var, ctx):
    return _report(ctx, "Derivative of a number is zero", expr, var, integer(0))


def _derive_constant(expr, var, ctx):
    return _report(ctx, "Derivative of a constant is zero", expr, var, integer(0))


def _derive_variable(expr, var, ctx):
    if expr.name == var:
        return _report(ctx, "Derivative of the derivation variable is one", expr, var, integer(1))
    return _report(ctx, "Derivative of an arbitrary variable is zero", expr, var, integer(0))


def _derive_negation(expr, var, ctx):
    after = Negation(_derive(expr.inner, var, ctx))
    return _report(ctx, "The negative sign stays outside", expr, var, after)


def _derive_addition(expr, var, ctx):
    after = Addition([_derive(t, var, ctx) for t in expr.terms])
    return _report(ctx, "Derivative of sum is given by (f + g)' => f' + g'", expr, var, after)


def _derive_subtraction(expr, var, ctx):
    after = Subtraction(_derive(expr.left, var, ctx), _derive(expr.right, var, ctx))
    return _report(ctx, "Derivative of difference is given by (f - g)' => f' - g'",
                   expr, var, after)


def _derive_multiplication(expr, var, ctx):
    terms = expr.terms
    if len(terms) == 1:
        return _derive(terms[0], var, ctx)
    first = terms[0]
    rest = terms[1] if len(terms) == 2 else Multiplication(terms[1:])
    after = Addition((
        Multiplication((_derive(first, var, ctx), rest)),
        Multiplication((first, _derive(rest, var, ctx))),
    ))
    return _report(ctx, "Derivative of product is given by (f*g)' => f' * g + f * g'",
                   expr, var, after)


def _derive_division(expr, var, ctx):
    f, g = expr.numerator, expr.denominator
    after = Division(
        Subtraction(Multiplication((_derive(f, var, ctx), g)),
                    Multiplication((f, _derive(g, var, ctx)))),
        Exponentiation(g, integer(2)))
    return _report(ctx, "Derivative of quotient is given by (f/g)' => (f'*g - f*g')/g^2",
                   expr, var, after)


def _derive_exponentiation(expr, var, ctx):
    base, exponent = expr.base, expr.exponent
    base_var = base.contains_var(var)
    exponent_var = exponent.contains_var(var)

    if base_var and exponent_var:
        rewritten = Exponentiation(Constant(ConstantKind.E), Multiplication((exponent, ln(base))))
        _report(ctx, "Derivative of exponentiation is given by (f^g)' => (e^(g*ln(f)))'",
                expr, var, rewritten)
        return _derive(rewritten, var, ctx)
    if base_var:
        after = Multiplication((
            exponent,
            Exponentiation(base, Subtraction(exponent, integer(1))),
            _derive(base, var, ctx),
        ))
        return _report(ctx, "Derivative of exponentiation is given by (f^a)' => a * f^(a-1) * f'",
                       expr, var, after)
    if exponent_var:
        if isinstance(base, Constant) and base.kind is ConstantKind.E:
            after = Multiplication((expr, _derive(exponent, var, ctx)))
            return _report(ctx, "Derivative of exponentiation is given by (e^f)' => e^f * f'",
                           expr, var, after)
        after = Multiplication((expr, ln(base), _derive(exponent, var, ctx)))
        return _report(ctx, "Derivative of exponentiation is given by (a^f)' => a^f * ln(a) * f'",
                       expr, var, after)
    return _report(ctx, "Derivative of a constant is zero", expr, var, integer(0))


def _derive_equality(expr, var, ctx):
    return Equality(_derive(expr.left, var, ctx), _derive(expr.right, var, ctx))


def _derive_derivative(expr, var, ctx):
    after = Derivative(_derive(expr.expr, var, ctx), expr.variable, expr.order)
    return _report(ctx, "Derivative of a derivative is given by f'' => (f')'", expr, var, after)


def _derive_complex(expr, var, ctx):
    return Complex(_derive(expr.real, var, ctx), _derive(expr.imag, var, ctx))


# ============================================================
# Functions
# ============================================================

def _one_over(denominator: Expression) -> Division:
    return Division(integer(1), denominator)


def _square(u: Expression) -> Exponentiation:
    return Exponentiation(u, integer(2))


# Derivative of f(u) with respect to u, for single-argument functions
_FUNCTION_RULES: Dict[FunctionKind, Callable[[Expression], Expression]] = {
    FunctionKind.SIN: lambda u: cos(u),
    FunctionKind.COS: lambda u: Negation(sin(u)),
    FunctionKind.TAN: lambda u: _one_over(_square(cos(u))),
    FunctionKind.ASIN: lambda u: _one_over(sqrt(Subtraction(integer(1), _square(u)))),
    FunctionKind.ACOS: lambda u: Negation(_one_over(sqrt(Subtraction(integer(1), _square(u))))),
    FunctionKind.ATAN: lambda u: _one_over(Addition((integer(1), _square(u)))),
    FunctionKind.SINH: lambda u: cosh(u),
    FunctionKind.COSH: lambda u: sinh(u),
    FunctionKind.TANH: lambda u: _one_over(_square(cosh(u))),
    FunctionKind.ASINH: lambda u: _one_over(sqrt(Addition((_square(u), integer(1))))),
    FunctionKind.ACOSH: lambda u: _one_over(sqrt(Subtraction(_square(u), integer(1)))),
    FunctionKind.ATANH: lambda u: _one_over(Subtraction(integer(1), _square(u))),
    FunctionKind.SQRT: lambda u: _one_over(Multiplication((integer(2), sqrt(u)))),
    FunctionKind.EXP: lambda u: exp(u),
    FunctionKind.LN: lambda u: _one_over(u),
    FunctionKind.LOG2: lambda u: _one_over(Multiplication((u, ln(integer(2))))),
    FunctionKind.LOG10: lambda u: _one_over(Multiplication((u, ln(integer(10))))),
}

_NOT_DIFFERENTIABLE = (FunctionKind.ABS, FunctionKind.CEIL, FunctionKind.FLOOR)


def _derive_function(expr: Function, var, ctx):
    if expr.kind in _NOT_DIFFERENTIABLE:
        raise Unsupported(f"{expr.kind} is not differentiable")
    if not any(a.contains_var(var) for a in expr.args):
        return _report(ctx, "Derivative of a function of a constant is zero", expr, var, integer(0))

    if expr.kind.arity == 2:
        order, u = expr.args
        if order.contains_var(var):
            if expr.kind is FunctionKind.LOG:
                rewritten = Division(ln(u), ln(order))
            elif expr.kind is FunctionKind.POW:
                rewritten = Exponentiation(u, order)
            else:
                rewritten = Exponentiation(u, Division(integer(1), order))
            _report(ctx, f"Rewrite {expr.kind} as a power", expr, var, rewritten)
            return _derive(rewritten, var, ctx)
        if expr.kind is FunctionKind.LOG:
            plain = _one_over(Multiplication((u, ln(order))))
        elif expr.kind is FunctionKind.POW:
            plain = Multiplication((order, pow_(Subtraction(order, integer(1)), u)))
        else:
            plain = Division(root(order, u), Multiplication((order, u)))
    else:
        u = expr.args[0]
        plain = _FUNCTION_RULES[expr.kind](u)

    if isinstance(u, Variable) and u.name == var:
        return _report(ctx, f"Derivative of {expr.kind}", expr, var, plain)
    after = Multiplication((plain, Derivative(u, var, 1)))
    return _report(ctx, f"Derivative of {expr.kind} with the chain rule", expr, var, after)


_RULES = {
    Number: _derive_number,
    Constant: _derive_constant,
    Variable: _derive_variable,
    Negation: _derive_negation,
    Addition: _derive_addition,
    Subtraction: _derive_subtraction,
    Multiplication: _derive_multiplication,
    Division: _derive_division,
    Exponentiation: _derive_exponentiation,
    Equality: _derive_equality,
    Derivative: _derive_derivative,
    Complex: _derive_complex,
    Function: _derive_function,
}
