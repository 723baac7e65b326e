"""
symcalc - symbolic simplification and differentiation

A symbolic-algebra core: immutable expression trees, a term-rewriting
simplifier that brings them to a normal form, and a rule-table
differentiator whose results are renormalized by the simplifier.

Quick Start:
    from symcalc import E, simplify, differentiate

    simplify(E("(+ a (* 2 a))"))             # => 3 * a
    simplify(E("(* (complex a b) (complex a (- b)))"))   # => a^2 + b^2
    differentiate(E("(^ x 3)"), "x")         # => 3 * x^2

Building expressions:
    E("(+ x 1)")                  # parse an s-expression
    E.op("^", "x", 2)             # build from an operator name
    x = variable("x")
    x ** 2 + 3 * x                # operators build unsimplified trees

Tracing:
    result, trace = simplify(expr, trace=True)
    print(trace.format("rules"))

Errors:
    Every engine failure raises a SimplifyError subclass:
    DivisionByZero, ZeroExponentiationZero, InvalidDerivative,
    Unsupported, LimitExceeded.
"""

__version__ = "0.1.0"

# Closed tags
from .functions import FunctionKind, ConstantKind

# Numerals
from .numeral import Numeral, Integer, Rational

# Expression model
from .expression import (
    Expression,
    Number,
    Variable,
    Constant,
    Negation,
    Addition,
    Multiplication,
    Subtraction,
    Division,
    Exponentiation,
    Equality,
    Complex,
    Function,
    Derivative,
    # Constructors
    integer,
    rational,
    variable,
    pi,
    e,
    tau,
    negation,
    addition,
    multiplication,
    subtraction,
    division,
    exponentiation,
    equality,
    complex_number,
    imaginary_unit,
    derivative,
    function,
    sin, cos, tan, asin, acos, atan,
    sinh, cosh, tanh, asinh, acosh, atanh,
    sqrt, exp, ln, log2, log10, abs_, ceil, floor,
    log, pow_, root,
)

# Errors and configuration
from .errors import (
    ErrorKind,
    SimplifyError,
    DivisionByZero,
    ZeroExponentiationZero,
    InvalidDerivative,
    Unsupported,
    LimitExceeded,
)
from .config import Limits, DEFAULT_LIMITS

# Engines
from .trace import Observer, RewriteStep, RewriteTrace, LoggingObserver
from .simplify import Context, simplify, is_complex, complex_conjugate
from .differentiation import differentiate, differentiate_n

# S-expressions
from .sexpr import E, parse_sexpr, format_sexpr

# Public API
__all__ = [
    # Version
    "__version__",
    # Tags
    "FunctionKind",
    "ConstantKind",
    # Numerals
    "Numeral",
    "Integer",
    "Rational",
    # Expression model
    "Expression",
    "Number",
    "Variable",
    "Constant",
    "Negation",
    "Addition",
    "Multiplication",
    "Subtraction",
    "Division",
    "Exponentiation",
    "Equality",
    "Complex",
    "Function",
    "Derivative",
    # Constructors
    "integer",
    "rational",
    "variable",
    "pi",
    "e",
    "tau",
    "negation",
    "addition",
    "multiplication",
    "subtraction",
    "division",
    "exponentiation",
    "equality",
    "complex_number",
    "imaginary_unit",
    "derivative",
    "function",
    "sin", "cos", "tan", "asin", "acos", "atan",
    "sinh", "cosh", "tanh", "asinh", "acosh", "atanh",
    "sqrt", "exp", "ln", "log2", "log10", "abs_", "ceil", "floor",
    "log", "pow_", "root",
    # Errors
    "ErrorKind",
    "SimplifyError",
    "DivisionByZero",
    "ZeroExponentiationZero",
    "InvalidDerivative",
    "Unsupported",
    "LimitExceeded",
    # Configuration
    "Limits",
    "DEFAULT_LIMITS",
    # Engines
    "Observer",
    "RewriteStep",
    "RewriteTrace",
    "LoggingObserver",
    "Context",
    "simplify",
    "differentiate",
    "differentiate_n",
    "is_complex",
    "complex_conjugate",
    # Expression builder
    "E",
    "parse_sexpr",
    "format_sexpr",
]
