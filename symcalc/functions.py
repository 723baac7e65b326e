"""
Named functions and mathematical constants.

Both are closed sets: an expression tree can only reference the tags
defined here.
"""

import math
from enum import Enum
from typing import Optional


class FunctionKind(Enum):
    """The named functions an expression tree may apply."""

    # 1 argument
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    ASIN = "asin"
    ACOS = "acos"
    ATAN = "atan"
    SINH = "sinh"
    COSH = "cosh"
    TANH = "tanh"
    ASINH = "asinh"
    ACOSH = "acosh"
    ATANH = "atanh"
    SQRT = "sqrt"
    EXP = "exp"
    LN = "ln"
    LOG2 = "log2"
    LOG10 = "log10"
    ABS = "abs"
    CEIL = "ceil"
    FLOOR = "floor"
    # 2 arguments: log(base, x), pow(order, x), root(order, x)
    LOG = "log"
    POW = "pow"
    ROOT = "root"

    @property
    def arity(self) -> int:
        """Number of arguments the function takes."""
        if self in (FunctionKind.LOG, FunctionKind.POW, FunctionKind.ROOT):
            return 2
        return 1

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> Optional["FunctionKind"]:
        """Look up a function by its printed name, or None."""
        try:
            return cls(name)
        except ValueError:
            return None


class ConstantKind(Enum):
    """Named mathematical constants."""

    PI = "pi"
    E = "e"
    TAU = "tau"

    def evaluate(self) -> float:
        """Floating-point value of the constant."""
        if self is ConstantKind.PI:
            return math.pi
        if self is ConstantKind.E:
            return math.e
        return math.tau

    def __str__(self) -> str:
        return self.value
