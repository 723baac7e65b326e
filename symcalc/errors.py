"""Errors raised by the simplification and differentiation engines."""

from enum import Enum


class ErrorKind(Enum):
    DIVISION_BY_ZERO = "division by zero"
    ZERO_EXPONENTIATION_ZERO = "zero to the power of zero"
    INVALID_DERIVATIVE = "invalid derivative"
    UNSUPPORTED = "unsupported operation"
    LIMIT_EXCEEDED = "resource limit exceeded"


class SimplifyError(Exception):
    """
    Base class for every engine failure.

    The first error met during the depth-first traversal aborts the
    whole simplify/differentiate call.
    """

    kind: ErrorKind = ErrorKind.UNSUPPORTED

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind.value)
        self.message = message or self.kind.value

    def __eq__(self, other):
        if isinstance(other, SimplifyError):
            return self.kind == other.kind
        return NotImplemented

    def __hash__(self):
        return hash(self.kind)


class DivisionByZero(SimplifyError):
    kind = ErrorKind.DIVISION_BY_ZERO


class ZeroExponentiationZero(SimplifyError):
    kind = ErrorKind.ZERO_EXPONENTIATION_ZERO


class InvalidDerivative(SimplifyError):
    """Raised for a negative or non-integer order, or an empty variable name."""

    kind = ErrorKind.INVALID_DERIVATIVE


class Unsupported(SimplifyError):
    """Raised when differentiating abs, ceil or floor."""

    kind = ErrorKind.UNSUPPORTED


class LimitExceeded(SimplifyError):
    """Raised when a call nests deeper than the configured maximum depth."""

    kind = ErrorKind.LIMIT_EXCEEDED
