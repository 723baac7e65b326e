"""Resource limits for the simplification and differentiation engines."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Limits:
    """
    Bounds on how much work a single engine call may do.

    Attributes:
        max_depth: Maximum nesting of simplify/differentiate calls.
            Crossing it raises LimitExceeded.
        max_passes: Maximum number of full simplification passes the
            public ``simplify`` runs while waiting for a fixpoint.
        max_expansion_terms: Largest multinomial expansion (number of
            terms) that ``(a + b + ...)^n`` is allowed to produce.
        max_power: Largest integer exponent folded exactly for numbers,
            and expanded into a product for complex bases.
    """

    max_depth: int = 200
    max_passes: int = 20
    max_expansion_terms: int = 500
    max_power: int = 64

    def __post_init__(self):
        for name in ("max_depth", "max_passes", "max_expansion_terms", "max_power"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be positive")


DEFAULT_LIMITS = Limits()
