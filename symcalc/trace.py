"""
Observation of rewrite steps.

The engines report every rule they apply to an optional observer. Two
observers ship with the package: RewriteTrace records the steps for
later formatting, and LoggingObserver forwards them to the logger.

Example:
    from symcalc import E, simplify

    result, trace = simplify(E("(+ a a)"), trace=True)
    print(trace.format("rules"))    # "Add same expression"
"""

import logging
from typing import Dict, List, Optional, Tuple

from .expression import Expression
from .sexpr import format_sexpr

logger = logging.getLogger(__name__)


class Observer:
    """
    Receiver of engine events.

    Subclasses override the hooks they care about; the defaults do
    nothing.
    """

    def rule_applied(self, rule: str, before: Expression, after: Expression) -> None:
        pass

    def step_started(self, expr: Expression) -> None:
        pass

    def step_completed(self, result: Expression) -> None:
        pass


class RewriteStep:
    """A single rule application."""

    def __init__(self, rule: str, before: Expression, after: Expression):
        self.rule = rule
        self.before = before
        self.after = after

    def __repr__(self) -> str:
        return f"{self.rule}: {format_sexpr(self.before)} → {format_sexpr(self.after)}"

    def to_dict(self) -> Dict:
        """Convert step to dictionary for serialization."""
        return {
            "rule": self.rule,
            "before": format_sexpr(self.before),
            "after": format_sexpr(self.after),
        }


class RewriteTrace(Observer):
    """
    A trace of all rewriting steps applied.

    Provides multiple formatting options:
        - Default repr: verbose multi-line format
        - format("compact"): single line showing rule chain
        - format("rules"): just the rule names applied
        - format("chain"): expression transformations as a chain
        - format("explain"): the nested started/applied/completed log
        - to_dict(): JSON-serializable dictionary
    """

    def __init__(self):
        self.steps: List[RewriteStep] = []
        self.events: List[Tuple[str, object]] = []
        self.initial: Optional[Expression] = None
        self.final: Optional[Expression] = None

    # ------------------------------------------------------------
    # Observer hooks
    # ------------------------------------------------------------

    def rule_applied(self, rule: str, before: Expression, after: Expression) -> None:
        step = RewriteStep(rule, before, after)
        self.steps.append(step)
        self.events.append(("rule", step))

    def step_started(self, expr: Expression) -> None:
        self.events.append(("started", expr))

    def step_completed(self, result: Expression) -> None:
        # A start directly followed by its completion did nothing
        if self.events and self.events[-1][0] == "started":
            self.events.pop()
            return
        self.events.append(("completed", result))

    # ------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------

    def format(self, style: str = "verbose") -> str:
        """
        Format the trace in different styles.

        Args:
            style: One of "verbose", "compact", "rules", "chain", "explain"

        Returns:
            Formatted string representation of the trace.
        """
        if style == "compact":
            rules = self.rules_applied()
            return f"{format_sexpr(self.initial)} --[{', '.join(rules)}]--> {format_sexpr(self.final)}"

        elif style == "rules":
            rules = self.rules_applied()
            return " -> ".join(rules) if rules else "(no rules applied)"

        elif style == "chain":
            if not self.steps:
                return format_sexpr(self.initial)
            parts = [format_sexpr(self.initial)]
            for step in self.steps:
                parts.append(f"  --({step.rule})-->")
                parts.append(format_sexpr(step.after))
            return "\n".join(parts)

        elif style == "explain":
            lines = []
            for kind, payload in self.events:
                if kind == "started":
                    lines.append(f"Simplifying expression: {payload}")
                elif kind == "completed":
                    lines.append(f"Simplifying result: {payload}")
                else:
                    lines.append(f"- {payload.rule}\n  Before: {payload.before}\n  After:  {payload.after}")
            return "\n".join(lines)

        elif style == "verbose":
            return repr(self)

        raise ValueError(f"Unknown trace style: {style}. "
                         f"Valid options: verbose, compact, rules, chain, explain")

    def __repr__(self) -> str:
        lines = [f"Initial: {format_sexpr(self.initial)}"]
        for i, step in enumerate(self.steps, 1):
            lines.append(f"  {i}. {step}")
        lines.append(f"Final: {format_sexpr(self.final)}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        """Iterate over rewrite steps."""
        return iter(self.steps)

    def __bool__(self) -> bool:
        """True if any rewriting was done."""
        return len(self.steps) > 0

    def to_dict(self) -> Dict:
        """Convert trace to dictionary for JSON serialization."""
        return {
            "initial": format_sexpr(self.initial),
            "final": format_sexpr(self.final),
            "steps": [step.to_dict() for step in self.steps],
            "step_count": len(self.steps),
        }

    def rule_counts(self) -> Dict[str, int]:
        """Count how many times each rule was applied."""
        counts: Dict[str, int] = {}
        for step in self.steps:
            counts[step.rule] = counts.get(step.rule, 0) + 1
        return counts

    def rules_applied(self) -> List[str]:
        """Get list of rule names in order of application."""
        return [s.rule for s in self.steps]

    def summary(self) -> str:
        """Get a brief summary of the rewriting."""
        if not self.steps:
            return "No rewriting performed"
        counts = self.rule_counts()
        most_used = max(counts.items(), key=lambda x: x[1])
        return (f"{len(self.steps)} steps using {len(counts)} unique rules. "
                f"Most used: {most_used[0]} ({most_used[1]}x)")


class LoggingObserver(Observer):
    """Forward engine events to a logger at DEBUG level."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def rule_applied(self, rule: str, before: Expression, after: Expression) -> None:
        self.log.debug("%s: %s -> %s", rule, before, after)

    def step_started(self, expr: Expression) -> None:
        self.log.debug("simplifying %s", expr)

    def step_completed(self, result: Expression) -> None:
        self.log.debug("result %s", result)


class _Tee(Observer):
    """Send every event to several observers."""

    def __init__(self, *observers: Observer):
        self.observers = [o for o in observers if o is not None]

    def rule_applied(self, rule, before, after):
        for o in self.observers:
            o.rule_applied(rule, before, after)

    def step_started(self, expr):
        for o in self.observers:
            o.step_started(expr)

    def step_completed(self, result):
        for o in self.observers:
            o.step_completed(result)


def combine(*observers: Optional[Observer]) -> Optional[Observer]:
    """Merge observers into one, skipping None; None if none remain."""
    present = [o for o in observers if o is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return _Tee(*present)
