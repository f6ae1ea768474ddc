"""
Rule data models for the Ruler engine.
"""

from typing import Dict, Any, Optional, List, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from shared.errors import ErrorResponse, InvalidArgumentError
from .operators.base import Proposition


class RuleOutcome(str, Enum):
    """Outcome of evaluating one rule."""
    MATCHED = "matched"
    NOT_MATCHED = "not_matched"
    ERROR = "error"


@dataclass
class Rule:
    """A named condition with an optional action to run when it holds."""
    rule_id: str
    name: str
    condition: Proposition
    action: Optional[Callable[[Any], Any]] = None
    description: Optional[str] = None
    enabled: bool = True
    created_at: datetime = field(default_factory=datetime.now)
    expires_at: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.condition, Proposition):
            raise InvalidArgumentError(
                "Rule condition must be a Proposition",
                {"rule_id": self.rule_id, "condition": type(self.condition).__name__}
            )

    def is_active(self, now: datetime) -> bool:
        """Enabled and not yet expired."""
        if not self.enabled:
            return False
        return self.expires_at is None or self.expires_at >= now

    def evaluate(self, context) -> bool:
        return self.condition.evaluate(context)

    def execute(self, context) -> bool:
        """Evaluate, and run the action if the condition holds."""
        if not self.evaluate(context):
            return False
        if self.action is not None:
            self.action(context)
        return True


@dataclass
class EvaluationResult:
    """Result of evaluating the registered rules against one context."""
    evaluation_id: str
    outcomes: Dict[str, RuleOutcome] = field(default_factory=dict)
    errors: Dict[str, ErrorResponse] = field(default_factory=dict)
    evaluation_time_ms: float = 0.0

    @property
    def matched_rules(self) -> List[str]:
        """Rule IDs that matched, in evaluation order."""
        return [
            rule_id for rule_id, outcome in self.outcomes.items()
            if outcome is RuleOutcome.MATCHED
        ]

    @property
    def evaluated_rules(self) -> int:
        return len(self.outcomes)

    @property
    def matched(self) -> bool:
        return RuleOutcome.MATCHED in self.outcomes.values()
