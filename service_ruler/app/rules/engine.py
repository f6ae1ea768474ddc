"""
Rule evaluation engine for the Ruler service.
"""

import time
from typing import Dict, Any, Optional, List
from datetime import datetime

from shared.config import RulerConfig, get_config
from shared.errors import InvalidArgumentError, RulerException
from shared.logging import get_logger, set_evaluation_id, set_rule_context, clear_context
from shared.metrics import MetricsCollector, get_metrics_collector
from .models import Rule, RuleOutcome, EvaluationResult


class RuleEngine:
    """
    Rule evaluation engine.

    Evaluates every enabled, unexpired rule in registration order against
    one context. The engine is the caller the core propagates failures to:
    with ``error_policy="skip"`` a rule whose evaluation raises is recorded
    in the result's errors and evaluation moves on; with ``"raise"`` the
    failure propagates.
    """

    def __init__(self, config: Optional[RulerConfig] = None, metrics: Optional[MetricsCollector] = None):
        self.config = config or get_config()
        self.logger = get_logger("ruler.rule_engine")
        self.rules: Dict[str, Rule] = {}
        if metrics is None and self.config.enable_metrics:
            metrics = get_metrics_collector(
                self.config.service_name,
                max_rule_series=self.config.metrics_max_rule_series
            )
        self.metrics = metrics

    def add_rule(self, rule: Rule) -> bool:
        """Add a rule to the engine, replacing one with the same ID."""
        if not isinstance(rule, Rule):
            raise InvalidArgumentError("Only Rule instances can be registered", {"type": type(rule).__name__})
        self.rules[rule.rule_id] = rule
        self.logger.info("Rule added", rule_id=rule.rule_id, name=rule.name)
        return True

    def remove_rule(self, rule_id: str) -> bool:
        """Remove a rule from the engine."""
        if rule_id in self.rules:
            rule = self.rules.pop(rule_id)
            self.logger.info("Rule removed", rule_id=rule_id, name=rule.name)
            return True
        return False

    def update_rule(self, rule: Rule) -> bool:
        """Update a rule in the engine."""
        if rule.rule_id in self.rules:
            self.rules[rule.rule_id] = rule
            self.logger.info("Rule updated", rule_id=rule.rule_id, name=rule.name)
            return True
        return False

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        """Get a rule by ID."""
        return self.rules.get(rule_id)

    def get_active_rules(self, now: Optional[datetime] = None) -> List[Rule]:
        """Enabled, unexpired rules in registration order."""
        now = now or datetime.now()
        return [rule for rule in self.rules.values() if rule.is_active(now)]

    def evaluate(self, context, now: Optional[datetime] = None) -> EvaluationResult:
        """Evaluate active rules against context."""
        return self._run(context, now, fire_actions=False)

    def execute(self, context, now: Optional[datetime] = None) -> EvaluationResult:
        """Evaluate active rules and run the action of every rule that matched."""
        return self._run(context, now, fire_actions=True)

    def _run(self, context, now: Optional[datetime], fire_actions: bool) -> EvaluationResult:
        start_time = time.time()
        evaluation_id = set_evaluation_id()
        result = EvaluationResult(evaluation_id=evaluation_id)

        try:
            if self.metrics:
                with self.metrics.time_operation("rule_evaluation_duration_seconds"):
                    self._evaluate_rules(context, now, fire_actions, result)
            else:
                self._evaluate_rules(context, now, fire_actions, result)
        finally:
            result.evaluation_time_ms = (time.time() - start_time) * 1000
            clear_context()

        self.logger.debug(
            "Rule evaluation result",
            evaluation_id=evaluation_id,
            evaluated=result.evaluated_rules,
            matched=result.matched_rules,
            errors=list(result.errors)
        )
        return result

    def _evaluate_rules(self, context, now: Optional[datetime], fire_actions: bool, result: EvaluationResult):
        for rule in self.get_active_rules(now):
            set_rule_context(rule.rule_id)
            try:
                matched = rule.execute(context) if fire_actions else rule.evaluate(context)
            except RulerException as e:
                self._record(rule.rule_id, RuleOutcome.ERROR)
                if self.metrics:
                    self.metrics.record_error(e.code)
                if self.config.error_policy == "raise":
                    self.logger.error("Rule evaluation error", rule_id=rule.rule_id, code=e.code, error=e.message)
                    raise
                self.logger.warning("Rule could not be evaluated", rule_id=rule.rule_id, code=e.code, error=e.message)
                result.outcomes[rule.rule_id] = RuleOutcome.ERROR
                result.errors[rule.rule_id] = e.to_response(result.evaluation_id)
                continue

            outcome = RuleOutcome.MATCHED if matched else RuleOutcome.NOT_MATCHED
            self._record(rule.rule_id, outcome)
            result.outcomes[rule.rule_id] = outcome

    def _record(self, rule_id: str, outcome: RuleOutcome):
        if self.metrics:
            self.metrics.record_rule_evaluation(rule_id, outcome.value)

    def get_engine_stats(self) -> Dict[str, Any]:
        """Get engine statistics."""
        return {
            "total_rules": len(self.rules),
            "enabled_rules": len([r for r in self.rules.values() if r.enabled]),
            "error_policy": self.config.error_policy,
        }

    def clear_all_rules(self):
        """Clear all rules from the engine."""
        self.rules.clear()
        self.logger.info("All rules cleared")
