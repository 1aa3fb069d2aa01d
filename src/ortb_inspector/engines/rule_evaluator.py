# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Rule Evaluator - Run the rule catalogue against a validation context.

Key behaviors:
- Rule sets run in catalogue order, rules in declaration order
- Every applicable rule is evaluated; no failure stops the pass
- A failing rule produces exactly one Issue, never deduplicated
"""

import logging
from typing import Optional

from ..models.validation import Issue, Rule, RuleSet, ValidationContext
from ..rules import RULE_SETS

logger = logging.getLogger(__name__)


class RuleEvaluator:
    """Evaluate an ordered catalogue of declarative rules.

    Example:
        evaluator = RuleEvaluator()
        issues = evaluator.evaluate(context)
    """

    def __init__(self, rule_sets: Optional[tuple[RuleSet, ...]] = None) -> None:
        """Initialize the evaluator.

        Args:
            rule_sets: Rule sets in evaluation order (defaults to the full catalogue)
        """
        self._rule_sets = tuple(rule_sets) if rule_sets is not None else RULE_SETS

    @property
    def rule_sets(self) -> tuple[RuleSet, ...]:
        """Get the rule sets in evaluation order."""
        return self._rule_sets

    @property
    def rule_count(self) -> int:
        return sum(len(rule_set) for rule_set in self._rule_sets)

    def evaluate(self, context: ValidationContext) -> list[Issue]:
        """Evaluate every applicable rule.

        Args:
            context: Per-analysis validation context

        Returns:
            Issues for failing rules, in catalogue order
        """
        issues: list[Issue] = []
        for rule_set in self._rule_sets:
            for rule in rule_set.rules:
                if not self._applies(rule, context):
                    continue
                if not self._passes(rule, context):
                    issues.append(Issue.from_rule(rule))
        return issues

    def _applies(self, rule: Rule, context: ValidationContext) -> bool:
        try:
            return rule.is_applicable(context)
        except Exception:
            # A broken gate still runs the rule so the failure is visible
            logger.exception("Applicability check for rule %s raised", rule.id)
            return True

    def _passes(self, rule: Rule, context: ValidationContext) -> bool:
        try:
            return rule.passes(context)
        except Exception:
            logger.exception("Rule %s raised; reporting it as failed", rule.id)
            return False
