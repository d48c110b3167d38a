"""
NIGHTPLAN Rule Store

In-memory registry of schedule rules. The store is an ordinary object owned
by whoever constructs it (normally the ObservationScheduler); there is no
module-level registry. A lock serialises writers so the store can be shared
between threads.
"""

import threading
from dataclasses import replace
from typing import Any, Iterable, Optional

from nightplan.logging_config import get_logger
from nightplan.types import Clock, utc_now

from .conditions import ConditionEvaluator
from .models import (
    EvaluationContext,
    RuleType,
    ScheduleAction,
    ScheduleCondition,
    ScheduleRule,
    new_id,
)

logger = get_logger(__name__)

# Fields a caller may change through update_rule
UPDATABLE_FIELDS = frozenset(
    {"name", "conditions", "actions", "priority", "enabled", "rule_type"}
)


class RuleStore:
    """CRUD over ScheduleRule records."""

    def __init__(self, clock: Clock = utc_now):
        self._rules: list[ScheduleRule] = []
        self._lock = threading.Lock()
        self._clock = clock

    def add_rule(
        self,
        name: str,
        conditions: Optional[Iterable[ScheduleCondition]] = None,
        actions: Optional[Iterable[ScheduleAction]] = None,
        priority: int = 0,
        enabled: bool = True,
        rule_type: RuleType = RuleType.CONDITION,
    ) -> ScheduleRule:
        """Create and register a rule. ``created`` and ``modified`` are equal."""
        now = self._clock()
        rule = ScheduleRule(
            id=new_id(),
            name=name,
            conditions=list(conditions or []),
            actions=list(actions or []),
            priority=priority,
            enabled=enabled,
            rule_type=rule_type,
            created=now,
            modified=now,
        )
        with self._lock:
            self._rules.append(rule)
        logger.info(f"Added rule {rule.id} ({name})")
        return _copy(rule)

    def update_rule(self, rule_id: str, **updates: Any) -> Optional[ScheduleRule]:
        """Merge ``updates`` into a rule and refresh ``modified``.

        Returns:
            The updated rule, or None if no rule has that id

        Raises:
            ValueError: If ``updates`` names a field that cannot be changed
        """
        invalid = set(updates) - UPDATABLE_FIELDS
        if invalid:
            raise ValueError(f"Cannot update rule fields: {', '.join(sorted(invalid))}")

        for key in ("conditions", "actions"):
            if key in updates:
                updates[key] = list(updates[key])

        with self._lock:
            for index, rule in enumerate(self._rules):
                if rule.id == rule_id:
                    updated = replace(rule, **updates, modified=self._clock())
                    self._rules[index] = updated
                    break
            else:
                logger.debug(f"update_rule: no rule {rule_id}")
                return None

        logger.info(f"Updated rule {rule_id}: {', '.join(sorted(updates)) or 'touch'}")
        return _copy(updated)

    def delete_rule(self, rule_id: str) -> bool:
        """Remove a rule. Returns False if it did not exist."""
        with self._lock:
            before = len(self._rules)
            self._rules = [r for r in self._rules if r.id != rule_id]
            removed = len(self._rules) < before
        if removed:
            logger.info(f"Deleted rule {rule_id}")
        return removed

    def get_rule(self, rule_id: str) -> Optional[ScheduleRule]:
        with self._lock:
            for rule in self._rules:
                if rule.id == rule_id:
                    return _copy(rule)
        return None

    def get_rules(self) -> list[ScheduleRule]:
        """Snapshot of all rules in insertion order."""
        with self._lock:
            return [_copy(r) for r in self._rules]

    def matching_rules(
        self,
        evaluator: ConditionEvaluator,
        context: EvaluationContext,
    ) -> list[ScheduleRule]:
        """Enabled rules whose conditions all pass, highest priority first."""
        candidates = [r for r in self.get_rules() if r.enabled]
        matched = [r for r in candidates if evaluator.evaluate_all(r.conditions, context)]
        return sorted(matched, key=lambda r: r.priority, reverse=True)


def _copy(rule: ScheduleRule) -> ScheduleRule:
    return replace(rule, conditions=list(rule.conditions), actions=list(rule.actions))
