"""Priority-ordered decision table mapping (baseline, current, trend) to a change class."""

from __future__ import annotations

from dataclasses import dataclass

from .classes import ChangeClass, StateClass, TrendClass


@dataclass(frozen=True)
class ChangeRule:
    priority: int
    baseline: frozenset[StateClass]
    current: frozenset[StateClass]
    trend: frozenset[TrendClass] | None  # None matches any trend
    result: ChangeClass

    def matches(self, baseline: StateClass, current: StateClass, trend: TrendClass) -> bool:
        if baseline not in self.baseline or current not in self.current:
            return False
        return self.trend is None or trend in self.trend


def _states(*states: StateClass) -> frozenset[StateClass]:
    return frozenset(states)


CHANGE_RULES: tuple[ChangeRule, ...] = (
    ChangeRule(
        1,
        _states(StateClass.DENSE),
        _states(StateClass.SPARSE, StateClass.BARE),
        None,
        ChangeClass.LOSS,
    ),
    ChangeRule(
        2,
        _states(StateClass.DENSE),
        _states(StateClass.TRANSITIONAL),
        frozenset({TrendClass.LOSING}),
        ChangeClass.THINNING,
    ),
    ChangeRule(
        3,
        _states(StateClass.SPARSE),
        _states(StateClass.TRANSITIONAL),
        frozenset({TrendClass.GAINING}),
        ChangeClass.EMERGING,
    ),
    ChangeRule(
        4,
        _states(StateClass.TRANSITIONAL),
        _states(StateClass.DENSE),
        frozenset({TrendClass.GAINING}),
        ChangeClass.THICKENING,
    ),
    ChangeRule(
        5,
        _states(StateClass.DENSE),
        _states(StateClass.DENSE),
        frozenset({TrendClass.GAINING}),
        ChangeClass.DENSIFICATION,
    ),
    # No trend condition: establishment is assigned even under a losing trend.
    ChangeRule(
        6,
        _states(StateClass.SPARSE, StateClass.BARE),
        _states(StateClass.DENSE),
        None,
        ChangeClass.ESTABLISHMENT,
    ),
)


def matching_rules(
    baseline: StateClass | None,
    current: StateClass | None,
    trend: TrendClass | None,
    rules: tuple[ChangeRule, ...] = CHANGE_RULES,
) -> list[ChangeRule]:
    if baseline is None or current is None or trend is None:
        return []
    return [rule for rule in rules if rule.matches(baseline, current, trend)]


def decide_change(
    baseline: StateClass | None,
    current: StateClass | None,
    trend: TrendClass | None,
    rules: tuple[ChangeRule, ...] = CHANGE_RULES,
) -> ChangeClass:
    """First matching rule by priority; ``NONE`` if nothing matches or an input is undefined."""

    matched = matching_rules(baseline, current, trend, rules)
    if not matched:
        return ChangeClass.NONE
    return min(matched, key=lambda rule: rule.priority).result
