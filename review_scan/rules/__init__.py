"""Rules package."""

from dataclasses import dataclass

from review_scan.rules.base import BlockRule, LineRule, Rule
from review_scan.rules.bugs import BUG_RULES
from review_scan.rules.frontend import FRONTEND_RULES, TYPESCRIPT_RULES
from review_scan.rules.general import GENERAL_RULES
from review_scan.rules.go import GO_RULES
from review_scan.rules.performance import PERFORMANCE_RULES
from review_scan.rules.python import PYTHON_RULES
from review_scan.rules.security import SECURITY_RULES

RULES: tuple[Rule, ...] = (
    *SECURITY_RULES,
    *BUG_RULES,
    *PERFORMANCE_RULES,
    *PYTHON_RULES,
    *GO_RULES,
    *FRONTEND_RULES,
    *TYPESCRIPT_RULES,
    *GENERAL_RULES,
)

KNOWN_CATEGORIES = {
    "security",
    "bug",
    "performance",
    "python",
    "go",
    "react",
    "typescript",
    "general",
}


def index_rules(rules: tuple[Rule, ...]) -> dict[str, Rule]:
    """Index rules by id, rejecting duplicate ids and unknown categories."""
    registry: dict[str, Rule] = {}
    for rule in rules:
        if rule.rule_id in registry:
            raise ValueError(f"Duplicate rule id: {rule.rule_id}")
        if rule.category not in KNOWN_CATEGORIES:
            raise ValueError(f"Rule {rule.rule_id} has unknown category: {rule.category}")
        registry[rule.rule_id] = rule
    return registry


_REGISTRY = index_rules(RULES)


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing and selection."""

    rule_id: str
    name: str
    description: str
    category: str
    severity: str
    languages: tuple[str, ...]
    kind: str


def get_rule(rule_id: str) -> Rule:
    """Look up a rule by id."""
    try:
        return _REGISTRY[rule_id]
    except KeyError:
        raise ValueError(f"Unknown rule id: {rule_id}") from None


def build_rules(
    *,
    enabled_rule_ids: list[str] | None = None,
    disabled_rule_ids: list[str] | None = None,
) -> tuple[Rule, ...]:
    """Select rules in declaration order applying enable/disable lists."""
    requested_ids = set(enabled_rule_ids or []) | set(disabled_rule_ids or [])
    unknown = [rule_id for rule_id in requested_ids if rule_id not in _REGISTRY]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown rule ids: {joined}")

    enabled_set = set(enabled_rule_ids) if enabled_rule_ids is not None else None
    disabled_set = set(disabled_rule_ids or [])
    return tuple(
        rule
        for rule in RULES
        if (enabled_set is None or rule.rule_id in enabled_set)
        and rule.rule_id not in disabled_set
    )


def list_rule_info() -> list[RuleInfo]:
    """Return metadata for every known rule."""
    return [_describe(rule) for rule in RULES]


def _describe(rule: Rule) -> RuleInfo:
    if isinstance(rule, BlockRule):
        description = rule.description
        kind = "block"
    else:
        description = rule.message
        kind = "line"
    return RuleInfo(
        rule_id=rule.rule_id,
        name=rule.name,
        description=description,
        category=rule.category,
        severity=rule.severity,
        languages=tuple(sorted(rule.languages)),
        kind=kind,
    )


__all__ = [
    "BlockRule",
    "KNOWN_CATEGORIES",
    "LineRule",
    "RULES",
    "Rule",
    "RuleInfo",
    "build_rules",
    "get_rule",
    "index_rules",
    "list_rule_info",
]
