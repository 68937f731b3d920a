"""Python-specific rules."""

from __future__ import annotations

import re

from review_scan.rules.base import LineRule, languages


def _outside_tests(line: str, path: str) -> bool:
    return "test" not in path.lower()


PYTHON_RULES: tuple[LineRule, ...] = (
    LineRule(
        rule_id="PY001",
        name="Mutable Default Argument",
        category="python",
        severity="error",
        languages=languages("py"),
        pattern=re.compile(
            r"\bdef\s+\w+\s*\([^)]*=\s*(?:\[\s*\]|\{\s*\}|set\(\s*\))"
        ),
        message="Mutable default argument: the default object is shared between calls.",
        suggestion="Default to `None` and create the object inside the function.",
    ),
    LineRule(
        rule_id="PY002",
        name="Bare Except",
        category="python",
        severity="warning",
        languages=languages("py"),
        pattern=re.compile(r"\bexcept\s*:"),
        message="Bare except: also catches KeyboardInterrupt and SystemExit.",
        suggestion="Catch `Exception` at minimum, or the specific exceptions expected.",
    ),
    LineRule(
        rule_id="PY003",
        name="Assert in Production",
        category="python",
        severity="warning",
        languages=languages("py"),
        pattern=re.compile(r"^assert\s+"),
        message="Module-level assert: assert statements are stripped under `python -O`.",
        suggestion="Raise an explicit exception, e.g. `if not cond: raise ValueError(...)`.",
        context_filter=_outside_tests,
    ),
)
