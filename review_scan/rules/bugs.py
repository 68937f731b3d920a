"""Likely-bug rules."""

from __future__ import annotations

import re

from review_scan.rules.base import LineRule, languages

_STRING_AROUND_EQ_RE = re.compile(r"['\"`].*==.*['\"`]")
_AWAIT_RE = re.compile(r"\bawait\b")
_DEBUG_CONTEXT_RE = re.compile(r"//.*console|test|spec|debug", re.IGNORECASE)

_ASYNC_VERBS = (
    "find|save|create|update|delete|fetch|get|post|put|patch|remove|insert|query"
)


def _outside_string_literal(line: str, path: str) -> bool:
    return _STRING_AROUND_EQ_RE.search(line) is None


def _lacks_await(line: str, path: str) -> bool:
    return _AWAIT_RE.search(line) is None


def _not_debug_context(line: str, path: str) -> bool:
    return _DEBUG_CONTEXT_RE.search(line) is None


BUG_RULES: tuple[LineRule, ...] = (
    LineRule(
        rule_id="BUG001",
        name="Loose Equality",
        category="bug",
        severity="warning",
        languages=languages("js", "ts"),
        pattern=re.compile(r"[^=!<>]==[^=]"),
        message="Loose equality: `==` performs type coercion.",
        suggestion="Use `===` and `!==` to avoid unexpected coercion.",
        context_filter=_outside_string_literal,
    ),
    LineRule(
        rule_id="BUG002",
        name="Floating Point Comparison",
        category="bug",
        severity="warning",
        languages=languages("js", "ts", "py", "java", "go", "c", "cpp"),
        pattern=re.compile(
            r"(?:\b0\.\d+|parseFloat|float\()\s*===?\s*(?:0\.\d+|parseFloat|float\()"
        ),
        message="Floating point comparison: exact equality between floats is unreliable.",
        suggestion="Compare with a tolerance, e.g. `Math.abs(a - b) < Number.EPSILON`.",
    ),
    LineRule(
        rule_id="BUG003",
        name="Missing await",
        category="bug",
        severity="warning",
        languages=languages("js", "ts"),
        pattern=re.compile(
            r"(?:^|\s)(?:const|let|var)\s+\w+\s*=\s*\w+\.(?:" + _ASYNC_VERBS + r")\s*\("
        ),
        message="Possible missing await: this looks like an async operation.",
        suggestion="If the call returns a Promise, `await` it to keep execution order.",
        context_filter=_lacks_await,
    ),
    LineRule(
        rule_id="BUG004",
        name="Empty Catch Block",
        category="bug",
        severity="warning",
        languages=languages("js", "ts", "java", "py"),
        pattern=re.compile(r"catch\s*(?:\([^)]*\))?\s*\{\s*\}|\bexcept\b[^:]*:\s*pass\s*$"),
        message="Empty catch block: silently swallowing errors hides failures.",
        suggestion="Log the error or handle it explicitly.",
    ),
    LineRule(
        rule_id="BUG005",
        name="Console.log in Production",
        category="bug",
        severity="info",
        languages=languages("js", "ts"),
        pattern=re.compile(r"console\.log\s*\("),
        message="console.log left in code; consider removing it before release.",
        suggestion="Use a proper logger (pino, winston) or remove the call.",
        context_filter=_not_debug_context,
    ),
    LineRule(
        rule_id="BUG006",
        name="TODO/FIXME/HACK Comment",
        category="bug",
        severity="info",
        languages=languages(),
        pattern=re.compile(
            r"(?://|#)\s*(?:TODO|FIXME|HACK|XXX|BUG|WORKAROUND)[\s:]", re.IGNORECASE
        ),
        message="Technical debt: TODO/FIXME marker that should be tracked.",
        suggestion="Open an issue to track the work and reference it from the comment.",
    ),
)
