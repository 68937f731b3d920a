"""Language-agnostic rules."""

from __future__ import annotations

import re
from collections.abc import Sequence

from review_scan.rules.base import BlockIssue, BlockRule, LineRule, languages

MAX_FUNCTION_LINES = 50

_FUNCTION_START_RE = re.compile(r"\b(?:function|def|func|fn)\s+(\w+)")
_LEGIT_NUMBER_CONTEXT_RE = re.compile(
    r"port|status|code|http|error|errno|0x|pixel|width|height|size", re.IGNORECASE
)


def _not_named_number_context(line: str, path: str) -> bool:
    return _LEGIT_NUMBER_CONTEXT_RE.search(line) is None


def _long_functions(lines: Sequence[str]) -> list[BlockIssue]:
    """Report functions whose brace-delimited body exceeds the line limit.

    Tracking starts at a function keyword and ends on the first later line
    where the brace depth drops back to zero; nested functions are not
    tracked separately.
    """
    issues: list[BlockIssue] = []
    start = -1
    depth = 0
    name = ""

    for index, line in enumerate(lines):
        if start == -1:
            match = _FUNCTION_START_RE.search(line)
            if match is not None:
                start = index
                name = match.group(1)
                depth = 0

        if start == -1:
            continue

        depth += line.count("{") - line.count("}")
        if depth <= 0 and index > start:
            length = index - start
            if length > MAX_FUNCTION_LINES:
                issues.append(
                    BlockIssue(
                        line=start + 1,
                        message=(
                            f"Long function: `{name}` is {length} lines long. "
                            "Consider breaking it up."
                        ),
                        suggestion=(
                            f"Functions over {MAX_FUNCTION_LINES} lines are harder to test "
                            "and maintain. Extract helper functions."
                        ),
                    )
                )
            start = -1

    return issues


GENERAL_RULES: tuple[LineRule | BlockRule, ...] = (
    LineRule(
        rule_id="GEN001",
        name="Magic Number",
        category="general",
        severity="info",
        languages=languages(),
        pattern=re.compile(r"(?:\bif|\bwhile|\bfor|\breturn|===?|!==?|[<>]=?)\s*\d{3,}"),
        message="Magic number: large numeric literals read better as named constants.",
        suggestion="Extract it to a named constant, e.g. `MAX_RETRIES = 1000`.",
        context_filter=_not_named_number_context,
    ),
    BlockRule(
        rule_id="GEN002",
        name="Long Function",
        category="general",
        severity="info",
        languages=languages(),
        check=_long_functions,
        description=f"Function body longer than {MAX_FUNCTION_LINES} lines.",
    ),
)
