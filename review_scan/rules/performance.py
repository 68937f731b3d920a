"""Performance rules.

The loop rules look a few lines ahead of the loop header, so they approximate
"inside the loop body" with a fixed character window rather than real scoping.
"""

from __future__ import annotations

import re

from review_scan.rules.base import LineRule, languages

_LOOP_HEADER = (
    r"(?:\bfor\s*[({]"
    r"|\bforEach\s*\("
    r"|\bmap\s*\("
    r"|\.each\s*[({]"
    r"|\bfor\s+[^:\n]+\s+in\s+[^:\n]+:)"
)
_SETUP_CONTEXT_RE = re.compile(r"config|setup|init|boot|build|script|cli|bin", re.IGNORECASE)


def _not_setup_context(line: str, path: str) -> bool:
    return _SETUP_CONTEXT_RE.search(line) is None


PERFORMANCE_RULES: tuple[LineRule, ...] = (
    LineRule(
        rule_id="PERF001",
        name="N+1 Query Pattern",
        category="performance",
        severity="warning",
        languages=languages("js", "ts", "py", "rb", "java"),
        pattern=re.compile(
            _LOOP_HEADER
            + r"[\s\S]{0,100}?(?:\bawait\b|\.query|\.find|\.get|\.fetch|\.execute|\.select)"
        ),
        message="N+1 query: database or network call inside a loop.",
        suggestion="Batch the queries outside the loop, or use eager loading / JOINs.",
        lookahead_lines=3,
    ),
    LineRule(
        rule_id="PERF002",
        name="Synchronous I/O",
        category="performance",
        severity="warning",
        languages=languages("js", "ts"),
        pattern=re.compile(
            r"(?:readFileSync|writeFileSync|mkdirSync|readdirSync|statSync|existsSync"
            r"|appendFileSync|copyFileSync|renameSync|unlinkSync|rmdirSync)\s*\("
        ),
        message="Synchronous I/O: blocking calls freeze the event loop.",
        suggestion="Use the async variants (e.g. `fs.promises.readFile`).",
        context_filter=_not_setup_context,
    ),
    LineRule(
        rule_id="PERF003",
        name="Unbounded Array Growth",
        category="performance",
        severity="warning",
        languages=languages("js", "ts", "py"),
        pattern=re.compile(
            r"(?:\bwhile\s*\(\s*true\s*\)|\bwhile\s+True\s*:)"
            r"[\s\S]{0,200}?\.(?:push|append)\s*\("
        ),
        message="Unbounded growth: collection grows inside an infinite loop.",
        suggestion="Cap the collection size or use a bounded structure (ring buffer, deque).",
        lookahead_lines=5,
    ),
    LineRule(
        rule_id="PERF004",
        name="Regex in Loop",
        category="performance",
        severity="info",
        languages=languages("js", "ts", "py", "java"),
        pattern=re.compile(
            r"(?:" + _LOOP_HEADER + r"|\bwhile\s*\()"
            r"[\s\S]{0,50}?(?:new RegExp\(|\bre\.compile\(|Pattern\.compile\()"
        ),
        message="Regex in loop: the pattern is rebuilt on every iteration.",
        suggestion="Compile the regex once outside the loop.",
        lookahead_lines=2,
    ),
)
