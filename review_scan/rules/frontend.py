"""React and TypeScript rules."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from review_scan.rules.base import BlockIssue, BlockRule, LineRule, is_comment_line, languages

_COMPONENT_START_RE = re.compile(
    r"^\s*(?:export\s+)?(?:default\s+)?"
    r"(?:function\s+(?P<fn>\w+)\s*\(|(?:const|let)\s+(?P<const>\w+)\s*=\s*"
    r"(?:async\s+)?(?:\([^)]*\)|\w+)\s*=>)"
)
_STATE_SETTER_RE = re.compile(r"\b(set(?!Timeout|Interval|Immediate)[A-Z]\w*)\s*\(")
_RENDER_RETURN_RE = re.compile(r"\breturn\s*[(<]")
_CONDITIONAL_RE = re.compile(r"\bif\b|&&|\|\||(?<!\?)\?(?![.?])")

_REACT_LANGUAGES = languages("js", "ts", "jsx", "tsx")


@dataclass(slots=True)
class _ComponentScan:
    name: str
    depth: int = 0
    returns_markup: bool = False
    setter_calls: list[tuple[int, str]] = field(default_factory=list)


def _depth_at(line: str, position: int, depth: int) -> int:
    for char in line[:position]:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
    return depth


def _state_updates_in_render(lines: Sequence[str]) -> list[BlockIssue]:
    issues: list[BlockIssue] = []
    scan: _ComponentScan | None = None

    for index, line in enumerate(lines):
        body_start = 0
        if scan is None:
            match = _COMPONENT_START_RE.match(line)
            if match is None or "{" not in line[match.end() :]:
                continue
            scan = _ComponentScan(name=match.group("fn") or match.group("const") or "")
            body_start = match.end()

        if not is_comment_line(line):
            for setter in _STATE_SETTER_RE.finditer(line, body_start):
                prefix = line[: setter.start()]
                if _depth_at(line, setter.start(), scan.depth) != 1:
                    continue
                if "=>" in prefix[body_start:] or _CONDITIONAL_RE.search(prefix[body_start:]):
                    continue
                scan.setter_calls.append((index + 1, setter.group(1)))
                break
            for returned in _RENDER_RETURN_RE.finditer(line, body_start):
                if _depth_at(line, returned.start(), scan.depth) == 1:
                    scan.returns_markup = True

        scan.depth = _depth_at(line, len(line), scan.depth)
        if scan.depth <= 0:
            if scan.returns_markup:
                for line_no, setter_name in scan.setter_calls:
                    issues.append(
                        BlockIssue(
                            line=line_no,
                            message=(
                                f"State update in render: `{setter_name}` runs every time "
                                f"`{scan.name}` renders, causing re-render loops."
                            ),
                            suggestion="Move state updates into event handlers or useEffect.",
                        )
                    )
            scan = None

    return issues


FRONTEND_RULES: tuple[LineRule | BlockRule, ...] = (
    LineRule(
        rule_id="REACT001",
        name="Empty Dependency Array",
        category="react",
        severity="warning",
        languages=_REACT_LANGUAGES,
        pattern=re.compile(r"\buse(?:Effect|Callback|Memo)\s*\(\s*(?:\(\)|[^,]+),\s*\[\s*\]\s*\)"),
        message="Empty dependency array: the hook runs only once. Verify this is intentional.",
        suggestion="List every referenced value in the dependency array, or document why not.",
    ),
    BlockRule(
        rule_id="REACT002",
        name="State Update in Render",
        category="react",
        severity="error",
        languages=_REACT_LANGUAGES,
        check=_state_updates_in_render,
        description="State setter called unconditionally in a component body that renders.",
    ),
)

TYPESCRIPT_RULES: tuple[LineRule, ...] = (
    LineRule(
        rule_id="TS001",
        name="any Type",
        category="typescript",
        severity="info",
        languages=languages("ts", "tsx"),
        pattern=re.compile(r":\s*any\b"),
        message="`any` type: disables type checking for this value.",
        suggestion="Use a specific type, `unknown`, or a generic.",
    ),
    LineRule(
        rule_id="TS002",
        name="Non-null Assertion",
        category="typescript",
        severity="warning",
        languages=languages("ts", "tsx"),
        pattern=re.compile(r"\w+!\."),
        message="Non-null assertion: `!.` bypasses null checks and can fail at runtime.",
        suggestion="Use optional chaining (`?.`) or an explicit null check.",
    ),
)
