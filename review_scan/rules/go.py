"""Go-specific rules."""

from __future__ import annotations

import re

from review_scan.rules.base import LineRule, languages

GO_RULES: tuple[LineRule, ...] = (
    LineRule(
        rule_id="GO001",
        name="Unchecked Error",
        category="go",
        severity="warning",
        languages=languages("go"),
        # single non-err target assigned from a package call, nothing else on the line
        pattern=re.compile(r"^\s*(?:var\s+)?(?!err\b)\w+\s*:?=\s*\w+\.\w+\([^)]*\)\s*$"),
        message="Unchecked error: the call may return an error that is dropped.",
        suggestion="Capture and check it: `v, err := fn(); if err != nil { return err }`.",
    ),
    LineRule(
        rule_id="GO002",
        name="Goroutine Leak",
        category="go",
        severity="warning",
        languages=languages("go"),
        pattern=re.compile(r"\bgo\s+func\s*\("),
        message="Goroutine leak risk: anonymous goroutine without visible lifecycle control.",
        suggestion="Stop goroutines through a context or a done channel.",
    ),
)
