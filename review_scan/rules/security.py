"""Security rules."""

from __future__ import annotations

import re

from review_scan.rules.base import LineRule, languages

_SECURITY_CONTEXT_RE = re.compile(
    r"token|secret|password|key|auth|session|nonce|salt|hash|crypto", re.IGNORECASE
)


def _mentions_security_context(line: str, path: str) -> bool:
    return _SECURITY_CONTEXT_RE.search(line) is not None


SECURITY_RULES: tuple[LineRule, ...] = (
    LineRule(
        rule_id="SEC001",
        name="SQL Injection Risk",
        category="security",
        severity="error",
        languages=languages("js", "ts", "py", "java", "go", "rb", "php"),
        pattern=re.compile(
            r"(?:query|execute|exec|raw)\s*\(\s*"
            r"(?:`[^`]*\$\{"
            r"|f['\"][^'\"]*\{"
            r"|['\"].*?\+\s*(?:req|request|params|input|user|args)"
            r"|['\"].*?%s"
            r"|['\"].*?\?\s*%)",
            re.IGNORECASE,
        ),
        message="SQL injection risk: string interpolation in a SQL query.",
        suggestion=(
            'Use parameterized queries: `db.query("SELECT * FROM users WHERE id = ?", [userId])`.'
        ),
    ),
    LineRule(
        rule_id="SEC002",
        name="eval() Usage",
        category="security",
        severity="error",
        languages=languages("js", "ts", "py"),
        pattern=re.compile(r"\beval\s*\("),
        message="Dangerous eval(): executes arbitrary code and is a major security risk.",
        suggestion=(
            "Use `JSON.parse()` / `ast.literal_eval()` for data, or refactor to avoid "
            "dynamic code execution."
        ),
    ),
    LineRule(
        rule_id="SEC003",
        name="Hardcoded Secret",
        category="security",
        severity="error",
        languages=languages(),
        pattern=re.compile(
            r"(?:password|secret|api_key|apikey|api_secret|access_token|auth_token|private_key)"
            r"\w*['\"]?\s*[:=]\s*['\"][^'\"]{8,}['\"]",
            re.IGNORECASE,
        ),
        message="Hardcoded secret: credentials should never be committed to source.",
        suggestion="Read the value from an environment variable or a secrets manager.",
    ),
    LineRule(
        rule_id="SEC004",
        name="Path Traversal",
        category="security",
        severity="error",
        languages=languages("js", "ts", "py", "go", "java", "rb", "php"),
        pattern=re.compile(
            r"(?:readFile|readFileSync|open|fopen|os\.path\.join|filepath\.Join)\s*\("
            r"[^)]*(?:req\.|request\.|params\.|input|user_input|args)",
            re.IGNORECASE,
        ),
        message="Path traversal risk: user input used in a file path without sanitization.",
        suggestion=(
            "Resolve the path and check that it stays inside the expected base directory."
        ),
    ),
    LineRule(
        rule_id="SEC005",
        name="XSS via innerHTML",
        category="security",
        severity="error",
        languages=languages("js", "ts"),
        pattern=re.compile(r"\.innerHTML\s*=(?!=)(?!\s*['\"`]<)"),
        message="XSS risk: assigning dynamic content to innerHTML.",
        suggestion="Use `textContent` for text, or sanitize the HTML (e.g. DOMPurify) first.",
    ),
    LineRule(
        rule_id="SEC006",
        name="Command Injection",
        category="security",
        severity="error",
        languages=languages("js", "ts", "py", "rb", "php"),
        pattern=re.compile(
            r"(?:exec|spawn|system|popen|subprocess\.call|subprocess\.run|os\.system)\s*\("
            r"[^)]*(?:\+|`|\$\{|\.format|%s|f['\"])",
            re.IGNORECASE,
        ),
        message="Command injection risk: dynamic string passed to a shell command.",
        suggestion="Pass arguments as a list (e.g. `execFile`, `subprocess.run([...])`).",
    ),
    LineRule(
        rule_id="SEC007",
        name="Insecure Randomness",
        category="security",
        severity="warning",
        languages=languages("js", "ts"),
        pattern=re.compile(r"Math\.random\s*\(\)"),
        message="Insecure randomness: Math.random() is not cryptographically secure.",
        suggestion="Use `crypto.randomBytes()` or `crypto.getRandomValues()` for secrets.",
        context_filter=_mentions_security_context,
    ),
    LineRule(
        rule_id="SEC008",
        name="Disabled SSL Verification",
        category="security",
        severity="error",
        languages=languages("py", "js", "ts", "go", "java", "rb"),
        pattern=re.compile(
            r"verify\s*=\s*False"
            r"|rejectUnauthorized\s*:\s*false"
            r"|InsecureSkipVerify\s*:\s*true"
            r"|VERIFY_NONE"
            r"|ssl_verify.*false",
            re.IGNORECASE,
        ),
        message="SSL verification disabled: connections are open to man-in-the-middle attacks.",
        suggestion="Keep certificate verification on; disable it only for local development.",
    ),
)
