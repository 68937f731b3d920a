"""Configuration loading for review-scan."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from review_scan.rules.base import SEVERITIES

CONFIG_FILENAMES = (".review-scan.toml", "review-scan.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("review_scan", "review-scan")

DEFAULT_EXCLUDED_DIRS = (
    "node_modules",
    ".git",
    "vendor",
    "dist",
    "build",
    ".next",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
)
DEFAULT_API_URL = "https://api.github.com"
FAIL_ON_CHOICES = {*SEVERITIES, "never"}


@dataclass(slots=True)
class GitHubConfig:
    """Pull-request review posting settings."""

    max_comments: int = 20
    api_url: str = DEFAULT_API_URL

    def to_dict(self) -> dict[str, Any]:
        return {"max_comments": self.max_comments, "api_url": self.api_url}


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    severity: str = "warning"
    format: str = "human"
    fail_on: str = "error"
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    exclude_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_DIRS))
    rule_enable: list[str] | None = None
    rule_disable: list[str] = field(default_factory=list)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "format": self.format,
            "fail_on": self.fail_on,
            "include": list(self.include),
            "exclude": list(self.exclude),
            "exclude_dirs": list(self.exclude_dirs),
            "rules": {
                "enable": list(self.rule_enable) if self.rule_enable is not None else None,
                "disable": list(self.rule_disable),
            },
            "github": self.github.to_dict(),
            "source": self.source,
        }


def load_app_config(repo: Path, config_path: Path | None = None) -> AppConfig:
    """Load config from explicit path or repository-local files with precedence."""
    repo = repo.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (repo / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        return _from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = repo / filename
        if resolved.exists():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = repo / PYPROJECT_FILENAME
    if pyproject_path.exists():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def default_config_template() -> str:
    """Return a starter config template."""
    return "\n".join(
        [
            'severity = "warning"',
            'format = "human"',
            'fail_on = "error"',
            'include = ["src/**"]',
            'exclude = ["**/*.test.js"]',
            "exclude_dirs = [",
            *(f'  "{name}",' for name in DEFAULT_EXCLUDED_DIRS),
            "]",
            "",
            "[rules]",
            '# enable = ["SEC001", "SEC002"]',
            'disable = ["GEN001"]',
            "",
            "[github]",
            "max_comments = 20",
            f'api_url = "{DEFAULT_API_URL}"',
            "",
        ]
    )


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    tool_section = _find_pyproject_tool_section(loaded)
    if source_path.name == PYPROJECT_FILENAME:
        return tool_section if tool_section is not None else {}
    return tool_section if tool_section is not None else loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str) -> AppConfig:
    rules_mapping = _as_table(mapping.get("rules"), "rules")
    github_mapping = _as_table(mapping.get("github"), "github")

    exclude_dirs = mapping.get("exclude_dirs")
    max_comments = _as_int(github_mapping.get("max_comments", 20), "github.max_comments")
    if max_comments < 0:
        raise ValueError("github.max_comments must be >= 0")

    return AppConfig(
        severity=_as_choice(mapping.get("severity", "warning"), set(SEVERITIES), "severity"),
        format=_as_choice(mapping.get("format", "human"), {"human", "json"}, "format"),
        fail_on=_as_choice(mapping.get("fail_on", "error"), FAIL_ON_CHOICES, "fail_on"),
        include=_as_str_list(mapping.get("include"), "include"),
        exclude=_as_str_list(mapping.get("exclude"), "exclude"),
        exclude_dirs=(
            _as_str_list(exclude_dirs, "exclude_dirs")
            if exclude_dirs is not None
            else list(DEFAULT_EXCLUDED_DIRS)
        ),
        rule_enable=_as_str_list_or_none(rules_mapping.get("enable"), "rules.enable"),
        rule_disable=_as_str_list(rules_mapping.get("disable"), "rules.disable"),
        github=GitHubConfig(
            max_comments=max_comments,
            api_url=_as_str(github_mapping.get("api_url", DEFAULT_API_URL), "github.api_url"),
        ),
        source=source,
    )


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{field_name} must be a list of strings")
    return list(value)


def _as_str_list_or_none(value: Any, field_name: str) -> list[str] | None:
    if value is None:
        return None
    return _as_str_list(value, field_name)


def _as_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    return value


def _as_choice(raw: Any, allowed: set[str], field_name: str) -> str:
    value = str(raw).lower()
    if value not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ValueError(f"{field_name} must be one of: {choices}")
    return value


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{field_name} must be an integer")
    return raw
