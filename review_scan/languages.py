"""File path to language tag mapping."""

from __future__ import annotations

from pathlib import PurePosixPath

EXTENSION_LANGUAGES: dict[str, str] = {
    "js": "js",
    "mjs": "js",
    "cjs": "js",
    "jsx": "jsx",
    "ts": "ts",
    "mts": "ts",
    "cts": "ts",
    "tsx": "tsx",
    "py": "py",
    "pyw": "py",
    "go": "go",
    "rs": "rust",
    "java": "java",
    "rb": "rb",
    "php": "php",
    "c": "c",
    "h": "c",
    "cpp": "cpp",
    "cc": "cpp",
    "cxx": "cpp",
    "hpp": "cpp",
}

SUPPORTED_EXTENSIONS = frozenset(f".{ext}" for ext in EXTENSION_LANGUAGES)


def detect_language(path: str) -> str:
    """Return the language tag for a path.

    Unknown extensions are returned as-is (lower-cased) so rules scoped to
    ``"*"`` still apply and nothing fails on unfamiliar files.
    """
    name = PurePosixPath(path.replace("\\", "/")).name or path
    extension = name.rsplit(".", 1)[-1].lower()
    return EXTENSION_LANGUAGES.get(extension, extension)
