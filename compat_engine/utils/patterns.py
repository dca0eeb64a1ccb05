"""
Path pattern matching for the ignore/include rules.

Supported patterns:

- ``_*``, ``.*``: prefix wildcard, matches when any path part starts with it
- ``tests/*``: paths under ``tests/`` (or ``tests`` itself)
- ``scripts/**``: paths under ``scripts/`` at any depth (or ``scripts``)
- ``README.md``: the full path, or any single part, equals the pattern

Anything else falls through to the exact-match rule.
"""

from typing import Iterable


def matches_pattern(file_path: str, pattern: str) -> bool:
    normalized = file_path.replace("\\", "/")
    parts = normalized.split("/")

    if pattern.endswith("*") and "/" not in pattern:
        prefix = pattern[:-1]
        return any(part.startswith(prefix) for part in parts)

    if pattern.endswith("/**"):
        directory = pattern[:-3]
        return normalized.startswith(directory + "/") or normalized == directory

    if pattern.endswith("/*"):
        directory = pattern[:-2]
        return normalized.startswith(directory + "/") or parts[0] == directory

    return normalized == pattern or pattern in parts


def should_include_file(
    relative_path: str, ignore: Iterable[str], include: Iterable[str]
) -> bool:
    """Include patterns win over ignore patterns; the default is to include."""
    if any(matches_pattern(relative_path, pattern) for pattern in include):
        return True
    if any(matches_pattern(relative_path, pattern) for pattern in ignore):
        return False
    return True
