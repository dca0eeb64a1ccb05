"""
File discovery: walk the content directory and decide which files become
pages.

``scan_directory`` applies the extension allow-list and the ignore/include
patterns directly. ``scan_with_plugins`` hands each file to the scanner
plugin pipeline instead; with only the builtin plugins both agree.
"""

import logging
import os
from typing import Iterable, List, Optional, Sequence

from compat_engine.core.pipeline import run_scanner_pipeline
from compat_engine.types import ScannerContext, ScannerPlugin
from compat_engine.utils.patterns import matches_pattern, should_include_file
from compat_engine.utils.slug import DEFAULT_EXTENSIONS

log = logging.getLogger(f"mkdocs.plugins.{__name__}")


def has_extension(file_path: str, extensions: Iterable[str]) -> bool:
    """Case-insensitive suffix check; ``.md`` does not match ``.mdx``."""
    lowered = file_path.lower()
    return any(ext and lowered.endswith(ext.lower()) for ext in extensions)


def walk_files(root_dir: str) -> List[str]:
    """All regular files under ``root_dir`` as ``/``-separated relative paths."""
    if not os.path.isdir(root_dir):
        log.debug(f"[compat_engine] content directory not found at {root_dir}")
        return []

    results = []
    for root, dirs, files in os.walk(root_dir):
        dirs.sort()
        for file in sorted(files):
            full_path = os.path.join(root, file)
            if not os.path.isfile(full_path):
                continue
            relative = os.path.relpath(full_path, root_dir)
            results.append(relative.replace(os.sep, "/"))
    return results


def scan_directory(
    root_dir: str,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    ignore: Sequence[str] = (),
    include: Sequence[str] = (),
) -> List[str]:
    """Relative paths of the files that pass the extension and pattern checks."""
    return [
        path
        for path in walk_files(root_dir)
        if has_extension(path, extensions) and should_include_file(path, ignore, include)
    ]


def scan_with_plugins(
    root_dir: str, plugins: Iterable[ScannerPlugin], context: ScannerContext
) -> List[str]:
    plugins = list(plugins)
    return [
        path for path in walk_files(root_dir) if run_scanner_pipeline(plugins, path, context)
    ]


def _sort_rank(file_path: str) -> int:
    name = file_path.replace("\\", "/").rsplit("/", 1)[-1].lower()
    if name.startswith("readme"):
        return 0
    if name.startswith("index"):
        return 1
    return 2


def sort_files(files: Iterable[str]) -> List[str]:
    """README* first, then index*, then the rest, each group by path."""
    return sorted(files, key=lambda path: (_sort_rank(path), path))


# ==================== Builtin scanner plugins ====================
#
# Without explicit lists the builtins read ``extensions``, ``ignore`` and
# ``include`` from the construction options on the context.


def _context_option(context: ScannerContext, key: str, default):
    options = context.options
    if options is None:
        return default
    value = options.get(key)
    return default if value is None else value


def create_scanner_plugins(
    extensions: Optional[Sequence[str]] = None,
    ignore: Optional[Sequence[str]] = None,
    include: Optional[Sequence[str]] = None,
) -> List[ScannerPlugin]:
    """
    Build the three builtin filters.

    - extension-filter (5): hard include/exclude by extension
    - ignore-pattern (15): excludes matches, otherwise defers
    - include-pattern (20): includes matches, otherwise defers
    """

    def extension_filter(file_path: str, context: ScannerContext) -> bool:
        allowed = extensions
        if allowed is None:
            allowed = _context_option(context, "extensions", DEFAULT_EXTENSIONS)
        return has_extension(file_path, allowed)

    def ignore_pattern(file_path: str, context: ScannerContext) -> Optional[bool]:
        patterns = ignore
        if patterns is None:
            patterns = _context_option(context, "ignore", [])
        if any(matches_pattern(file_path, pattern) for pattern in patterns):
            return False
        return None

    def include_pattern(file_path: str, context: ScannerContext) -> Optional[bool]:
        patterns = include
        if patterns is None:
            patterns = _context_option(context, "include", [])
        if any(matches_pattern(file_path, pattern) for pattern in patterns):
            return True
        return None

    return [
        ScannerPlugin(name="extension-filter", priority=5, filter=extension_filter),
        ScannerPlugin(name="ignore-pattern", priority=15, filter=ignore_pattern),
        ScannerPlugin(name="include-pattern", priority=20, filter=include_pattern),
    ]


BUILTIN_SCANNER_PLUGINS = create_scanner_plugins()
