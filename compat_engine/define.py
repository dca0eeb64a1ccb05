"""
Plugin definition helpers.

Example::

    reading_time = define_metadata_plugin(
        "reading-time",
        50,
        lambda metadata, content, ctx: {
            **metadata,
            "reading_time": max(1, len(content.split()) // 200),
        },
    )
"""

from typing import Any, Callable, Dict, Optional

from compat_engine.types import (
    ContentPlugin,
    MetadataPlugin,
    ScannerPlugin,
    TreePlugin,
)


def define_content_plugin(
    name: str, priority: int, transform: Callable, options: Optional[Dict[str, Any]] = None
) -> ContentPlugin:
    return ContentPlugin(name=name, priority=priority, transform=transform, options=dict(options or {}))


def define_metadata_plugin(
    name: str, priority: int, extract: Callable, options: Optional[Dict[str, Any]] = None
) -> MetadataPlugin:
    return MetadataPlugin(name=name, priority=priority, extract=extract, options=dict(options or {}))


def define_scanner_plugin(
    name: str, priority: int, filter: Callable, options: Optional[Dict[str, Any]] = None
) -> ScannerPlugin:
    """``filter`` returns True to include, False to exclude, None to defer."""
    return ScannerPlugin(name=name, priority=priority, filter=filter, options=dict(options or {}))


def define_tree_plugin(
    name: str, priority: int, transform: Callable, options: Optional[Dict[str, Any]] = None
) -> TreePlugin:
    return TreePlugin(name=name, priority=priority, transform=transform, options=dict(options or {}))
