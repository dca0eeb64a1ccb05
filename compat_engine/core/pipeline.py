"""
Plugin execution engine.

Every runner sorts its plugins first (lower priority runs earlier) and
then folds them over an accumulator: text for content plugins, a metadata
dict for metadata plugins, an include decision for scanner plugins and
the page tree for tree plugins. Exceptions raised by plugins propagate.
"""

from typing import Iterable, List, Optional, Union

from compat_engine.core.plugin_merger import merge_plugins
from compat_engine.types import (
    ContentPlugin,
    MetadataPlugin,
    PageMetadata,
    PluginContext,
    PluginOverride,
    ScannerContext,
    ScannerPlugin,
    TreeContext,
    TreeNode,
    TreePlugin,
    bind_plugin_options,
)


def create_pipeline(
    plugins: Iterable[Union[object, PluginOverride]], kind: Optional[str] = None
) -> List:
    """
    Drop overrides and disabled plugins, then stable-sort by priority.

    Plugins are keyed by name, so of two plugins sharing a name only the
    later one runs (logged at debug level by the merger).
    """
    return merge_plugins((), plugins, kind)


def run_content_pipeline(
    plugins: Iterable[ContentPlugin], content: str, context: PluginContext
) -> str:
    result = content
    for plugin in create_pipeline(plugins, "content"):
        result = plugin.transform(result, bind_plugin_options(context, plugin))
    return result


def run_metadata_pipeline(
    plugins: Iterable[MetadataPlugin],
    initial_metadata: PageMetadata,
    content: str,
    context: PluginContext,
) -> PageMetadata:
    metadata = dict(initial_metadata)
    for plugin in create_pipeline(plugins, "metadata"):
        metadata = plugin.extract(metadata, content, bind_plugin_options(context, plugin))
    return metadata


def run_scanner_pipeline(
    plugins: Iterable[ScannerPlugin], file_path: str, context: ScannerContext
) -> bool:
    """
    Decide whether ``file_path`` is included.

    Each plugin answers True, False or None (defer). A False before any
    definitive answer is final: that is how the extension filter, which
    runs first, rejects files no include pattern may bring back. After a
    first answer, the latest definitive answer wins, which is what lets
    the include patterns override the ignore patterns. With no answer at
    all the file is included.
    """
    decision: Optional[bool] = None

    for plugin in create_pipeline(plugins, "scanner"):
        result = plugin.filter(file_path, bind_plugin_options(context, plugin))
        if result is None:
            continue
        if result is False and decision is None:
            return False
        decision = bool(result)

    return True if decision is None else decision


def _transform_tree(node: TreeNode, plugin: TreePlugin, context: TreeContext) -> TreeNode:
    children = node.get("children")
    if children is not None:
        node["children"] = [_transform_tree(child, plugin, context) for child in children]
    return plugin.transform(node, context)


def run_tree_pipeline(
    plugins: Iterable[TreePlugin], root: TreeNode, context: TreeContext
) -> TreeNode:
    """Apply each tree plugin to every node, children before parents."""
    for plugin in create_pipeline(plugins, "tree"):
        root = _transform_tree(root, plugin, bind_plugin_options(context, plugin))
    return root
