"""
Core types and plugin interfaces for the compat engine.

Pages are immutable records; metadata and page-tree nodes are plain dicts
so they serialise straight to JSON for the navigation layer.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

# Metadata is a dict with at least ``title``, ``description`` and
# ``frontmatter``. Plugins may add their own keys.
PageMetadata = Dict[str, Any]

# Tree nodes: {"type": "page", "name", "url"}, {"type": "folder", "name",
# "children", "index"?} and the root {"name", "children"}.
TreeNode = Dict[str, Any]

PLUGIN_KINDS = ("content", "metadata", "scanner", "tree")

_CAPABILITIES = ("transform", "extract", "filter")


def new_metadata(frontmatter: Optional[Dict[str, Any]] = None) -> PageMetadata:
    return {"title": "", "description": "", "frontmatter": dict(frontmatter or {})}


# ==================== Core Types ====================


@dataclass(frozen=True)
class Page:
    """
    A processed document, addressable by its slugs.

    ``slugs`` is stored as a tuple. ``data`` stays a plain dict so it
    serialises as is; treat it as read-only.
    """

    file_path: str
    slugs: Tuple[str, ...]
    url: str
    content: str
    data: PageMetadata

    def __post_init__(self):
        object.__setattr__(self, "slugs", tuple(self.slugs))

    @property
    def key(self) -> str:
        return slug_key(self.slugs)


def slug_key(slugs: Optional[Sequence[str]]) -> str:
    """Key a page is stored under; the root index is ``"index"``."""
    return "/".join(slugs or []) or "index"


# ==================== Plugin Contexts ====================


@dataclass(frozen=True)
class ScannerContext:
    """Context handed to scanner plugins (no file content yet)."""

    base_url: str
    source_dir: str
    options: Any
    plugin_options: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PluginContext(ScannerContext):
    """Context handed to content and metadata plugins."""

    # Path of the current file, relative to ``source_dir``
    file_path: str = ""


@dataclass(frozen=True)
class TreeContext(PluginContext):
    pages: List[Page] = field(default_factory=list)


def bind_plugin_options(context: ScannerContext, plugin: Any) -> ScannerContext:
    """Return ``context`` carrying the options configured for ``plugin``."""
    options = getattr(plugin, "options", None) or {}
    if options == context.plugin_options:
        return context
    return dataclasses.replace(context, plugin_options=dict(options))


# ==================== Plugin Types ====================
#
# Priority is ascending: lower numbers run earlier. Recommended ranges for
# content plugins are 0-30 preprocessing, 31-60 transformation and 61-100
# post-processing.


@dataclass
class ContentPlugin:
    name: str
    priority: int
    transform: Callable[[str, PluginContext], str]
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class MetadataPlugin:
    name: str
    priority: int
    # extract(metadata, content_without_frontmatter, context) -> metadata
    extract: Callable[[PageMetadata, str, PluginContext], PageMetadata]
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ScannerPlugin:
    name: str
    priority: int
    # filter(relative_path, context) -> True (include), False (exclude)
    # or None (defer to the next plugin)
    filter: Callable[[str, ScannerContext], Optional[bool]]
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TreePlugin:
    name: str
    priority: int
    transform: Callable[[TreeNode, TreeContext], TreeNode]
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PluginOverride:
    """Disables (``enabled=False``) or configures a same-named plugin."""

    name: str
    enabled: Optional[bool] = None
    options: Dict[str, Any] = field(default_factory=dict)


AnyPlugin = Union[ContentPlugin, MetadataPlugin, ScannerPlugin, TreePlugin]


# ==================== Type Guards ====================


def is_plugin_override(value: Any) -> bool:
    """True when ``value`` carries no transform/extract/filter callable.

    Mappings count as overrides, so ``{"name": "link-transform",
    "enabled": False}`` read from ``mkdocs.yml`` behaves like a
    :class:`PluginOverride`.
    """
    if isinstance(value, PluginOverride):
        return True
    if isinstance(value, Mapping):
        return not any(callable(value.get(attr)) for attr in _CAPABILITIES)
    return not any(callable(getattr(value, attr, None)) for attr in _CAPABILITIES)


def as_override(value: Union[PluginOverride, Mapping]) -> PluginOverride:
    if isinstance(value, PluginOverride):
        return value
    if "name" not in value:
        raise ValueError(f"Plugin override is missing a name: {dict(value)!r}")
    return PluginOverride(
        name=value["name"],
        enabled=value.get("enabled"),
        options=dict(value.get("options") or {}),
    )


_PLUGIN_CLASSES = {
    "content": (ContentPlugin, "transform"),
    "metadata": (MetadataPlugin, "extract"),
    "scanner": (ScannerPlugin, "filter"),
    "tree": (TreePlugin, "transform"),
}


def plugin_kind(plugin: Any) -> Optional[str]:
    for kind, (plugin_class, _) in _PLUGIN_CLASSES.items():
        if isinstance(plugin, plugin_class):
            return kind
    return None


def as_plugin(value: Any, kind: Optional[str] = None) -> Any:
    """
    Turn a plugin-shaped mapping into the matching plugin dataclass.

    ``{"name": "shout", "priority": 50, "transform": fn}`` becomes a
    :class:`ContentPlugin` (or a :class:`TreePlugin` for ``kind="tree"``).
    Without ``kind`` the capability key decides. Anything that is not a
    mapping is returned as is.
    """
    if not isinstance(value, Mapping):
        return value

    if kind is None:
        if callable(value.get("extract")):
            kind = "metadata"
        elif callable(value.get("filter")):
            kind = "scanner"
        else:
            kind = "content"
    plugin_class, capability = _PLUGIN_CLASSES[kind]

    missing = [key for key in ("name", "priority", capability) if value.get(key) is None]
    if missing:
        raise ValueError(f"{kind.capitalize()} plugin is missing {', '.join(missing)}: {dict(value)!r}")
    if not callable(value[capability]):
        raise ValueError(f"{kind.capitalize()} plugin {value['name']!r} needs a callable {capability!r}")

    return plugin_class(
        name=value["name"],
        priority=value["priority"],
        options=dict(value.get("options") or {}),
        **{capability: value[capability]},
    )
