"""
Plugin merging shared by all four plugin kinds.

Merging happens in two phases so it is easy to reason about:

1. Plugins are collected into a name-keyed map. Defaults go in first and
   a later plugin with the same name replaces the earlier one in place.
   Overrides are collected separately (last one per name wins).
2. Overrides are applied (``enabled=False`` drops the plugin, ``options``
   are merged into it) and the survivors are stable-sorted by priority.
"""

import dataclasses
import logging
from typing import Dict, Iterable, List, Optional, Sequence, TypeVar, Union

from compat_engine.types import (
    PluginOverride,
    as_override,
    as_plugin,
    is_plugin_override,
    plugin_kind,
)

log = logging.getLogger(f"mkdocs.plugins.{__name__}")

P = TypeVar("P")


def _configure(plugin: P, override: PluginOverride) -> P:
    if not override.options:
        return plugin
    options = {**(getattr(plugin, "options", None) or {}), **override.options}
    if dataclasses.is_dataclass(plugin):
        return dataclasses.replace(plugin, options=options)
    plugin.options = options
    return plugin


def merge_plugins(
    defaults: Sequence[P],
    customs: Iterable[Union[P, PluginOverride, dict]] = (),
    kind: Optional[str] = None,
) -> List[P]:
    """
    Merge ``customs`` into ``defaults``.

    - a plugin named like a default replaces it
    - ``PluginOverride(name, enabled=False)`` removes the named plugin
    - ``PluginOverride(name, options={...})`` configures it
    - any other plugin is added

    Names are unique in the result: when two plugins share a name the
    later one wins, also among ``customs`` themselves (a debug line is
    logged). Plugin-shaped mappings are turned into plugins of ``kind``,
    which defaults to the kind of the first default.

    The result is sorted by ascending priority; ties keep their order.
    """
    plugins: Dict[str, P] = {}
    overrides: Dict[str, PluginOverride] = {}

    if kind is None and defaults:
        kind = plugin_kind(defaults[0])

    for plugin in defaults:
        plugins[plugin.name] = plugin

    for item in customs:
        if is_plugin_override(item):
            override = as_override(item)
            overrides[override.name] = override
        else:
            item = as_plugin(item, kind)
            if item.name in plugins:
                log.debug(f"[compat_engine] replacing plugin {item.name!r}")
            plugins[item.name] = item

    for name, override in overrides.items():
        if name not in plugins:
            continue
        if override.enabled is False:
            log.debug(f"[compat_engine] disabling plugin {name!r}")
            del plugins[name]
        else:
            plugins[name] = _configure(plugins[name], override)

    # sorted() is stable, so equal priorities keep insertion order
    return sorted(plugins.values(), key=lambda plugin: plugin.priority)
