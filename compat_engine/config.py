"""
Construction options, declared as an MkDocs config schema.

The same schema backs ``create_compat_source(...)`` and the ``compat_source``
entry in ``mkdocs.yml`` (see ``compat_engine.mkdocs_plugin.plugin``).
"""

import logging
from typing import Any, Mapping, Optional

from mkdocs.config import base
from mkdocs.config import config_options as c
from mkdocs.config.base import ValidationError
from mkdocs.exceptions import ConfigurationError

from compat_engine.types import PLUGIN_KINDS, as_plugin, is_plugin_override
from compat_engine.utils.slug import DEFAULT_EXTENSIONS, DEFAULT_INDEX_FILES

log = logging.getLogger(f"mkdocs.plugins.{__name__}")

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_IGNORE = ["_*", ".*"]


class CallableOption(c.BaseConfigOption):
    """A Python callable; only reachable from the Python API."""

    def run_validation(self, value):
        if not callable(value):
            raise ValidationError(f"Expected a callable, got {type(value).__name__}")
        return value


class PluginLists(c.OptionallyRequired):
    """Mapping of plugin kind -> list of plugins or overrides.

    Plugin-shaped mappings are turned into plugins of their kind here, so
    a malformed one is reported as a config error.
    """

    def run_validation(self, value):
        if not isinstance(value, Mapping):
            raise ValidationError(
                f"Expected a mapping of plugin lists, got {type(value).__name__}"
            )
        unknown = sorted(str(kind) for kind in value if kind not in PLUGIN_KINDS)
        if unknown:
            raise ValidationError(
                f"Unknown plugin kind(s) {', '.join(unknown)}; "
                f"expected any of {', '.join(PLUGIN_KINDS)}"
            )
        lists = {}
        for kind, items in value.items():
            if items is None:
                items = []
            if not isinstance(items, (list, tuple)):
                raise ValidationError(
                    f"Plugins for '{kind}' must be a list, got {type(items).__name__}"
                )
            try:
                lists[kind] = [
                    item if is_plugin_override(item) else as_plugin(item, kind)
                    for item in items
                ]
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
        return lists


class CompatSourceOptions(base.Config):
    # Content directory; relative paths resolve against the working directory
    dir = c.Type(str)
    base_url = c.Type(str)

    # File filtering
    extensions = c.ListOfItems(c.Type(str), default=list(DEFAULT_EXTENSIONS))
    index_files = c.ListOfItems(c.Type(str), default=list(DEFAULT_INDEX_FILES))
    ignore = c.ListOfItems(c.Type(str), default=list(DEFAULT_IGNORE))
    # Include patterns override ignore patterns
    include = c.ListOfItems(c.Type(str), default=[])
    max_file_size = c.Type(int, default=DEFAULT_MAX_FILE_SIZE)

    # Link processing
    transform_links = c.Type(bool, default=True)
    image_base_path = c.Type(str, default="")

    plugins = PluginLists(default={})

    # Legacy hooks; when present they take precedence over the plugins
    title_extractor = c.Optional(CallableOption())
    description_extractor = c.Optional(CallableOption())
    preprocessor = c.Optional(CallableOption())


def validate_config(config: base.Config) -> base.Config:
    failed, warnings = config.validate()
    for key, warning in warnings:
        log.warning(f"[compat_engine] Config value '{key}': {warning}")
    if failed:
        raise ConfigurationError(
            "\n".join(f"Config value '{key}': {error}" for key, error in failed)
        )
    return config


def load_options(options: Optional[Mapping[str, Any]] = None, **overrides) -> CompatSourceOptions:
    """
    Load and validate construction options.

    ``options`` may be any mapping (including a previously loaded
    :class:`CompatSourceOptions`); keyword arguments are layered on top.
    Raises :class:`ConfigurationError` listing every invalid value.
    """
    data = dict(options or {})
    data.update(overrides)

    config = CompatSourceOptions()
    config.load_dict(data)
    return validate_config(config)
