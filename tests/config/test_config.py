import pytest
from mkdocs.exceptions import ConfigurationError

from compat_engine.config import DEFAULT_MAX_FILE_SIZE, load_options
from compat_engine.types import MetadataPlugin, PluginOverride, ScannerPlugin


class TestLoadOptions:
    def test_defaults(self):
        options = load_options(dir="notes", base_url="/raw-notes")
        assert options["extensions"] == [".md", ".mdx"]
        assert options["index_files"] == ["README.md", "readme.md", "index.md", "index.mdx"]
        assert options["ignore"] == ["_*", ".*"]
        assert options["include"] == []
        assert options["max_file_size"] == DEFAULT_MAX_FILE_SIZE == 10 * 1024 * 1024
        assert options["transform_links"] is True
        assert options["image_base_path"] == ""
        assert options["plugins"] == {}
        assert options["title_extractor"] is None
        assert options["preprocessor"] is None

    def test_mapping_and_keywords(self):
        options = load_options({"dir": "a", "base_url": "/a"}, base_url="/b")
        assert options["dir"] == "a"
        assert options["base_url"] == "/b"

    def test_reload_from_loaded_options(self):
        options = load_options(dir="notes", base_url="/x", include=["_keep/**"])
        again = load_options(options)
        assert again["include"] == ["_keep/**"]

    def test_missing_required(self):
        with pytest.raises(ConfigurationError, match="base_url"):
            load_options(dir="notes")

    def test_wrong_type(self):
        with pytest.raises(ConfigurationError, match="max_file_size"):
            load_options(dir="notes", base_url="/x", max_file_size="big")

    def test_callable_hooks(self):
        options = load_options(dir="n", base_url="/x", preprocessor=lambda c, p: c)
        assert callable(options["preprocessor"])
        with pytest.raises(ConfigurationError, match="title_extractor"):
            load_options(dir="n", base_url="/x", title_extractor="not callable")


class TestPluginsOption:
    def test_accepts_known_kinds(self):
        override = PluginOverride(name="link-transform", enabled=False)
        options = load_options(dir="n", base_url="/x", plugins={"content": [override], "tree": None})
        assert options["plugins"] == {"content": [override], "tree": []}

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError, match="Unknown plugin kind"):
            load_options(dir="n", base_url="/x", plugins={"render": []})

    def test_lists_required(self):
        with pytest.raises(ConfigurationError, match="must be a list"):
            load_options(dir="n", base_url="/x", plugins={"content": "jsx-escape"})

    def test_plugin_mappings_become_plugins(self):
        words = {"name": "words", "priority": 50, "extract": lambda m, c, ctx: m}
        skip = {"name": "skip", "priority": 30, "filter": lambda path, ctx: None}
        options = load_options(
            dir="n",
            base_url="/x",
            plugins={"metadata": [words, {"name": "title-from-h1", "enabled": False}], "scanner": [skip]},
        )
        metadata = options["plugins"]["metadata"]
        assert isinstance(metadata[0], MetadataPlugin)
        assert metadata[1] == {"name": "title-from-h1", "enabled": False}
        assert isinstance(options["plugins"]["scanner"][0], ScannerPlugin)

    def test_malformed_plugin_mapping(self):
        with pytest.raises(ConfigurationError, match="missing priority"):
            load_options(
                dir="n", base_url="/x", plugins={"content": [{"name": "x", "transform": str.upper}]}
            )
