from compat_engine.core.plugin_merger import merge_plugins
from compat_engine.define import define_scanner_plugin
from compat_engine.plugins.scanner import (
    BUILTIN_SCANNER_PLUGINS,
    create_scanner_plugins,
    has_extension,
    scan_directory,
    scan_with_plugins,
    sort_files,
)
from compat_engine.types import ScannerContext

FILES = {
    "README.md": "# Home",
    "guide.md": "guide",
    "page.mdx": "page",
    "notes.txt": "not markdown",
    "_drafts/wip.md": "draft",
    ".promptpack/x.md": "pack",
    ".promptpack/config.toml": "key = 1",
    ".other-hidden/y.md": "hidden",
    "nested/deep/file.MD": "upper case extension",
}


def scanner_context(root, **options):
    return ScannerContext(base_url="/docs", source_dir=str(root), options=options)


class TestHasExtension:
    def test_exact_suffix(self):
        assert has_extension("a.md", [".md"])
        assert has_extension("a.MD", [".md"])
        assert not has_extension("a.mdx", [".md"])
        assert not has_extension("a.md.bak", [".md"])


class TestScanDirectory:
    def test_missing_directory_is_empty(self, tmp_path):
        assert scan_directory(str(tmp_path / "missing")) == []

    def test_defaults(self, make_tree):
        root = make_tree(FILES)
        files = scan_directory(str(root), [".md", ".mdx"], ["_*", ".*"], [])
        assert sorted(files) == ["README.md", "guide.md", "nested/deep/file.MD", "page.mdx"]

    def test_include_overrides_ignore(self, make_tree):
        root = make_tree(FILES)
        files = scan_directory(str(root), [".md", ".mdx"], [".*"], [".promptpack/**"])
        assert ".promptpack/x.md" in files
        assert ".other-hidden/y.md" not in files

    def test_extension_rejection_is_absolute(self, make_tree):
        root = make_tree(FILES)
        files = scan_directory(str(root), [".md", ".mdx"], [".*"], [".promptpack/**"])
        assert ".promptpack/config.toml" not in files


class TestScannerPlugins:
    def test_builtins_read_options(self, make_tree):
        root = make_tree(FILES)
        ctx = scanner_context(root, extensions=[".md", ".mdx"], ignore=[".*"], include=[".promptpack/**"])
        files = scan_with_plugins(str(root), BUILTIN_SCANNER_PLUGINS, ctx)
        assert ".promptpack/x.md" in files
        assert ".promptpack/config.toml" not in files
        assert ".other-hidden/y.md" not in files
        assert "_drafts/wip.md" in files

    def test_bound_builtins(self, make_tree):
        root = make_tree(FILES)
        plugins = create_scanner_plugins([".mdx"], [], [])
        assert scan_with_plugins(str(root), plugins, scanner_context(root)) == ["page.mdx"]

    def test_agrees_with_scan_directory(self, make_tree):
        root = make_tree(FILES)
        options = dict(extensions=[".md", ".mdx"], ignore=["_*", ".*"], include=[".promptpack/*"])
        expected = scan_directory(str(root), **options)
        assert scan_with_plugins(str(root), BUILTIN_SCANNER_PLUGINS, scanner_context(root, **options)) == expected

    def test_custom_plugin_can_exclude(self, make_tree):
        root = make_tree(FILES)
        no_guides = define_scanner_plugin(
            "no-guide", 30, lambda path, ctx: False if path.startswith("guide") else None
        )
        plugins = merge_plugins(BUILTIN_SCANNER_PLUGINS, [no_guides])
        ctx = scanner_context(root, ignore=["_*", ".*"])
        files = scan_with_plugins(str(root), plugins, ctx)
        assert "guide.md" not in files
        assert "README.md" in files

    def test_custom_plugin_cannot_rescue_wrong_extension(self, make_tree):
        root = make_tree(FILES)
        txt = define_scanner_plugin("txt", 50, lambda path, ctx: True if path.endswith(".txt") else None)
        plugins = merge_plugins(BUILTIN_SCANNER_PLUGINS, [txt])
        assert "notes.txt" not in scan_with_plugins(str(root), plugins, scanner_context(root))


class TestSortFiles:
    def test_readme_then_index_then_rest(self):
        files = ["b.md", "index.md", "a.md", "docs/README.md", "readme.md", "docs/index.mdx"]
        assert sort_files(files) == [
            "docs/README.md",
            "readme.md",
            "docs/index.mdx",
            "index.md",
            "a.md",
            "b.md",
        ]

    def test_index_sorts_before_siblings(self):
        files = ["guides/advanced.md", "guides/README.md", "guides/a.md"]
        assert sort_files(files)[0] == "guides/README.md"
