from compat_engine.utils.slug import (
    create_index_file_checker,
    file_path_to_slugs,
    is_index_file,
    slug_to_display_name,
    slugify_segment,
    slugs_to_url,
    strip_extension,
)


class TestIndexFiles:
    def test_default_index_files_case_insensitive(self):
        assert is_index_file("README.md")
        assert is_index_file("Readme.MD")
        assert is_index_file("index.md")
        assert is_index_file("INDEX.mdx")
        assert not is_index_file("readme-old.md")

    def test_configured_index_files(self):
        is_index = create_index_file_checker(["_index.md"])
        assert is_index("_INDEX.md")
        assert not is_index("README.md")


class TestFilePathToSlugs:
    def test_simple_file(self):
        assert file_path_to_slugs("intro.md") == ["intro"]

    def test_nested_file(self):
        assert file_path_to_slugs("guides/getting-started.md") == ["guides", "getting-started"]

    def test_index_file_becomes_parent(self):
        """An index file stands for its directory, never for itself."""
        assert file_path_to_slugs("guides/README.md") == ["guides"]
        assert file_path_to_slugs("guides/readme.md") == ["guides"]
        assert file_path_to_slugs("a/b/index.mdx") == ["a", "b"]
        assert file_path_to_slugs("README.md") == []
        assert file_path_to_slugs("ReadMe.md") == []

    def test_whitespace_and_case(self):
        assert file_path_to_slugs("My Guides/Getting Started.md") == ["my-guides", "getting-started"]

    def test_special_characters_are_deleted(self):
        assert file_path_to_slugs("notes/C++ & Rust!.md") == ["notes", "c--rust"]

    def test_non_ascii_is_dropped(self):
        slugs = file_path_to_slugs("docs/中文笔记.md")
        assert slugs == ["docs", ""]
        assert all(ch.isascii() for ch in "".join(slugs))

    def test_windows_separators(self):
        assert file_path_to_slugs("guides\\intro.md") == ["guides", "intro"]

    def test_empty_path(self):
        assert file_path_to_slugs("") == []

    def test_custom_extensions(self):
        assert file_path_to_slugs("page.markdown", extensions=[".markdown"]) == ["page"]
        assert strip_extension("page.MDX", [".md", ".mdx"]) == "page"


class TestUrlsAndNames:
    def test_slugs_to_url(self):
        assert slugs_to_url("/docs", ["a", "b"]) == "/docs/a/b"
        assert slugs_to_url("/docs", []) == "/docs"

    def test_slugify_segment(self):
        assert slugify_segment("Hello   World") == "hello-world"
        assert slugify_segment("snake_case-ok") == "snake_case-ok"

    def test_display_name(self):
        assert slug_to_display_name("getting-started") == "Getting Started"
        assert slug_to_display_name("api") == "Api"
