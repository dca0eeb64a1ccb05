import re
from typing import Callable, Iterable, List, Sequence

# Files that stand for their directory rather than a page of their own
DEFAULT_INDEX_FILES = ["README.md", "readme.md", "index.md", "index.mdx"]
DEFAULT_EXTENSIONS = [".md", ".mdx"]

_SEPARATORS = re.compile(r"[/\\]")
_WHITESPACE = re.compile(r"\s+")
_NON_SLUG_CHARS = re.compile(r"[^a-z0-9_-]")


def create_index_file_checker(index_files: Iterable[str]) -> Callable[[str], bool]:
    names = {name.lower() for name in index_files}

    def is_index(file_name: str) -> bool:
        return file_name.lower() in names

    return is_index


def is_index_file(file_name: str, index_files: Iterable[str] = DEFAULT_INDEX_FILES) -> bool:
    """Case-insensitive check of a bare file name against ``index_files``."""
    return create_index_file_checker(index_files)(file_name)


def strip_extension(file_path: str, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> str:
    lowered = file_path.lower()
    for ext in extensions:
        if ext and lowered.endswith(ext.lower()):
            return file_path[: -len(ext)]
    return file_path


def slugify_segment(segment: str) -> str:
    """Lowercase, hyphenate whitespace, and drop everything outside
    ``[a-z0-9_-]`` (non-ASCII letters included, so they vanish)."""
    value = _WHITESPACE.sub("-", segment.lower())
    return _NON_SLUG_CHARS.sub("", value)


def file_path_to_slugs(
    file_path: str,
    index_files: Iterable[str] = DEFAULT_INDEX_FILES,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> List[str]:
    """
    Convert a relative file path into URL slugs.

    ``guides/Getting Started.md`` becomes ``["guides", "getting-started"]``;
    an index file such as ``guides/README.md`` becomes ``["guides"]``.
    """
    if not file_path:
        return []

    parts = [part for part in _SEPARATORS.split(strip_extension(file_path, extensions)) if part]
    file_name = _SEPARATORS.split(file_path)[-1]

    if parts and is_index_file(file_name, index_files):
        parts.pop()

    return [slugify_segment(part) for part in parts]


def slugs_to_url(base_url: str, slugs: List[str]) -> str:
    return f"{base_url}/{'/'.join(slugs)}" if slugs else base_url


def slug_to_display_name(slug: str) -> str:
    """``getting-started`` -> ``Getting Started``"""
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))
