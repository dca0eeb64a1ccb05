"""
Content plugins: turn raw markdown into renderer-safe markdown.

Default order:

1. markdown-preprocess (10): code/math protection, table escaping
2. jsx-escape (20): second per-line guard for comments and JSX chars
3. link-transform (40): relative ``.md``/``.mdx`` links -> page URLs
4. image-transform (45): relative images -> ``image_base_path``
"""

import posixpath
import re

from compat_engine.preprocessor.preprocessor import (
    escape_jsx_in_non_code_text,
    preprocess_markdown,
    process_lines,
)
from compat_engine.types import ContentPlugin, PluginContext
from compat_engine.utils.slug import (
    DEFAULT_EXTENSIONS,
    DEFAULT_INDEX_FILES,
    file_path_to_slugs,
    slugs_to_url,
)

# Module scope regex variables

LINK_RE = re.compile(r"(?<!!)\[([^\]]*)\]\(([^)]+)\)")
IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
DOC_LINK_RE = re.compile(r"^(?P<path>.+\.mdx?)(?P<fragment>#.*)?$", re.IGNORECASE)

EXTERNAL_PREFIXES = ("http://", "https://")


def _option(context: PluginContext, key: str, default=None):
    options = context.options
    if options is None:
        return default
    value = options.get(key)
    return default if value is None else value


def _markdown_preprocess(content: str, context: PluginContext) -> str:
    return preprocess_markdown(content)


def _jsx_escape(content: str, context: PluginContext) -> str:
    # Code fences and $$ blocks are skipped; tables are treated as prose
    return process_lines(content, escape_jsx_in_non_code_text)


def _link_transform(content: str, context: PluginContext) -> str:
    if _option(context, "transform_links", True) is False:
        return content

    index_files = _option(context, "index_files", DEFAULT_INDEX_FILES)
    extensions = _option(context, "extensions", DEFAULT_EXTENSIONS)
    current_dir = posixpath.dirname(context.file_path.replace("\\", "/"))

    def replace(match: re.Match) -> str:
        text, href = match.group(1), match.group(2)
        if href.startswith(EXTERNAL_PREFIXES) or href.startswith(("#", "/")):
            return match.group(0)

        target = DOC_LINK_RE.match(href)
        if not target:
            return match.group(0)

        target_path = posixpath.normpath(posixpath.join(current_dir, target.group("path")))
        slugs = file_path_to_slugs(target_path, index_files, extensions)
        url = slugs_to_url(context.base_url, slugs)
        return f"[{text}]({url}{target.group('fragment') or ''})"

    return LINK_RE.sub(replace, content)


def _image_transform(content: str, context: PluginContext) -> str:
    image_base_path = _option(context, "image_base_path", "")
    if not image_base_path:
        return content

    current_dir = posixpath.dirname(context.file_path.replace("\\", "/"))

    def replace(match: re.Match) -> str:
        alt, src = match.group(1), match.group(2)
        if src.startswith(EXTERNAL_PREFIXES) or src.startswith("/"):
            return match.group(0)

        resolved = posixpath.normpath(posixpath.join(current_dir, src))
        new_src = re.sub(r"/{2,}", "/", f"{image_base_path}/{resolved}")
        return f"![{alt}]({new_src})"

    return IMAGE_RE.sub(replace, content)


# ==================== Plugin Definitions ====================

markdown_preprocess_plugin = ContentPlugin(
    name="markdown-preprocess", priority=10, transform=_markdown_preprocess
)

jsx_escape_plugin = ContentPlugin(name="jsx-escape", priority=20, transform=_jsx_escape)

link_transform_plugin = ContentPlugin(
    name="link-transform", priority=40, transform=_link_transform
)

image_transform_plugin = ContentPlugin(
    name="image-transform", priority=45, transform=_image_transform
)

DEFAULT_CONTENT_PLUGINS = [
    markdown_preprocess_plugin,
    jsx_escape_plugin,
    link_transform_plugin,
    image_transform_plugin,
]
