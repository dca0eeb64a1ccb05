"""
Metadata plugins: derive title and description for a page.

Each plugin only fills fields that are still empty, so the first plugin
(by priority) to set a field wins.
"""

import os
import re

from compat_engine.types import MetadataPlugin, PageMetadata, PluginContext

# Module scope regex variables

H1_RE = re.compile(r"^#[ \t]+(.+)$", re.MULTILINE)
LEADING_FRONTMATTER_RE = re.compile(r"^---[\s\S]*?---\n?")
FILENAME_SEPARATOR_RE = re.compile(r"[-_]")
WORD_START_RE = re.compile(r"\b\w")

DEFAULT_DESCRIPTION_LENGTH = 200
DEFAULT_DESCRIPTION = "No description available"


def _frontmatter(metadata: PageMetadata, content: str, context: PluginContext) -> PageMetadata:
    frontmatter = metadata.get("frontmatter") or {}
    title = frontmatter.get("title")
    description = frontmatter.get("description")

    if title and not metadata.get("title"):
        metadata = {**metadata, "title": str(title)}
    if description and not metadata.get("description"):
        metadata = {**metadata, "description": str(description)}
    return metadata


def _title_from_h1(metadata: PageMetadata, content: str, context: PluginContext) -> PageMetadata:
    if metadata.get("title"):
        return metadata

    match = H1_RE.search(content)
    if match:
        return {**metadata, "title": match.group(1).strip()}
    return metadata


def extract_description(content: str, max_length: int = DEFAULT_DESCRIPTION_LENGTH) -> str:
    """
    First paragraph of ``content`` as a single line.

    Headings and blank lines before it are skipped, blockquote markers
    are dropped (quotes opening with ``**`` such as ``> **Note**`` are
    left out), and the result is cut to ``max_length`` characters.
    Returns an empty string when there is no paragraph.
    """
    body = LEADING_FRONTMATTER_RE.sub("", content, count=1)
    lines = []

    for raw_line in body.split("\n"):
        line = raw_line.strip()

        if not line or line.startswith("#") or line == ">":
            if lines:
                break
            continue

        if line.startswith(">"):
            quote = line[1:].strip()
            if quote and not quote.startswith("**"):
                lines.append(quote)
            continue

        lines.append(line)

    return " ".join(lines)[:max_length]


def _description_from_paragraph(
    metadata: PageMetadata, content: str, context: PluginContext
) -> PageMetadata:
    if metadata.get("description"):
        return metadata

    options = context.plugin_options or {}
    max_length = options.get("max_length", DEFAULT_DESCRIPTION_LENGTH)
    fallback = options.get("fallback", DEFAULT_DESCRIPTION)

    description = extract_description(content, max_length)
    return {**metadata, "description": description or fallback}


def title_from_file_name(file_path: str) -> str:
    """``guides/getting-started.md`` -> ``Getting Started``"""
    stem, _ = os.path.splitext(os.path.basename(file_path.replace("\\", "/")))
    words = FILENAME_SEPARATOR_RE.sub(" ", stem)
    return WORD_START_RE.sub(lambda match: match.group(0).upper(), words)


def _title_from_filename(
    metadata: PageMetadata, content: str, context: PluginContext
) -> PageMetadata:
    if metadata.get("title"):
        return metadata
    return {**metadata, "title": title_from_file_name(context.file_path)}


# ==================== Plugin Definitions ====================

frontmatter_plugin = MetadataPlugin(name="frontmatter", priority=5, extract=_frontmatter)

title_from_h1_plugin = MetadataPlugin(name="title-from-h1", priority=20, extract=_title_from_h1)

description_from_paragraph_plugin = MetadataPlugin(
    name="description-from-paragraph",
    priority=25,
    extract=_description_from_paragraph,
    options={"max_length": DEFAULT_DESCRIPTION_LENGTH, "fallback": DEFAULT_DESCRIPTION},
)

title_from_filename_plugin = MetadataPlugin(
    name="title-from-filename", priority=30, extract=_title_from_filename
)

DEFAULT_METADATA_PLUGINS = [
    frontmatter_plugin,
    title_from_h1_plugin,
    description_from_paragraph_plugin,
    title_from_filename_plugin,
]
