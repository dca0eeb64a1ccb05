"""
Source factory: scan a content directory and build a queryable page set.

    source = create_compat_source(dir="notes", base_url="/raw-notes")
    source.get_page(["guides", "getting-started"])
    source.page_tree
"""

import logging
import os
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from compat_engine.config import CompatSourceOptions, load_options
from compat_engine.core.page_builder import ROOT_NAME, build_page_tree
from compat_engine.core.pipeline import (
    run_content_pipeline,
    run_metadata_pipeline,
    run_tree_pipeline,
)
from compat_engine.core.plugin_merger import merge_plugins
from compat_engine.plugins.content import DEFAULT_CONTENT_PLUGINS
from compat_engine.plugins.metadata import DEFAULT_METADATA_PLUGINS
from compat_engine.plugins.scanner import (
    BUILTIN_SCANNER_PLUGINS,
    scan_directory,
    scan_with_plugins,
    sort_files,
)
from compat_engine.types import (
    Page,
    PageMetadata,
    PluginContext,
    ScannerContext,
    TreeContext,
    TreeNode,
    new_metadata,
    slug_key,
)
from compat_engine.utils.slug import file_path_to_slugs, slugs_to_url

log = logging.getLogger(f"mkdocs.plugins.{__name__}")

# Module scope regex variables

FM_PATTERN = re.compile(r"^---[ \t]*\n(.*?\n)?---[ \t]*(?:\n|$)", re.DOTALL)
FM_FALLBACK_PATTERN = re.compile(r"^---.*?---\n?(.*)\Z", re.DOTALL)


class FrontMatterError(ValueError):
    pass


def split_front_matter(source_text: str) -> Tuple[Dict[str, Any], str]:
    """
    Return ``(front_matter_dict, body_text)``.

    Without a leading ``---`` block the dict is empty and the body is the
    full text. Raises :class:`FrontMatterError` when the block is not a
    YAML mapping.
    """
    match = FM_PATTERN.match(source_text)
    if not match:
        return {}, source_text

    try:
        front_matter = yaml.safe_load(match.group(1) or "")
    except yaml.YAMLError as exc:
        raise FrontMatterError(str(exc)) from exc

    if front_matter is None:
        front_matter = {}
    if not isinstance(front_matter, dict):
        raise FrontMatterError(
            f"expected a mapping, got {type(front_matter).__name__}"
        )
    return front_matter, source_text[match.end():]


def strip_front_matter(source_text: str) -> str:
    """Best-effort removal of a leading ``---`` block that failed to parse."""
    match = FM_FALLBACK_PATTERN.match(source_text)
    if match and match.group(1):
        return match.group(1)
    return source_text


class CompatSource:
    """
    A built page set plus its navigation tree.

    Pages are keyed by ``"/".join(slugs)``, the root index by ``"index"``.
    The object is a snapshot; :meth:`reload` builds a new one.
    """

    def __init__(
        self,
        pages: Dict[str, Page],
        page_tree: TreeNode,
        base_url: str,
        warnings: List[str],
        options: Optional[CompatSourceOptions] = None,
    ):
        self._pages = pages
        self.page_tree = page_tree
        self.base_url = base_url
        self.warnings = warnings
        self.options = options

    @classmethod
    def empty(cls, base_url: str) -> "CompatSource":
        return cls({}, {"name": ROOT_NAME, "children": []}, base_url, [])

    def get_page(self, slugs: Optional[List[str]] = None) -> Optional[Page]:
        """Look up a page; ``None`` or ``[]`` is the root index."""
        return self._pages.get(slug_key(slugs))

    def get_pages(self) -> List[Page]:
        return list(self._pages.values())

    def generate_params(self) -> List[Dict[str, List[str]]]:
        return [{"slug": list(page.slugs)} for page in self._pages.values()]

    def reload(self) -> "CompatSource":
        if self.options is None:
            return CompatSource.empty(self.base_url)
        return create_compat_source(self.options)

    def __len__(self):
        return len(self._pages)

    def __repr__(self):
        return f"CompatSource(base_url={self.base_url!r}, pages={len(self._pages)})"


def _read_text(file_path: str) -> str:
    with open(file_path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def _extract_metadata(
    options: CompatSourceOptions,
    front_matter: Dict[str, Any],
    body: str,
    file_path: str,
    context: PluginContext,
) -> PageMetadata:
    metadata = new_metadata(front_matter)
    title_extractor = options["title_extractor"]
    description_extractor = options["description_extractor"]

    if title_extractor or description_extractor:
        # Legacy extractors replace the metadata plugins entirely
        title = front_matter.get("title") or (
            title_extractor(body, file_path) if title_extractor else ""
        )
        description = front_matter.get("description") or (
            description_extractor(body, file_path) if description_extractor else ""
        )
        return {**metadata, "title": title or "", "description": description or ""}

    plugins = merge_plugins(DEFAULT_METADATA_PLUGINS, options["plugins"].get("metadata", []))
    return run_metadata_pipeline(plugins, metadata, body, context)


def create_compat_source(
    options: Optional[Mapping[str, Any]] = None, **kwargs
) -> CompatSource:
    """
    Build a :class:`CompatSource` from ``options`` and/or keyword options.

    Non-fatal problems (over-size files, bad front matter, slug
    conflicts) end up in ``source.warnings``; exceptions raised by
    plugins propagate.
    """
    options = load_options(options, **kwargs)

    source_dir = os.path.abspath(options["dir"])
    base_url = options["base_url"]
    plugin_lists = options["plugins"]
    index_files = options["index_files"]
    extensions = options["extensions"]
    max_file_size = options["max_file_size"]

    if "scanner" in plugin_lists:
        scanner_context = ScannerContext(
            base_url=base_url, source_dir=source_dir, options=options
        )
        scanner_plugins = merge_plugins(BUILTIN_SCANNER_PLUGINS, plugin_lists["scanner"])
        files = scan_with_plugins(source_dir, scanner_plugins, scanner_context)
    else:
        files = scan_directory(source_dir, extensions, options["ignore"], options["include"])
    files = sort_files(files)
    log.debug(f"[compat_engine] {len(files)} file(s) found in {source_dir}")

    content_plugins = merge_plugins(DEFAULT_CONTENT_PLUGINS, plugin_lists.get("content", []))
    preprocessor = options["preprocessor"]

    pages: Dict[str, Page] = {}
    warnings: List[str] = []

    for file in files:
        file_path = os.path.join(source_dir, *file.split("/"))

        try:
            size = os.stat(file_path).st_size
        except OSError:
            continue
        if size > max_file_size:
            warnings.append(f"File {file} exceeds max size ({size} > {max_file_size}), skipping")
            continue

        text = _read_text(file_path)

        try:
            front_matter, body = split_front_matter(text)
        except FrontMatterError as exc:
            warnings.append(f"Invalid frontmatter in {file}: {exc}")
            front_matter, body = {}, strip_front_matter(text)

        context = PluginContext(
            base_url=base_url, source_dir=source_dir, options=options, file_path=file
        )

        slugs = file_path_to_slugs(file, index_files, extensions)
        key = slug_key(slugs)
        if key in pages:
            warnings.append(
                f'Slug conflict: "{file}" conflicts with "{pages[key].file_path}". Using first file.'
            )
            continue

        metadata = _extract_metadata(options, front_matter, body, file_path, context)

        content = body
        if preprocessor:
            content = preprocessor(content, file_path)
        content = run_content_pipeline(content_plugins, content, context)

        pages[key] = Page(
            file_path=file_path,
            slugs=slugs,
            url=slugs_to_url(base_url, slugs),
            content=content,
            data=metadata,
        )

    page_list = list(pages.values())
    page_tree = build_page_tree(page_list, base_url, index_files)

    tree_plugins = plugin_lists.get("tree")
    if tree_plugins:
        tree_context = TreeContext(
            base_url=base_url, source_dir=source_dir, options=options, pages=page_list
        )
        page_tree = run_tree_pipeline(tree_plugins, page_tree, tree_context)

    log.debug(f"[compat_engine] built {len(pages)} page(s) with {len(warnings)} warning(s)")
    return CompatSource(pages, page_tree, base_url, warnings, options)
