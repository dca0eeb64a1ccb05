"""
Builds the navigation tree from the final page set.
"""

import os
from typing import Dict, Iterable, List

from compat_engine.types import Page, TreeNode
from compat_engine.utils.slug import (
    DEFAULT_INDEX_FILES,
    create_index_file_checker,
    slug_to_display_name,
)

ROOT_NAME = "Documents"


def _page_node(name: str, url: str) -> TreeNode:
    return {"type": "page", "name": name, "url": url}


def build_page_tree(
    pages: List[Page], base_url: str, index_files: Iterable[str] = DEFAULT_INDEX_FILES
) -> TreeNode:
    """
    Build a root node with nested folders and pages.

    Pages are visited in URL order. The root index page goes first. An
    index page (README/index) of a directory turns into that folder's
    ``index`` rather than a leaf of its own. Folders that end up holding
    nothing but their index are flattened into plain pages.
    """
    root: TreeNode = {"name": ROOT_NAME, "children": []}
    if not pages:
        return root

    is_index = create_index_file_checker(index_files)
    folders: Dict[str, TreeNode] = {}
    folder_index_pages: Dict[str, Page] = {}

    sorted_pages = sorted(pages, key=lambda page: page.url)

    # First pass: index pages by the folder they stand for
    for page in sorted_pages:
        if page.slugs and is_index(os.path.basename(page.file_path)):
            folder_index_pages["/".join(page.slugs)] = page

    # Second pass: build tree
    for page in sorted_pages:
        if not page.slugs:
            root["children"].insert(0, _page_node(page.data["title"], page.url))
            continue

        if is_index(os.path.basename(page.file_path)):
            ensure_folder_path(page.slugs, root, folders, folder_index_pages)
            continue

        node = _page_node(page.data["title"], page.url)
        if len(page.slugs) == 1:
            root["children"].append(node)
        else:
            folder = ensure_folder_path(page.slugs[:-1], root, folders, folder_index_pages)
            folder["children"].append(node)

    flatten_empty_folders(root)
    return root


def ensure_folder_path(
    slugs: List[str],
    root: TreeNode,
    folders: Dict[str, TreeNode],
    folder_index_pages: Dict[str, Page],
) -> TreeNode:
    """Create the folders along ``slugs`` as needed; return the deepest."""
    parent = root
    for depth in range(1, len(slugs) + 1):
        folder_key = "/".join(slugs[:depth])
        folder = folders.get(folder_key)
        if folder is None:
            index_page = folder_index_pages.get(folder_key)
            name = (index_page.data["title"] if index_page else "") or slug_to_display_name(
                slugs[depth - 1]
            )
            folder = {"type": "folder", "name": name, "children": []}
            if index_page is not None:
                folder["index"] = _page_node(index_page.data["title"], index_page.url)
            folders[folder_key] = folder
            parent["children"].append(folder)
        parent = folder
    return parent


def flatten_empty_folders(node: TreeNode) -> None:
    """
    Turn folders that have an index but no children into page nodes.

    Keeps the sidebar free of collapsible sections with nothing inside.
    Folders without an index stay as they are, even when empty.
    """
    children = node["children"]
    for position, child in enumerate(children):
        if child.get("type") != "folder":
            continue
        flatten_empty_folders(child)
        if not child["children"] and child.get("index"):
            children[position] = _page_node(child["name"], child["index"]["url"])
