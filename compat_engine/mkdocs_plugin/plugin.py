import json
import os
import shutil
from pathlib import Path
from typing import Optional

import yaml
from mkdocs.config import config_options as c
from mkdocs.config.defaults import MkDocsConfig
from mkdocs.plugins import BasePlugin
from mkdocs.utils import log

from compat_engine.config import CompatSourceOptions
from compat_engine.create_source import CompatSource, create_compat_source
from compat_engine.types import Page

PLUGIN_ONLY_KEYS = ("enabled", "output_dir")


class CompatSourcePluginConfig(CompatSourceOptions):
    enabled = c.Type(bool, default=True)
    # Relative to site_dir
    output_dir = c.Type(str, default="compat")


# Define plugin class
class CompatSourcePlugin(BasePlugin[CompatSourcePluginConfig]):
    """
    Build a compat source from a directory of loose markdown and publish
    it next to the site.

    Under ``mkdocs build`` the source is built once; under ``mkdocs serve``
    it is rebuilt on every rebuild so edits show up.

    Output, under ``site_dir/<output_dir>``:
    - ``pages/<key>.md``: processed markdown with a YAML header
    - ``page-tree.json``: the navigation tree
    - ``params.json``: ``[{"slug": [...]}, ...]`` for static routing
    """

    def __init__(self):
        super().__init__()
        self.source: Optional[CompatSource] = None
        self.is_serve = False
        self.source_dir = ""

    def on_startup(self, *, command, dirty):
        self.is_serve = command == "serve"

    def on_config(self, config: MkDocsConfig):
        # Resolve the content directory relative to mkdocs.yml
        source_dir = self.config.dir
        if not os.path.isabs(source_dir) and config.config_file_path:
            project_root = Path(config.config_file_path).resolve().parent
            source_dir = str(project_root / source_dir)
        self.source_dir = source_dir
        return config

    def on_pre_build(self, *, config: MkDocsConfig) -> None:
        if not self.config.enabled:
            self.source = CompatSource.empty(self.config.base_url)
            log.debug("[compat_source] disabled; using an empty source")
            return

        if self.source is not None and self.source.options is not None:
            if not self.is_serve:
                return
            self.source = self.source.reload()
        else:
            self.source = create_compat_source(self.get_source_options())

        log.info(
            f"[compat_source] loaded {len(self.source)} page(s) from {self.source_dir}"
        )
        for warning in self.source.warnings:
            log.warning(f"[compat_source] {warning}")

    def on_post_build(self, *, config: MkDocsConfig) -> None:
        if not self.config.enabled or self.source is None:
            return

        output_root = self.get_output_dir(Path(config["site_dir"]))
        if output_root is None:
            return

        pages_dir = output_root / "pages"
        self.reset_directory(pages_dir)

        for page in self.source.get_pages():
            self.write_page(pages_dir, page)

        tree_path = output_root / "page-tree.json"
        tree_path.write_text(
            json.dumps(self.source.page_tree, ensure_ascii=False, indent=2), encoding="utf-8"
        )
        params_path = output_root / "params.json"
        params_path.write_text(
            json.dumps(self.source.generate_params(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        log.info(
            f"[compat_source] wrote {len(self.source)} page(s) to {output_root}"
        )

    # ----- Helper functions -------

    def get_source_options(self) -> dict:
        """Engine options from the plugin config, with ``dir`` resolved."""
        options = {
            key: value
            for key, value in self.config.items()
            if key not in PLUGIN_ONLY_KEYS
        }
        options["dir"] = self.source_dir or self.config.dir
        return options

    def get_output_dir(self, site_dir: Path) -> Optional[Path]:
        """Resolve ``output_dir`` inside ``site_dir``; None if it escapes it."""
        site_dir = site_dir.resolve()
        output_root = (site_dir / self.config.output_dir).resolve()
        try:
            output_root.relative_to(site_dir)
        except ValueError:
            log.error(
                f"[compat_source] output_dir '{self.config.output_dir}' resolves outside site_dir"
            )
            return None
        if output_root == site_dir:
            log.error("[compat_source] output_dir must be a subdirectory of site_dir")
            return None
        output_root.mkdir(parents=True, exist_ok=True)
        return output_root

    @staticmethod
    def reset_directory(output_dir: Path) -> None:
        """Remove existing artifacts before writing fresh files."""
        output_dir.mkdir(parents=True, exist_ok=True)
        for entry in output_dir.iterdir():
            if entry.is_dir():
                shutil.rmtree(entry)
            else:
                entry.unlink()

    @staticmethod
    def write_page(pages_dir: Path, page: Page) -> Path:
        """Write processed markdown with a YAML header."""
        out_path = pages_dir / f"{page.key}.md"
        out_path.parent.mkdir(parents=True, exist_ok=True)

        header = {}
        for key, val in (
            ("title", page.data.get("title")),
            ("description", page.data.get("description")),
            ("url", page.url),
        ):
            if val not in (None, ""):
                header[key] = val

        fm_yaml = yaml.safe_dump(
            header, sort_keys=False, allow_unicode=True, width=4096
        ).strip()
        content = f"---\n{fm_yaml}\n---\n\n{page.content.strip()}\n"
        with out_path.open("w", encoding="utf-8") as fh:
            fh.write(content)
        log.debug(f"[compat_source] wrote {out_path}")
        return out_path
