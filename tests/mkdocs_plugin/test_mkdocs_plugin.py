import json

import pytest
import yaml
from mkdocs.config.defaults import MkDocsConfig

from compat_engine.mkdocs_plugin.plugin import CompatSourcePlugin

FILES = {
    "README.md": "# Notes Home\n\nWelcome",
    "guides/getting-started.md": "---\ndescription: Start here\n---\n# Getting Started\n\nx <3",
}


@pytest.fixture
def project(tmp_path, make_tree):
    make_tree(FILES)
    (tmp_path / "mkdocs.yml").write_text("site_name: Test\n", encoding="utf-8")
    return tmp_path


def make_plugin(project, command="build", **options):
    plugin = CompatSourcePlugin()
    errors, warnings = plugin.load_config({"dir": "notes", "base_url": "/raw-notes", **options})
    assert errors == []
    plugin.on_startup(command=command, dirty=False)

    config = MkDocsConfig(config_file_path=str(project / "mkdocs.yml"))
    config["site_dir"] = str(project / "site")
    plugin.on_config(config)
    return plugin, config


class TestCompatSourcePlugin:
    def test_dir_resolves_against_mkdocs_yml(self, project):
        plugin, _ = make_plugin(project)
        assert plugin.source_dir == str(project.resolve() / "notes")
        assert plugin.get_source_options()["dir"] == plugin.source_dir
        assert "output_dir" not in plugin.get_source_options()

    def test_pre_build_loads_source(self, project):
        plugin, config = make_plugin(project)
        plugin.on_pre_build(config=config)
        assert plugin.source.get_page([]).data["title"] == "Notes Home"
        assert plugin.source.get_page(["guides", "getting-started"]).url == "/raw-notes/guides/getting-started"

    def test_build_reuses_source(self, project):
        plugin, config = make_plugin(project)
        plugin.on_pre_build(config=config)
        first = plugin.source
        plugin.on_pre_build(config=config)
        assert plugin.source is first

    def test_serve_rebuilds(self, project):
        plugin, config = make_plugin(project, command="serve")
        plugin.on_pre_build(config=config)
        first = plugin.source
        (project / "notes" / "new.md").write_text("# New", encoding="utf-8")
        plugin.on_pre_build(config=config)
        assert plugin.source is not first
        assert plugin.source.get_page(["new"]) is not None

    def test_disabled(self, project):
        plugin, config = make_plugin(project, enabled=False)
        plugin.on_pre_build(config=config)
        assert plugin.source.get_pages() == []
        plugin.on_post_build(config=config)
        assert not (project / "site" / "compat").exists()

    def test_post_build_writes_outputs(self, project):
        plugin, config = make_plugin(project)
        plugin.on_pre_build(config=config)
        plugin.on_post_build(config=config)

        out = project / "site" / "compat"
        page_text = (out / "pages" / "guides" / "getting-started.md").read_text(encoding="utf-8")
        header = yaml.safe_load(page_text.split("---\n")[1])
        assert header == {
            "title": "Getting Started",
            "description": "Start here",
            "url": "/raw-notes/guides/getting-started",
        }
        assert "x &lt;3" in page_text
        assert (out / "pages" / "index.md").exists()

        tree = json.loads((out / "page-tree.json").read_text(encoding="utf-8"))
        assert tree["name"] == "Documents"
        assert tree["children"][0] == {"type": "page", "name": "Notes Home", "url": "/raw-notes"}

        params = json.loads((out / "params.json").read_text(encoding="utf-8"))
        assert params == [{"slug": []}, {"slug": ["guides", "getting-started"]}]

    def test_post_build_clears_stale_pages(self, project):
        plugin, config = make_plugin(project)
        stale = project / "site" / "compat" / "pages" / "old.md"
        stale.parent.mkdir(parents=True)
        stale.write_text("old", encoding="utf-8")
        plugin.on_pre_build(config=config)
        plugin.on_post_build(config=config)
        assert not stale.exists()

    def test_output_dir_outside_site_is_refused(self, project):
        plugin, config = make_plugin(project, output_dir="../outside")
        plugin.on_pre_build(config=config)
        plugin.on_post_build(config=config)
        assert not (project / "outside").exists()

    def test_invalid_config_is_reported(self):
        plugin = CompatSourcePlugin()
        errors, _ = plugin.load_config({"dir": "notes"})
        assert [key for key, _ in errors] == ["base_url"]
