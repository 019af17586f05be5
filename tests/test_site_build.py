"""
Tests for the site build orchestrator — individual stages, then whole runs
against a fake core repository (git calls patched out).
"""

import json
import shutil
from pathlib import Path

import pytest

from docsite.adapters.shell.command import CommandResult
from docsite.core.context import BuildPaths
from docsite.core.engine.stages import BuildAborted
from docsite.core.models.site import SiteConfig
from docsite.core.services import site_build
from docsite.core.services.site_build import (
    build_site,
    copy_repo_images,
    copy_repo_resources,
    copy_site_source,
    find_root_community_files,
    find_source_docs,
    process_source_file,
    publish_content,
    remove_retired_content,
    resolve_paths,
    should_skip_version,
    validate_args,
    write_landing_page,
)

CORE_FILES = {
    "README.md": (
        "# Pepr\n\n"
        "See [guide](./docs/user-guide/README.md) and [Cap](./docs/user-guide/capabilities.md).\n"
    ),
    "CODE_OF_CONDUCT.md": "# Code of Conduct\n\nBe nice.\n",
    "_images/arch.png": "png",
    "docs/README.md": "# Docs index\n",
    "docs/010_user-guide/README.md": "# User Guide\n\n> [!NOTE]\n> Read ![a](../_images/arch.png)\n",
    "docs/010_user-guide/020_capabilities.md": "# Capabilities\n\nSee [intro](./README.md).\n",
    "docs/010_user-guide/notes.txt": "not markdown",
}


@pytest.fixture
def paths(tmp_path: Path) -> BuildPaths:
    root = tmp_path / "root"
    return BuildPaths(
        core=tmp_path / "core",
        site=tmp_path / "site",
        examples=tmp_path / "examples",
        site_root=root,
        work=root / "tmp",
    )


@pytest.fixture
def fake_git(monkeypatch, fake_tags):
    """Patch GitRepo so checkouts are recorded instead of run."""
    checkouts: list[str] = []
    monkeypatch.setattr("docsite.adapters.vcs.git.GitRepo.checkout", lambda self, ref: checkouts.append(ref))
    monkeypatch.setattr("docsite.adapters.vcs.git.GitRepo.current_branch", lambda self: "main")
    monkeypatch.setattr("docsite.adapters.vcs.git.GitRepo.describe_tags", lambda self: checkouts[-1])
    fake_tags(["v0.53.0", "v0.54.0", "v0.55.0"])
    return checkouts


@pytest.fixture
def repos(tmp_path: Path, write_tree):
    write_tree(tmp_path / "core", CORE_FILES)
    write_tree(tmp_path / "site", {"astro.config.mjs": "export default {}\n"})
    write_tree(tmp_path / "examples", {"hello-pepr-watch/README.md": "# Hello Pepr Watch\n\nWatch it.\n"})
    return tmp_path


# ── Setup stages ─────────────────────────────────────────────────────


class TestSetupStages:
    def test_resolve_paths(self, tmp_path):
        config = SiteConfig(site_root=str(tmp_path / "root"), work_dir="scratch")
        paths = resolve_paths(Path("core"), Path("site"), Path("ex"), config, cwd=tmp_path)
        assert paths.work == (tmp_path / "root" / "scratch").resolve()
        assert paths.dist == tmp_path.resolve() / "dist"

    def test_resolve_paths_no_dist(self, tmp_path):
        paths = resolve_paths(Path("c"), Path("s"), Path("e"), SiteConfig(), dist=False, cwd=tmp_path)
        assert paths.dist is None
        assert paths.site_root == tmp_path.resolve()

    def test_validate_args_missing_dir(self, paths):
        paths.site.mkdir(parents=True)
        with pytest.raises(NotADirectoryError, match="Not a directory"):
            validate_args(paths, [])

    def test_copy_site_source_skips_work_dir(self, tmp_path, write_tree):
        site = write_tree(tmp_path / "site", {"a.txt": "a", "content/v0.54.0/index.md": "# x\n"})
        paths = BuildPaths(core=tmp_path, site=site, examples=tmp_path, site_root=site, work=site / "tmp")
        (site / "tmp").mkdir()

        copy_site_source(paths, [])

        assert (site / "tmp" / "a.txt").is_file()
        assert (site / "tmp" / "content" / "v0.54.0" / "index.md").is_file()
        assert not (site / "tmp" / "tmp").exists()

    def test_remove_retired_content(self, paths, write_tree):
        write_tree(paths.site, {
            "content/v0.53.0/index.md": "x",
            "content/v0.53.1/index.md": "x",
            "content/v0.54.0/index.md": "x",
            "static/v0.53.0/_images/a.png": "x",
        })
        log = []
        remove_retired_content(paths, ["0.53"], log)

        assert sorted(p.name for p in (paths.site / "content").iterdir()) == ["v0.54.0"]
        assert list((paths.site / "static").iterdir()) == []
        assert len(log) == 3


# ── Per-version stages ───────────────────────────────────────────────


class TestVersionStages:
    def test_cached_version_skipped(self, tmp_path):
        verdir = tmp_path / "v0.54.0"
        verdir.mkdir()
        assert should_skip_version("v0.54.0", verdir) is True
        assert verdir.is_dir()

    def test_latest_always_rebuilt(self, tmp_path):
        verdir = tmp_path / "latest"
        verdir.mkdir()
        assert should_skip_version("latest", verdir) is False
        assert not verdir.exists()

    def test_missing_version_built(self, tmp_path):
        assert should_skip_version("v0.54.0", tmp_path / "v0.54.0") is False

    def test_find_source_docs(self, tmp_path, write_tree):
        write_tree(tmp_path, CORE_FILES)
        log = []
        assert find_source_docs(tmp_path / "docs", log) == [
            "010_user-guide/020_capabilities.md",
            "010_user-guide/README.md",
        ]
        assert ("ignored", "010_user-guide/notes.txt, README.md") in log

    def test_find_source_docs_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Docs directory not found"):
            find_source_docs(tmp_path / "docs", [])

    def test_copy_images_missing_is_warning(self, tmp_path):
        log = []
        assert copy_repo_images(tmp_path, tmp_path / "static", log) is False
        assert log[0][0] == "warning"

    def test_copy_resources(self, tmp_path, write_tree):
        docs = write_tree(tmp_path / "docs", {"030_tutorials/resources/light.png": "png"})
        static = tmp_path / "static"
        assert copy_repo_resources(docs, static, []) == 1
        assert (static / "030_tutorials" / "resources" / "light.png").is_file()

    def test_root_community_files(self, tmp_path, write_tree):
        write_tree(tmp_path, {"SECURITY.md": "# Security\n"})
        log = []
        found = find_root_community_files(tmp_path, "latest", log)
        assert found == [("community/security.md", tmp_path / "SECURITY.md")]
        assert ("missing", "SUPPORT.md") in log

    def test_root_community_files_unique_targets(self, tmp_path, write_tree):
        """Both code-of-conduct spellings present: the underscore one wins."""
        write_tree(tmp_path, {
            "CODE_OF_CONDUCT.md": "# Code of Conduct\n",
            "CODE-OF-CONDUCT.md": "# Old Code of Conduct\n",
        })
        log = []
        found = find_root_community_files(tmp_path, "v0.55.0", log)

        targets = [target for target, _ in found]
        assert len(targets) == len(set(targets))
        assert found == [("contribute/code-of-conduct.md", tmp_path / "CODE_OF_CONDUCT.md")]
        assert any(kind == "shadowed" and msg.startswith("CODE-OF-CONDUCT.md") for kind, msg in log)

    def test_process_source_file(self, tmp_path, write_tree):
        write_tree(tmp_path, CORE_FILES)
        verdir = tmp_path / "out"
        src = tmp_path / "docs" / "010_user-guide" / "020_capabilities.md"

        dst = process_source_file("010_user-guide/020_capabilities.md", src, verdir, "v0.54.0")

        assert dst == verdir / "user-guide" / "capabilities.md"
        text = dst.read_text()
        assert text.startswith("---\ntitle: Capabilities\n")
        assert "slug: v0.54/user-guide/capabilities" in text
        assert "# Capabilities" not in text

    def test_landing_page(self, tmp_path, write_tree):
        write_tree(tmp_path, CORE_FILES)
        verdir = tmp_path / "v0.54.0"
        verdir.mkdir()

        index = write_landing_page(tmp_path, verdir, "v0.54.0", [])

        text = index.read_text()
        assert text.startswith("---\ntitle: Pepr\ndescription: Pepr Documentation - v0.54.0\nslug: v0.54\n---")
        assert "[guide](./user-guide)" in text
        assert "[Cap](./user-guide/capabilities)" in text
        assert "# Pepr" not in text

    def test_landing_page_latest_has_no_slug(self, tmp_path, write_tree):
        write_tree(tmp_path, CORE_FILES)
        index = write_landing_page(tmp_path, tmp_path, "latest", [])
        assert "slug:" not in index.read_text()


class TestPublish:
    def test_layout(self, paths, write_tree):
        write_tree(paths.work_content, {
            "latest/index.md": "latest",
            "v0.55.0/index.md": "v55",
            "v0.54.0/index.md": "v54",
        })
        log = []

        current = publish_content(paths, ["v0.55.0", "v0.54.0", "latest"], log)

        assert current == "v0.55.0"
        docs = paths.docs_dir
        assert (docs / "index.md").read_text() == "latest"
        assert (docs / "v0.55" / "index.md").read_text() == "v55"
        assert (docs / "v0.54" / "index.md").read_text() == "v54"
        assert (docs / "current" / "index.md").read_text() == "v55"

    def test_no_stable_versions(self, paths, write_tree):
        write_tree(paths.work_content, {"latest/index.md": "latest"})
        log = []
        assert publish_content(paths, ["latest"], log) is None
        assert ("current", "no stable versions found") in log
        assert not (paths.docs_dir / "current").exists()


# ── Whole runs ───────────────────────────────────────────────────────


class TestBuildSite:
    def _config(self, tmp_path: Path) -> SiteConfig:
        return SiteConfig(site_root=str(tmp_path / "root"), workers=2)

    def test_full_run(self, repos, fake_git):
        tmp_path = repos
        report = build_site(
            tmp_path / "core", tmp_path / "site", tmp_path / "examples",
            config=self._config(tmp_path), dist=False,
        )

        assert report.ok
        assert report.versions == ["v0.55.0", "v0.54.0", "latest"]
        assert report.retired == ["0.53"]
        assert report.current_version == "v0.55.0"
        assert fake_git == ["v0.55.0", "v0.54.0", "main"]

        labels = [s.label for s in report.stages]
        assert labels[:5] == [
            "Validate args",
            "Clean tmp dir",
            "Copy site src to tmp dir",
            "Search core repo versions",
            "Nuke retired version content",
        ]
        assert labels[-1] == "Generate _redirects file"

        root = tmp_path / "root"
        docs = root / "src" / "content" / "docs"
        overview = (docs / "user-guide" / "index.md").read_text()
        assert "title: Overview" in overview
        assert ":::note" in overview
        assert "/assets/arch.png" in overview
        assert (docs / "contribute" / "code-of-conduct.md").is_file()
        assert "slug: v0.55/user-guide/capabilities" in (docs / "v0.55" / "user-guide" / "capabilities.md").read_text()
        assert (docs / "current" / "user-guide" / "capabilities.md").is_file()
        assert (docs / "examples" / "watch.md").is_file()
        assert (root / "public" / "assets" / "arch.png").is_file()

        versions_dir = root / "src" / "content" / "versions"
        assert sorted(p.name for p in versions_dir.iterdir()) == ["v0.54.json", "v0.55.json"]
        sidebar = json.loads((root / "src" / "content" / "examples-sidebar.json").read_text())
        assert sidebar == [{"label": "Watch", "link": "examples/watch"}]
        starlight = json.loads((root / "src" / "content" / "starlight-versions.json").read_text())
        assert starlight == [
            {"slug": "v0.55", "label": "v0.55.0"},
            {"slug": "v0.54", "label": "v0.54.0"},
        ]

        assert (root / "public" / "_redirects").is_file()
        assert report.redirects["patch_count"] == 4
        assert report.redirects["retired_count"] == 2

    def test_cached_version_skipped(self, repos, fake_git, write_tree):
        tmp_path = repos
        write_tree(tmp_path / "site", {
            "content/v0.54.0/index.md": "---\ntitle: cached\n---\n",
            "content/v0.53.0/index.md": "retired",
        })

        report = build_site(
            tmp_path / "core", tmp_path / "site", tmp_path / "examples",
            config=self._config(tmp_path), dist=False,
        )

        assert fake_git == ["v0.55.0", "main"]
        docs = tmp_path / "root" / "src" / "content" / "docs"
        assert (docs / "v0.54" / "index.md").read_text() == "---\ntitle: cached\n---\n"
        assert not (tmp_path / "site" / "content" / "v0.53.0").exists()
        assert report.ok

    def test_dist_built(self, repos, fake_git, monkeypatch):
        tmp_path = repos
        commands = []

        def _fake_run(command, cwd):
            commands.append(command)
            (cwd / "dist").mkdir()
            (cwd / "dist" / "index.html").write_text("<html></html>")
            return CommandResult(command=command, returncode=0, stderr="warn: large chunk\n")

        monkeypatch.setattr(site_build, "run_command", _fake_run)
        monkeypatch.chdir(tmp_path)

        report = build_site(
            tmp_path / "core", tmp_path / "site", tmp_path / "examples",
            config=self._config(tmp_path),
        )

        assert commands == [["node", "node_modules/.bin/astro", "build"]]
        assert report.dist == str(tmp_path.resolve() / "dist")
        assert (tmp_path / "dist" / "index.html").is_file()
        assert [s.label for s in report.stages][-2:] == ["Clean dist dir", "Build site into dist dir"]
        assert ("warnings", "warn: large chunk") in report.stages[-1].log

    def test_missing_docs_aborts_with_state(self, repos, fake_git):
        tmp_path = repos
        shutil.rmtree(tmp_path / "core" / "docs")

        with pytest.raises(BuildAborted) as exc_info:
            build_site(
                tmp_path / "core", tmp_path / "site", tmp_path / "examples",
                config=self._config(tmp_path), dist=False,
            )

        aborted = exc_info.value
        assert aborted.stage == "Find source doc files"
        assert aborted.state["version"] == "v0.55.0"
        assert aborted.state["versions"] == ["v0.55.0", "v0.54.0", "latest"]

    def test_invalid_site_dir_aborts(self, repos, fake_git):
        tmp_path = repos
        with pytest.raises(BuildAborted) as exc_info:
            build_site(
                tmp_path / "core", tmp_path / "nope", tmp_path / "examples",
                config=self._config(tmp_path), dist=False,
            )
        assert exc_info.value.stage == "Validate args"
