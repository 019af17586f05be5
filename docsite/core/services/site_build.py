"""
Site build orchestrator — core repo + examples repo → site content.

Stage order:

    Validate args → Clean work dir → Copy site src → Discover versions
    → Remove retired content
    → per version (sequential, it checks out the shared core clone):
        Create dir → Checkout → Find sources → Images → Resources
        → Community files → Transform sources (parallel) → Landing page
    → Examples → Post-process (parallel) → Publish content
    → Navigation → Redirects → [Clean dist → Build site]

Existing version directories are a cache: they are skipped, except
``latest`` which is always rebuilt. Any stage failure raises
``BuildAborted`` and ends the run.
"""

from __future__ import annotations

import json
import logging
import re
import shutil
import time
from pathlib import Path

from docsite.adapters.shell.command import run_command
from docsite.adapters.vcs.git import GitRepo
from docsite.core.context import BuildPaths, BuildState
from docsite.core.data import get_registry
from docsite.core.engine.fanout import run_parallel
from docsite.core.engine.stages import (
    BuildReport,
    ProgressCallback,
    StageLog,
    run_stage,
)
from docsite.core.models.site import SiteConfig
from docsite.core.services.examples import process_examples
from docsite.core.services.file_metadata import generate_file_metadata
from docsite.core.services.frontmatter import generate_front_matter
from docsite.core.services.md_transforms import (
    postprocess_content,
    process_content_links,
    transform_content,
)
from docsite.core.services.navigation import (
    generate_examples_sidebar_items,
    get_starlight_versions,
    write_version_navigation,
)
from docsite.core.services.redirects import generate_redirects
from docsite.core.services.versions import (
    LATEST,
    discover_versions,
    find_current_version,
    get_stable_versions,
    version_slug,
)

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"#\s+(.*)")


# ── Paths ───────────────────────────────────────────────────────────


def resolve_paths(
    core: Path,
    site: Path,
    examples: Path,
    config: SiteConfig,
    dist: bool = True,
    cwd: Path | None = None,
) -> BuildPaths:
    """Absolute build paths from CLI arguments and config (no I/O)."""
    cwd = (cwd or Path.cwd()).resolve()
    site_root = Path(config.site_root).resolve() if config.site_root else cwd
    work = Path(config.work_dir)
    dist_dir = Path(config.dist_dir)
    return BuildPaths(
        core=core.resolve(),
        site=site.resolve(),
        examples=examples.resolve(),
        site_root=site_root,
        work=work if work.is_absolute() else site_root / work,
        dist=(dist_dir if dist_dir.is_absolute() else cwd / dist_dir) if dist else None,
    )


def validate_args(paths: BuildPaths, log: StageLog) -> None:
    for name in ("site", "core", "examples"):
        path: Path = getattr(paths, name)
        if not path.is_dir():
            raise NotADirectoryError(f"Not a directory: '{path}'")
        log.append((name, str(path)))


# ── Work dir ────────────────────────────────────────────────────────


def clean_work_dir(paths: BuildPaths, log: StageLog) -> None:
    shutil.rmtree(paths.work, ignore_errors=True)
    paths.work.mkdir(parents=True)
    log.append(("tmp", str(paths.work)))


def copy_site_source(paths: BuildPaths, log: StageLog) -> None:
    """Copy the site source (including cached version content) into work."""
    work = paths.work.resolve()

    def _skip_work_dir(directory: str, names: list[str]) -> list[str]:
        return [n for n in names if (Path(directory) / n).resolve() == work]

    shutil.copytree(paths.site, paths.work, dirs_exist_ok=True, ignore=_skip_work_dir)
    log.append(("copied", f"{paths.site} -> {paths.work}"))


def remove_retired_content(paths: BuildPaths, retired: list[str], log: StageLog) -> None:
    """Delete cached content and static files of retired ``M.m`` lines."""
    roots = (
        paths.site / "content",
        paths.site / "static",
        paths.work_content,
        paths.work_static,
    )
    for mm in retired:
        for root in roots:
            for path in root.glob(f"v{mm}.*"):
                shutil.rmtree(path, ignore_errors=True)
                log.append(("removed", str(path)))


# ── Per version ─────────────────────────────────────────────────────


def should_skip_version(version: str, verdir: Path) -> bool:
    """True when ``verdir`` is already built. ``latest`` is wiped instead."""
    if not verdir.is_dir():
        return False
    if version == LATEST:
        shutil.rmtree(verdir)
        return False
    return True


def create_version_dir(verdir: Path, log: StageLog) -> None:
    verdir.mkdir(parents=True, exist_ok=True)
    log.append(("dir", str(verdir)))


def checkout_core_version(repo: GitRepo, version: str, log: StageLog) -> str:
    """Check out the tag (``main`` for latest) and report what git says."""
    repo.checkout("main" if version == LATEST else version)
    if version == LATEST:
        described = repo.current_branch()
        log.append(("branch", described))
    else:
        described = repo.describe_tags()
        log.append(("tag", described))
    log.append(("repo", str(repo.path)))
    return described


def find_source_docs(core_docs: Path, log: StageLog) -> list[str]:
    """All ``.md`` files under ``docs/`` except a top-level README.md."""
    if not core_docs.is_dir():
        raise FileNotFoundError(f"Docs directory not found: {core_docs}")
    found = sorted(p.relative_to(core_docs).as_posix() for p in core_docs.rglob("*") if p.is_file())
    sources = [f for f in found if f.endswith(".md") and f != "README.md"]
    log.append(("sources", ", ".join(sources)))
    log.append(("ignored", ", ".join(f for f in found if f not in sources)))
    return sources


def copy_repo_images(core: Path, static_dir: Path, log: StageLog) -> bool:
    src, dst = core / "_images", static_dir / "_images"
    if not src.is_dir():
        logger.warning("No images directory at %s", src)
        log.append(("warning", f"images directory not found: {src}"))
        return False
    shutil.copytree(src, dst, dirs_exist_ok=True)
    log.append(("src", str(src)))
    log.append(("dst", str(dst)))
    return True


def copy_repo_resources(core_docs: Path, static_dir: Path, log: StageLog) -> int:
    """Copy every ``resources`` directory under docs/, keeping its location."""
    resource_dirs = [p for p in sorted(core_docs.rglob("resources")) if p.is_dir()]
    if not resource_dirs:
        logger.warning("No resources directories under %s", core_docs)
        log.append(("warning", f"no resources directories under {core_docs}"))
    for resource_dir in resource_dirs:
        dst = static_dir / resource_dir.relative_to(core_docs)
        shutil.copytree(resource_dir, dst, dirs_exist_ok=True)
        log.append(("copied", f"{resource_dir} -> {dst}"))
    return len(resource_dirs)


def find_root_community_files(core: Path, version: str, log: StageLog) -> list[tuple[str, Path]]:
    """Community files at the core repo root, with their docs destination.

    Spellings that share a destination are checked in catalog order and
    the first one present wins; later ones are logged as shadowed.
    """
    found: list[tuple[str, Path]] = []
    claimed: dict[str, str] = {}
    for filename, target in get_registry().root_file_map.items():
        src = core / filename
        if not src.is_file():
            logger.info("%s does not exist for version %s", filename, version)
            log.append(("missing", filename))
            continue
        if target in claimed:
            logger.warning(
                "%s shadowed by %s for version %s (both map to %s)",
                filename, claimed[target], version, target,
            )
            log.append(("shadowed", f"{filename} -> {target} (using {claimed[target]})"))
            continue
        claimed[target] = filename
        found.append((target, src))
        log.append(("found", f"{filename} -> {target}"))
    return found


def process_source_file(rel: str, src: Path, verdir: Path, version: str) -> Path:
    """Read, transform and write one page. Returns the written path."""
    content = src.read_text(encoding="utf-8")
    meta = generate_file_metadata(rel)
    fm = generate_front_matter(content, meta.newfile, version, rel)
    processed = process_content_links("\n".join([fm.front, fm.content_without_heading]), rel)

    dst = verdir / meta.newfile
    dst.parent.mkdir(parents=True, exist_ok=True)
    dst.write_text(processed, encoding="utf-8")
    return dst


def write_landing_page(core: Path, verdir: Path, version: str, log: StageLog) -> Path:
    """``index.md`` for a version, built from the core repo's README."""
    front = ["---", "title: Pepr", f"description: Pepr Documentation - {version}"]
    if version != LATEST:
        front.append(f"slug: {version_slug(version)}")
    front.append("---")

    body = (core / "README.md").read_text(encoding="utf-8")
    heading = _HEADING_RE.search(body)
    if heading:
        body = body.replace(heading.group(0), "", 1)
    body = body.replace("](./docs/", "](./")
    body = transform_content(body).replace(".md)", "/)")

    index = verdir / "index.md"
    index.write_text("\n".join(["\n".join(front), body]), encoding="utf-8")
    log.append(("dst", str(index)))
    return index


def build_version(
    state: BuildState,
    repo: GitRepo,
    report: BuildReport,
    config: SiteConfig,
    on_progress: ProgressCallback | None = None,
) -> None:
    """Run every per-version stage for ``state.version``."""
    paths, version = state.paths, state.version
    verdir = paths.version_dir(version)
    static_dir = paths.work_static / version

    def _stage(label, func):
        return run_stage(label, state, func, report, on_progress)

    _stage("Create version dir", lambda log: create_version_dir(verdir, log))
    _stage("Checkout core version", lambda log: checkout_core_version(repo, version, log))
    state.sources = _stage("Find source doc files", lambda log: find_source_docs(paths.core_docs, log))
    _stage("Copy repo images", lambda log: copy_repo_images(paths.core, static_dir, log))
    _stage("Copy repo resources", lambda log: copy_repo_resources(paths.core_docs, static_dir, log))
    root_files = _stage(
        "Process root level markdown files",
        lambda log: find_root_community_files(paths.core, version, log),
    )

    jobs = [(rel, paths.core_docs / rel) for rel in state.sources] + root_files

    def _transform(log: StageLog) -> None:
        written = run_parallel(
            f"Transform {version} sources",
            jobs,
            lambda job: process_source_file(job[0], job[1], verdir, version),
            config.workers,
        )
        log.append(("written", str(len(written))))

    _stage("Process source files", _transform)
    _stage(
        "Write version landing page",
        lambda log: write_landing_page(paths.core, verdir, version, log),
    )


# ── After all versions ──────────────────────────────────────────────


def postprocess_version_dirs(paths: BuildPaths, log: StageLog, workers: int | None = None) -> int:
    """Fix image paths and convert callouts in every generated page."""
    files = sorted(paths.work_content.rglob("*.md")) if paths.work_content.is_dir() else []

    def _fix(path: Path) -> bool:
        original = path.read_text(encoding="utf-8")
        updated = postprocess_content(original)
        if updated == original:
            return False
        path.write_text(updated, encoding="utf-8")
        return True

    changed = sum(run_parallel("Post-process pages", files, _fix, workers))
    log.append(("processed", f"{len(files)} files"))
    log.append(("updated", f"{changed} files"))
    return changed


def _copy_assets(paths: BuildPaths, versions: list[str], log: StageLog) -> None:
    """Images and resources from the first version that has any."""
    paths.assets_dir.mkdir(parents=True, exist_ok=True)
    resources_dst = paths.docs_dir / "resources"

    for version in versions:
        static_dir = paths.work_static / version
        images = static_dir / "_images"
        resource_dirs = [p for p in sorted(static_dir.rglob("resources")) if p.is_dir()]
        if not images.is_dir() and not resource_dirs:
            continue

        if images.is_dir():
            for image in images.iterdir():
                if image.is_file():
                    shutil.copy2(image, paths.assets_dir / image.name)
        for resource_dir in resource_dirs:
            shutil.copytree(resource_dir, resources_dst, dirs_exist_ok=True)
            for png in resource_dir.rglob("*.png"):
                shutil.copy2(png, paths.assets_dir / png.name)

        log.append(("assets", f"copied from {version}"))
        return

    logger.warning("No images or resources found to copy")
    log.append(("warning", "no images or resources found"))


def publish_content(paths: BuildPaths, versions: list[str], log: StageLog) -> str | None:
    """Lay out the site generator's docs tree from the work dir.

    ``latest`` is flattened to the unversioned root, each stable version
    goes to ``v<M.m>/`` and the newest stable one is also copied to
    ``current/``. Returns that current version, if any.
    """
    shutil.rmtree(paths.docs_dir, ignore_errors=True)
    paths.docs_dir.mkdir(parents=True)

    _copy_assets(paths, versions, log)

    latest = paths.version_dir(LATEST)
    if latest.is_dir():
        shutil.copytree(latest, paths.docs_dir, dirs_exist_ok=True)
        log.append(("latest", str(paths.docs_dir)))

    for version in get_stable_versions(versions):
        src = paths.version_dir(version)
        if src.is_dir():
            shutil.copytree(src, paths.docs_dir / version_slug(version), dirs_exist_ok=True)
            log.append(("version", version))

    current = find_current_version(versions)
    if current is None:
        log.append(("current", "no stable versions found"))
        return None

    target = paths.docs_dir / version_slug(current)
    if not target.is_dir():
        log.append(("error", f"target version directory not found: {target}"))
        return current
    shutil.copytree(target, paths.docs_dir / "current", dirs_exist_ok=True)
    log.append(("current", f"{version_slug(current)} ({current})"))
    return current


def write_navigation(paths: BuildPaths, versions: list[str], log: StageLog) -> list[Path]:
    shutil.rmtree(paths.versions_dir, ignore_errors=True)
    paths.versions_dir.mkdir(parents=True)

    written: list[Path] = []
    for version in get_stable_versions(versions):
        path = write_version_navigation(version, paths.version_dir(version), paths.versions_dir)
        if path is None:
            log.append(("skipped", f"{version_slug(version)} (no content)"))
        else:
            written.append(path)
            log.append(("generated", path.name))

    items = generate_examples_sidebar_items(paths.version_dir(LATEST) / "examples")
    paths.examples_sidebar_file.parent.mkdir(parents=True, exist_ok=True)
    paths.examples_sidebar_file.write_text(json.dumps(items, indent=2), encoding="utf-8")
    log.append(("generated", paths.examples_sidebar_file.name))

    paths.starlight_versions_file.write_text(
        json.dumps(get_starlight_versions(versions), indent=2), encoding="utf-8"
    )
    log.append(("generated", paths.starlight_versions_file.name))
    return written


def clean_dist_dir(dist: Path, log: StageLog) -> None:
    shutil.rmtree(dist, ignore_errors=True)
    dist.mkdir(parents=True)
    log.append(("dist", str(dist)))


def build_dist(paths: BuildPaths, config: SiteConfig, log: StageLog) -> Path:
    """Run the site generator and move its output to ``paths.dist``."""
    result = run_command(config.build_command, paths.site_root)
    if result.stderr.strip():
        log.append(("warnings", result.stderr.strip()))

    output = paths.site_root / config.build_output
    if not output.is_dir():
        raise FileNotFoundError(f"Build did not produce expected output directory: {output}")

    if output.resolve() == paths.dist.resolve():
        log.append(("dist", f"already in place: {output}"))
        return output

    shutil.rmtree(paths.dist, ignore_errors=True)
    shutil.copytree(output, paths.dist)
    log.append(("copied", f"{output} -> {paths.dist}"))
    return paths.dist


# ── Entry point ─────────────────────────────────────────────────────


def build_site(
    core: Path,
    site: Path,
    examples: Path,
    config: SiteConfig | None = None,
    dist: bool = True,
    on_progress: ProgressCallback | None = None,
) -> BuildReport:
    """Run the whole build.

    Raises:
        BuildAborted: On the first failing stage, carrying a state dump.
    """
    config = config or SiteConfig()
    paths = resolve_paths(core, site, examples, config, dist=dist)
    state = BuildState(paths=paths, cutoff=config.cutoff)
    report = BuildReport()
    start = time.monotonic()

    def _stage(label, func):
        return run_stage(label, state, func, report, on_progress)

    _stage("Validate args", lambda log: validate_args(paths, log))
    _stage("Clean tmp dir", lambda log: clean_work_dir(paths, log))
    _stage("Copy site src to tmp dir", lambda log: copy_site_source(paths, log))

    def _discover(log: StageLog) -> None:
        found = discover_versions(paths.core, state.cutoff)
        state.versions, state.retired = found.versions, found.retired
        log.append(("versions", ", ".join(state.versions)))
        log.append(("retired", ", ".join(state.retired)))

    _stage("Search core repo versions", _discover)
    _stage("Nuke retired version content", lambda log: remove_retired_content(paths, state.retired, log))

    repo = GitRepo(paths.core)
    for version in state.versions:
        state.version = version
        verdir = paths.version_dir(version)
        if _stage("Check version cache", lambda log: should_skip_version(version, verdir)):
            logger.info("Skipping %s - already built", version)
            state.skipped.append(version)
            continue
        build_version(state, repo, report, config, on_progress)
        state.built.append(version)
    state.version = None

    def _examples(log: StageLog) -> None:
        pages = process_examples(
            paths.examples,
            paths.version_dir(LATEST) / "examples",
            config.examples_repo_url,
            config.workers,
        )
        log.append(("examples", str(len(pages))))

    _stage("Process examples", _examples)
    _stage(
        "Process all tmp directory content",
        lambda log: postprocess_version_dirs(paths, log, config.workers),
    )
    state.current_version = _stage(
        "Publish content",
        lambda log: publish_content(paths, state.versions, log),
    )
    _stage(
        "Generate version configuration files",
        lambda log: write_navigation(paths, state.versions, log),
    )

    def _redirects(log: StageLog) -> dict:
        result = generate_redirects(paths.core, state.retired, state.versions, paths.redirects_file)
        log.append(("total", f"{result.total_rules} redirect rules"))
        log.append(("retired", f"{result.retired_count} retired version redirects"))
        log.append(("manual", f"{result.manual_count} manual redirects"))
        log.append(("patch", f"{result.patch_count} patch-to-minor redirects"))
        log.append(("examples", f"{result.examples_count} example redirects"))
        return result.to_dict()

    report.redirects = _stage("Generate _redirects file", _redirects)

    if paths.dist is not None:
        _stage("Clean dist dir", lambda log: clean_dist_dir(paths.dist, log))
        built = _stage("Build site into dist dir", lambda log: build_dist(paths, config, log))
        report.dist = str(built)

    report.ok = True
    report.versions = list(state.versions)
    report.retired = list(state.retired)
    report.current_version = state.current_version
    report.total_duration_ms = int((time.monotonic() - start) * 1000)
    logger.info("Build finished in %dms", report.total_duration_ms)
    return report
