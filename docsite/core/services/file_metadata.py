"""
Path mapping — legacy docs-tree paths to their place on the site.

Older core tags number their directories and files for ordering
(``010_user-guide/020_actions.md``). The site orders pages itself, so
the numeric prefixes are dropped, ``README.md`` pages become
``index.md``, and the routing tables move a few sections around.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass

from docsite.core.data import DataRegistry, get_registry

# Legacy ordering prefix, e.g. "010_"
_NUMBERED_PREFIX_RE = re.compile(r"^\d+_")


@dataclass(frozen=True)
class FileMetadata:
    """Where a source file lands relative to a version's content root."""

    source: str
    newfile: str

    @property
    def newdir(self) -> str:
        return posixpath.dirname(self.newfile)


def strip_numbered_prefix(segment: str) -> str:
    """``010_user-guide`` → ``user-guide``."""
    return _NUMBERED_PREFIX_RE.sub("", segment, count=1)


def generate_file_metadata(file: str, registry: DataRegistry | None = None) -> FileMetadata:
    """Map a source-relative path (``/``-separated) to its destination path.

    The single-file collapse only applies to an ``index.md`` whose
    cleaned directory, before structural renames, is exactly a key of
    the single-file table. Other files in such a directory keep their
    (renamed) location.
    """
    registry = registry or get_registry()

    dirname, filename = posixpath.split(file)
    rawdir = "/".join(strip_numbered_prefix(part) for part in dirname.split("/")) if dirname else ""

    newdir = rawdir
    for old, new in registry.structure_map.items():
        if newdir.startswith(old):
            newdir = newdir.replace(old, new, 1)

    newfile = strip_numbered_prefix(filename)
    if newfile == "README.md":
        newfile = "index.md"

    collapsed = registry.single_file_map.get(rawdir)
    if newfile == "index.md" and collapsed:
        newdir, newfile = "", collapsed

    if newdir and newdir != ".":
        newfile = f"{newdir}/{newfile}"
    return FileMetadata(source=file, newfile=newfile)
