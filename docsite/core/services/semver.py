"""
Semantic version parsing and precedence (pure).

Tags are accepted with an optional leading ``v`` (``v1.2.3``) as git tags
are usually written. No I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*))*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@total_ordering
@dataclass(frozen=True)
class SemVer:
    """A parsed semantic version. Build metadata does not affect ordering."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str = ""

    @property
    def majmin(self) -> str:
        return f"{self.major}.{self.minor}"

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def _key(self) -> tuple:
        # Numeric identifiers sort below alphanumeric ones
        pre = tuple(
            (0, int(ident), "") if ident.isdigit() else (1, 0, ident)
            for ident in self.prerelease
        )
        # A release sorts above every prerelease of the same triple
        return (self.major, self.minor, self.patch, not self.prerelease, pre)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() < other._key()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + self.build
        return text


def parse(tag: str) -> SemVer | None:
    """Parse a tag like ``v1.2.3-rc.1``; None when it is not valid semver."""
    m = _SEMVER_RE.match(tag.strip())
    if not m:
        return None
    major, minor, patch, pre, build = m.groups()
    return SemVer(
        major=int(major),
        minor=int(minor),
        patch=int(patch),
        prerelease=tuple(pre.split(".")) if pre else (),
        build=build or "",
    )


def is_valid(tag: str) -> bool:
    return parse(tag) is not None


def is_prerelease(tag: str) -> bool:
    """True for valid tags carrying a prerelease part."""
    v = parse(tag)
    return v is not None and v.is_prerelease


def majmin(tag: str) -> str:
    """``v1.2.3`` → ``1.2``.

    Raises:
        ValueError: If ``tag`` is not a valid semantic version.
    """
    v = parse(tag)
    if v is None:
        raise ValueError(f"Not a semantic version: {tag!r}")
    return v.majmin


def sort_desc(tags: list[str]) -> list[str]:
    """Valid tags only, highest precedence first."""
    parsed = [(parse(t), t) for t in tags]
    valid = [(v, t) for v, t in parsed if v is not None]
    valid.sort(key=lambda pair: pair[0], reverse=True)
    return [t for _, t in valid]
