"""
Tests for page front matter.
"""

import pytest

from docsite.core.services.frontmatter import (
    MissingHeadingError,
    generate_front_matter,
    page_slug,
)


class TestTitle:
    def test_heading_becomes_title(self):
        fm = generate_front_matter("# Getting Started\n\nLine 1\nLine 2", "user-guide/getting-started.md", "latest")
        assert fm.title == "Getting Started"
        assert fm.front == "---\ntitle: Getting Started\ndescription: Getting Started\n---"

    def test_heading_removed_from_body(self):
        fm = generate_front_matter("# Getting Started\n\nLine 1\nLine 2", "user-guide/getting-started.md", "latest")
        assert fm.content_without_heading == "\n\nLine 1\nLine 2"

    def test_only_first_heading_removed(self):
        content = "# Title\n\nIntro\n\n# Title\n"
        fm = generate_front_matter(content, "page.md", "latest")
        assert fm.content_without_heading == "\n\nIntro\n\n# Title\n"

    def test_backticks_and_colons_stripped(self):
        fm = generate_front_matter("# The `when`: clause\n", "guide.md", "latest")
        assert fm.title == "The when clause"

    def test_missing_heading(self):
        with pytest.raises(MissingHeadingError, match="Missing heading in guide.md"):
            generate_front_matter("No heading here\n", "guide.md", "latest")


class TestReadme:
    """README pages are always titled Overview."""

    def test_overview_with_sidebar_label(self):
        fm = generate_front_matter("# User Guide\n\nBody", "user-guide/index.md", "latest", "010_user-guide/README.md")
        assert fm.title == "Overview"
        assert fm.front.splitlines() == [
            "---",
            "title: Overview",
            "description: Overview",
            "sidebar:",
            "  label: Overview",
            "---",
        ]

    def test_readme_newfile(self):
        fm = generate_front_matter("# Anything\n", "README.md", "latest")
        assert fm.title == "Overview"

    def test_non_readme_has_no_sidebar(self):
        fm = generate_front_matter("# Guide\n", "guide.md", "latest", "guide.md")
        assert "sidebar:" not in fm.front


class TestSlug:
    def test_versioned_page(self):
        fm = generate_front_matter("# Capabilities\n", "user-guide/capabilities.md", "v1.2.3")
        assert fm.slug == "v1.2/user-guide/capabilities"
        assert "slug: v1.2/user-guide/capabilities" in fm.front

    def test_latest_has_no_slug(self):
        fm = generate_front_matter("# Capabilities\n", "user-guide/capabilities.md", "latest")
        assert fm.slug is None
        assert "slug:" not in fm.front

    def test_slug_before_sidebar(self):
        fm = generate_front_matter("# Guide\n", "user-guide/index.md", "v0.54.0", "user-guide/README.md")
        lines = fm.front.splitlines()
        assert lines.index("slug: v0.54/user-guide") < lines.index("sidebar:")

    @pytest.mark.parametrize(
        "newfile, version, expected",
        [
            ("user-guide/index.md", "v0.54.1", "v0.54/user-guide"),
            ("index.md", "v0.54.1", "v0.54"),
            ("reference/faq.md", "v1.0.0", "v1.0/reference/faq"),
            ("guide.md", "latest", None),
        ],
    )
    def test_page_slug(self, newfile, version, expected):
        assert page_slug(newfile, version) == expected
