"""Tests for report rendering."""

import json

import pytest

from tagcheck_cli.report import (
    ReportError,
    build_report,
    format_line,
    format_skip,
    render_json,
    validate_report,
)
from tagcheck_cli.versions import ImageNewerVersions


class TestTextReport:
    def test_newer_versions_line(self):
        """Test the newer versions line."""
        line = format_line(ImageNewerVersions("author/image:0.2.0", ["0.3.0", "1.0.0"]))
        assert line == "There are new versions of author/image:0.2.0! Newer versions: [0.3.0, 1.0.0]"

    def test_up_to_date_line(self):
        """Test the up to date line."""
        assert format_line(ImageNewerVersions("nginx:1.25", [])) == "nginx:1.25 is up to date"

    def test_skip_line(self):
        """Test the skip line."""
        assert format_skip("nginx", "not specified tag") == "Ignoring nginx due to not specified tag"


class TestJsonReport:
    def test_build_report(self):
        """Test the JSON document and its rendering."""
        report = build_report(
            [ImageNewerVersions("a:1.0", ["1.1"]), ImageNewerVersions("b:2.0", [])],
            skipped=[("nginx", "not specified tag")],
        )
        assert report["images"] == [
            {"image": "a:1.0", "newer_versions": ["1.1"], "up_to_date": False},
            {"image": "b:2.0", "newer_versions": [], "up_to_date": True},
        ]
        assert report["skipped"] == [{"image": "nginx", "reason": "not specified tag"}]
        assert json.loads(render_json(report)) == report

    def test_no_skipped_key_when_empty(self):
        """Test skipped is omitted when nothing was skipped."""
        assert "skipped" not in build_report([])

    def test_invalid_report(self):
        """Test schema violations raise ReportError."""
        with pytest.raises(ReportError):
            validate_report({"images": [{"image": "a"}]})
