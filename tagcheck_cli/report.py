"""Render newer-version results as text lines or a JSON report."""

from __future__ import annotations

import json
from importlib import resources
from typing import Any

import jsonschema

from tagcheck_cli.versions import ImageNewerVersions


class ReportError(Exception):
    """Raised when a report does not conform to its schema."""


def format_line(result: ImageNewerVersions) -> str:
    """Return the one-line outcome for *result*."""
    if result.newer_versions:
        versions = ", ".join(result.newer_versions)
        return f"There are new versions of {result.image_name}! Newer versions: [{versions}]"
    return f"{result.image_name} is up to date"


def format_skip(image_name: str, reason: Exception | str) -> str:
    return f"Ignoring {image_name} due to {reason}"


def build_report(
    results: list[ImageNewerVersions],
    skipped: list[tuple[str, str]] | None = None,
) -> dict[str, Any]:
    """Build the JSON report document and validate it.

    Raises:
        ReportError: If the document fails schema validation.
    """
    report: dict[str, Any] = {
        "images": [
            {
                "image": r.image_name,
                "newer_versions": list(r.newer_versions),
                "up_to_date": r.up_to_date,
            }
            for r in results
        ],
    }
    if skipped:
        report["skipped"] = [{"image": name, "reason": reason} for name, reason in skipped]

    validate_report(report)
    return report


def render_json(report: dict[str, Any]) -> str:
    return json.dumps(report, indent=2, ensure_ascii=False)


def validate_report(report: dict[str, Any]) -> None:
    """Validate *report* against ``report.schema.json``.

    Raises:
        ReportError: If the report does not conform to the schema.
    """
    try:
        jsonschema.validate(instance=report, schema=_load_schema())
    except jsonschema.ValidationError as exc:
        raise ReportError(f"Report failed schema validation: {exc.message}") from exc


def _load_schema() -> dict[str, Any]:
    """Load the report schema from the ``tagcheck_cli.schemas`` package."""
    schema_ref = resources.files("tagcheck_cli.schemas").joinpath("report.schema.json")
    return json.loads(schema_ref.read_text(encoding="utf-8"))  # type: ignore[no-any-return]
