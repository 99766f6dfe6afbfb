import json
from datetime import datetime, timezone

import click

from license_guard.compliance import check_compliance
from license_guard.reporting import (
    render_json,
    render_license_catalog,
    render_summary,
    render_table,
    truncate,
)
from license_guard.types import DependencyRecord, PolicyConfig, ScanResult


def _sample():
    deps = [
        DependencyRecord("good", "1.0.0", "MIT", source="npm"),
        DependencyRecord("strong", "2.0.0", "GPL-3.0", source="npm"),
        DependencyRecord("weak", None, "MPL-2.0", source="npm"),
        DependencyRecord("mystery", "0.1.0", "UNKNOWN (run npm install)", source="npm"),
    ]
    return deps, check_compliance(deps, PolicyConfig(project_license="MIT"))


def test_truncate_adds_ellipsis():
    assert truncate("short", 10) == "short"
    assert truncate("a-very-long-package-name", 10) == "a-very-lo…"
    assert truncate(None, 5) == ""


def test_render_table_shows_status_per_dependency():
    deps, report = _sample()

    table = click.unstyle(render_table(deps, report))
    lines = table.splitlines()

    assert lines[0].startswith("┌") and lines[-1].startswith("└")
    assert "Package" in lines[1] and "Status" in lines[1]
    assert len(lines) == 4 + len(deps)
    rows = {line.split("│")[1].strip(): line for line in lines[3:-1]}
    assert "✓ OK" in rows["good"]
    assert "✗ Copyleft license in…" in rows["strong"]
    assert "⚠ Weak copyleft - may…" in rows["weak"]
    assert "-" in rows["weak"].split("│")[2]
    assert "? Unknown" in rows["mystery"]
    assert len({len(line) for line in lines}) == 1


def test_render_table_colours_licenses_by_category():
    deps, report = _sample()

    table = render_table(deps, report)

    assert click.style(truncate("MIT", 18).ljust(18), fg="green") in table
    assert click.style(truncate("GPL-3.0", 18).ljust(18), fg="red") in table


def test_render_summary_lists_violations_and_warnings():
    _, report = _sample()

    summary = click.unstyle(render_summary(report))

    assert "Total packages: 4" in summary
    assert "Compliant:  1" in summary
    assert "Violations: 1" in summary
    assert "License Violations:" in summary
    assert "✗ strong@2.0.0: GPL-3.0" in summary
    assert "Copyleft license incompatible with MIT project" in summary
    assert "⚠ weak@None: MPL-2.0" in summary


def test_render_summary_omits_empty_sections():
    report = check_compliance([DependencyRecord("good", "1.0.0", "ISC")])

    summary = click.unstyle(render_summary(report))

    headings = {line.strip() for line in summary.splitlines()}
    assert "Warnings:   0" in summary
    assert "License Violations:" not in headings
    assert "Warnings:" not in headings


def test_render_json_embeds_compliance():
    deps, report = _sample()
    result = ScanResult(
        project_path="/tmp/demo",
        scanned_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        package_manager="npm",
        dependencies=deps,
    )

    payload = json.loads(render_json(result, report))

    assert payload["package_manager"] == "npm"
    assert payload["scanned_at"].startswith("2024-01-01")
    assert payload["dependencies"][0]["name"] == "good"
    assert payload["compliance"]["verdict"] == "fail"
    assert payload["compliance"]["unknown"][0]["license"] == "UNKNOWN (run npm install)"
    assert "reason" not in payload["compliance"]["compliant"][0]


def test_license_catalog_lists_common_licenses():
    catalog = click.unstyle(render_license_catalog())

    assert "Common Open Source Licenses:" in catalog
    assert "AGPL-3.0" in catalog
    assert "Network copyleft!" in catalog
