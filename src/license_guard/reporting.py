from __future__ import annotations

import json
from typing import Iterable, List, Optional

import click
from jinja2 import Environment

from .licenses import LICENSE_CATALOG, UNKNOWN_LICENSE, get_license_category
from .types import ComplianceReport, DependencyRecord, ScanResult


env = Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True)
env.filters["style"] = click.style

COLUMN_WIDTHS = (35, 12, 20, 25)
TABLE_HEADINGS = ("Package", "Version", "License", "Status")

CATEGORY_STYLES = {
    "permissive": {"fg": "green"},
    "weak-copyleft": {"fg": "yellow"},
    "copyleft": {"fg": "red"},
    "problematic": {"fg": "red", "bold": True},
    "unknown": {"dim": True},
}
OTHER_STYLE = {"fg": "cyan"}

TABLE_TEMPLATE = env.from_string(
    """{{ top }}
{{ header }}
{{ middle }}
{% for row in rows %}
{{ row }}
{% endfor %}
{{ bottom }}"""
)

SUMMARY_TEMPLATE = env.from_string(
    """
{{ "License Compliance Summary"|style(bold=True) }}
{{ "=" * 40 }}
   Total packages: {{ report.total }}
   {{ "✓"|style(fg="green") }} Compliant:  {{ report.compliant|length }}
   {{ "⚠"|style(fg="yellow") }} Warnings:   {{ report.warnings|length }}
   {{ "✗"|style(fg="red") }} Violations: {{ report.violations|length }}
   {{ "?"|style(dim=True) }} Unknown:    {{ report.unknown|length }}
{% if report.violations %}

{{ "License Violations:"|style(fg="red", bold=True) }}
{% for finding in report.violations %}
{{ ("  ✗ %s@%s: %s"|format(finding.package, finding.version, finding.license))|style(fg="red") }}
{{ ("    " ~ finding.reason)|style(fg="red") }}
{% endfor %}
{% endif %}
{% if report.warnings %}

{{ "Warnings:"|style(fg="yellow", bold=True) }}
{% for finding in report.warnings %}
{{ ("  ⚠ %s@%s: %s"|format(finding.package, finding.version, finding.license))|style(fg="yellow") }}
{{ ("    " ~ finding.reason)|style(fg="yellow") }}
{% endfor %}
{% endif %}"""
)

CATALOG_TEMPLATE = env.from_string(
    """
{{ "Common Open Source Licenses:"|style(bold=True) }}

{% for license_id, kind, compatible in catalog %}
  {{ ("%-15s"|format(license_id))|style(bold=True) }} {{ ("%-16s"|format(kind))|style(fg="yellow" if "copyleft" in kind.lower() else "green") }} {{ compatible|style(dim=True) }}
{% endfor %}"""
)


def truncate(text: Optional[str], length: int) -> str:
    if not text:
        return ""
    if len(text) <= length:
        return text
    return text[: length - 1] + "…"


def _cell(text: str, width: int, **style) -> str:
    content = truncate(text, width - 2).ljust(width - 2)
    return " " + (click.style(content, **style) if style else content) + " "


def _border(left: str, joint: str, right: str) -> str:
    return left + joint.join("─" * width for width in COLUMN_WIDTHS) + right


def _line(cells: Iterable[str]) -> str:
    return "│" + "│".join(cells) + "│"


def _statuses(report: ComplianceReport) -> dict[str, tuple[str, dict]]:
    # Later buckets are written first so violations take precedence for duplicate names.
    statuses: dict[str, tuple[str, dict]] = {}
    for finding in report.unknown:
        statuses[finding.package] = ("? Unknown", {"dim": True})
    for finding in report.warnings:
        statuses[finding.package] = (f"⚠ {truncate(finding.reason, 20)}", {"fg": "yellow"})
    for finding in report.violations:
        statuses[finding.package] = (f"✗ {truncate(finding.reason, 20)}", {"fg": "red"})
    return statuses


def render_table(dependencies: List[DependencyRecord], report: ComplianceReport) -> str:
    """Render one row per scanned dependency with its license and compliance status."""

    statuses = _statuses(report)
    rows = []
    for dep in dependencies:
        license_name = dep.license or UNKNOWN_LICENSE
        category = get_license_category(license_name)
        status, status_style = statuses.get(dep.name, ("✓ OK", {"fg": "green"}))
        rows.append(
            _line(
                [
                    _cell(dep.name, COLUMN_WIDTHS[0]),
                    _cell(dep.version or "-", COLUMN_WIDTHS[1]),
                    _cell(license_name, COLUMN_WIDTHS[2], **CATEGORY_STYLES.get(category, OTHER_STYLE)),
                    _cell(status, COLUMN_WIDTHS[3], **status_style),
                ]
            )
        )

    header = _line(
        _cell(heading, width, bold=True) for heading, width in zip(TABLE_HEADINGS, COLUMN_WIDTHS)
    )
    return TABLE_TEMPLATE.render(
        top=_border("┌", "┬", "┐"),
        header=header,
        middle=_border("├", "┼", "┤"),
        rows=rows,
        bottom=_border("└", "┴", "┘"),
    )


def render_summary(report: ComplianceReport) -> str:
    return SUMMARY_TEMPLATE.render(report=report)


def render_json(scan_result: ScanResult, report: ComplianceReport) -> str:
    payload = scan_result.as_dict()
    payload["compliance"] = report.as_dict()
    return json.dumps(payload, indent=2)


def render_license_catalog() -> str:
    return CATALOG_TEMPLATE.render(catalog=LICENSE_CATALOG)
