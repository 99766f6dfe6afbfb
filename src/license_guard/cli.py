from __future__ import annotations

import logging
from typing import Optional

import click

from .compliance import check_compliance
from .dependency_scanner import enrich_with_registry_licenses, scan as scan_project
from .reporting import render_json, render_license_catalog, render_summary, render_table
from .types import PolicyConfig, ScanResult

PROJECT_PATH = click.Path(exists=True, file_okay=False, path_type=str)


def _license_option(help_text: str):
    return click.option(
        "-l",
        "--license",
        "project_license",
        default="MIT",
        show_default=True,
        envvar="LICENSE_GUARD_PROJECT_LICENSE",
        help=help_text,
    )


def _scan_or_exit(path: str) -> ScanResult:
    try:
        return scan_project(path)
    except Exception as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)


@click.group()
@click.version_option(package_name="license-guard")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """License compliance checker for your projects."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@main.command()
@click.argument("path", default=".", type=PROJECT_PATH)
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    show_default=True,
    help="Output format.",
)
@_license_option("Your project license (e.g., MIT, Apache-2.0).")
@click.option("--strict", is_flag=True, help="Exit with error on any warning.")
@click.option(
    "--allow",
    multiple=True,
    help="Additional allowed licenses (repeatable or comma-separated).",
)
@click.option(
    "--deny",
    multiple=True,
    help="Explicitly denied licenses (repeatable or comma-separated).",
)
@click.option(
    "--offline/--online",
    default=True,
    show_default=True,
    help="Pass --online to look up unknown licenses on the npm, PyPI and crates.io registries.",
)
@click.option(
    "--registry-timeout",
    type=float,
    help="HTTP timeout (seconds) for registry lookups; defaults to LICENSE_GUARD_REGISTRY_TIMEOUT or 8s.",
)
def scan(
    path: str,
    fmt: str,
    project_license: str,
    strict: bool,
    allow: tuple[str, ...],
    deny: tuple[str, ...],
    offline: bool,
    registry_timeout: Optional[float],
) -> None:
    """Scan project dependencies for license information."""
    click.echo("License Guard - Scanning...", err=True)

    results = _scan_or_exit(path)
    if not results.dependencies:
        click.echo("No dependencies found.")
        return

    results.dependencies = enrich_with_registry_licenses(
        results.dependencies, offline=offline, timeout=registry_timeout
    )
    policy = PolicyConfig.from_options(project_license, allow=allow, deny=deny)
    compliance = check_compliance(results.dependencies, policy)

    if fmt.lower() == "json":
        click.echo(render_json(results, compliance))
    else:
        click.echo(render_table(results.dependencies, compliance))
        click.echo(render_summary(compliance))

    raise SystemExit(compliance.exit_code(strict=strict))


@main.command()
@click.argument("path", default=".", type=PROJECT_PATH)
@_license_option("Your project license.")
def check(path: str, project_license: str) -> None:
    """Quick compliance check (CI-friendly)."""
    results = _scan_or_exit(path)
    compliance = check_compliance(results.dependencies, PolicyConfig(project_license=project_license))

    if compliance.violations:
        click.secho(f"✗ {len(compliance.violations)} license violation(s) found", fg="red")
        for finding in compliance.violations:
            click.secho(f"  - {finding.package}: {finding.license} ({finding.reason})", fg="red")
        raise SystemExit(2)

    if compliance.warnings:
        click.secho(f"⚠ {len(compliance.warnings)} license warning(s)", fg="yellow")
        for finding in compliance.warnings:
            click.secho(f"  - {finding.package}: {finding.license} ({finding.reason})", fg="yellow")
        raise SystemExit(1)

    click.secho("✓ All dependencies are license-compliant", fg="green")


@main.command()
def licenses() -> None:
    """Show commonly used license information."""
    click.echo(render_license_catalog())


if __name__ == "__main__":
    main()
