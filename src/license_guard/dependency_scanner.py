from __future__ import annotations

import json
import logging
import os
import re
import tomllib
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from packaging.requirements import InvalidRequirement, Requirement
import requests  # type: ignore[import-untyped]

from .licenses import UNKNOWN_LICENSE
from .types import DependencyRecord, ScanResult

logger = logging.getLogger(__name__)

LICENSE_FILES = ("LICENSE", "LICENSE.md", "LICENSE.txt", "LICENCE")
NPM_UNINSTALLED_LICENSE = "UNKNOWN (run npm install)"
PIP_LICENSE = "UNKNOWN (use pip-licenses for details)"
GO_LICENSE = "UNKNOWN (Go module)"
CARGO_LICENSE = "UNKNOWN (Cargo crate)"

REGISTRY_ENDPOINTS = {
    "npm": "https://registry.npmjs.org/{name}/{version}",
    "pip": "https://pypi.org/pypi/{name}/json",
    "cargo": "https://crates.io/api/v1/crates/{name}",
}
REGISTRY_USER_AGENT = "license-guard (https://pypi.org/project/license-guard/)"

_VERSION_RANGE_CHARS = re.compile(r"[\^~>=<]")
_NPM_EXACT_VERSION = re.compile(r"^\d+\.\d+\.\d+(?:[-+][0-9A-Za-z.+-]+)?$")
_GO_REQUIRE = re.compile(r"^(?:require\s+)?(\S+)\s+(\S+)")
# PyPI "license" fields sometimes carry the full license text.
_MAX_DECLARED_LICENSE = 64


def scan(project_path: Path | str) -> ScanResult:
    """Detect supported manifests in ``project_path`` and collect their dependencies."""

    root = Path(project_path).resolve()
    result = ScanResult(project_path=str(root), scanned_at=datetime.now(timezone.utc))

    for manifest, ecosystem, scanner in (
        ("package.json", "npm", scan_npm_project),
        ("requirements.txt", "pip", scan_python_project),
        ("go.mod", "go", scan_go_project),
        ("Cargo.toml", "cargo", scan_cargo_project),
    ):
        if not (root / manifest).exists():
            continue
        result.package_manager = "multiple" if result.package_manager else ecosystem
        found = scanner(root)
        logger.debug("found %d %s dependencies in %s", len(found), ecosystem, root / manifest)
        result.dependencies.extend(found)

    return result


def scan_npm_project(project_path: Path) -> List[DependencyRecord]:
    node_modules = project_path / "node_modules"
    if not node_modules.is_dir():
        data = json.loads((project_path / "package.json").read_text(encoding="utf-8"))
        declared = {**(data.get("dependencies") or {}), **(data.get("devDependencies") or {})}
        return [
            DependencyRecord(
                name=name,
                version=_VERSION_RANGE_CHARS.sub("", str(version)),
                license=NPM_UNINSTALLED_LICENSE,
                source="npm",
                installed=False,
            )
            for name, version in declared.items()
        ]

    dependencies: List[DependencyRecord] = []
    for entry in sorted(node_modules.iterdir()):
        if not entry.is_dir():
            continue
        if entry.name.startswith("@"):
            for scoped in sorted(entry.iterdir()):
                if not scoped.is_dir():
                    continue
                info = get_package_info(scoped)
                if info:
                    dependencies.append(replace(info, name=f"{entry.name}/{scoped.name}"))
        else:
            info = get_package_info(entry)
            if info:
                dependencies.append(info)
    return dependencies


def get_package_info(package_path: Path) -> DependencyRecord | None:
    """Read name, version and declared license from an installed npm package."""

    manifest = package_path / "package.json"
    if not manifest.exists():
        return None

    try:
        pkg = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.debug("skipping unreadable manifest %s: %s", manifest, exc)
        return None
    if not isinstance(pkg, dict):
        return None

    license_value = _declared_npm_license(pkg)
    if license_value == UNKNOWN_LICENSE:
        if any((package_path / name).exists() for name in LICENSE_FILES):
            license_value = "See LICENSE file"

    repository = pkg.get("repository")
    if isinstance(repository, dict):
        repository = repository.get("url")
    author = pkg.get("author")
    if isinstance(author, dict):
        author = author.get("name")

    return DependencyRecord(
        name=pkg.get("name") or package_path.name,
        version=pkg.get("version"),
        license=license_value,
        source="npm",
        installed=True,
        repository=repository or None,
        author=author or None,
    )


def _declared_npm_license(pkg: dict) -> str:
    license_value = pkg.get("license")
    if isinstance(license_value, str):
        return license_value
    if isinstance(license_value, dict) and license_value.get("type"):
        return str(license_value["type"])
    licenses = pkg.get("licenses")
    if isinstance(licenses, list):
        return " OR ".join(
            str(entry.get("type") or entry) if isinstance(entry, dict) else str(entry)
            for entry in licenses
        )
    return UNKNOWN_LICENSE


def parse_requirement_line(line: str) -> DependencyRecord | None:
    cleaned = line.split(" #", 1)[0].strip()
    if not cleaned or cleaned.startswith("#") or cleaned.startswith("-"):
        return None

    try:
        req = Requirement(cleaned)
    except InvalidRequirement:
        return DependencyRecord(name=cleaned, version="*", license=PIP_LICENSE, source="pip")

    specifiers = list(req.specifier)
    if len(specifiers) == 1:
        version = specifiers[0].version
    elif specifiers:
        version = str(req.specifier)
    else:
        version = "*"

    return DependencyRecord(name=req.name, version=version, license=PIP_LICENSE, source="pip")


def scan_python_project(project_path: Path) -> List[DependencyRecord]:
    dependencies: List[DependencyRecord] = []
    for line in (project_path / "requirements.txt").read_text(encoding="utf-8").splitlines():
        info = parse_requirement_line(line)
        if info:
            dependencies.append(info)
    return dependencies


def scan_go_project(project_path: Path) -> List[DependencyRecord]:
    dependencies: List[DependencyRecord] = []
    in_require = False
    for line in (project_path / "go.mod").read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if stripped == "require (":
            in_require = True
            continue
        if stripped == ")":
            in_require = False
            continue
        if stripped.startswith("//") or not (in_require or stripped.startswith("require ")):
            continue

        match = _GO_REQUIRE.match(stripped)
        if match:
            dependencies.append(
                DependencyRecord(
                    name=match.group(1),
                    version=match.group(2),
                    license=GO_LICENSE,
                    source="go",
                )
            )
    return dependencies


def _cargo_dependency_tables(data: dict) -> Iterable[dict]:
    for key, value in data.items():
        if not isinstance(value, dict):
            continue
        if key.endswith("dependencies"):
            yield value
        elif key == "target":
            for platform in value.values():
                if isinstance(platform, dict):
                    yield from _cargo_dependency_tables(platform)
        elif key == "workspace":
            yield from _cargo_dependency_tables(value)


def scan_cargo_project(project_path: Path) -> List[DependencyRecord]:
    data = tomllib.loads((project_path / "Cargo.toml").read_text(encoding="utf-8"))

    dependencies: List[DependencyRecord] = []
    for table in _cargo_dependency_tables(data):
        for name, spec in table.items():
            if isinstance(spec, dict):
                version = spec.get("version") or "*"
            else:
                version = str(spec)
            dependencies.append(
                DependencyRecord(name=name, version=version, license=CARGO_LICENSE, source="cargo")
            )
    return dependencies


def _registry_timeout(timeout: float | None) -> float:
    if timeout:
        return timeout
    try:
        return float(os.environ.get("LICENSE_GUARD_REGISTRY_TIMEOUT", "8"))
    except ValueError:
        return 8.0


def _pypi_license(payload: dict) -> Optional[str]:
    info = payload.get("info") or {}
    for key in ("license_expression", "license"):
        value = (info.get(key) or "").strip()
        if value and len(value) <= _MAX_DECLARED_LICENSE and "\n" not in value:
            return value
    for classifier in info.get("classifiers") or []:
        if classifier.startswith("License :: OSI Approved :: "):
            return classifier.rsplit(" :: ", 1)[-1]
    return None


def _crates_license(payload: dict, version: Optional[str]) -> Optional[str]:
    versions = payload.get("versions") or []
    for entry in versions:
        if entry.get("num") == version and entry.get("license"):
            return entry["license"]
    if versions:
        return versions[0].get("license")
    return None


def lookup_registry_license(dep: DependencyRecord, timeout: float | None = None) -> Optional[str]:
    """Return the license declared for ``dep`` by its package registry, if any."""

    template = REGISTRY_ENDPOINTS.get(dep.source)
    if not template:
        return None

    version = dep.version or "latest"
    if dep.source == "npm" and not _NPM_EXACT_VERSION.match(version):
        # Ranges such as 1.2.x or ">=1 <2" have no registry document of their own.
        version = "latest"
    url = template.format(name=dep.name, version=version)
    response = requests.get(
        url,
        timeout=_registry_timeout(timeout),
        headers={"User-Agent": REGISTRY_USER_AGENT, "Accept": "application/json"},
    )
    if response.status_code != 200:
        logger.debug("registry returned %s for %s", response.status_code, url)
        return None

    payload = response.json()
    if dep.source == "npm":
        declared = payload.get("license")
        if isinstance(declared, dict):
            declared = declared.get("type")
        return declared or None
    if dep.source == "pip":
        return _pypi_license(payload)
    return _crates_license(payload, dep.version)


def enrich_with_registry_licenses(
    dependencies: List[DependencyRecord],
    offline: bool = False,
    timeout: float | None = None,
) -> List[DependencyRecord]:
    """Optionally replace unknown licenses with the ones published on package registries."""

    if offline:
        return list(dependencies)

    enriched: List[DependencyRecord] = []
    for dep in dependencies:
        if UNKNOWN_LICENSE not in (dep.license or UNKNOWN_LICENSE):
            enriched.append(dep)
            continue
        try:
            declared = lookup_registry_license(dep, timeout=timeout)
        except (requests.RequestException, ValueError) as exc:
            logger.warning("license lookup failed for %s: %s", dep.name, exc)
            declared = None
        enriched.append(replace(dep, license=declared) if declared else dep)
    return enriched
