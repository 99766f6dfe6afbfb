"""License compliance evaluation.

Each dependency is matched against an ordered rule table; the first matching
rule decides its bucket. Several licenses belong to more than one set (AGPL is
both copyleft and problematic), so the order of ``COMPLIANCE_RULES`` is part of
the behavior and must not be rearranged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from .dependency_scanner import scan
from .licenses import (
    COPYLEFT_LICENSES,
    PROBLEMATIC_LICENSES,
    WEAK_COPYLEFT_LICENSES,
    is_permissive,
    is_unknown,
    normalize_license,
    problematic_reason,
)
from .types import ComplianceReport, DependencyRecord, Finding, PolicyConfig, QuickCheckResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComplianceRule:
    name: str
    bucket: str
    matches: Callable[[str, PolicyConfig], bool]
    reason: Callable[[str, PolicyConfig], Optional[str]]


def _fixed(message: Optional[str]) -> Callable[[str, PolicyConfig], Optional[str]]:
    return lambda license_name, policy: message


def _copyleft_incompatible(license_name: str, policy: PolicyConfig) -> bool:
    return license_name in COPYLEFT_LICENSES and is_permissive(policy.project_license)


COMPLIANCE_RULES: tuple[ComplianceRule, ...] = (
    ComplianceRule(
        "unknown",
        "unknown",
        lambda license_name, policy: is_unknown(license_name),
        _fixed("License could not be determined"),
    ),
    ComplianceRule(
        "denied",
        "violations",
        lambda license_name, policy: license_name in policy.deny_list,
        _fixed("License is explicitly denied"),
    ),
    ComplianceRule(
        "allowed",
        "compliant",
        lambda license_name, policy: license_name in policy.allowed_licenses,
        _fixed(None),
    ),
    ComplianceRule(
        "problematic",
        "violations",
        lambda license_name, policy: license_name in PROBLEMATIC_LICENSES,
        lambda license_name, policy: problematic_reason(license_name),
    ),
    ComplianceRule(
        "copyleft-incompatible",
        "violations",
        _copyleft_incompatible,
        # The project license is echoed as given, not normalized.
        lambda license_name, policy: (
            f"Copyleft license incompatible with {policy.project_license} project"
        ),
    ),
    ComplianceRule(
        "copyleft",
        "warnings",
        lambda license_name, policy: license_name in COPYLEFT_LICENSES,
        _fixed("Copyleft license - check distribution requirements"),
    ),
    ComplianceRule(
        "weak-copyleft",
        "warnings",
        lambda license_name, policy: license_name in WEAK_COPYLEFT_LICENSES,
        _fixed("Weak copyleft - may require source disclosure for modifications"),
    ),
    ComplianceRule(
        "unrecognized",
        "warnings",
        lambda license_name, policy: True,
        _fixed("Unrecognized license - manual review recommended"),
    ),
)


def _field(dependency: DependencyRecord | Mapping[str, Any], key: str) -> Any:
    if isinstance(dependency, Mapping):
        return dependency.get(key)
    return getattr(dependency, key)


def match_rule(license_name: str, policy: PolicyConfig) -> ComplianceRule:
    """Return the first rule matching an already normalized license."""

    # The last rule matches every license, so a rule is always found.
    return next(rule for rule in COMPLIANCE_RULES if rule.matches(license_name, policy))


def check_compliance(
    dependencies: Sequence[DependencyRecord | Mapping[str, Any]],
    policy: PolicyConfig | None = None,
) -> ComplianceReport:
    """Partition dependencies into compliant, warning, violation and unknown findings.

    Every dependency yields exactly one finding and bucket order follows input
    order. Unknown findings keep the raw declared license; all others carry the
    normalized identifier.
    """

    if not isinstance(dependencies, (list, tuple)):
        raise TypeError(
            f"dependencies must be a list of dependency records, got {type(dependencies).__name__}"
        )

    policy = policy or PolicyConfig()
    report = ComplianceReport(project_license=policy.project_license)

    for dependency in dependencies:
        raw_license = _field(dependency, "license")
        normalized = normalize_license(raw_license)
        rule = match_rule(normalized, policy)

        finding = Finding(
            package=_field(dependency, "name"),
            version=_field(dependency, "version"),
            license=raw_license if rule.bucket == "unknown" else normalized,
            reason=rule.reason(normalized, policy),
        )
        getattr(report, rule.bucket).append(finding)
        logger.debug("%s (%s) -> %s [%s]", finding.package, normalized, rule.bucket, rule.name)

    return report


def quick_check(project_path: Path | str, project_license: str = "MIT") -> QuickCheckResult:
    """Scan ``project_path`` and classify it against a default policy for CI gating."""

    results = scan(project_path)
    report = check_compliance(results.dependencies, PolicyConfig(project_license=project_license))
    return QuickCheckResult(
        ok=not report.violations,
        violations=report.violations,
        warnings=report.warnings,
        total=len(results.dependencies),
    )
