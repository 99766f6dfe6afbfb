from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Finding:
    package: str
    version: Optional[str]
    license: Optional[str]
    reason: Optional[str] = None

    def as_dict(self) -> dict:
        payload = {"package": self.package, "version": self.version, "license": self.license}
        if self.reason is not None:
            payload["reason"] = self.reason
        return payload


@dataclass
class ComplianceReport:
    project_license: str
    compliant: List[Finding] = field(default_factory=list)
    warnings: List[Finding] = field(default_factory=list)
    violations: List[Finding] = field(default_factory=list)
    unknown: List[Finding] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.compliant) + len(self.warnings) + len(self.violations) + len(self.unknown)

    @property
    def verdict(self) -> str:
        """Return ``pass``, ``warn`` or ``fail`` for dashboards and CI logs."""

        if self.violations:
            return "fail"
        if self.warnings:
            return "warn"
        return "pass"

    def exit_code(self, strict: bool = False) -> int:
        """Map the report onto the CI exit-code contract (0 ok, 1 strict warnings, 2 violations)."""

        if self.violations:
            return 2
        if strict and self.warnings:
            return 1
        return 0

    def as_dict(self) -> dict:
        return {
            "project_license": self.project_license,
            "verdict": self.verdict,
            "compliant": [finding.as_dict() for finding in self.compliant],
            "warnings": [finding.as_dict() for finding in self.warnings],
            "violations": [finding.as_dict() for finding in self.violations],
            "unknown": [finding.as_dict() for finding in self.unknown],
        }


@dataclass
class QuickCheckResult:
    """Condensed CI outcome: ``ok`` is False only when violations exist."""

    ok: bool
    violations: List[Finding] = field(default_factory=list)
    warnings: List[Finding] = field(default_factory=list)
    total: int = 0
