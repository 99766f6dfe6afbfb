from __future__ import annotations

"""Shared data structures for dependency scanning and license compliance.

The definitions live in domain-focused modules; this module keeps a single
stable import path for callers.
"""

from .types_dependencies import DependencyRecord, ScanResult
from .types_policy import PolicyConfig
from .types_report import ComplianceReport, Finding, QuickCheckResult

__all__ = [
    "ComplianceReport",
    "DependencyRecord",
    "Finding",
    "PolicyConfig",
    "QuickCheckResult",
    "ScanResult",
]
