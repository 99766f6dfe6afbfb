from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class DependencyRecord:
    name: str
    version: Optional[str]
    license: Optional[str] = None
    source: str = "unknown"
    installed: bool = False
    repository: Optional[str] = None
    author: Optional[str] = None

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class ScanResult:
    """Dependencies discovered for one project directory."""

    project_path: str
    scanned_at: datetime
    package_manager: Optional[str] = None
    dependencies: List[DependencyRecord] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "project_path": self.project_path,
            "scanned_at": self.scanned_at.isoformat(),
            "package_manager": self.package_manager,
            "dependencies": [dep.as_dict() for dep in self.dependencies],
        }
