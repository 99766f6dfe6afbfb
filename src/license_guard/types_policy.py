from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable

from .licenses import PERMISSIVE_LICENSES


@dataclass(frozen=True)
class PolicyConfig:
    """Per-invocation license policy.

    ``allow_list`` extends the built-in permissive set; ``deny_list`` is
    evaluated before any other rule, so a license present in both lists is
    always a violation.
    """

    project_license: str = "MIT"
    allow_list: FrozenSet[str] = field(default_factory=frozenset)
    deny_list: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        # Accept any iterable of identifiers (lists from the CLI, tuples in tests).
        object.__setattr__(self, "allow_list", frozenset(self.allow_list))
        object.__setattr__(self, "deny_list", frozenset(self.deny_list))

    @property
    def allowed_licenses(self) -> FrozenSet[str]:
        return PERMISSIVE_LICENSES | self.allow_list

    @classmethod
    def from_options(
        cls,
        project_license: str | None = None,
        allow: Iterable[str] = (),
        deny: Iterable[str] = (),
    ) -> "PolicyConfig":
        """Build a policy from repeatable, possibly comma-separated CLI values."""

        return cls(
            project_license=project_license or "MIT",
            allow_list=frozenset(_split_identifiers(allow)),
            deny_list=frozenset(_split_identifiers(deny)),
        )


def _split_identifiers(values: Iterable[str]) -> list[str]:
    identifiers: list[str] = []
    for value in values:
        for part in value.split(","):
            cleaned = part.strip()
            if cleaned:
                identifiers.append(cleaned)
    return identifiers
