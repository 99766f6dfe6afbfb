"""Static license taxonomy and license-string normalization.

Identifiers are matched exactly and case-sensitively against SPDX-style ids.
Human spellings are mapped onto canonical ids through ``LICENSE_ALIASES``;
anything else is passed through unchanged.
"""

from __future__ import annotations

from typing import Optional

UNKNOWN_LICENSE = "UNKNOWN"

PERMISSIVE_LICENSES = frozenset(
    {
        "MIT",
        "ISC",
        "BSD-2-Clause",
        "BSD-3-Clause",
        "Apache-2.0",
        "Unlicense",
        "0BSD",
        "CC0-1.0",
        "WTFPL",
        "Zlib",
        "X11",
        "Public Domain",
        "CC-BY-4.0",
        "CC-BY-3.0",
        "BlueOak-1.0.0",
    }
)

COPYLEFT_LICENSES = frozenset(
    {
        "GPL-2.0",
        "GPL-2.0-only",
        "GPL-2.0-or-later",
        "GPL-3.0",
        "GPL-3.0-only",
        "GPL-3.0-or-later",
        "AGPL-3.0",
        "AGPL-3.0-only",
        "AGPL-3.0-or-later",
    }
)

WEAK_COPYLEFT_LICENSES = frozenset(
    {
        "LGPL-2.0",
        "LGPL-2.1",
        "LGPL-3.0",
        "MPL-2.0",
        "EPL-1.0",
        "EPL-2.0",
        "OSL-3.0",
        "CDDL-1.0",
        "CDDL-1.1",
    }
)

_NETWORK_COPYLEFT = "Network copyleft - requires source disclosure for SaaS"
_NON_COMMERCIAL = "Non-commercial use only"

PROBLEMATIC_REASONS = {
    "AGPL-3.0": _NETWORK_COPYLEFT,
    "AGPL-3.0-only": _NETWORK_COPYLEFT,
    "AGPL-3.0-or-later": _NETWORK_COPYLEFT,
    "SSPL-1.0": "Server Side Public License - very restrictive for services",
    "CC-BY-NC-4.0": _NON_COMMERCIAL,
    "CC-BY-NC-SA-4.0": _NON_COMMERCIAL,
    "CC-BY-ND-4.0": "No derivatives allowed",
    "Prosperity-3.0.0": _NON_COMMERCIAL,
    "BSL-1.0": "Business Source License - commercial restrictions",
}

PROBLEMATIC_LICENSES = frozenset(PROBLEMATIC_REASONS)

DEFAULT_PROBLEMATIC_REASON = "License has usage restrictions"

LICENSE_ALIASES = {
    "Apache 2.0": "Apache-2.0",
    "Apache License 2.0": "Apache-2.0",
    "Apache-2": "Apache-2.0",
    "BSD": "BSD-3-Clause",
    "GPL": "GPL-3.0",
    "GPLv3": "GPL-3.0",
    "GPLv2": "GPL-2.0",
    "LGPL": "LGPL-3.0",
    "MIT License": "MIT",
    "(MIT)": "MIT",
}

# (id, type, compatibility note) rows for the ``licenses`` command.
LICENSE_CATALOG = (
    ("MIT", "Permissive", "Almost everything"),
    ("Apache-2.0", "Permissive", "Most licenses"),
    ("BSD-3-Clause", "Permissive", "Most licenses"),
    ("ISC", "Permissive", "Almost everything"),
    ("GPL-3.0", "Copyleft", "GPL-compatible only"),
    ("LGPL-3.0", "Weak copyleft", "Dynamic linking OK"),
    ("MPL-2.0", "Weak copyleft", "File-level copyleft"),
    ("AGPL-3.0", "Strong copyleft", "Network copyleft!"),
)

_SPDX_OR = " OR "


def normalize_license(license_name: Optional[str]) -> str:
    """Map a raw declared license onto a canonical identifier.

    ``A OR B`` expressions resolve to the first permissive option, or to the
    first option when none is permissive. ``AND``/``WITH`` and parentheses are
    not interpreted.
    """

    if not license_name:
        return UNKNOWN_LICENSE

    normalized = license_name.strip()

    if _SPDX_OR in normalized:
        options = [option.strip() for option in normalized.split(_SPDX_OR)]
        for option in options:
            if option in PERMISSIVE_LICENSES:
                return option
        return options[0]

    return LICENSE_ALIASES.get(normalized, normalized)


def is_unknown(normalized: str) -> bool:
    return UNKNOWN_LICENSE in normalized


def is_permissive(license_name: Optional[str]) -> bool:
    return normalize_license(license_name) in PERMISSIVE_LICENSES


def problematic_reason(license_name: str) -> str:
    return PROBLEMATIC_REASONS.get(license_name, DEFAULT_PROBLEMATIC_REASON)


def get_license_category(license_name: Optional[str]) -> str:
    normalized = normalize_license(license_name)

    # AGPL appears in both the copyleft and problematic sets; problematic wins.
    if is_unknown(normalized):
        return "unknown"
    if normalized in PROBLEMATIC_LICENSES:
        return "problematic"
    if normalized in PERMISSIVE_LICENSES:
        return "permissive"
    if normalized in COPYLEFT_LICENSES:
        return "copyleft"
    if normalized in WEAK_COPYLEFT_LICENSES:
        return "weak-copyleft"
    return "other"
