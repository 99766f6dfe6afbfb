import pytest

from license_guard.licenses import (
    COPYLEFT_LICENSES,
    PERMISSIVE_LICENSES,
    PROBLEMATIC_LICENSES,
    PROBLEMATIC_REASONS,
    get_license_category,
    is_permissive,
    normalize_license,
    problematic_reason,
)


def test_normalize_handles_missing_and_blank_values():
    assert normalize_license(None) == "UNKNOWN"
    assert normalize_license("") == "UNKNOWN"
    assert normalize_license("   ") == ""
    assert normalize_license("  MIT  ") == "MIT"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Apache 2.0", "Apache-2.0"),
        ("Apache License 2.0", "Apache-2.0"),
        ("Apache-2", "Apache-2.0"),
        ("BSD", "BSD-3-Clause"),
        ("GPL", "GPL-3.0"),
        ("GPLv3", "GPL-3.0"),
        ("GPLv2", "GPL-2.0"),
        ("LGPL", "LGPL-3.0"),
        ("MIT License", "MIT"),
        ("(MIT)", "MIT"),
    ],
)
def test_normalize_maps_common_variants(raw, expected):
    assert normalize_license(raw) == expected


def test_alias_matching_is_exact():
    assert normalize_license("mit license") == "mit license"
    assert normalize_license("Custom-1.0") == "Custom-1.0"


def test_or_expression_prefers_first_permissive_option():
    assert normalize_license("GPL-3.0 OR MIT") == "MIT"
    assert normalize_license("MIT OR Apache-2.0") == "MIT"
    assert normalize_license("Apache-2.0 OR MIT") == "Apache-2.0"


def test_or_expression_falls_back_to_first_option():
    assert normalize_license("GPL-2.0 OR LGPL-3.0 OR MPL-2.0") == "GPL-2.0"
    # Options are not passed through the alias table.
    assert normalize_license("GPLv2 OR GPLv3") == "GPLv2"


def test_normalization_is_idempotent():
    samples = sorted(PERMISSIVE_LICENSES | COPYLEFT_LICENSES | PROBLEMATIC_LICENSES) + [
        "Apache 2.0",
        "GPL-3.0 OR MIT",
        "UNKNOWN (Go module)",
        "Something-Else",
        None,
    ]
    for raw in samples:
        once = normalize_license(raw)
        assert normalize_license(once) == once


def test_agpl_is_problematic_rather_than_copyleft():
    assert "AGPL-3.0" in COPYLEFT_LICENSES
    assert get_license_category("AGPL-3.0") == "problematic"
    assert get_license_category("AGPL-3.0-or-later") == "problematic"


@pytest.mark.parametrize(
    "raw, category",
    [
        ("MIT", "permissive"),
        ("MIT License", "permissive"),
        ("GPL-3.0", "copyleft"),
        ("GPLv2", "copyleft"),
        ("LGPL-2.1", "weak-copyleft"),
        ("MPL-2.0", "weak-copyleft"),
        ("SSPL-1.0", "problematic"),
        (None, "unknown"),
        ("UNKNOWN (run npm install)", "unknown"),
        ("See LICENSE file", "other"),
    ],
)
def test_get_license_category(raw, category):
    assert get_license_category(raw) == category


def test_problematic_reasons_cover_every_problematic_license():
    assert set(PROBLEMATIC_REASONS) == set(PROBLEMATIC_LICENSES)
    assert problematic_reason("BSL-1.0").startswith("Business Source License")
    assert problematic_reason("Not-In-Table") == "License has usage restrictions"


def test_is_permissive_normalizes_input():
    assert is_permissive("MIT License")
    assert is_permissive("Apache 2.0")
    assert not is_permissive("GPL-3.0")
