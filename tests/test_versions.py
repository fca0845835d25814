"""
Version and PTF ordering — pure functions, no database.

Run:
    pytest tests/test_versions.py -v
"""

import pytest

from core.versions import (
    VersionRef,
    compare_ptf_levels,
    compare_software_versions,
    compare_versions,
    format_software_version,
    is_version_compatible,
    parse_vendor_designation,
    same_ptf,
    version_tokens,
)


class TestVersionTokens:

    def test_vrm_designation_decomposes_like_dotted(self):
        assert version_tokens("V5R6M0") == [5, 6, 0]
        assert version_tokens("5.6.0") == [5, 6, 0]

    def test_non_numeric_fragments_count_as_zero(self):
        assert version_tokens("2.x.1") == [2, 0, 1]

    def test_empty(self):
        assert version_tokens("") == []


class TestCompareVersions:

    @pytest.mark.parametrize("a, b, expected", [
        ("2.4.0", "2.3.9", 1),
        ("2.4", "2.4.0", 0),
        ("2.10", "2.9", 1),
        ("V5R5M0", "V5R6M0", -1),
        ("V5R6M0", "5.6.0", 0),
        ("13.1", "12.1", 1),
        ("V6R1M0", "V5R9M0", 1),
    ])
    def test_ordering(self, a, b, expected):
        assert compare_versions(a, b) == expected

    @pytest.mark.parametrize("v", ["V5R6M0", "2.4.0", "13", "", "1.0.0.0"])
    def test_reflexive(self, v):
        assert compare_versions(v, v) == 0

    def test_antisymmetric(self):
        assert compare_versions("1.2.3", "1.3") == -compare_versions("1.3", "1.2.3")

    def test_transitive(self):
        chain = ["V5R5M0", "V5R6M0", "V6R1M0"]
        assert compare_versions(chain[0], chain[1]) == -1
        assert compare_versions(chain[1], chain[2]) == -1
        assert compare_versions(chain[0], chain[2]) == -1


class TestComparePtfLevels:

    def test_missing_sorts_first(self):
        assert compare_ptf_levels(None, "UI100") == -1
        assert compare_ptf_levels("UI100", "") == 1
        assert compare_ptf_levels(None, "") == 0

    def test_numeric_part_decides(self):
        assert compare_ptf_levels("UI12345", "PH12346") == -1
        assert compare_ptf_levels("PTF900", "PTF0900") == 0


class TestCompareSoftwareVersions:

    def test_version_before_ptf(self):
        assert compare_software_versions(VersionRef("2.5", None), VersionRef("2.4", "PTF999")) == 1

    def test_ptf_breaks_ties(self):
        assert compare_software_versions(VersionRef("2.4", "PTF2"), VersionRef("2.4", "PTF10")) == -1


class TestCompatibility:

    def test_lenient_accepts_newer(self):
        assert is_version_compatible(VersionRef("V5R6M0"), VersionRef("V5R5M0"))
        assert not is_version_compatible(VersionRef("V5R4M0"), VersionRef("V5R5M0"))

    def test_strict_requires_exact_match(self):
        assert not is_version_compatible(VersionRef("V5R6M0"), VersionRef("V5R5M0"), strict=True)
        assert is_version_compatible(VersionRef("13.1", "PH1"), VersionRef("13.1", "PH1"), strict=True)
        assert not is_version_compatible(VersionRef("13.1", "PH2"), VersionRef("13.1", "PH1"), strict=True)


class TestDesignations:

    @pytest.mark.parametrize("designation, expected", [
        ("V2R4M0-PTF12345", VersionRef("V2R4M0", "PTF12345")),
        ("2.4.0 (PTF 12345)", VersionRef("2.4.0", "12345")),
        ("V2R4M0 PTF12345", VersionRef("V2R4M0", "PTF12345")),
        ("2.4.0-SP1", VersionRef("2.4.0", "SP1")),
        ("14.5", VersionRef("14.5", None)),
    ])
    def test_parse(self, designation, expected):
        assert parse_vendor_designation(designation) == expected

    def test_format(self):
        assert format_software_version(VersionRef("V5R6M0", "UI12345")) == "V5R6M0 (UI12345)"
        assert format_software_version(VersionRef("13.1")) == "13.1"
        assert str(VersionRef("13.1", "")) == "13.1"

    def test_same_ptf_treats_blank_as_none(self):
        assert same_ptf(None, "")
        assert not same_ptf("UI1", None)
