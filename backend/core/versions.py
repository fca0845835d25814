"""
Version and PTF-level parsing and ordering.

Handles both dotted versions ("2.4.0") and mainframe VRM designations
("V5R6M0"): both decompose into the same integer sequence, so
"V5R6M0" orders like "5.6.0".

Usage:
    from core.versions import VersionRef, compare_versions, is_version_compatible

    compare_versions("V5R6M0", "V5R5M0")                       # 1
    is_version_compatible(VersionRef("V5R6M0"), VersionRef("V5R5M0"))  # True
"""

import re
from dataclasses import dataclass
from typing import Optional

_VERSION_SPLIT = re.compile(r"[.VvRrMm]")
_LEADING_INT = re.compile(r"^\s*[+-]?\d+")
_NON_DIGITS = re.compile(r"\D")

# Ordered; first match wins.
_DESIGNATION_PATTERNS = [
    re.compile(r"^([VvRrMm0-9.]+)[-_]+(PTF[0-9]+)$", re.IGNORECASE),   # V2R4M0-PTF12345
    re.compile(r"^([0-9.]+)\s*\(PTF\s*([0-9]+)\)$", re.IGNORECASE),   # 2.4.0 (PTF 12345)
    re.compile(r"^([VvRrMm0-9.]+)\s+(PTF[0-9]+)$", re.IGNORECASE),    # V2R4M0 PTF12345
    re.compile(r"^([0-9.]+)[-_]+(SP[0-9]+)$", re.IGNORECASE),         # 2.4.0-SP1
]


@dataclass(frozen=True)
class VersionRef:
    """A version string plus optional PTF/patch level."""
    version: str
    ptf_level: Optional[str] = None

    def __str__(self) -> str:
        return format_software_version(self)


def _to_int(fragment: str) -> int:
    match = _LEADING_INT.match(fragment)
    return int(match.group()) if match else 0


def version_tokens(version: str) -> list[int]:
    """Integer tokens of a version string: "V5R6M0" -> [5, 6, 0]."""
    return [_to_int(p) for p in _VERSION_SPLIT.split(version or "") if p]


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1; missing trailing tokens count as 0."""
    parts_a = version_tokens(a)
    parts_b = version_tokens(b)
    width = max(len(parts_a), len(parts_b))
    parts_a += [0] * (width - len(parts_a))
    parts_b += [0] * (width - len(parts_b))
    for left, right in zip(parts_a, parts_b):
        if left != right:
            return _sign(left - right)
    return 0


def compare_ptf_levels(a: Optional[str], b: Optional[str]) -> int:
    """Return -1, 0 or 1. A missing PTF sorts before any PTF."""
    if not a and not b:
        return 0
    if not a:
        return -1
    if not b:
        return 1
    num_a = int(_NON_DIGITS.sub("", a) or 0)
    num_b = int(_NON_DIGITS.sub("", b) or 0)
    return _sign(num_a - num_b)


def compare_software_versions(a: VersionRef, b: VersionRef) -> int:
    """Version first, PTF level as tiebreaker."""
    result = compare_versions(a.version, b.version)
    if result != 0:
        return result
    return compare_ptf_levels(a.ptf_level, b.ptf_level)


def is_version_compatible(installed: VersionRef, required: VersionRef, strict: bool = False) -> bool:
    """Lenient: installed >= required. Strict: exact version and PTF match."""
    comparison = compare_software_versions(installed, required)
    if strict:
        return comparison == 0
    return comparison >= 0


def parse_vendor_designation(designation: str) -> VersionRef:
    """Split a vendor designation into version and PTF level.

    "V2R4M0-PTF12345"   -> VersionRef("V2R4M0", "PTF12345")
    "2.4.0 (PTF 12345)" -> VersionRef("2.4.0", "12345")
    "14.5"              -> VersionRef("14.5", None)
    """
    for pattern in _DESIGNATION_PATTERNS:
        match = pattern.match(designation)
        if match:
            return VersionRef(match.group(1).strip(), match.group(2).strip())
    return VersionRef(designation.strip(), None)


def format_software_version(ref: VersionRef) -> str:
    if ref.ptf_level:
        return f"{ref.version} ({ref.ptf_level})"
    return ref.version


def same_ptf(a: Optional[str], b: Optional[str]) -> bool:
    """PTF equality where None and "" are the same thing."""
    return (a or None) == (b or None)
