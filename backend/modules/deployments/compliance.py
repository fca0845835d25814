"""
Compliance evaluation of an LPAR's installed software against a package.

Pure functions: callers load the rows, these decide. Installed rows are
anything with ``software_id``, ``current_version``, ``current_ptf_level``
and ``rolled_back`` (LparSoftware rows in practice).

Two separate measures come out of an evaluation:

    status          per item, the worst one decides the LPAR's standing
    coverage_score  0..100, share of package software present on the LPAR
                    regardless of version
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from core.base import ComplianceStatus
from core.versions import VersionRef, same_ptf


@dataclass(frozen=True)
class Requirement:
    """A package item resolved to the version/PTF it requires."""
    software_id: int
    version: str
    ptf_level: Optional[str] = None
    required: bool = True
    software_name: Optional[str] = None
    item_id: Optional[int] = None

    @property
    def ref(self) -> VersionRef:
        return VersionRef(self.version, self.ptf_level or None)


def requirement_from_item(item) -> Requirement:
    """Build a Requirement from a PackageItem with its version loaded."""
    version = item.software_version
    software = item.software
    return Requirement(
        software_id=item.software_id,
        version=version.version if version is not None else "",
        ptf_level=version.ptf_level if version is not None else None,
        required=item.required if item.required is not None else True,
        software_name=software.name if software is not None else None,
        item_id=item.id,
    )


@dataclass
class ItemCompliance:
    software_id: int
    software_name: Optional[str]
    status: ComplianceStatus
    required_version: str
    required_ptf_level: Optional[str]
    installed_version: Optional[str] = None
    installed_ptf_level: Optional[str] = None


@dataclass
class ComplianceResult:
    items: List[ItemCompliance] = field(default_factory=list)
    coverage_score: int = 100

    @property
    def counts(self) -> Dict[str, int]:
        tally = Counter(row.status for row in self.items)
        return {status.value: tally.get(status, 0) for status in ComplianceStatus}

    @property
    def worst_status(self) -> ComplianceStatus:
        return worst_status(row.status for row in self.items)

    @property
    def compliant(self) -> bool:
        return self.worst_status == ComplianceStatus.COMPLIANT


def index_installed(installed: Iterable) -> Dict[int, object]:
    return {row.software_id: row for row in installed or ()}


def classify(row, requirement: Requirement) -> ComplianceStatus:
    """Status of one requirement given the matching installed row (or None)."""
    if row is None:
        return ComplianceStatus.MISSING
    if row.rolled_back:
        return ComplianceStatus.ROLLED_BACK
    if row.current_version != requirement.version:
        return ComplianceStatus.VERSION_MISMATCH
    if not same_ptf(row.current_ptf_level, requirement.ptf_level):
        return ComplianceStatus.PTF_MISMATCH
    return ComplianceStatus.COMPLIANT


def worst_status(statuses: Iterable[ComplianceStatus]) -> ComplianceStatus:
    """Most severe status (lowest priority number); COMPLIANT when empty."""
    return min(statuses, key=lambda s: s.priority, default=ComplianceStatus.COMPLIANT)


def calculate_compatibility_score(installed: Iterable, requirements: List[Requirement]) -> int:
    """Percentage of package software present on the LPAR, rounded half up."""
    if not requirements:
        return 100
    present = index_installed(installed)
    hits = sum(1 for req in requirements if req.software_id in present)
    return int(hits * 100 / len(requirements) + 0.5)


def evaluate_compliance(installed: Iterable, requirements: List[Requirement]) -> ComplianceResult:
    """
    Classify every requirement against the installed rows.

    Software absent from the LPAR is reported MISSING only for required
    items; optional items that are not installed are left out.
    """
    installed = list(installed or ())
    by_software = index_installed(installed)
    rows = []
    for req in requirements:
        row = by_software.get(req.software_id)
        if row is None and not req.required:
            continue
        rows.append(ItemCompliance(
            software_id=req.software_id,
            software_name=req.software_name,
            status=classify(row, req),
            required_version=req.version,
            required_ptf_level=req.ptf_level,
            installed_version=row.current_version if row is not None else None,
            installed_ptf_level=row.current_ptf_level if row is not None else None,
        ))
    return ComplianceResult(
        items=rows,
        coverage_score=calculate_compatibility_score(installed, requirements),
    )


def customer_package_subset(requirements: Iterable[Requirement], software_ids: Iterable[int]) -> List[Requirement]:
    """Only the requirements for software the customer actually receives."""
    wanted = set(software_ids)
    return [req for req in requirements if req.software_id in wanted]
