"""
Deployment planning: what applying a package to an LPAR would change.

plan_deployment() partitions the package's requirements into install /
upgrade / unchanged and lists installed software the package does not
mention as candidates for removal. Nothing is removed by a deployment;
to_remove is informational.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from core.base import ChangeKind
from core.versions import VersionRef, compare_software_versions
from modules.deployments.compliance import Requirement, index_installed


@dataclass
class PlannedChange:
    software_id: int
    software_name: Optional[str] = None
    current: Optional[VersionRef] = None
    target: Optional[VersionRef] = None


@dataclass
class DeploymentPlan:
    to_install: List[PlannedChange] = field(default_factory=list)
    to_upgrade: List[PlannedChange] = field(default_factory=list)
    to_remove: List[PlannedChange] = field(default_factory=list)
    unchanged: List[PlannedChange] = field(default_factory=list)

    @property
    def pending_changes(self) -> int:
        return len(self.to_install) + len(self.to_upgrade)


def _installed_ref(row) -> VersionRef:
    return VersionRef(row.current_version, row.current_ptf_level or None)


def plan_deployment(installed: Iterable, requirements: List[Requirement]) -> DeploymentPlan:
    installed = list(installed or ())
    by_software = index_installed(installed)
    plan = DeploymentPlan()

    for req in requirements:
        row = by_software.get(req.software_id)
        if row is None:
            plan.to_install.append(PlannedChange(req.software_id, req.software_name, None, req.ref))
            continue
        change = PlannedChange(req.software_id, req.software_name, _installed_ref(row), req.ref)
        if compare_software_versions(change.current, req.ref) < 0:
            plan.to_upgrade.append(change)
        else:
            plan.unchanged.append(change)

    targeted = {req.software_id for req in requirements}
    for row in installed:
        if row.software_id not in targeted:
            plan.to_remove.append(PlannedChange(row.software_id, None, _installed_ref(row), None))
    return plan


def classify_change(current: Optional[VersionRef], target: VersionRef) -> ChangeKind:
    if current is None:
        return ChangeKind.INSTALL
    comparison = compare_software_versions(current, target)
    if comparison < 0:
        return ChangeKind.UPGRADE
    if comparison > 0:
        return ChangeKind.DOWNGRADE
    return ChangeKind.NO_CHANGE
