"""
Deployment planning — pure functions, no database.

Run:
    pytest tests/test_planner.py -v
"""

from types import SimpleNamespace

from core.base import ChangeKind
from core.versions import VersionRef
from modules.deployments.compliance import Requirement
from modules.deployments.planner import classify_change, plan_deployment


def installed(software_id, version, ptf=None):
    return SimpleNamespace(
        software_id=software_id, current_version=version, current_ptf_level=ptf, rolled_back=False,
    )


class TestPlanDeployment:

    def test_partitions_requirements(self):
        requirements = [
            Requirement(1, "V5R6M0", "UI12345", software_name="CICS"),
            Requirement(2, "13.1", software_name="DB2"),
            Requirement(3, "9.3", software_name="MQ"),
        ]
        rows = [installed(1, "V5R5M0"), installed(2, "13.1"), installed(9, "1.0")]

        plan = plan_deployment(rows, requirements)

        assert [c.software_id for c in plan.to_install] == [3]
        assert [c.software_id for c in plan.to_upgrade] == [1]
        assert [c.software_id for c in plan.unchanged] == [2]
        assert [c.software_id for c in plan.to_remove] == [9]
        assert plan.pending_changes == 2

    def test_upgrade_carries_both_refs(self):
        plan = plan_deployment([installed(1, "V5R5M0")], [Requirement(1, "V5R6M0", "UI1")])
        change = plan.to_upgrade[0]
        assert change.current == VersionRef("V5R5M0", None)
        assert change.target == VersionRef("V5R6M0", "UI1")

    def test_newer_install_is_left_alone(self):
        plan = plan_deployment([installed(2, "13.2")], [Requirement(2, "13.1")])
        assert plan.to_upgrade == []
        assert [c.software_id for c in plan.unchanged] == [2]

    def test_lower_ptf_is_an_upgrade(self):
        plan = plan_deployment([installed(2, "13.1", "PH1")], [Requirement(2, "13.1", "PH2")])
        assert len(plan.to_upgrade) == 1

    def test_empty_lpar(self):
        plan = plan_deployment([], [Requirement(1, "1.0")])
        assert len(plan.to_install) == 1
        assert plan.to_remove == []


class TestClassifyChange:

    def test_kinds(self):
        target = VersionRef("2.0")
        assert classify_change(None, target) == ChangeKind.INSTALL
        assert classify_change(VersionRef("1.9"), target) == ChangeKind.UPGRADE
        assert classify_change(VersionRef("2.1"), target) == ChangeKind.DOWNGRADE
        assert classify_change(VersionRef("2.0.0"), target) == ChangeKind.NO_CHANGE
