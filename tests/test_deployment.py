"""
Package deployment — planning, previews, status and the transactional
apply path, exercised against an in-memory database.

Run:
    pytest tests/test_deployment.py -v
"""

import pytest

from core.base import AuditAction, ChangeKind, EntityType
from core.errors import NotFoundError, ValidationError
from helpers import (
    audit_entries, make_customer, make_lpar, make_package, make_software, make_vendor,
)
from modules.deployments import services as deployments
from modules.lpars import services as lpars
from modules.lpars.models import Lpar, LparSoftware
from modules.packages import services as packages


@pytest.fixture()
def scenario(db):
    """Package P = {CICS V5R6M0/PTF12345, DB2 V13R1M0/PTF54321}; L has CICS V5R5M0 only."""
    ibm = make_vendor(db)
    cics, cics_v = make_software(
        db, ibm, "CICS Transaction Server",
        versions=[("V5R5M0", "PTF11111"), ("V5R6M0", "PTF12345")], current="V5R6M0",
    )
    db2, db2_v = make_software(db, ibm, "DB2 for z/OS", versions=[("V13R1M0", "PTF54321")], current="V13R1M0")
    customer = make_customer(db)
    lpar = make_lpar(db, customer, code="LPAR1", name="LPAR one")
    lpars.install_software(db, lpar.id, cics_v["V5R5M0"].id)
    package = make_package(db, "P", "1.0", [(cics, cics_v["V5R6M0"]), (db2, db2_v["V13R1M0"])])
    return lpar, package, cics, db2


class TestEndToEnd:

    def test_plan_then_apply(self, db, scenario):
        lpar, package, cics, db2 = scenario

        plan = deployments.plan_for_lpar(db, lpar.id, package.id)
        assert [c.software_id for c in plan.to_upgrade] == [cics.id]
        assert [c.software_id for c in plan.to_install] == [db2.id]
        assert plan.to_remove == []

        report = deployments.apply_deployment(db, [lpar.id], package.id, user_id="ops")
        assert report.lpar_ids == [lpar.id]
        assert report.lpars[0].installed == [db2.id]
        assert report.lpars[0].updated == [cics.id]

        cics_row = lpars.get_installation(db, lpar.id, cics.id)
        assert (cics_row.current_version, cics_row.current_ptf_level) == ("V5R6M0", "PTF12345")
        assert (cics_row.previous_version, cics_row.previous_ptf_level) == ("V5R5M0", "PTF11111")

        db2_row = lpars.get_installation(db, lpar.id, db2.id)
        assert (db2_row.current_version, db2_row.current_ptf_level) == ("V13R1M0", "PTF54321")
        assert db2_row.previous_version is None

        assert db.get(Lpar, lpar.id).current_package_id == package.id

        deploys = audit_entries(db, EntityType.LPAR.value, AuditAction.DEPLOY.value, lpar.id)
        assert len(deploys) == 1
        assert deploys[0].user_id == "ops"
        assert deploys[0].changes["package_id"] == package.id

    def test_compliant_after_deploy(self, db, scenario):
        lpar, package, _, _ = scenario
        before = deployments.lpar_compliance(db, lpar.id, package.id)
        assert before["status"] == "missing"
        assert before["coverage_score"] == 50

        deployments.apply_deployment(db, [lpar.id], package.id)

        after = deployments.lpar_compliance(db, lpar.id)
        assert after["package_id"] == package.id
        assert after["compliant"] is True
        assert after["coverage_score"] == 100


class TestApplyDeployment:

    def test_redeploy_shifts_target_into_previous(self, db, scenario):
        lpar, package, cics, db2 = scenario
        deployments.apply_deployment(db, [lpar.id], package.id)
        report = deployments.apply_deployment(db, [lpar.id], package.id)

        assert report.lpars[0].updated == []
        assert len(report.lpars[0].unchanged) == 2
        row = lpars.get_installation(db, lpar.id, cics.id)
        assert (row.previous_version, row.previous_ptf_level) == ("V5R6M0", "PTF12345")
        assert (row.current_version, row.current_ptf_level) == ("V5R6M0", "PTF12345")
        db2_row = lpars.get_installation(db, lpar.id, db2.id)
        assert (db2_row.previous_version, db2_row.previous_ptf_level) == ("V13R1M0", "PTF54321")

    def test_clears_rollback_markers(self, db, scenario):
        lpar, package, cics, _ = scenario
        deployments.apply_deployment(db, [lpar.id], package.id)
        lpars.rollback_installation(db, lpar.id, cics.id, None, "Broke the nightly batch window")

        deployments.apply_deployment(db, [lpar.id], package.id)

        row = lpars.get_installation(db, lpar.id, cics.id)
        assert row.rolled_back is False
        assert row.rolled_back_at is None
        assert row.rollback_reason is None
        assert row.current_version == "V5R6M0"

    def test_multiple_lpars_one_audit_entry_each(self, db, scenario):
        lpar, package, _, _ = scenario
        other = make_lpar(db, lpar.customer, code="LPAR2", name="LPAR two")

        deployments.apply_deployment(db, [lpar.id, other.id, lpar.id], package.id)

        for lpar_id in (lpar.id, other.id):
            assert len(audit_entries(db, "lpar", "deploy", lpar_id)) == 1
        assert db.query(LparSoftware).filter(LparSoftware.lpar_id == other.id).count() == 2

    def test_empty_selection(self, db, scenario):
        _, package, _, _ = scenario
        with pytest.raises(ValidationError) as exc:
            deployments.apply_deployment(db, [], package.id)
        assert exc.value.field == "lpar_ids"

    def test_unknown_lpar_writes_nothing(self, db, scenario):
        lpar, package, _, _ = scenario
        with pytest.raises(NotFoundError):
            deployments.apply_deployment(db, [lpar.id, 9999], package.id)
        assert db.get(Lpar, lpar.id).current_package_id is None
        assert audit_entries(db, action="deploy") == []

    def test_inactive_package_is_rejected(self, db, scenario):
        lpar, package, _, _ = scenario
        packages.deactivate_package(db, package.id)
        with pytest.raises(ValidationError):
            deployments.apply_deployment(db, [lpar.id], package.id)

    def test_failure_rolls_back_every_lpar(self, db, scenario, monkeypatch):
        lpar, package, cics, _ = scenario
        other = make_lpar(db, lpar.customer, code="LPAR2", name="LPAR two")
        calls = []

        def failing_audit(*args, **kwargs):
            calls.append(args)
            if len(calls) == 2:
                raise RuntimeError("audit sink unavailable")

        monkeypatch.setattr(deployments, "log_audit", failing_audit)
        with pytest.raises(RuntimeError):
            deployments.apply_deployment(db, [lpar.id, other.id], package.id)

        db.expire_all()
        assert db.get(Lpar, lpar.id).current_package_id is None
        assert lpars.get_installation(db, lpar.id, cics.id).current_version == "V5R5M0"
        assert db.query(LparSoftware).filter(LparSoftware.lpar_id == other.id).count() == 0


class TestReadPaths:

    def test_preview_changes(self, db, scenario):
        lpar, package, cics, db2 = scenario
        preview = deployments.preview_deployment(db, package.id, [lpar.id])
        assert len(preview) == 1
        changes = {row["software_id"]: row for row in preview[0]["changes"]}
        assert changes[cics.id]["change"] == ChangeKind.UPGRADE.value
        assert changes[cics.id]["current_version"] == "V5R5M0 (PTF11111)"
        assert changes[db2.id]["change"] == ChangeKind.INSTALL.value
        assert changes[db2.id]["current_version"] is None

    def test_preview_is_read_only(self, db, scenario):
        lpar, package, _, _ = scenario
        deployments.preview_deployment(db, package.id, [lpar.id])
        assert db.query(LparSoftware).filter(LparSoftware.lpar_id == lpar.id).count() == 1

    def test_deployment_status(self, db, scenario):
        lpar, package, _, _ = scenario
        idle = make_lpar(db, lpar.customer, code="IDLE", name="Idle LPAR")

        rows = {r["lpar_id"]: r for r in deployments.deployment_status(db, package.id)}
        assert rows[lpar.id]["status"] == "needs_update"
        assert rows[lpar.id]["changes_needed"] == 1
        assert rows[lpar.id]["new_installs"] == 1
        assert rows[idle.id]["new_installs"] == 2

        deployments.apply_deployment(db, [lpar.id], package.id)
        rows = {r["lpar_id"]: r for r in deployments.deployment_status(db, package.id)}
        assert rows[lpar.id]["status"] == "compliant"

    def test_status_unknown_when_versions_match_without_assignment(self, db, scenario):
        lpar, package, _, _ = scenario
        deployments.apply_deployment(db, [lpar.id], package.id)
        lpars.update_lpar(db, lpar.id, {"current_package_id": None})

        rows = {r["lpar_id"]: r for r in deployments.deployment_status(db, package.id)}
        assert rows[lpar.id]["status"] == "unknown"
        assert rows[lpar.id]["compliance_status"] == "compliant"

    def test_compliance_without_package(self, db, scenario):
        lpar, _, _, _ = scenario
        report = deployments.lpar_compliance(db, lpar.id)
        assert report["package_id"] is None
        assert report["status"] is None
        assert report["items"] == []

    def test_plan_for_software_subset(self, db, scenario):
        lpar, package, _, db2 = scenario
        plan = deployments.plan_for_lpar(db, lpar.id, package.id, software_ids=[db2.id])
        assert [c.software_id for c in plan.to_install] == [db2.id]
        assert plan.to_upgrade == []

    def test_compliance_provider_summary(self, db, scenario):
        lpar, package, _, _ = scenario
        provider = deployments.ComplianceService()
        assert provider.lpar_summary(db, lpar.id) is None

        deployments.apply_deployment(db, [lpar.id], package.id)
        summary = provider.lpar_summary(db, lpar.id)
        assert summary == {
            "package_id": package.id,
            "status": "compliant",
            "compliant": True,
            "coverage_score": 100,
        }
