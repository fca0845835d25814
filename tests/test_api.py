"""
HTTP surface — every module's routes through FastAPI's TestClient.

Run:
    pytest tests/test_api.py -v --tb=short
"""

import pytest

ACTOR = {"X-User-Id": "ops-42"}


def _post(client, path, body, expected=201):
    r = client.post(f"/api{path}", json=body, headers=ACTOR)
    assert r.status_code == expected, f"POST {path}: {r.status_code} {r.text}"
    return r.json()


@pytest.fixture()
def catalog(client):
    """IBM / CICS + DB2 / ACME / PROD1 / package ZBASE 2024.1 built over HTTP."""
    vendor = _post(client, "/vendors", {"name": "IBM Corporation", "code": "ibm", "website": "https://ibm.com"})
    cics = _post(client, "/software", {"name": "CICS Transaction Server", "vendor_id": vendor["id"]})
    cics_old = _post(client, f"/software/{cics['id']}/versions", {"version": "V5R5M0"})
    cics_new = _post(
        client, f"/software/{cics['id']}/versions",
        {"version": "V5R6M0-PTF12345", "is_current": True, "release_date": "2023-06-01"},
    )
    db2 = _post(client, "/software", {"name": "DB2 for z/OS", "vendor_id": vendor["id"]})
    db2_v = _post(client, f"/software/{db2['id']}/versions", {"version": "13.1", "ptf_level": "PH54321"})
    customer = _post(client, "/customers", {"name": "Acme Bank", "code": "ACME"})
    lpar = _post(client, "/lpars", {"name": "Production 1", "code": "PROD1", "customer_id": customer["id"]})
    package = _post(client, "/packages", {
        "name": "z/OS base stack",
        "code": "ZBASE",
        "version": "2024.1",
        "items": [
            {"software_id": cics["id"], "software_version_id": cics_new["id"]},
            {"software_id": db2["id"], "software_version_id": db2_v["id"]},
        ],
    })
    return {
        "vendor": vendor, "cics": cics, "cics_old": cics_old, "cics_new": cics_new,
        "db2": db2, "db2_v": db2_v, "customer": customer, "lpar": lpar, "package": package,
    }


class TestSystem:

    def test_health(self, client):
        r = client.get("/api/health")
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "ok"
        assert body["database_ok"] is True
        assert {"deployments", "lpars", "packages"} <= set(body["modules"])

    def test_v1_prefix(self, client):
        assert client.get("/api/v1/health").status_code == 200


class TestCatalog:

    def test_vendor_code_is_uppercased(self, catalog):
        assert catalog["vendor"]["code"] == "IBM"

    def test_duplicate_vendor_code(self, client, catalog):
        r = client.post("/api/vendors", json={"name": "Another IBM", "code": "IBM"})
        assert r.status_code == 409
        body = r.json()
        assert body["error"] == "duplicate"
        assert body["field"] == "code"
        assert body["value"] == "IBM"

    def test_bad_vendor_code_is_rejected(self, client):
        r = client.post("/api/vendors", json={"name": "Bad Code", "code": "has space"})
        assert r.status_code == 422

    def test_designation_is_split(self, catalog):
        assert catalog["cics_new"]["version"] == "V5R6M0"
        assert catalog["cics_new"]["ptf_level"] == "PTF12345"
        assert catalog["cics_new"]["is_current"] is True

    def test_software_detail_has_versions(self, client, catalog):
        body = client.get(f"/api/software/{catalog['cics']['id']}").json()
        assert body["current_version"]["id"] == catalog["cics_new"]["id"]
        assert len(body["versions"]) == 2

    def test_set_current_version(self, client, catalog):
        r = client.put(
            f"/api/software/{catalog['cics']['id']}/current-version",
            json={"version_id": catalog["cics_old"]["id"]},
        )
        assert r.status_code == 200
        assert r.json()["current_version_id"] == catalog["cics_old"]["id"]

    def test_version_of_other_software_cannot_be_current(self, client, catalog):
        r = client.put(
            f"/api/software/{catalog['cics']['id']}/current-version",
            json={"version_id": catalog["db2_v"]["id"]},
        )
        assert r.status_code == 400
        assert r.json()["field"] == "version_id"

    def test_end_of_support_before_release(self, client, catalog):
        r = client.post(
            f"/api/software/{catalog['db2']['id']}/versions",
            json={"version": "13.2", "release_date": "2025-01-01", "end_of_support": "2024-01-01"},
        )
        assert r.status_code == 422

    def test_patch_rejects_null_for_required_field(self, client, catalog):
        r = client.patch(f"/api/vendors/{catalog['vendor']['id']}", json={"name": None})
        assert r.status_code == 422

    def test_not_found_is_generic(self, client):
        r = client.get("/api/vendors/9999")
        assert r.status_code == 404
        assert r.json() == {"detail": "Not found", "error": "not_found", "entity": "Vendor"}

    def test_list_pagination(self, client, catalog):
        body = client.get("/api/software", params={"limit": 1}).json()
        assert body["total"] == 2
        assert body["limit"] == 1
        assert len(body["items"]) == 1

    def test_list_search(self, client, catalog):
        body = client.get("/api/software", params={"q": "db2"}).json()
        assert [s["name"] for s in body["items"]] == ["DB2 for z/OS"]

    def test_delete_requires_deactivation(self, client, catalog):
        r = client.delete(f"/api/customers/{catalog['customer']['id']}")
        assert r.status_code == 400
        assert r.json()["error"] == "validation"


class TestPackages:

    def test_detail_lists_items_in_order(self, client, catalog):
        body = client.get(f"/api/packages/{catalog['package']['id']}").json()
        assert [i["software"]["name"] for i in body["items"]] == ["CICS Transaction Server", "DB2 for z/OS"]
        assert body["items"][0]["software_version"]["ptf_level"] == "PTF12345"

    def test_patch_items(self, client, catalog):
        package = catalog["package"]
        db2_item = package["items"][1]
        r = client.patch(f"/api/packages/{package['id']}", json={
            "description": "CICS only",
            "items": [{**db2_item, "action": "delete"}],
        })
        assert r.status_code == 200, r.text
        assert [i["software_id"] for i in r.json()["items"]] == [catalog["cics"]["id"]]

    def test_add_existing_software_again(self, client, catalog):
        r = client.post(f"/api/packages/{catalog['package']['id']}/items", json={
            "software_id": catalog["cics"]["id"],
            "software_version_id": catalog["cics_old"]["id"],
        })
        assert r.status_code == 409


class TestLparsAndDeployments:

    def test_install_then_compliance(self, client, catalog):
        lpar_id = catalog["lpar"]["id"]
        _post(client, f"/lpars/{lpar_id}/software", {"software_version_id": catalog["cics_old"]["id"]})

        r = client.get(f"/api/lpars/{lpar_id}/compliance", params={"package_id": catalog["package"]["id"]})
        body = r.json()
        assert body["status"] == "missing"
        assert body["coverage_score"] == 50
        assert {i["status"] for i in body["items"]} == {"version_mismatch", "missing"}

    def test_plan(self, client, catalog):
        lpar_id = catalog["lpar"]["id"]
        _post(client, f"/lpars/{lpar_id}/software", {"software_version_id": catalog["cics_old"]["id"]})

        body = client.get(f"/api/lpars/{lpar_id}/plan", params={"package_id": catalog["package"]["id"]}).json()
        assert [c["software_id"] for c in body["to_upgrade"]] == [catalog["cics"]["id"]]
        assert body["to_upgrade"][0]["target"] == {"version": "V5R6M0", "ptf_level": "PTF12345"}
        assert [c["software_id"] for c in body["to_install"]] == [catalog["db2"]["id"]]
        assert body["pending_changes"] == 2

    def test_preview_and_deploy(self, client, catalog):
        lpar_id = catalog["lpar"]["id"]
        package_id = catalog["package"]["id"]

        preview = _post(client, f"/packages/{package_id}/preview", {"lpar_ids": [lpar_id]}, expected=200)
        assert {c["change"] for c in preview[0]["changes"]} == {"install"}

        report = _post(client, f"/packages/{package_id}/deploy", {"lpar_ids": [lpar_id]}, expected=200)
        assert report["package_code"] == "ZBASE"
        assert len(report["lpars"][0]["installed"]) == 2

        detail = client.get(f"/api/lpars/{lpar_id}").json()
        assert detail["current_package_id"] == package_id
        assert detail["compliance"]["compliant"] is True
        assert len(detail["installations"]) == 2

        status = client.get(f"/api/packages/{package_id}/deployment-status").json()
        assert status[0]["status"] == "compliant"

    def test_deploy_needs_lpars(self, client, catalog):
        r = client.post(f"/api/packages/{catalog['package']['id']}/deploy", json={"lpar_ids": []})
        assert r.status_code == 422

    def test_rollback(self, client, catalog):
        lpar_id = catalog["lpar"]["id"]
        cics_id = catalog["cics"]["id"]
        _post(client, f"/lpars/{lpar_id}/software", {"software_version_id": catalog["cics_old"]["id"]})
        _post(client, f"/packages/{catalog['package']['id']}/deploy", {"lpar_ids": [lpar_id]}, expected=200)

        row = _post(
            client, f"/lpars/{lpar_id}/software/{cics_id}/rollback",
            {"reason": "  Regression in transaction routing  "}, expected=200,
        )
        assert row["current_version"] == "V5R5M0"
        assert row["previous_version"] == "V5R6M0"
        assert row["rolled_back"] is True
        assert row["rollback_reason"] == "Regression in transaction routing"

    def test_rollback_reason_too_short(self, client, catalog):
        r = client.post(
            f"/api/lpars/{catalog['lpar']['id']}/software/{catalog['cics']['id']}/rollback",
            json={"reason": "oops"},
        )
        assert r.status_code == 422

    def test_rollback_without_history(self, client, catalog):
        lpar_id = catalog["lpar"]["id"]
        _post(client, f"/lpars/{lpar_id}/software", {"software_version_id": catalog["cics_old"]["id"]})
        r = client.post(
            f"/api/lpars/{lpar_id}/software/{catalog['cics']['id']}/rollback",
            json={"reason": "Nothing recorded before this"},
        )
        assert r.status_code == 400
        assert r.json()["field"] == "target_version_id"


class TestClone:

    def test_clone_package(self, client, catalog):
        body = _post(client, "/clone", {
            "entity_type": "package",
            "source_id": catalog["package"]["id"],
            "data": {"name": "z/OS base stack", "code": "ZBASE", "version": "2024.2"},
        })
        assert body["entity_type"] == "package"
        assert body["id"] != catalog["package"]["id"]
        items = client.get(f"/api/packages/{body['id']}/items").json()
        assert len(items) == 2

    def test_clone_duplicate(self, client, catalog):
        r = client.post("/api/clone", json={
            "entity_type": "package",
            "source_id": catalog["package"]["id"],
            "data": {"name": "z/OS base stack", "code": "ZBASE", "version": "2024.1"},
        })
        assert r.status_code == 409

    def test_clone_data_is_validated(self, client, catalog):
        r = client.post("/api/clone", json={
            "entity_type": "lpar",
            "source_id": catalog["lpar"]["id"],
            "data": {"name": "Copy"},
        })
        assert r.status_code == 400
        assert r.json()["field"] == "code"

    def test_preview(self, client, catalog):
        r = client.get("/api/clone/preview", params={"entity_type": "vendor", "source_id": catalog["vendor"]["id"]})
        assert r.json()["preview"]["software_count"] == 2


class TestActivity:

    def test_audit_log_filters(self, client, catalog):
        body = client.get("/api/audit-logs", params={"entity_type": "package"}).json()
        assert body["total"] == 1
        assert body["items"][0]["action"] == "create"
        assert body["items"][0]["user_id"] == "ops-42"
        assert "software" in body["entity_types"]
        assert "version_update" in body["actions"]

    def test_audit_log_newest_first(self, client, catalog):
        items = client.get("/api/audit-logs", params={"limit": 100}).json()["items"]
        ids = [i["id"] for i in items]
        assert ids == sorted(ids, reverse=True)

    def test_dashboard(self, client, catalog):
        lpar_id = catalog["lpar"]["id"]
        _post(client, f"/packages/{catalog['package']['id']}/deploy", {"lpar_ids": [lpar_id]}, expected=200)

        body = client.get("/api/dashboard").json()
        assert body["counts"] == {"vendors": 1, "customers": 1, "software": 2, "packages": 1, "lpars": 1}
        assert [d["entity_id"] for d in body["recent_deployments"]] == [lpar_id]
        assert body["recent_rollbacks"] == []
