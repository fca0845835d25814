#!/usr/bin/env python3
"""
LPAR Inventory Demo — Full Data Seed (Wipe & Replace)
=====================================================
Builds a realistic mainframe inventory through the service layer, so every
row gets the same validation and audit trail as an API call.

    DATABASE_URL=sqlite:///./lpar_inventory.db python3 ops/seed_demo.py
"""

import random
import sys
from datetime import date, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "backend"))

import models  # noqa: E402,F401  (registers all tables on Base.metadata)
from core.base import Base  # noqa: E402
from core.db import SessionLocal, engine, init_db  # noqa: E402
from modules.customers import services as customers  # noqa: E402
from modules.deployments import services as deployments  # noqa: E402
from modules.lpars import services as lpars  # noqa: E402
from modules.packages import services as packages  # noqa: E402
from modules.software import services as software  # noqa: E402
from modules.vendors import services as vendors  # noqa: E402

TODAY = date.today()
ACTOR = "seed"
random.seed(42)  # reproducible

# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

VENDORS = [
    ("IBM Corporation", "IBM", "https://www.ibm.com"),
    ("Broadcom", "BROADCOM", "https://www.broadcom.com"),
    ("BMC Software", "BMC", "https://www.bmc.com"),
]

# (vendor code, name, [(version, ptf, released days ago, support left in days)])
SOFTWARE = [
    ("IBM", "CICS Transaction Server", [
        ("V5R5M0", "UI71234", 1400, -30),
        ("V5R6M0", "UI80012", 900, 60),
        ("V6R1M0", "UI91200", 200, 1500),
    ]),
    ("IBM", "DB2 for z/OS", [
        ("V12R1M0", "PH40011", 1800, 45),
        ("V13R1M0", "PH54321", 700, 1800),
    ]),
    ("IBM", "IMS", [
        ("V15R4M0", None, 800, 900),
        ("V15R5M0", "UI88001", 300, 1900),
    ]),
    ("IBM", "IBM MQ for z/OS", [
        ("9.2.0", None, 1200, 20),
        ("9.3.0", "PH60001", 500, 1400),
    ]),
    ("BROADCOM", "CA ACF2", [
        ("16.0", "SO12345", 1000, 700),
    ]),
    ("BMC", "BMC AMI Ops", [
        ("2.2", None, 900, 300),
        ("2.3", "BPN1001", 120, 1000),
    ]),
]

CUSTOMERS = [
    ("Acme Bank", "ACME", ["PROD1", "PROD2", "TEST1"]),
    ("Globex Insurance", "GLOBEX", ["GLXP", "GLXQ"]),
    ("Initech Payments", "INITECH", ["INIT01"]),
]

# (code, version, name, [(software name, version)])
PACKAGES = [
    ("ZBASE", "2024.1", "z/OS base stack 2024.1", [
        ("CICS Transaction Server", "V5R6M0"),
        ("DB2 for z/OS", "V13R1M0"),
        ("IBM MQ for z/OS", "9.3.0"),
    ]),
    ("ZBASE", "2025.1", "z/OS base stack 2025.1", [
        ("CICS Transaction Server", "V6R1M0"),
        ("DB2 for z/OS", "V13R1M0"),
        ("IBM MQ for z/OS", "9.3.0"),
        ("IMS", "V15R5M0"),
    ]),
    ("SECOPS", "1.0", "Security & operations", [
        ("CA ACF2", "16.0"),
        ("BMC AMI Ops", "2.3"),
    ]),
]


def main():
    print("=" * 60)
    print("LPAR Inventory Demo Seed — Full Wipe & Replace")
    print("=" * 60)

    print("\n[1/6] Wiping existing data...")
    Base.metadata.drop_all(bind=engine)
    init_db()
    print("  ✓ Schema recreated")

    db = SessionLocal()
    try:
        print("\n[2/6] Seeding vendors...")
        vendor_ids = {}
        for name, code, website in VENDORS:
            vendor_ids[code] = vendors.create_vendor(db, {"name": name, "code": code, "website": website}, ACTOR).id
        print(f"  ✓ {len(VENDORS)} vendors")

        print("\n[3/6] Seeding software catalog...")
        sw_ids, version_ids = {}, {}
        version_count = 0
        for vendor_code, name, versions in SOFTWARE:
            sw = software.create_software(db, {"name": name, "vendor_id": vendor_ids[vendor_code]}, ACTOR)
            sw_ids[name] = sw.id
            for i, (version, ptf, released, support_left) in enumerate(versions):
                v = software.add_version(db, sw.id, {
                    "version": version,
                    "ptf_level": ptf,
                    "release_date": TODAY - timedelta(days=released),
                    "end_of_support": TODAY + timedelta(days=support_left),
                    "is_current": i == len(versions) - 1,
                }, ACTOR)
                version_ids[(name, version)] = v.id
                version_count += 1
        print(f"  ✓ {len(SOFTWARE)} products, {version_count} versions")

        print("\n[4/6] Seeding customers & LPARs...")
        lpar_ids = []
        for name, code, lpar_codes in CUSTOMERS:
            customer = customers.create_customer(db, {"name": name, "code": code}, ACTOR)
            for lpar_code in lpar_codes:
                lpar = lpars.create_lpar(db, {
                    "name": f"{name} {lpar_code}",
                    "code": lpar_code,
                    "customer_id": customer.id,
                }, ACTOR)
                lpar_ids.append(lpar.id)
                # Every LPAR starts on the oldest release of some products
                for sw_name, versions in random.sample([(s[1], s[2]) for s in SOFTWARE], k=3):
                    lpars.install_software(db, lpar.id, version_ids[(sw_name, versions[0][0])], ACTOR)
        print(f"  ✓ {len(CUSTOMERS)} customers, {len(lpar_ids)} LPARs")

        print("\n[5/6] Seeding packages...")
        package_ids = []
        for code, version, name, entries in PACKAGES:
            items = [
                {"software_id": sw_ids[sw_name], "software_version_id": version_ids[(sw_name, v)], "required": True}
                for sw_name, v in entries
            ]
            package_ids.append(packages.create_package(
                db, {"name": name, "code": code, "version": version}, items, ACTOR,
            ).id)
        print(f"  ✓ {len(PACKAGES)} packages")

        print("\n[6/6] Deploying & rolling back...")
        deployments.apply_deployment(db, lpar_ids[:4], package_ids[0], ACTOR)
        deployments.apply_deployment(db, lpar_ids[:2], package_ids[1], ACTOR)
        lpars.rollback_installation(
            db, lpar_ids[1], sw_ids["CICS Transaction Server"], None,
            "Transaction routing regression after V6R1M0 upgrade", ACTOR,
        )
        print("  ✓ 2 deployments, 1 rollback")
    finally:
        db.close()

    print("\n" + "=" * 60)
    print("SEED COMPLETE")
    print("=" * 60)


if __name__ == "__main__":
    main()
