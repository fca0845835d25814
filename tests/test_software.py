"""
Software catalog — versions and the current-version pointer.

Run:
    pytest tests/test_software.py -v
"""

import pytest

from core.errors import DuplicateError, NotFoundError
from helpers import audit_entries
from modules.software import services as software
from modules.software.schemas import SoftwareVersionCreate


def test_adding_current_version_moves_the_flag(db, mainframe):
    m = mainframe
    new = software.add_version(db, m.cics.id, {"version": "V6R1M0", "ptf_level": None, "is_current": True})

    db.refresh(m.cics)
    assert m.cics.current_version_id == new.id
    flags = {v.version: v.is_current for v in m.cics.versions}
    assert flags == {"V5R5M0": False, "V5R6M0": False, "V6R1M0": True}

    entry = audit_entries(db, "software", "version_update", m.cics.id)[-1]
    assert entry.changes["previous_current"] == "V5R6M0 (UI12345)"


def test_non_current_version_leaves_pointer(db, mainframe):
    m = mainframe
    software.add_version(db, m.cics.id, {"version": "V6R1M0", "ptf_level": None})
    db.refresh(m.cics)
    assert m.cics.current_version.version == "V5R6M0"


def test_same_version_and_ptf_is_a_duplicate(db, mainframe):
    with pytest.raises(DuplicateError):
        software.add_version(db, mainframe.cics.id, {"version": "V5R6M0", "ptf_level": "UI12345"})


def test_same_version_new_ptf_is_allowed(db, mainframe):
    v = software.add_version(db, mainframe.cics.id, {"version": "V5R6M0", "ptf_level": "UI20000"})
    assert v.ptf_level == "UI20000"


def test_unknown_vendor(db):
    with pytest.raises(NotFoundError):
        software.create_software(db, {"name": "Orphan", "vendor_id": 9999})


def test_set_current_is_idempotent(db, mainframe):
    m = mainframe
    before = len(audit_entries(db, "software", "version_update", m.cics.id))
    software.set_current_version(db, m.cics.id, m.cics_versions["V5R6M0"].id)
    assert len(audit_entries(db, "software", "version_update", m.cics.id)) == before


class TestVersionCreateSchema:

    def test_designation_split(self):
        body = SoftwareVersionCreate(version="2.4.0 (PTF 12345)")
        assert (body.version, body.ptf_level) == ("2.4.0", "12345")

    def test_explicit_ptf_wins(self):
        body = SoftwareVersionCreate(version="V2R4M0-PTF1", ptf_level="UI9")
        assert (body.version, body.ptf_level) == ("V2R4M0-PTF1", "UI9")

    def test_blank_ptf_becomes_none(self):
        assert SoftwareVersionCreate(version="13.1", ptf_level="  ").ptf_level is None
