"""
modules/deployments/schemas.py — Pydantic schemas for compliance, planning and deployment.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.base import ChangeKind, ComplianceStatus


class DeploymentRequest(BaseModel):
    lpar_ids: List[int] = Field(..., min_length=1)


# ============== Compliance ==============

class ItemComplianceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    software_id: int
    software_name: Optional[str] = None
    status: ComplianceStatus
    required_version: str
    required_ptf_level: Optional[str] = None
    installed_version: Optional[str] = None
    installed_ptf_level: Optional[str] = None


class LparComplianceResponse(BaseModel):
    lpar_id: int
    package_id: Optional[int] = None
    status: Optional[ComplianceStatus] = None
    compliant: bool
    coverage_score: int
    counts: Dict[str, int] = {}
    items: List[ItemComplianceResponse] = []


class LparDeploymentStatus(BaseModel):
    lpar_id: int
    lpar_name: str
    lpar_code: str
    customer_id: int
    current_package_id: Optional[int] = None
    status: str  # compliant | needs_update | unknown
    compliance_status: ComplianceStatus
    coverage_score: int
    changes_needed: int
    new_installs: int


# ============== Planning ==============

class VersionRefResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    version: str
    ptf_level: Optional[str] = None


class PlannedChangeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    software_id: int
    software_name: Optional[str] = None
    current: Optional[VersionRefResponse] = None
    target: Optional[VersionRefResponse] = None


class DeploymentPlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    to_install: List[PlannedChangeResponse] = []
    to_upgrade: List[PlannedChangeResponse] = []
    to_remove: List[PlannedChangeResponse] = []
    unchanged: List[PlannedChangeResponse] = []
    pending_changes: int = 0


class PreviewItem(BaseModel):
    software_id: int
    software_name: Optional[str] = None
    current_version: Optional[str] = None
    target_version: str
    change: ChangeKind
    required: bool = True


class LparPreview(BaseModel):
    lpar_id: int
    lpar_name: str
    lpar_code: str
    changes: List[PreviewItem] = []


# ============== Deployment ==============

class LparDeploymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lpar_id: int
    lpar_code: str
    installed: List[int] = []
    updated: List[int] = []
    unchanged: List[int] = []


class DeploymentReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    package_id: int
    package_code: str
    package_version: str
    lpars: List[LparDeploymentResponse] = []
