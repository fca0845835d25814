"""Clone routes — copy software, packages, LPARs, customers and vendors."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from core.audit import get_actor
from core.db import get_db
from core.errors import ValidationError
from core.rate_limit import limiter, mutation_limit
from modules.cloning import services
from modules.cloning.schemas import CLONE_DATA, CloneRequest, CloneResponse, EntityKind

router = APIRouter(prefix="/clone", tags=["Clone"])


def _parse_data(entity_type: str, data: dict):
    try:
        return CLONE_DATA[entity_type].model_validate(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ValidationError(f"Invalid clone data: {first.get('msg')}", field=field) from exc


@router.post("", response_model=CloneResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(mutation_limit)
def clone_entity(
    request: Request,
    body: CloneRequest,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Clone an entity; ``data`` carries the new identity for the chosen entity type."""
    data = _parse_data(body.entity_type, body.data)

    if body.entity_type == "software":
        clone = services.clone_software(
            db, body.source_id, data.name, data.vendor_id, data.clone_versions, actor
        )
    elif body.entity_type == "package":
        clone = services.clone_package(db, body.source_id, data.name, data.code, data.version, actor)
    elif body.entity_type == "lpar":
        clone = services.clone_lpar(db, body.source_id, data.name, data.code, data.customer_id, actor)
    elif body.entity_type == "customer":
        clone = services.clone_customer(db, body.source_id, data.name, data.code, actor)
    else:
        clone = services.clone_vendor(db, body.source_id, data.name, data.code, actor)

    return CloneResponse(
        entity_type=body.entity_type,
        source_id=body.source_id,
        id=clone.id,
        name=clone.name,
        code=getattr(clone, "code", None),
    )


@router.get("/preview")
def clone_preview(
    entity_type: EntityKind = Query(...),
    source_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """Summary of what cloning the source would copy."""
    return {
        "entity_type": entity_type,
        "source_id": source_id,
        "preview": services.clone_preview(db, entity_type, source_id),
    }
