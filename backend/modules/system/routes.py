"""System routes — health check."""

import logging
import pathlib as _pathlib

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import settings
from core.db import get_db
from modules.system.schemas import HealthCheck

log = logging.getLogger("inventory.api")
router = APIRouter(tags=["System"])

_version_file = _pathlib.Path(__file__).parent.parent.parent.parent / "VERSION"
if _version_file.exists():
    __version__ = _version_file.read_text().strip()
else:
    __version__ = "1.0.0"


@router.get("/health", response_model=HealthCheck)
def health_check(request: Request, db: Session = Depends(get_db)):
    """Check API health and database connectivity."""
    database_ok = True
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        log.warning(f"Health check: database unreachable: {exc}")
        database_ok = False

    return HealthCheck(
        status="ok" if database_ok else "degraded",
        version=__version__,
        database=settings.database_url.split("///")[-1],
        database_ok=database_ok,
        modules=list(getattr(request.app.state, "modules", [])),
        environment=settings.environment,
    )
