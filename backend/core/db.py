"""
LPAR Inventory — Core database layer.

Provides the SQLAlchemy engine, session factory, the FastAPI get_db
dependency, and the atomic() transaction helper used by every service
that writes more than one row.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from core.config import settings
from core.base import Base  # Single Base instance shared across all models
from core.errors import DatabaseError, DuplicateError, InventoryError, NotFoundError

log = logging.getLogger("inventory.db")


def build_engine(database_url: str, **kwargs):
    """Create an engine; SQLite connections get foreign keys (and WAL for files)."""
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(database_url, echo=settings.debug, pool_pre_ping=True, **kwargs)

    if is_sqlite:
        in_memory = ":memory:" in database_url or database_url.rstrip("/") == "sqlite:"

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

    return engine


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for database sessions."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create every module's tables."""
    import models  # noqa: F401  (registers all tables on Base.metadata)

    Base.metadata.create_all(bind=bind or engine)


def _is_unique_violation(exc: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed"; PostgreSQL: "duplicate key value violates unique constraint"
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate key" in message


@contextmanager
def atomic(db: Session):
    """Run a block as one transaction.

    Commits when the block finishes; rolls back on any error. Domain errors
    pass through unchanged, unique-constraint violations become DuplicateError
    and any other SQLAlchemy failure becomes DatabaseError.
    """
    try:
        yield db
        db.commit()
    except InventoryError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        if _is_unique_violation(exc):
            log.warning(f"Uniqueness violation: {exc.orig}")
            raise DuplicateError(f"Uniqueness constraint violated: {exc.orig}") from exc
        log.error("Integrity violation, transaction rolled back", exc_info=True)
        raise DatabaseError(f"Constraint violated: {exc.orig}") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        log.error("Database failure, transaction rolled back", exc_info=True)
        raise DatabaseError(f"Database operation failed: {exc}") from exc
    except Exception:
        db.rollback()
        raise


def get_or_404(db: Session, model, entity_id: int, label: str):
    """Fetch a row by primary key or raise NotFoundError."""
    obj = db.get(model, entity_id)
    if obj is None:
        raise NotFoundError(label, entity_id)
    return obj


def ensure_unique(db: Session, model, label: str, exclude_id=None, **fields) -> None:
    """Raise DuplicateError if another row already has these field values.

    The first field named is reported as the offending one.
    """
    query = db.query(model.id).filter_by(**fields)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if query.first() is not None:
        field, value = next(iter(fields.items()))
        shown = " / ".join(str(v) for v in fields.values())
        raise DuplicateError(f"{label} '{shown}' already exists", field=field, value=value)
