# core/app.py — LPAR inventory app factory
#
# Every package under backend/modules/ with a manifest (MODULE_ID, ROUTES,
# TABLES, IMPLEMENTS, REQUIRES, register) is discovered, ordered so that
# interface providers come first, and registered on a single FastAPI app.

import importlib
import logging
import pathlib
from collections import defaultdict
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.errors import DatabaseError, InventoryError, NotFoundError

log = logging.getLogger("inventory.api")

# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

_version_file = pathlib.Path(__file__).parent.parent.parent / "VERSION"
if _version_file.exists():
    __version__ = _version_file.read_text().strip()
else:
    __version__ = "1.0.0"


# ---------------------------------------------------------------------------
# Module discovery
# ---------------------------------------------------------------------------

MODULES_DIR = pathlib.Path(__file__).resolve().parent.parent / "modules"


def _discover_modules() -> list[str]:
    """Package names under backend/modules/ whose __init__ declares a MODULE_ID."""
    packages = (
        f"modules.{entry.name}"
        for entry in sorted(MODULES_DIR.iterdir())
        if (entry / "__init__.py").is_file()
    )
    return [pkg for pkg in packages if hasattr(importlib.import_module(pkg), "MODULE_ID")]


def _resolve_load_order(pkg_names: list[str]) -> list[str]:
    """Order modules so every IMPLEMENTS provider registers before the modules that REQUIRE it.

    Ties break alphabetically; anything caught in a cycle or requiring an
    interface nobody implements is appended in discovery order.
    """
    manifests = {pkg: importlib.import_module(pkg) for pkg in pkg_names}
    implemented_by = {
        iface: pkg
        for pkg, mod in manifests.items()
        for iface in getattr(mod, "IMPLEMENTS", [])
    }

    waiting_on: dict[str, set[str]] = {}
    dependents: dict[str, list[str]] = defaultdict(list)
    for pkg, mod in manifests.items():
        providers = {
            implemented_by[iface]
            for iface in getattr(mod, "REQUIRES", [])
            if implemented_by.get(iface, pkg) != pkg
        }
        waiting_on[pkg] = providers
        for provider in providers:
            dependents[provider].append(pkg)

    ready = sorted(pkg for pkg, deps in waiting_on.items() if not deps)
    ordered: list[str] = []
    while ready:
        pkg = ready.pop(0)
        ordered.append(pkg)
        for consumer in dependents[pkg]:
            waiting_on[consumer].discard(pkg)
            if not waiting_on[consumer]:
                ready.append(consumer)
        ready.sort()

    stuck = [pkg for pkg in pkg_names if pkg not in ordered]
    if stuck:
        log.warning(f"Unresolvable module dependencies, loading last: {stuck}")
    return ordered + stuck


# ---------------------------------------------------------------------------
# Logging / middleware / error handling
# ---------------------------------------------------------------------------

def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _setup_middleware(app: FastAPI) -> None:
    """Attach CORS and rate limiting to the app."""
    from core.config import settings
    from core.rate_limit import limiter
    from slowapi import _rate_limit_exceeded_handler
    from slowapi.errors import RateLimitExceeded

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    _cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    if "*" in _cors_origins:
        log.warning(
            "CORS origin '*' is incompatible with allow_credentials=True — "
            "falling back to empty origins list. Set explicit origins in CORS_ORIGINS."
        )
        _cors_origins = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-User-Id", "Accept"],
    )


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(InventoryError)
    async def inventory_error_handler(request: Request, exc: InventoryError):
        if isinstance(exc, DatabaseError):
            log.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)
            body = {"detail": "Database error", "error": exc.kind}
        elif isinstance(exc, NotFoundError):
            log.info(f"{request.method} {request.url.path}: {exc.message}")
            body = {"detail": "Not found", "error": exc.kind, "entity": exc.entity}
        else:
            body = exc.to_dict()
        return JSONResponse(status_code=exc.status_code, content=body)


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(init_database: bool = True) -> FastAPI:
    """Create and fully configure the inventory FastAPI application.

    1. Discover all modules under backend/modules/.
    2. Resolve load order by REQUIRES/IMPLEMENTS declarations.
    3. Build a ModuleRegistry; call each module's register(app, registry).
    4. Lifespan creates tables and validates declared dependencies.
    """
    from core.config import settings
    from core.db import init_db
    from core.registry import ModuleRegistry

    _configure_logging(settings.log_level)

    pkg_names = _discover_modules()
    ordered_pkgs = _resolve_load_order(pkg_names)
    log.info(f"Module load order: {[p.split('.')[-1] for p in ordered_pkgs]}")

    registry = ModuleRegistry()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if init_database:
            init_db()
        registry.validate_dependencies()
        yield

    app = FastAPI(
        title="LPAR Inventory",
        description="Mainframe software inventory, package compliance and deployment",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
    )
    app.state.registry = registry
    app.state.modules = []

    _setup_middleware(app)
    _register_error_handlers(app)

    for pkg in ordered_pkgs:
        mod = importlib.import_module(pkg)
        registry.record_requires(getattr(mod, "MODULE_ID", pkg), getattr(mod, "REQUIRES", []))
        if hasattr(mod, "register"):
            mod.register(app, registry)
            app.state.modules.append(mod.MODULE_ID)
            log.debug(f"Registered module: {pkg}")

    return app
