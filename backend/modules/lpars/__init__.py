MODULE_ID = "lpars"
MODULE_VERSION = "1.0.0"
MODULE_DESCRIPTION = "LPARs, installed software and rollback"

ROUTES = [
    "lpars.routes",
]

TABLES = [
    "lpars",
    "lpar_software",
]

IMPLEMENTS = []

REQUIRES = ["ComplianceProvider"]


def register(app, registry) -> None:
    """Register the lpars module routes."""
    from modules.lpars import routes

    app.include_router(routes.router, prefix="/api")
    app.include_router(routes.router, prefix="/api/v1")
