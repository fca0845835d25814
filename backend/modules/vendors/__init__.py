MODULE_ID = "vendors"
MODULE_VERSION = "1.0.0"
MODULE_DESCRIPTION = "Software vendors"

ROUTES = [
    "vendors.routes",
]

TABLES = [
    "vendors",
]

IMPLEMENTS = []

REQUIRES = []


def register(app, registry) -> None:
    """Register the vendors module routes."""
    from modules.vendors import routes

    app.include_router(routes.router, prefix="/api")
    app.include_router(routes.router, prefix="/api/v1")
