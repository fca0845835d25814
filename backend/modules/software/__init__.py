MODULE_ID = "software"
MODULE_VERSION = "1.0.0"
MODULE_DESCRIPTION = "Software catalog, versions and PTF levels"

ROUTES = [
    "software.routes",
]

TABLES = [
    "software",
    "software_versions",
]

IMPLEMENTS = []

REQUIRES = []


def register(app, registry) -> None:
    """Register the software module routes."""
    from modules.software import routes

    app.include_router(routes.router, prefix="/api")
    app.include_router(routes.router, prefix="/api/v1")
