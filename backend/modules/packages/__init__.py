MODULE_ID = "packages"
MODULE_VERSION = "1.0.0"
MODULE_DESCRIPTION = "Versioned software packages and their required items"

ROUTES = [
    "packages.routes",
]

TABLES = [
    "packages",
    "package_items",
]

IMPLEMENTS = []

REQUIRES = []


def register(app, registry) -> None:
    """Register the packages module routes."""
    from modules.packages import routes

    app.include_router(routes.router, prefix="/api")
    app.include_router(routes.router, prefix="/api/v1")
