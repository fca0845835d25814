MODULE_ID = "cloning"
MODULE_VERSION = "1.0.0"
MODULE_DESCRIPTION = "Deep copies of software, packages, LPARs, customers and vendors"

ROUTES = [
    "cloning.routes",
]

TABLES = []

IMPLEMENTS = []

REQUIRES = []


def register(app, registry) -> None:
    """Register the cloning module routes."""
    from modules.cloning import routes

    app.include_router(routes.router, prefix="/api")
    app.include_router(routes.router, prefix="/api/v1")
