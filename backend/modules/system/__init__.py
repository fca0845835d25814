MODULE_ID = "system"
MODULE_VERSION = "1.0.0"
MODULE_DESCRIPTION = "Health check"

ROUTES = [
    "system.routes",
]

TABLES = []

IMPLEMENTS = []

REQUIRES = []


def register(app, registry) -> None:
    """Register the system module routes."""
    from modules.system import routes

    app.include_router(routes.router, prefix="/api")
    app.include_router(routes.router, prefix="/api/v1")
