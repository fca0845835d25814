MODULE_ID = "activity"
MODULE_VERSION = "1.0.0"
MODULE_DESCRIPTION = "Audit log browsing and dashboard summary"

ROUTES = [
    "activity.routes",
]

TABLES = []

IMPLEMENTS = []

REQUIRES = []


def register(app, registry) -> None:
    """Register the activity module routes."""
    from modules.activity import routes

    app.include_router(routes.router, prefix="/api")
    app.include_router(routes.router, prefix="/api/v1")
