MODULE_ID = "customers"
MODULE_VERSION = "1.0.0"
MODULE_DESCRIPTION = "Customers owning LPARs"

ROUTES = [
    "customers.routes",
]

TABLES = [
    "customers",
]

IMPLEMENTS = []

REQUIRES = []


def register(app, registry) -> None:
    """Register the customers module routes."""
    from modules.customers import routes

    app.include_router(routes.router, prefix="/api")
    app.include_router(routes.router, prefix="/api/v1")
