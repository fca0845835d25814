MODULE_ID = "deployments"
MODULE_VERSION = "1.0.0"
MODULE_DESCRIPTION = "Package compliance, deployment planning and deployment"

ROUTES = [
    "deployments.routes",
]

TABLES = []

IMPLEMENTS = ["ComplianceProvider"]

REQUIRES = []


def register(app, registry) -> None:
    """Register the deployments module: routes and ComplianceProvider."""
    from modules.deployments import routes
    from modules.deployments.services import ComplianceService

    app.include_router(routes.router, prefix="/api")
    app.include_router(routes.router, prefix="/api/v1")

    registry.register_provider("ComplianceProvider", ComplianceService())
