"""
LPAR Inventory API

FastAPI application tracking vendor software on mainframe LPARs:
catalog, packages, compliance, deployment and rollback.

Run with: uvicorn main:app
"""

from core.app import create_app

app = create_app()


if __name__ == "__main__":
    import uvicorn
    from core.config import settings

    uvicorn.run("main:app", host=settings.host, port=settings.port)
