"""FastAPI entrypoint exposing the Maisa Worker node to HTTP hosts."""

from fastapi import FastAPI

from maisa_node import __version__
from maisa_node.core.config import get_settings
from maisa_node.routers import health, node


def create_app() -> FastAPI:
    app = FastAPI(title=get_settings().app_name, version=__version__)
    app.include_router(health.router)
    app.include_router(node.router)
    return app


app = create_app()
