"""
ToolDock Gateway Server — Application Composition

Thin entry point that creates the FastAPI app around a wired Gateway.
All initialization logic lives in `startup.py`.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .startup import Gateway, build_gateway, lifespan
from .routes import router as http_router
from ..version import get_version


def create_app(gateway: Optional[Gateway] = None) -> FastAPI:
    gateway = gateway or build_gateway()

    app = FastAPI(
        title="ToolDock Gateway",
        description="Tool dispatch and provider fallback core",
        version=get_version(),
        lifespan=lifespan,
    )
    app.state.gateway = gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=gateway.config.gateway.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(http_router)
    return app


def app_factory() -> FastAPI:
    """uvicorn ``--factory`` entry point; reads config from the usual places."""
    from ..config.loader import load_config

    return create_app(build_gateway(load_config()))
