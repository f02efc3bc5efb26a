from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inkwell.api.endpoints import get_endpoints_router
from inkwell.config import settings
from inkwell.workspace import Workspace


def create_app(*, workspace: Workspace) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router=get_endpoints_router(workspace=workspace))

    return app
