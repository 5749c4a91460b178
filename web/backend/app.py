import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from web.backend.routers import goals

logger = logging.getLogger("goalforest.api")


def create_app() -> FastAPI:
    app = FastAPI(title="goalforest API", version="1.0")

    raw_origins = os.getenv("GOALFOREST_ALLOWED_ORIGINS", "*")
    allow_origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    allow_credentials = "*" not in allow_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "goalforest"}

    app.include_router(goals.router, prefix="/api/v1/goals", tags=["goals"])

    logger.info("goalforest API ready")
    return app


app = create_app()
