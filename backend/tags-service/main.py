import logging
from contextlib import asynccontextmanager

from application.rest.routers import (
    router_health,
    router_objects,
    router_search,
    router_tags,
)
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from infrastructure.models import associations, tag_log_orm, tag_orm  # noqa: F401
from infrastructure.models.base import Base
from utils.config import SERVICE_HOST, SERVICE_PORT
from utils.dependencies import engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables before the service starts answering requests."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")
    yield


app = FastAPI(
    title="Tags Service",
    description="Tag management, object tagging, tag merge and copy with audit log",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router_health.router, tags=["health"])
app.include_router(router_tags.router, tags=["tags"])
app.include_router(router_objects.router, tags=["objects"])
app.include_router(router_search.router, tags=["search"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=SERVICE_HOST, port=SERVICE_PORT)
