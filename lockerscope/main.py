import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lockerscope.api import health_router, locker_router
from lockerscope.config import settings
from lockerscope.services.catalog_database import get_catalog_index

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    try:
        get_catalog_index()
    except (FileNotFoundError, ValueError) as e:
        # Service still starts; /ready reports the missing catalog
        logger.warning("Catalog not loaded at startup: %s", e)
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("lockerscope"),
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(locker_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
