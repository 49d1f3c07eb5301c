from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cardex.api import (
    catalog_router,
    discover_router,
    health_router,
    install_error_handlers,
    messages_router,
    reviews_router,
)
from cardex.config import settings
from cardex.db.database import init_db
from cardex.jobs.init_db import ensure_system_collection


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    await ensure_system_collection()
    yield


def _version() -> str:
    try:
        return pkg_version("cardex")
    except PackageNotFoundError:
        return "0.0.0"


app = FastAPI(
    title=settings.app_name,
    version=_version(),
    lifespan=lifespan,
)

app.include_router(catalog_router)
app.include_router(discover_router)
app.include_router(health_router)
app.include_router(messages_router)
app.include_router(reviews_router)

install_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
