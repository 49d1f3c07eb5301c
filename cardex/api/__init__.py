from cardex.api.catalog import router as catalog_router
from cardex.api.discover import router as discover_router
from cardex.api.errors import install_error_handlers
from cardex.api.health import router as health_router
from cardex.api.messages import router as messages_router
from cardex.api.reviews import router as reviews_router

__all__ = [
    "catalog_router",
    "discover_router",
    "health_router",
    "install_error_handlers",
    "messages_router",
    "reviews_router",
]
