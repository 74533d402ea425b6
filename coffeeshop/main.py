# coffeeshop/main.py
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import Response

from .config import ServerConfig
from .database import ProductNotFoundError, Store
from .middleware import (
    JSON_CONTENT_TYPE,
    DelayMiddleware,
    RequestTimeoutMiddleware,
    SetHeaderMiddleware,
    TransportTimeoutMiddleware,
)
from .models import encode_product, encode_products

logger = logging.getLogger(__name__)


def create_app(store: Store, config: Optional[ServerConfig] = None) -> FastAPI:
    """Build the shop application serving products from ``store``."""
    if config is None:
        config = ServerConfig()

    app = FastAPI(
        title="coffeeshop",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # ---------------------------
    # Middleware (last added runs first)
    # ---------------------------
    app.add_middleware(DelayMiddleware, delay=config.latency)
    app.add_middleware(SetHeaderMiddleware, name="Content-Type", value=JSON_CONTENT_TYPE)
    app.add_middleware(RequestTimeoutMiddleware, timeout=config.request_timeout)
    app.add_middleware(
        TransportTimeoutMiddleware,
        read_timeout=config.read_timeout,
        write_timeout=config.write_timeout,
    )

    # Starlette answers unhandled errors outside the middleware stack
    @app.exception_handler(Exception)
    async def unhandled_error(request, exc):
        return Response(content="internal error", status_code=500, media_type=JSON_CONTENT_TYPE)

    # ---------------------------
    # Product endpoints
    # ---------------------------
    @app.get("/products")
    async def list_products():
        try:
            data = encode_products(store.get_all())
        except (TypeError, ValueError):
            logger.exception("cannot encode product list")
            return Response(status_code=500)
        return Response(content=data, status_code=200)

    @app.get("/products/{product_id}")
    async def get_product(product_id: str):
        try:
            product = store.get_product(product_id)
        except ProductNotFoundError:
            return Response(content="product not found", status_code=404)
        try:
            data = encode_product(product)
        except (TypeError, ValueError):
            logger.exception("cannot encode product %s", product_id)
            return Response(content="internal error", status_code=500)
        # Once the status line is out a failed body write cannot become a 500;
        # the server just drops the connection.
        return Response(content=data, status_code=200)

    return app
