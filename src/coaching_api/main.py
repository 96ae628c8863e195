"""FastAPI application exposing the coaching booking financial rules.

This package provides REST endpoints for:
- Health checks
- Refund policies, discounts, block bookings, transfers and cancellations

The API is stateless: requests carry the entities to act on and responses
return their next state. Persistence and payment capture stay with the caller.
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from coaching_api.exceptions import register_exception_handlers
from coaching_api.middleware import CorrelationIdMiddleware
from coaching_api.routes import (
    block_bookings_router,
    bookings_router,
    discounts_router,
    refunds_router,
    transfers_router,
)
from coaching_core import __version__
from coaching_core.config import get_settings
from coaching_core.utils.logging import configure_logging, get_logger

settings = get_settings()
configure_logging(settings.log_level)
logger = get_logger(__name__)

app = FastAPI(
    title="Coaching Bookings API",
    description="Refund, discount, block booking and transfer rules for coaching sessions",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

# Register exception handlers for consistent error responses
register_exception_handlers(app)

app.include_router(refunds_router, prefix="/api")
app.include_router(discounts_router, prefix="/api")
app.include_router(block_bookings_router, prefix="/api")
app.include_router(transfers_router, prefix="/api")
app.include_router(bookings_router, prefix="/api")


@app.get("/api/ping")
async def ping() -> dict[str, Any]:
    """Health check endpoint at /api/ping."""
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": "coaching-api",
        "version": __version__,
    }


# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: True)
    """
    import uvicorn

    logger.info("Starting coaching API on %s:%s", host, port)
    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run("coaching_api.main:app", host=host, port=port, reload=True, reload_dirs=["src"])
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
