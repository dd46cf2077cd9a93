from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import health, network, session
from .config import settings
from .core.wallet.session_manager import get_session_manager
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .workers.reachability_worker import get_reachability_worker


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    await get_session_manager().restore()
    worker = get_reachability_worker()
    worker.start()
    try:
        yield
    finally:
        await worker.stop()


app = FastAPI(
    title="Stake and Steal Client API",
    description="Local control surface for wallet sessions and network reachability",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
app.include_router(session.router, tags=["Session"])
app.include_router(network.router, tags=["Network"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Stake and Steal Client API",
        "version": "0.1.0",
        "network": settings.network,
        "health": "/healthz",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "stakeclient.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
