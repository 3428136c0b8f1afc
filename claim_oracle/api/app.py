"""FastAPI application for the claim oracle service."""

import contextlib
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..infrastructure.dependencies import ServiceContainer
from .endpoints import health, verdicts

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Create the API application.

    Args:
        container: Pre-built service container; one is built from the
            environment at startup when omitted
    """

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.container = container or ServiceContainer()
        await app.state.container.initialize()
        logger.info("🚀 Claim oracle API ready")

        yield  # Application runs here

        await app.state.container.shutdown()

    app = FastAPI(
        title="Claim Oracle API",
        description="Verifies measurable claims against live data and records verdict proofs on-chain",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(verdicts.router)
    return app


app = create_app()
