"""
Architecture Flow Simulator API

FastAPI application exposing the interactive simulation engine and
headless simulation runs.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from archsim import __version__
from api.dependencies import shutdown_engine
from api.routers import health, simulation

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    shutdown_engine()
    logger.info("Simulation engine stopped")


# Initialize FastAPI app
app = FastAPI(
    title="Architecture Flow Simulator API",
    description="API for simulating request traffic through software architecture diagrams",
    version=__version__,
    lifespan=lifespan
)

# Configure CORS to allow the editor frontend from any origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # Must be False when allow_origins is "*"
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(simulation.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
