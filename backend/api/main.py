from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pathlib import Path
import logging
import sys

# Add parent directory to path to allow importing backend and nebula
sys.path.append(str(Path(__file__).resolve().parents[2]))

from backend.api.routers import reconcile_router
from backend.core.config import configure_logging, settings

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    configure_logging(settings)
    logger.info(f"Sheet reconciliation service {VERSION} starting")

    yield  # Application runs here

    logger.info("Sheet reconciliation service stopped")


app = FastAPI(title="Sheet Reconciliation Service", version=VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reconcile_router)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "version": VERSION}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8090)
