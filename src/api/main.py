"""Main FastAPI application for the Is It A Fox? service."""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

import config
from api.routers import classify, fox
from api.services.model_registry import ModelRegistry

# Setup logging
logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format='%(asctime)s - [%(levelname)s] - %(name)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the classifier at startup, unload at shutdown."""
    logger.info("Loading classifier from %s ...", config.MODEL_PATH)
    registry = ModelRegistry(workers=config.INFERENCE_WORKERS)
    # ModelLoadError propagates here and stops the server from starting
    await registry.load_all()
    app.state.registry = registry
    logger.info("%d models ready: %s", len(registry.loaded_models()), registry.loaded_models())
    yield
    logger.info("Shutting down and unloading models...")
    await registry.unload_all()
    app.state.registry = None


app = FastAPI(
    title="Is It A Fox?",
    description=(
        "Upload an image and find out whether it shows a fox. "
        "Uses a pretrained ResNet-34 ImageNet classifier."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── Include Routers ────────────────────────────────────────────────────
app.include_router(fox.router,                           tags=["Fox / HTML"])
app.include_router(classify.router, prefix="/api",       tags=["Fox / JSON"])


# ── Health Check ────────────────────────────────────────────────────────
@app.get("/health", tags=["Health"], summary="Service health check")
async def health():
    """
    Check API health and loaded models.

    Returns:
        - status: "ok" if running
        - models_loaded: List of successfully initialized models
    """
    registry = getattr(app.state, "registry", None)
    return {
        "status": "ok",
        "models_loaded": registry.loaded_models() if registry is not None else [],
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        reload=False,
        log_level=config.LOG_LEVEL,
    )
