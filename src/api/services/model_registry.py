"""Central model registry - loads the classifier once at startup."""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from fastapi import HTTPException, Request

from analyzers.errors import InvalidKError

logger = logging.getLogger(__name__)


class ModelUnavailableError(RuntimeError):
    """Raised when a model was never loaded or has been unloaded."""


class ModelRegistry:
    """
    Holds the shared, read-only classifier and the inference worker pool.

    One instance lives on ``app.state.registry`` for the lifetime of the
    application. Blocking decode/inference work is submitted to a bounded
    thread pool so it never runs on the event loop and concurrent
    inferences are capped at ``workers``.
    """

    def __init__(self, workers: int = 2):
        self._registry: dict[str, Any] = {}
        self.workers = max(1, workers)
        self._executor: ThreadPoolExecutor | None = None

    async def load_all(self) -> None:
        """Load the classifier. A ModelLoadError or bad TOP_K aborts startup."""
        import config
        from analyzers.classifier import ImageClassifier

        classifier = ImageClassifier()
        try:
            await self.run(
                classifier.load,
                config.MODEL_PATH,
                weights_file=config.MODEL_FILE,
                labels_file=config.LABELS_FILE,
            )
            _check_top_k(config.TOP_K, len(classifier.labels))
        except Exception as exc:
            logger.error("✗ classifier model initialization failed: %s", exc)
            await self.unload_all()
            raise
        self._registry["classifier"] = classifier
        logger.info("✓ classifier model loaded")

    def register(self, key: str, model: Any) -> None:
        """Register an already constructed model."""
        self._registry[key] = model

    async def unload_all(self) -> None:
        """Unload all models and stop the worker pool at shutdown."""
        self._registry.clear()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        logger.info("All models unloaded")

    async def run(self, func, *args, **kwargs):
        """Run blocking ``func`` on the inference pool."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="inference")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, lambda: func(*args, **kwargs))

    def get(self, key: str) -> Any:
        """Get a model from registry."""
        model = self._registry.get(key)
        if model is None:
            raise ModelUnavailableError(f"Model '{key}' is not available.")
        return model

    def loaded_models(self) -> list[str]:
        """Return list of successfully loaded models."""
        return [k for k, v in self._registry.items() if v is not None]


def get_registry(request: Request) -> ModelRegistry:
    """FastAPI dependency returning the application's registry."""
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(503, "Model registry is not initialised.")
    return registry


def _check_top_k(top_k: int, class_count: int) -> None:
    if isinstance(top_k, bool) or not isinstance(top_k, int) or not 1 <= top_k <= class_count:
        raise InvalidKError(f"TOP_K must be between 1 and {class_count}, got {top_k!r}")
