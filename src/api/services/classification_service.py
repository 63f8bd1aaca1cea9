"""Fox classification service - delegates to FoxPipeline on the inference pool."""
import logging

import config
from analyzers.fox_pipeline import FoxPipeline
from analyzers.result_extractor import ClassificationResult
from api.services.model_registry import ModelRegistry

logger = logging.getLogger(__name__)


async def run_fox_check(registry: ModelRegistry, uploads: list[bytes]) -> ClassificationResult:
    """
    Decode, classify and match every uploaded image.

    Raises DecodeError for unreadable uploads and RuntimeError when the
    classifier is not available.
    """
    classifier = registry.get("classifier")
    pipeline = FoxPipeline(classifier, top_k=config.TOP_K, target_terms=config.TARGET_TERMS)
    return await registry.run(pipeline.identify, uploads)
