"""
Fox Pipeline Module
Decode -> classify -> top-k -> target matching for uploaded images.
"""

import logging
from typing import Iterable, List, Sequence

from .classifier import classify
from .image_decoder import decode_and_normalize
from .interface import ClassifierInterface, Prediction
from .result_extractor import ClassificationResult, extract_top_k, matches_target

logger = logging.getLogger("FOXCHECK_PIPELINE")

DEFAULT_TOP_K = 5
DEFAULT_TARGET_TERMS = ("fox", "vulpes")


class FoxPipeline:
    """Answers "is it a fox?" for uploaded images with a shared classifier."""

    def __init__(
        self,
        classifier: ClassifierInterface,
        top_k: int = DEFAULT_TOP_K,
        target_terms: Sequence[str] = DEFAULT_TARGET_TERMS,
    ):
        self.classifier = classifier
        self.top_k = top_k
        self.target_terms = tuple(target_terms)

    def predict(self, data: bytes) -> List[Prediction]:
        """Top-k predictions for a single encoded image."""
        image = decode_and_normalize(data)
        probs = classify(self.classifier, image)
        return extract_top_k(probs, self.top_k)

    def identify(self, uploads: Iterable[bytes]) -> ClassificationResult:
        """
        Classify every upload and match the combined predictions.

        Predictions are concatenated in upload order, so ``best`` is the top
        guess for the first image. No uploads gives an unmatched result with
        no best guess. A DecodeError from any upload propagates.
        """
        predictions: List[Prediction] = []
        count = 0
        for data in uploads:
            predictions.extend(self.predict(data))
            count += 1

        result = matches_target(predictions, self.target_terms)
        if result.best is not None:
            logger.info(
                "%d image(s) classified - matched=%s, best=%s (%.1f%%)",
                count, result.matched, result.best.class_name, result.best.probability_percent,
            )
        else:
            logger.info("No images supplied - nothing to classify")
        return result
