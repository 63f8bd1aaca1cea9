"""
Result Extractor Module
Top-k selection and target-concept matching over class probabilities.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import InvalidKError
from .interface import Prediction


@dataclass(frozen=True)
class BestGuess:
    """The top-ranked prediction as shown to the user."""

    class_name: str
    probability_percent: float


@dataclass(frozen=True)
class ClassificationResult:
    """Verdict for one request."""

    matched: bool
    best: Optional[BestGuess] = None
    predictions: Tuple[Prediction, ...] = field(default_factory=tuple)


def extract_top_k(probs: Sequence[Prediction], k: int) -> List[Prediction]:
    """
    Return the ``k`` most likely predictions, highest first.

    Equal probabilities keep their class-index order.

    Raises:
        InvalidKError: If ``k`` is not an int in [1, len(probs)].
    """
    if isinstance(k, bool) or not isinstance(k, int) or not 1 <= k <= len(probs):
        raise InvalidKError(f"k must be between 1 and {len(probs)}, got {k!r}")

    # sorted() is stable, so reverse=True keeps ties in index order
    ranked = sorted(probs, key=lambda prediction: prediction.probability, reverse=True)
    return ranked[:k]


def matches_target(predictions: Sequence[Prediction], target_terms: Iterable[str]) -> ClassificationResult:
    """
    Decide whether any prediction names the target concept.

    A prediction matches when its class name contains one of ``target_terms``
    (case-sensitive). ``best`` is always the first prediction, even when the
    match came from a lower-ranked entry.
    """
    terms = tuple(target_terms)
    matched = any(term in prediction.class_name for prediction in predictions for term in terms)

    best = None
    if predictions:
        top = predictions[0]
        best = BestGuess(class_name=top.class_name, probability_percent=100.0 * top.probability)

    return ClassificationResult(matched=matched, best=best, predictions=tuple(predictions))
