"""Tests for the decode -> classify -> match pipeline."""

import pytest

from analyzers.errors import DecodeError, NotLoadedError
from analyzers.classifier import ImageClassifier
from analyzers.fox_pipeline import FoxPipeline
from tests.utils.image_generation import StubClassifier, create_test_image


class SequenceClassifier(StubClassifier):
    """Answers each call with the next stub in turn."""

    def __init__(self, stubs: list[StubClassifier]):
        self.stubs = stubs
        self.calls = 0

    def classify(self, image):
        stub = self.stubs[self.calls % len(self.stubs)]
        self.calls += 1
        return stub.classify(image)


def test_fox_photo_is_matched(fox_classifier, png_bytes) -> None:
    result = FoxPipeline(fox_classifier).identify([png_bytes])

    assert result.matched is True
    assert result.best.class_name == "red fox"
    assert round(result.best.probability_percent) == 92
    assert len(result.predictions) == 5


def test_unrelated_photo_reports_top_guess(bicycle_classifier, png_bytes) -> None:
    result = FoxPipeline(bicycle_classifier).identify([png_bytes])

    assert result.matched is False
    assert result.best.class_name == "mountain bike"
    assert round(result.best.probability_percent) == 81


def test_fox_outside_top_k_is_not_matched(bicycle_classifier, png_bytes) -> None:
    """red fox ranks last in the bicycle distribution."""
    assert FoxPipeline(bicycle_classifier, top_k=5).identify([png_bytes]).matched is False
    assert FoxPipeline(bicycle_classifier, top_k=8).identify([png_bytes]).matched is True


def test_no_uploads_gives_empty_result(fox_classifier) -> None:
    result = FoxPipeline(fox_classifier).identify([])

    assert result.matched is False
    assert result.best is None
    assert result.predictions == ()
    assert fox_classifier.calls == 0


def test_corrupt_upload_raises_decode_error(fox_classifier) -> None:
    with pytest.raises(DecodeError):
        FoxPipeline(fox_classifier).identify([b"\xff\xd8\xff\xe0 corrupted"])
    assert fox_classifier.calls == 0


def test_empty_upload_raises_decode_error(fox_classifier) -> None:
    with pytest.raises(DecodeError):
        FoxPipeline(fox_classifier).identify([b""])


def test_multiple_uploads_best_comes_from_first_image(bicycle_classifier, fox_classifier, png_bytes) -> None:
    """The fox in the second image decides the verdict, best stays the first image's top guess."""
    classifier = SequenceClassifier([bicycle_classifier, fox_classifier])
    result = FoxPipeline(classifier).identify([png_bytes, create_test_image(64, 64)])

    assert result.matched is True
    assert result.best.class_name == "mountain bike"
    assert [p.class_name for p in result.predictions][5] == "red fox"


def test_multiple_uploads_any_match_wins(fox_classifier, png_bytes) -> None:
    result = FoxPipeline(fox_classifier).identify([png_bytes, create_test_image(32, 32)])

    assert result.matched is True
    assert len(result.predictions) == 10
    assert fox_classifier.calls == 2


def test_target_terms_are_injected(bicycle_classifier, png_bytes) -> None:
    pipeline = FoxPipeline(bicycle_classifier, target_terms=("bike",))
    assert pipeline.identify([png_bytes]).matched is True


def test_unloaded_classifier_raises(png_bytes) -> None:
    with pytest.raises(NotLoadedError):
        FoxPipeline(ImageClassifier()).identify([png_bytes])


def test_pipeline_with_real_network(loaded_classifier, png_bytes) -> None:
    """A randomly initialised ResNet-34 still yields a well-formed verdict."""
    result = FoxPipeline(loaded_classifier).identify([png_bytes])

    assert len(result.predictions) == 5
    assert result.best.class_name == result.predictions[0].class_name
    assert 0.0 <= result.best.probability_percent <= 100.0
    probabilities = [p.probability for p in result.predictions]
    assert probabilities == sorted(probabilities, reverse=True)
