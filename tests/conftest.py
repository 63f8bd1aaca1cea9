"""Shared fixtures for the fox check tests."""

import pytest
import torch

from tests.utils.image_generation import StubClassifier, create_test_image

FOX_SCORES = {
    "tabby": 0.01,
    "red fox": 0.92,
    "kit fox": 0.03,
    "bicycle": 0.005,
    "grey fox": 0.015,
    "coyote": 0.01,
    "mailbox": 0.005,
    "golden retriever": 0.005,
}

BICYCLE_SCORES = {
    "tabby": 0.01,
    "red fox": 0.001,
    "mountain bike": 0.81,
    "bicycle-built-for-two": 0.1,
    "tricycle": 0.04,
    "unicycle": 0.02,
    "moped": 0.015,
    "mailbox": 0.004,
}


@pytest.fixture
def png_bytes() -> bytes:
    return create_test_image(640, 480)


@pytest.fixture
def fox_classifier() -> StubClassifier:
    return StubClassifier(FOX_SCORES)


@pytest.fixture
def bicycle_classifier() -> StubClassifier:
    return StubClassifier(BICYCLE_SCORES)


@pytest.fixture(scope="session")
def resnet34_weights_dir(tmp_path_factory):
    """Directory holding a randomly initialised ResNet-34 state dict."""
    from torchvision.models import resnet34

    torch.manual_seed(0)
    weights_dir = tmp_path_factory.mktemp("weights")
    torch.save(resnet34(weights=None, num_classes=1000).state_dict(), weights_dir / "resnet34.pth")
    return weights_dir


@pytest.fixture(scope="session")
def loaded_classifier(resnet34_weights_dir):
    from analyzers.classifier import load

    return load(str(resnet34_weights_dir))
