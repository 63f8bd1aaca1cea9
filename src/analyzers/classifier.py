"""
Classifier Runtime Module
Loads a pretrained ResNet-34 once and exposes single-image softmax inference.
"""

import logging
import os
import time
from collections.abc import Mapping
from typing import List, Optional

import torch
import torch.nn as nn
from torchvision.models import ResNet34_Weights, resnet34

from .errors import ModelLoadError, NotLoadedError
from .image_decoder import INPUT_SIZE
from .interface import ClassifierInterface, Prediction

logger = logging.getLogger("FOXCHECK_CLASSIFIER")

CLASS_COUNT = 1000
DEFAULT_WEIGHTS_FILE = "resnet34.pth"
DEFAULT_LABELS_FILE = "imagenet_classes.txt"

_INPUT_SHAPE = (3, INPUT_SIZE, INPUT_SIZE)


class ImageClassifier(ClassifierInterface):
    """ResNet-34 ImageNet classifier. Weights are loaded once and never mutated."""

    ARCHITECTURE = "resnet34"

    def __init__(self, device: Optional[str] = None):
        self.device = device or ("cuda:0" if torch.cuda.is_available() else "cpu")
        self.model: Optional[nn.Module] = None
        self.labels: List[str] = []
        self.weights_path: Optional[str] = None

    @property
    def is_loaded(self) -> bool:
        return self.model is not None

    def load(
        self,
        model_path: str,
        weights_file: str = DEFAULT_WEIGHTS_FILE,
        labels_file: str = DEFAULT_LABELS_FILE,
    ) -> "ImageClassifier":
        """
        Load weights and the class-name table.

        Args:
            model_path: Weights file, or a directory containing ``weights_file``
            weights_file: Filename used when ``model_path`` is a directory
            labels_file: Optional one-label-per-line table next to the weights;
                the torchvision ImageNet categories are used when it is absent

        Returns:
            self, for chaining

        Raises:
            ModelLoadError: If the weights are missing, unreadable or do not
                fit the ResNet-34 architecture.
        """
        weights_path = model_path
        if os.path.isdir(model_path):
            weights_path = os.path.join(model_path, weights_file)
        if not os.path.isfile(weights_path):
            raise ModelLoadError(f"Classifier weights not found at: {weights_path}")

        start = time.perf_counter()
        state_dict = self._read_state_dict(weights_path)

        model = resnet34(weights=None, num_classes=CLASS_COUNT)
        try:
            model.load_state_dict(state_dict, strict=True)
        except RuntimeError as exc:
            raise ModelLoadError(
                f"Weights at {weights_path} do not match {self.ARCHITECTURE}: {exc}"
            ) from exc
        model.eval()
        model.to(self.device)

        labels = self._load_labels(os.path.join(os.path.dirname(weights_path), labels_file))
        if len(labels) != model.fc.out_features:
            raise ModelLoadError(
                f"Label table has {len(labels)} entries, model has {model.fc.out_features} classes"
            )

        self.model = model
        self.labels = labels
        self.weights_path = weights_path
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("%s loaded from %s on %s in %.0fms", self.ARCHITECTURE, weights_path, self.device, elapsed_ms)
        return self

    def classify(self, image: torch.Tensor) -> List[Prediction]:
        """Softmax probabilities for every class, in class-index order."""
        if not self.is_loaded:
            raise NotLoadedError()

        if image.dim() == len(_INPUT_SHAPE):
            batch = image.unsqueeze(0)
        else:
            batch = image
        if batch.dim() != 4 or batch.shape[0] != 1 or tuple(batch.shape[1:]) != _INPUT_SHAPE:
            raise ValueError(f"Expected image tensor of shape {list(_INPUT_SHAPE)}, got {list(image.shape)}")

        start = time.perf_counter()
        with torch.inference_mode():
            logits = self.model(batch.to(self.device, dtype=torch.float32))
            # float64 so the class probabilities sum to 1 within 1e-6
            probs = torch.softmax(logits.to(torch.float64), dim=-1)[0]
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("Inference completed in %.2fms", elapsed_ms)

        return [Prediction(label, prob) for label, prob in zip(self.labels, probs.cpu().tolist())]

    @staticmethod
    def _read_state_dict(weights_path: str) -> Mapping:
        try:
            checkpoint = torch.load(weights_path, map_location="cpu", weights_only=True)
        except Exception as exc:
            raise ModelLoadError(f"Failed to read weights from {weights_path}: {exc}") from exc

        if isinstance(checkpoint, Mapping) and isinstance(checkpoint.get("state_dict"), Mapping):
            checkpoint = checkpoint["state_dict"]
        if not isinstance(checkpoint, Mapping) or not all(
            isinstance(value, torch.Tensor) for value in checkpoint.values()
        ):
            raise ModelLoadError(f"{weights_path} does not contain a state dict")

        # Checkpoints saved from nn.DataParallel prefix every key
        return {key.removeprefix("module."): value for key, value in checkpoint.items()}

    @staticmethod
    def _load_labels(labels_path: str) -> List[str]:
        if os.path.isfile(labels_path):
            with open(labels_path, encoding="utf-8") as handle:
                labels = [line.strip() for line in handle if line.strip()]
            logger.info("Loaded %d class labels from %s", len(labels), labels_path)
            return labels
        return list(ResNet34_Weights.IMAGENET1K_V1.meta["categories"])


def load(model_path: str, **kwargs) -> ImageClassifier:
    """Load a classifier from ``model_path``. See ImageClassifier.load."""
    return ImageClassifier().load(model_path, **kwargs)


def classify(handle: Optional[ClassifierInterface], image: torch.Tensor) -> List[Prediction]:
    """Classify ``image`` with a loaded handle."""
    if handle is None:
        raise NotLoadedError()
    return handle.classify(image)
