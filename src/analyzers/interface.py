"""
Classifier Interface Module
Abstract base class defining the contract for image classifier implementations.
"""

from abc import ABC, abstractmethod
from typing import List, NamedTuple

import torch


class Prediction(NamedTuple):
    """A class label paired with its probability in [0, 1]."""

    class_name: str
    probability: float


class ClassifierInterface(ABC):
    """Abstract base class for all image classifiers."""

    @property
    @abstractmethod
    def is_loaded(self) -> bool:
        """Whether weights are loaded and classify() may be called."""
        pass

    @abstractmethod
    def classify(self, image: torch.Tensor) -> List[Prediction]:
        """
        Run a forward pass on a single normalized image.

        Args:
            image: Tensor of shape [3, 224, 224]

        Returns:
            One Prediction per class, in class-index order, summing to 1.0
        """
        pass
