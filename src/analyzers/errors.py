"""Exceptions raised by the image inference pipeline."""


class InferenceError(Exception):
    """Base class for all inference pipeline errors."""

    default_message = "Inference failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class DecodeError(InferenceError):
    """Raised when uploaded bytes cannot be decoded into an image."""

    default_message = "Could not decode image"


class ModelLoadError(InferenceError):
    """Raised when the classifier weights are missing, corrupt or incompatible."""

    default_message = "Could not load classifier weights"


class NotLoadedError(InferenceError):
    """Raised when inference is requested before the classifier is loaded."""

    default_message = "Classifier has not been loaded"


class InvalidKError(InferenceError):
    """Raised when a top-k request asks for an impossible number of entries."""

    default_message = "k must be between 1 and the number of classes"
