"""Fox classification response schemas."""
from pydantic import BaseModel, Field


class PredictionResult(BaseModel):
    """A single ranked ImageNet class."""
    class_name: str
    probability: float = Field(..., ge=0.0)


class BestGuessResult(BaseModel):
    """The top-ranked class shown to the user."""
    class_name: str
    probability_percent: float = Field(..., ge=0.0)


class ClassificationResponse(BaseModel):
    """Response from the fox check."""
    matched: bool
    best: BestGuessResult | None = None
    predictions: list[PredictionResult] = []
    filename: str = ""
    size_bytes: int = 0
