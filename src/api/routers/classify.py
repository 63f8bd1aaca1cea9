"""Fox classification JSON router."""
from fastapi import APIRouter, Depends, File, UploadFile, HTTPException, status

import config
from analyzers.errors import DecodeError
from api.schemas.classification import ClassificationResponse
from api.services.classification_service import run_fox_check
from api.services.model_registry import ModelRegistry, ModelUnavailableError, get_registry

router = APIRouter()


@router.post(
    "/classify",
    response_model=ClassificationResponse,
    status_code=status.HTTP_200_OK,
    summary="Check whether an image shows a fox",
)
async def classify_image(
    file: UploadFile = File(..., description="Image file (JPEG/PNG/WEBP)"),
    registry: ModelRegistry = Depends(get_registry),
):
    """
    Run the ResNet-34 ImageNet classifier on an image.

    - Ranks the top ImageNet classes
    - Reports whether any of them is a fox
    - Always reports the single most likely class

    Args:
        file: Image file in any format Pillow can decode

    Returns:
        Verdict, best guess and ranked predictions
    """
    data = await file.read()
    if len(data) > config.MAX_UPLOAD_SIZE:
        raise HTTPException(413, f"File exceeds {config.MAX_UPLOAD_SIZE // (1024 * 1024)} MB limit.")

    try:
        result = await run_fox_check(registry, [data])
    except DecodeError as exc:
        raise HTTPException(400, str(exc))
    except ModelUnavailableError as exc:
        raise HTTPException(503, str(exc))
    except Exception as exc:
        raise HTTPException(500, f"Image analysis error: {exc}")

    return ClassificationResponse(
        matched=result.matched,
        best=None if result.best is None else {
            "class_name": result.best.class_name,
            "probability_percent": result.best.probability_percent,
        },
        predictions=[
            {"class_name": p.class_name, "probability": p.probability} for p in result.predictions
        ],
        filename=file.filename or "upload",
        size_bytes=len(data),
    )
