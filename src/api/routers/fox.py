"""HTML form router - the "Is it a fox?" pages."""
import logging
import math
from pathlib import Path

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from starlette.datastructures import UploadFile

import config
from analyzers.errors import DecodeError
from api.services.classification_service import run_fox_check
from api.services.model_registry import ModelRegistry, ModelUnavailableError, get_registry

logger = logging.getLogger(__name__)

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[1] / "templates"))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


templates.env.filters["round_half_up"] = round_half_up


@router.get("/", response_class=HTMLResponse, summary="Image submission form")
async def file_submission(request: Request):
    """Render the upload form."""
    return templates.TemplateResponse(request, "submission.html")


@router.post("/check", response_class=HTMLResponse, summary="Is the uploaded image a fox?")
async def is_it_a_fox(request: Request, registry: ModelRegistry = Depends(get_registry)):
    """
    Classify every file posted in the form and render the verdict.

    The field names are ignored. A form with no files renders the
    "couldn't figure out what it was" message.
    """
    form = await request.form()
    uploads: list[bytes] = []
    for _, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        data = await value.read()
        # Browsers post an empty, unnamed part when no file was chosen
        if not value.filename and not data:
            continue
        if len(data) > config.MAX_UPLOAD_SIZE:
            return _error_page(request, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                               f"The image is larger than {config.MAX_UPLOAD_SIZE // (1024 * 1024)} MB.")
        uploads.append(data)

    try:
        result = await run_fox_check(registry, uploads)
    except DecodeError as exc:
        logger.warning("Rejected upload: %s", exc)
        return _error_page(request, status.HTTP_400_BAD_REQUEST,
                           "We couldn't process that image. Is it a valid picture?")
    except ModelUnavailableError as exc:
        logger.error("Classifier unavailable: %s", exc)
        return _error_page(request, status.HTTP_503_SERVICE_UNAVAILABLE,
                           "The fox detector isn't ready yet. Try again shortly.")
    except Exception:
        logger.exception("Fox check failed")
        return _error_page(request, status.HTTP_500_INTERNAL_SERVER_ERROR,
                           "Something broke while looking at that image.")

    return templates.TemplateResponse(request, "identified.html", {"result": result})


def _error_page(request: Request, status_code: int, message: str):
    return templates.TemplateResponse(
        request, "error.html", {"message": message}, status_code=status_code
    )
