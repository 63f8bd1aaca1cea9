"""
Image Decoder Module
Turns uploaded image bytes into a normalized ImageNet input tensor.
"""

import io
import logging

import numpy as np
import torch
from PIL import Image

from .errors import DecodeError

logger = logging.getLogger("FOXCHECK_DECODER")

INPUT_SIZE = 224

# ImageNet training statistics used by the torchvision ResNet weights
IMAGENET_MEAN = np.array([0.485, 0.456, 0.406], dtype=np.float32)
IMAGENET_STD = np.array([0.229, 0.224, 0.225], dtype=np.float32)


def decode_and_normalize(data: bytes) -> torch.Tensor:
    """
    Decode raw image bytes into a [3, 224, 224] float tensor.

    The image is resized so its shorter side is 224 px (bilinear), centre
    cropped to 224x224, scaled to [0, 1] and normalized per channel with
    the ImageNet mean and standard deviation.

    Args:
        data: Encoded image bytes (JPEG, PNG, WEBP, ...)

    Returns:
        Channel-first float32 tensor of shape [3, 224, 224]

    Raises:
        DecodeError: If the bytes are empty, not a supported image encoding,
            truncated, or decode to an image with no pixels.
    """
    image = _decode(data)
    image = _resize_and_crop(image, INPUT_SIZE)

    image_array = np.asarray(image, dtype=np.float32) / 255.0
    image_array = (image_array - IMAGENET_MEAN) / IMAGENET_STD
    image_array = np.transpose(image_array, (2, 0, 1))

    return torch.from_numpy(np.ascontiguousarray(image_array))


def _decode(data: bytes) -> Image.Image:
    if not data:
        raise DecodeError("Image payload is empty")

    try:
        image = Image.open(io.BytesIO(data))
        # Force a full decode so truncated payloads fail here
        image.load()
    except Image.DecompressionBombError as exc:
        raise DecodeError(f"Image is too large to decode: {exc}") from exc
    except (OSError, ValueError, SyntaxError) as exc:
        logger.warning("Failed to decode %d byte upload: %s", len(data), exc)
        raise DecodeError(f"Unsupported or corrupt image: {exc}") from exc

    width, height = image.size
    if width == 0 or height == 0:
        raise DecodeError(f"Decoded image has no pixels ({width}x{height})")

    logger.debug("Decoded %s image %dx%d (%s)", image.format, width, height, image.mode)
    return image.convert("RGB")


def _resize_and_crop(image: Image.Image, size: int) -> Image.Image:
    width, height = image.size
    scale = size / min(width, height)
    new_width = max(size, round(width * scale))
    new_height = max(size, round(height * scale))
    image = image.resize((new_width, new_height), Image.Resampling.BILINEAR)

    left = (new_width - size) // 2
    top = (new_height - size) // 2
    return image.crop((left, top, left + size, top + size))
