"""Turns encoded capture payloads into BGRA pixel surfaces."""

import base64
import binascii
import logging
from pathlib import Path

import cv2
import numpy as np

from longshot.errors import DecodeError

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:"


def _payload_bytes(payload) -> bytes:
    if isinstance(payload, Path):
        try:
            return payload.read_bytes()
        except OSError as exc:
            raise DecodeError(f"Failed to read image file {payload}: {exc}") from exc

    if isinstance(payload, str):
        text = payload.strip()
        if text.startswith(DATA_URL_PREFIX):
            header, sep, text = text.partition(",")
            if not sep:
                raise DecodeError("Malformed data URL: missing ',' separator")
            if ";base64" not in header:
                raise DecodeError(f"Unsupported data URL encoding: {header}")
        try:
            return base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DecodeError(f"Invalid base64 image payload: {exc}") from exc

    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)

    raise DecodeError(f"Unsupported image payload type: {type(payload).__name__}")


def to_bgra(image: np.ndarray) -> np.ndarray:
    """Promote a grayscale / BGR image to 4-channel BGRA."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    channels = image.shape[2]
    if channels == 4:
        return image
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
    if channels == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2BGRA)
    raise DecodeError(f"Unsupported channel count: {channels}")


def decode_image(payload) -> np.ndarray:
    """
    Decode an encoded image into an 8-bit BGRA array.

    :param payload: PNG/JPEG bytes, a data URL, a bare base64 string or a Path
    :return: array of shape (height, width, 4)
    :raises DecodeError: if the payload is not a supported raster image
    """
    data = _payload_bytes(payload)
    if not data:
        raise DecodeError("Empty image payload")

    buffer = np.frombuffer(data, dtype=np.uint8)
    try:
        image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    except cv2.error as exc:
        raise DecodeError(f"Failed to decode image: {exc}") from exc

    if image is None or image.size == 0:
        raise DecodeError("Failed to decode image: unsupported or corrupt data")

    if image.dtype != np.uint8:
        # 16-bit PNGs keep their high byte
        image = (image >> 8).astype(np.uint8) if image.dtype == np.uint16 else image.astype(np.uint8)

    image = to_bgra(image)
    logger.debug("Decoded image %dx%d", image.shape[1], image.shape[0])
    return image
