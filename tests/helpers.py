"""Synthetic capture builders shared by the test modules."""

import cv2
import numpy as np

from longshot.capture.models import BoundingRect, Capture


def noise(height: int, width: int, seed: int = 0) -> np.ndarray:
    """Opaque random BGRA image; no two rows are alike."""
    rng = np.random.default_rng(seed)
    bgr = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
    alpha = np.full((height, width, 1), 255, dtype=np.uint8)
    return np.concatenate([bgr, alpha], axis=2)


def encode_png(image: np.ndarray) -> bytes:
    ok, buffer = cv2.imencode(".png", image)
    assert ok
    return buffer.tobytes()


def decode_png(data: bytes) -> np.ndarray:
    return cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)


def make_capture(image: np.ndarray, scroll_y: float = 0, rect: BoundingRect = None, last: bool = False) -> Capture:
    h, w = image.shape[:2]
    return Capture(
        image=encode_png(image),
        viewport_height=h,
        viewport_width=w,
        scroll_y=scroll_y,
        bounding_rect=rect,
        is_last_capture=last,
    )


def with_header(header: np.ndarray, content: np.ndarray) -> np.ndarray:
    """Stack a fixed header band on top of viewport content."""
    return np.concatenate([header, content], axis=0)
