from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

# Encoded PNG/JPEG bytes, a data URL / base64 string, or a path on disk.
ImagePayload = Union[bytes, bytearray, memoryview, str, Path]


def _pick(data: dict, *keys, default=None):
    """Return the first present key; hosts send either snake_case or camelCase."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class BoundingRect:
    """Where the captured subject sat in the viewport, logical px."""
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "BoundingRect":
        return cls(
            x=float(_pick(data, "x", "left", default=0.0)),
            y=float(_pick(data, "y", "top", default=0.0)),
            width=float(_pick(data, "width", default=0.0)),
            height=float(_pick(data, "height", default=0.0)),
        )


@dataclass(frozen=True)
class Capture:
    """One viewport screenshot taken at a given scroll offset."""
    image: ImagePayload
    viewport_height: float = 0.0
    viewport_width: float = 0.0
    scroll_y: float = 0.0
    bounding_rect: Optional[BoundingRect] = None
    is_last_capture: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Capture":
        image = _pick(data, "image", "data_url", "dataUrl")
        if image is None:
            raise ValueError("Capture is missing its image payload")

        rect = _pick(data, "bounding_rect", "boundingRect")
        return cls(
            image=image,
            viewport_height=float(_pick(data, "viewport_height", "viewportHeight", default=0.0)),
            viewport_width=float(_pick(data, "viewport_width", "viewportWidth", default=0.0)),
            scroll_y=float(_pick(data, "scroll_y", "scrollY", default=0.0)),
            bounding_rect=BoundingRect.from_dict(rect) if rect is not None else None,
            is_last_capture=bool(_pick(data, "is_last_capture", "isLastCapture", default=False)),
        )


def _check_ratio(device_pixel_ratio: float):
    if device_pixel_ratio < 1:
        raise ValueError(f"device_pixel_ratio must be >= 1, got {device_pixel_ratio}")


def _check_size(width: float, height: float):
    if width <= 0 or height <= 0:
        raise ValueError(f"Bounds must have positive size, got {width}x{height}")


@dataclass(frozen=True)
class ContainerBounds:
    """Viewport rectangle of a custom scroll container, logical px."""
    left: float
    top: float
    width: float
    height: float

    def __post_init__(self):
        _check_size(self.width, self.height)

    @classmethod
    def from_dict(cls, data: dict) -> "ContainerBounds":
        return cls(
            left=float(_pick(data, "left", "x", default=0.0)),
            top=float(_pick(data, "top", "y", default=0.0)),
            width=float(data["width"]),
            height=float(data["height"]),
        )


@dataclass(frozen=True)
class CropBounds:
    """Fixed crop rectangle applied to every capture (a known sub-panel)."""
    left: float
    top: float
    width: float
    height: float
    device_pixel_ratio: float = 1.0

    def __post_init__(self):
        _check_size(self.width, self.height)
        _check_ratio(self.device_pixel_ratio)

    @classmethod
    def from_dict(cls, data: dict) -> "CropBounds":
        return cls(
            left=float(_pick(data, "left", "x", default=0.0)),
            top=float(_pick(data, "top", "y", default=0.0)),
            width=float(data["width"]),
            height=float(data["height"]),
            device_pixel_ratio=float(_pick(data, "device_pixel_ratio", "devicePixelRatio", default=1.0)),
        )


@dataclass(frozen=True)
class ElementBounds:
    """
    Geometry of a captured element, logical px.

    With ``has_internal_scroll`` the element stays put and ``height`` is its
    visible height; otherwise the page scrolls it past the viewport and
    ``height`` is the element's full height.
    """
    width: float
    height: float
    offset_x: float = 0.0
    offset_y: float = 0.0
    device_pixel_ratio: float = 1.0
    has_internal_scroll: bool = False

    def __post_init__(self):
        _check_size(self.width, self.height)
        _check_ratio(self.device_pixel_ratio)

    @classmethod
    def from_dict(cls, data: dict) -> "ElementBounds":
        return cls(
            width=float(data["width"]),
            height=float(data["height"]),
            offset_x=float(_pick(data, "offset_x", "offsetX", "x", default=0.0)),
            offset_y=float(_pick(data, "offset_y", "offsetY", "y", default=0.0)),
            device_pixel_ratio=float(_pick(data, "device_pixel_ratio", "devicePixelRatio", default=1.0)),
            has_internal_scroll=bool(_pick(data, "has_internal_scroll", "hasInternalScroll", default=False)),
        )
