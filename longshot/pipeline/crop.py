import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Rect:
    """Pixel rectangle, device px."""
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def clamp(self, shape: Tuple[int, ...]) -> "Rect":
        """
        Clamp to the bounds of an image with the given numpy shape.
        The result may be empty (width or height <= 0).
        """
        h, w = shape[:2]
        x1 = max(0, self.x)
        y1 = max(0, self.y)
        return Rect(
            x=x1,
            y=y1,
            width=min(self.width, w - x1),
            height=min(self.height, h - y1),
        )


class Cropper:
    """
    Cuts rectangular regions out of decoded captures.
    """

    def crop(self, frame: np.ndarray, rect: Rect) -> Optional[np.ndarray]:
        """
        Crop the frame to ``rect``.
        Returns None when the region falls outside the frame; never pads.
        """
        if frame is None or frame.size == 0:
            return None

        region = rect.clamp(frame.shape)
        if not region.is_valid():
            return None

        return frame[region.y:region.bottom, region.x:region.x + region.width]
