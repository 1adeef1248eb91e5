import logging
from pathlib import Path
from typing import Sequence

import cv2
import numpy as np

from longshot.errors import EmptyInputError, EncodingError, SurfaceAllocationError
from longshot.pipeline.geometry import Layout


class Compositor:
    """
    Draws resolved capture regions onto a single output surface and
    encodes the result as PNG.

    Surfaces are BGRA; area that no capture covers stays transparent.
    """

    def __init__(self, compression: int = 3):
        """
        compression: PNG compression level 0-9 (output is lossless either way)
        """
        self.log = logging.getLogger("Compositor")
        self.compression = compression

    def allocate(self, width: int, height: int) -> np.ndarray:
        try:
            return np.zeros((height, width, 4), dtype=np.uint8)
        except (MemoryError, ValueError) as e:
            raise SurfaceAllocationError(f"Failed to allocate {width}x{height} surface: {e}") from e

    def compose(self, images: Sequence[np.ndarray], layout: Layout) -> np.ndarray:
        """
        Allocate the layout's canvas and draw every instruction in order.
        Returns the untrimmed canvas.
        """
        canvas = self.allocate(layout.width, layout.height)

        for instruction in layout.instructions:
            src = instruction.source
            dest_y = instruction.destination_y
            image = images[instruction.index]

            self.log.debug(
                f"Drawing capture {instruction.index + 1}: "
                f"src({src.x}, {src.y}, {src.width}x{src.height}) -> dest(0, {dest_y})"
            )
            canvas[dest_y:dest_y + src.height, 0:src.width] = \
                image[src.y:src.bottom, src.x:src.x + src.width]

        return canvas

    def trim(self, canvas: np.ndarray, drawn_height: int) -> np.ndarray:
        """Copy the drawn rows into a surface of exactly that height."""
        if drawn_height <= 0:
            raise EmptyInputError("No capture contributed visible content")

        if drawn_height >= canvas.shape[0]:
            return canvas

        self.log.info(f"Trimming canvas from {canvas.shape[0]} to {drawn_height}")
        trimmed = self.allocate(canvas.shape[1], drawn_height)
        trimmed[:] = canvas[:drawn_height]
        return trimmed

    def encode(self, surface: np.ndarray) -> bytes:
        """Encode a BGRA surface as PNG bytes."""
        if surface is None or surface.size == 0:
            raise EncodingError("Cannot encode an empty surface")

        try:
            ok, buffer = cv2.imencode(".png", surface, [cv2.IMWRITE_PNG_COMPRESSION, self.compression])
        except cv2.error as e:
            raise EncodingError(f"PNG encoding failed: {e}") from e

        if not ok:
            raise EncodingError("PNG encoding failed")

        data = buffer.tobytes()
        self.log.info(f"Stitched PNG created: {len(data)} bytes")
        return data

    def save(self, png: bytes, path: Path) -> bool:
        """
        Write encoded PNG bytes to disk.

        :param png: Encoded image
        :param path: Output path
        :return: True if successful, False otherwise
        """
        if not png:
            self.log.error("Cannot save empty image")
            return False

        try:
            Path(path).write_bytes(png)
            self.log.info(f"Saved stitched image to {path}")
            return True
        except OSError as e:
            self.log.error(f"Failed to save image: {e}")
            return False
