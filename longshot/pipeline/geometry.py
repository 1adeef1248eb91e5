"""
Geometry resolution for stitching.

Every stitch call runs in exactly one mode. A mode knows, in device pixels:

- how large the output canvas should be,
- which window to compare when looking for a sticky header,
- which rectangle of each capture to draw.

``resolve_layout`` folds over the decoded captures carrying a ``Cursor``
(destination row in the output, element rows already drawn) and produces one
``DrawInstruction`` per capture that contributes pixels.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from longshot.capture.models import Capture, ContainerBounds, CropBounds, ElementBounds
from longshot.pipeline.crop import Rect
from longshot.pipeline.dimensions import MAX_DIMENSION, sanitize_dimension

logger = logging.getLogger(__name__)


def to_device_px(value: float, device_pixel_ratio: float = 1.0) -> int:
    """Scale logical px to device px, rounding halves up."""
    return int(math.floor(value * device_pixel_ratio + 0.5))


@dataclass(frozen=True)
class DrawInstruction:
    index: int              # capture position in the input sequence
    source: Rect            # device px inside the decoded capture
    destination_y: int      # device px inside the output surface


@dataclass(frozen=True)
class Cursor:
    destination_y: int = 0
    rows_drawn: int = 0     # element rows already on the canvas (page-scroll mode)


@dataclass(frozen=True)
class Layout:
    width: int
    height: int
    instructions: Tuple[DrawInstruction, ...]
    cursors: Tuple[Cursor, ...]     # cursor after each capture, skipped ones included

    @property
    def drawn_height(self) -> int:
        return self.cursors[-1].destination_y if self.cursors else 0


@dataclass(frozen=True)
class Placement:
    """Where the subject sat in one capture, device px."""
    offset_x: int
    offset_y: int
    height: int


class StitchMode:
    name = "base"
    device_pixel_ratio: float = 1.0

    def header_window(self, images: Sequence[np.ndarray], compare_height: int) -> Optional[Rect]:
        """Window compared between the first two captures, or None to skip detection."""
        return None

    def canvas_size(self, images: Sequence[np.ndarray], header: int) -> Tuple[int, int]:
        raise NotImplementedError

    def source_rect(self, index: int, image: np.ndarray, header: int, rows_drawn: int) -> Tuple[Rect, int]:
        """Unclamped source rectangle for one capture and the updated row watermark."""
        raise NotImplementedError


@dataclass(frozen=True)
class WholePage(StitchMode):
    """Captures frame the whole viewport and differ only by vertical scroll."""
    overlap: int = 0
    device_pixel_ratio: float = 1.0
    name = "whole_page"

    def header_window(self, images, compare_height):
        h, w = images[0].shape[:2]
        return Rect(0, 0, w, min(compare_height, h // 2))

    def canvas_size(self, images, header):
        first_h, first_w = images[0].shape[:2]
        total = first_h
        for image in images[1:]:
            total += max(0, image.shape[0] - self.overlap - header)
        return first_w, total

    def source_rect(self, index, image, header, rows_drawn):
        h, w = image.shape[:2]
        if index == 0:
            return Rect(0, 0, w, h), rows_drawn
        skip = self.overlap + header
        return Rect(0, skip, w, h - skip), rows_drawn


@dataclass(frozen=True)
class CustomContainer(StitchMode):
    """Every capture is cropped to a scroll container sitting inside the page."""
    left: int = 0
    top: int = 0
    width: int = 0
    height: int = 0
    overlap: int = 0
    device_pixel_ratio: float = 1.0
    name = "custom_container"

    def header_window(self, images, compare_height):
        return Rect(self.left, self.top, self.width, min(compare_height, self.height // 2))

    def canvas_size(self, images, header):
        step = max(0, self.height - self.overlap - header)
        return self.width, self.height + step * (len(images) - 1)

    def source_rect(self, index, image, header, rows_drawn):
        if index == 0:
            return Rect(self.left, self.top, self.width, self.height), rows_drawn
        skip = self.overlap + header
        return Rect(self.left, self.top + skip, self.width, self.height - skip), rows_drawn


@dataclass(frozen=True)
class NamedRegion(CustomContainer):
    """Fixed crop rectangle; only the fixed overlap is removed, no header detection."""
    name = "named_region"

    def header_window(self, images, compare_height):
        return None

    def canvas_size(self, images, header):
        return super().canvas_size(images, 0)

    def source_rect(self, index, image, header, rows_drawn):
        return super().source_rect(index, image, 0, rows_drawn)


@dataclass(frozen=True)
class ElementInternalScroll(StitchMode):
    """The element stays in place; its content scrolls inside it."""
    width: int = 0
    placements: Tuple[Placement, ...] = ()
    overlap: int = 0
    device_pixel_ratio: float = 1.0
    name = "element_internal_scroll"

    def header_window(self, images, compare_height):
        first = self.placements[0]
        return Rect(max(0, first.offset_x), first.offset_y, self.width, min(compare_height, first.height // 2))

    def canvas_size(self, images, header):
        total = self.placements[0].height
        for placement in self.placements[1:]:
            total += max(0, placement.height - self.overlap - header)
        return self.width, total

    def source_rect(self, index, image, header, rows_drawn):
        p = self.placements[index]
        x = max(0, p.offset_x)
        if index == 0:
            return Rect(x, p.offset_y, self.width, p.height), rows_drawn
        # A header fixed inside the element repeats at its top in every capture.
        skip = self.overlap + header
        return Rect(x, p.offset_y + skip, self.width, p.height - skip), rows_drawn


@dataclass(frozen=True)
class ElementPageScroll(StitchMode):
    """
    The element moves through the viewport as the page scrolls.

    Each capture exposes the element rows ``[row_start, row_end)``; rows below
    the running watermark were drawn from an earlier capture and are skipped.
    """
    width: int = 0
    total_height: int = 0
    placements: Tuple[Placement, ...] = ()
    device_pixel_ratio: float = 1.0
    name = "element_page_scroll"

    def header_window(self, images, compare_height):
        # The row watermark already drops every repeated row.
        return None

    def canvas_size(self, images, header):
        return self.width, self.total_height

    def visible_rows(self, index: int, image: np.ndarray) -> Tuple[int, int]:
        """Half-open range of element rows shown by one capture."""
        p = self.placements[index]
        row_start = max(0, -p.offset_y)
        row_end = row_start + (image.shape[0] - max(0, p.offset_y))
        return row_start, min(row_end, self.total_height)

    def source_rect(self, index, image, header, rows_drawn):
        p = self.placements[index]
        row_start, row_end = self.visible_rows(index, image)

        skip = max(0, rows_drawn - row_start)

        y = max(0, p.offset_y) + skip
        height = min(image.shape[0] - y, row_end - row_start - skip)

        logger.debug(
            f"Capture {index + 1}: element rows {row_start}-{row_end}, "
            f"overlap={skip}px"
        )
        return Rect(max(0, p.offset_x), y, self.width, height), max(rows_drawn, row_end)


# ----------------------------------------------------------------------
# Mode construction from logical (CSS px) inputs
# ----------------------------------------------------------------------

def whole_page_mode(overlap_height: float, device_pixel_ratio: float = 1.0) -> WholePage:
    return WholePage(
        overlap=to_device_px(overlap_height, device_pixel_ratio),
        device_pixel_ratio=device_pixel_ratio,
    )


def custom_container_mode(
    bounds: ContainerBounds,
    overlap_height: float,
    device_pixel_ratio: float = 1.0,
) -> CustomContainer:
    return CustomContainer(
        left=to_device_px(bounds.left, device_pixel_ratio),
        top=to_device_px(bounds.top, device_pixel_ratio),
        width=to_device_px(bounds.width, device_pixel_ratio),
        height=to_device_px(bounds.height, device_pixel_ratio),
        overlap=to_device_px(overlap_height, device_pixel_ratio),
        device_pixel_ratio=device_pixel_ratio,
    )


def named_region_mode(bounds: CropBounds, overlap_height: float) -> NamedRegion:
    ratio = bounds.device_pixel_ratio
    return NamedRegion(
        left=to_device_px(bounds.left, ratio),
        top=to_device_px(bounds.top, ratio),
        width=to_device_px(bounds.width, ratio),
        height=to_device_px(bounds.height, ratio),
        overlap=to_device_px(overlap_height, ratio),
        device_pixel_ratio=ratio,
    )


def element_placements(captures: Sequence[Capture], bounds: ElementBounds) -> Tuple[Placement, ...]:
    """Per-capture element position; a capture's own bounding rect wins over the bounds."""
    ratio = bounds.device_pixel_ratio
    placements = []
    for capture in captures:
        rect = capture.bounding_rect
        offset_x = rect.x if rect is not None else bounds.offset_x
        offset_y = rect.y if rect is not None else bounds.offset_y
        height = (rect.height if rect is not None else 0) or bounds.height
        placements.append(
            Placement(
                offset_x=to_device_px(offset_x, ratio),
                offset_y=to_device_px(offset_y, ratio),
                height=to_device_px(height, ratio),
            )
        )
    return tuple(placements)


def element_mode(captures: Sequence[Capture], bounds: ElementBounds, overlap_height: float) -> StitchMode:
    ratio = bounds.device_pixel_ratio
    width = to_device_px(bounds.width, ratio)

    if bounds.has_internal_scroll:
        return ElementInternalScroll(
            width=width,
            placements=element_placements(captures, bounds),
            overlap=to_device_px(overlap_height, ratio),
            device_pixel_ratio=ratio,
        )

    return ElementPageScroll(
        width=width,
        total_height=to_device_px(bounds.height, ratio),
        placements=element_placements(captures, bounds),
        device_pixel_ratio=ratio,
    )


# ----------------------------------------------------------------------
# Resolution
# ----------------------------------------------------------------------

def resolve_step(
    mode: StitchMode,
    index: int,
    image: np.ndarray,
    header: int,
    cursor: Cursor,
    canvas: Tuple[int, int],
) -> Tuple[Optional[DrawInstruction], Cursor]:
    """
    Resolve one capture against the running cursor.

    The source rectangle is clamped to the image and to the space left on the
    canvas. Captures left with nothing to draw return ``None`` and keep the
    destination row unchanged.
    """
    canvas_width, canvas_height = canvas

    rect, rows_drawn = mode.source_rect(index, image, header, cursor.rows_drawn)
    rect = rect.clamp(image.shape)
    rect = Rect(
        x=rect.x,
        y=rect.y,
        width=min(rect.width, canvas_width),
        height=min(rect.height, canvas_height - cursor.destination_y),
    )

    if not rect.is_valid():
        logger.info(
            f"Capture {index + 1}: Skipping - no visible content "
            f"(srcHeight={rect.height}, srcWidth={rect.width})"
        )
        return None, Cursor(cursor.destination_y, rows_drawn)

    instruction = DrawInstruction(index=index, source=rect, destination_y=cursor.destination_y)
    return instruction, Cursor(cursor.destination_y + rect.height, rows_drawn)


def resolve_layout(
    mode: StitchMode,
    images: Sequence[np.ndarray],
    header: int = 0,
    default_width: int = 800,
    default_height: int = 600,
    max_dimension: int = MAX_DIMENSION,
) -> Layout:
    """Compute the output canvas size and a draw instruction per contributing capture."""
    if not images:
        raise ValueError("No images to lay out")

    raw_width, raw_height = mode.canvas_size(images, header)
    width = sanitize_dimension(raw_width, default_width, max_dimension)
    height = sanitize_dimension(raw_height, default_height, max_dimension)
    logger.info(f"Canvas dimensions: {width}x{height} (requested {raw_width}x{raw_height}, mode={mode.name})")

    cursor = Cursor()
    instructions: List[DrawInstruction] = []
    cursors: List[Cursor] = []
    for index, image in enumerate(images):
        instruction, cursor = resolve_step(mode, index, image, header, cursor, (width, height))
        if instruction is not None:
            instructions.append(instruction)
        cursors.append(cursor)

    return Layout(width=width, height=height, instructions=tuple(instructions), cursors=tuple(cursors))
