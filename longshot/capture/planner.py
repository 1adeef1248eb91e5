"""Scroll-offset planning for a capture run.

The capture side scrolls the page (or a container) in steps of
``viewport_height - overlap_height`` so that every pair of consecutive
screenshots shares an ``overlap_height`` band. The stitcher later removes
that band again.
"""

import math
from dataclasses import dataclass
from typing import List

from loguru import logger

MAX_TOTAL_HEIGHT = 32000


@dataclass(frozen=True)
class CaptureSlot:
    index: int
    scroll_y: int
    is_last: bool


def count_captures(
    scroll_height: float,
    viewport_height: float,
    overlap_height: float = 75,
    max_captures: int = 100,
) -> int:
    if scroll_height <= viewport_height:
        return 1

    step = viewport_height - overlap_height
    scrollable = scroll_height - viewport_height
    return min(math.ceil(scrollable / step) + 1, max_captures)


def plan_captures(
    scroll_height: float,
    viewport_height: float,
    overlap_height: float = 75,
    max_captures: int = 100,
) -> List[CaptureSlot]:
    """
    Work out where to scroll for each capture.

    :param scroll_height: total scrollable height of the subject
    :param viewport_height: visible height of the subject
    :param overlap_height: band shared by consecutive captures
    :param max_captures: hard cap on the number of captures
    :return: slots in increasing scroll order
    """
    if scroll_height <= 0 or viewport_height <= 0:
        raise ValueError(
            f"Heights must be positive (scroll_height={scroll_height}, viewport_height={viewport_height})"
        )
    if overlap_height < 0:
        raise ValueError(f"overlap_height must not be negative, got {overlap_height}")
    if viewport_height <= overlap_height:
        raise ValueError(
            f"viewport_height ({viewport_height}) must exceed overlap_height ({overlap_height})"
        )
    if max_captures < 1:
        raise ValueError(f"max_captures must be at least 1, got {max_captures}")

    total = count_captures(scroll_height, viewport_height, overlap_height, max_captures)
    logger.info(
        f"Planning {total} captures (scroll height: {scroll_height}, viewport: {viewport_height})"
    )

    if scroll_height > MAX_TOTAL_HEIGHT:
        logger.warning(
            f"Scroll height {scroll_height}px exceeds {MAX_TOTAL_HEIGHT}px, output may be clamped"
        )

    step = viewport_height - overlap_height
    max_scroll = scroll_height - viewport_height
    slots = []
    for i in range(total):
        scroll_y = int(i * step)
        if i > 0 and scroll_y > max_scroll:
            # The final capture is pinned to the bottom so the tail is not lost.
            scroll_y = int(max_scroll)
            if scroll_y <= slots[-1].scroll_y:
                break
            logger.debug(f"Capture {i + 1}: clamped to bottom at Y={scroll_y}")
        slots.append(
            CaptureSlot(
                index=i,
                scroll_y=scroll_y,
                is_last=scroll_y + viewport_height >= scroll_height,
            )
        )

    return slots
