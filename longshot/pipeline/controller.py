from pathlib import Path
import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from longshot.capture.models import Capture, ContainerBounds, CropBounds, ElementBounds
from longshot.config import StitchConfig
from longshot.errors import EmptyInputError, StitchError
from longshot.fsm import StitchFSM
from longshot.pipeline.compositor import Compositor
from longshot.pipeline.decoder import decode_image
from longshot.pipeline.geometry import (
    StitchMode,
    custom_container_mode,
    element_mode,
    named_region_mode,
    resolve_layout,
    to_device_px,
    whole_page_mode,
)
from longshot.pipeline.similarity import HeaderDetector


class StitchController:
    """
    Orchestrates one stitch call:
    - Decodes every capture
    - Detects a sticky header between the first two captures
    - Resolves per-capture geometry for the requested mode
    - Composites, trims and encodes the output PNG

    Each call builds its own FSM, images and surface; nothing is shared
    between calls.
    """

    def __init__(self, config: StitchConfig = None, callbacks: Dict = None):
        self.log = logging.getLogger("StitchController")
        self.config = config or StitchConfig()
        self.callbacks = callbacks or {}

        self.header_detector = HeaderDetector(
            pixel_diff_threshold=self.config.pixel_diff_threshold,
            row_mismatch_ratio=self.config.row_mismatch_ratio,
            min_header_height=self.config.min_header_height,
        )
        self.compositor = Compositor()

    # ----------------------------------------------------------------------
    # PUBLIC ENTRY POINTS
    # ----------------------------------------------------------------------

    def stitch_full_page(
        self,
        captures: Sequence[Capture],
        overlap_height: float = None,
        use_custom_container: bool = False,
        container_bounds: Optional[ContainerBounds] = None,
        device_pixel_ratio: float = 1.0,
    ) -> bytes:
        """Stitch whole-viewport captures, optionally cropped to a scroll container."""
        overlap = self._overlap(overlap_height)
        if use_custom_container and container_bounds is not None:
            return self.stitch_custom_container(captures, container_bounds, overlap, device_pixel_ratio)

        self.log.info(f"Stitching {len(captures)} viewport captures with {overlap}px overlap")
        return self.stitch(captures, lambda: whole_page_mode(overlap, device_pixel_ratio))

    def stitch_custom_container(
        self,
        captures: Sequence[Capture],
        container_bounds: ContainerBounds,
        overlap_height: float = None,
        device_pixel_ratio: float = 1.0,
    ) -> bytes:
        overlap = self._overlap(overlap_height)
        self.log.info(f"Stitching {len(captures)} custom container captures, bounds: {container_bounds}")
        return self.stitch(
            captures,
            lambda: custom_container_mode(container_bounds, overlap, device_pixel_ratio),
        )

    def stitch_element(
        self,
        captures: Sequence[Capture],
        element_bounds: ElementBounds,
        overlap_height: float = None,
    ) -> bytes:
        """Stitch captures of a single element, in internal- or page-scroll mode."""
        overlap = self._overlap(overlap_height)
        self.log.info(
            f"Stitching {len(captures)} element captures "
            f"(mode: {'INTERNAL_SCROLL' if element_bounds.has_internal_scroll else 'PAGE_SCROLL'})"
        )
        return self.stitch(captures, lambda: element_mode(captures, element_bounds, overlap))

    def stitch_named_region(
        self,
        captures: Sequence[Capture],
        crop_bounds: CropBounds,
        overlap_height: float = None,
    ) -> bytes:
        """Stitch a fixed sub-panel of the page; only the fixed overlap is removed."""
        overlap = self._overlap(overlap_height)
        self.log.info(f"Stitching {len(captures)} named region captures, crop: {crop_bounds}")
        return self.stitch(captures, lambda: named_region_mode(crop_bounds, overlap))

    def stitch(self, captures: Sequence[Capture], mode) -> bytes:
        """
        Run the stitch state machine for ``captures``.

        :param captures: captures in increasing scroll order
        :param mode: a StitchMode, or a zero-argument callable building one
        :return: encoded PNG bytes
        :raises StitchError: on any fatal failure; no partial output is returned
        """
        fsm = StitchFSM(callbacks=self.callbacks)

        if not captures:
            fsm.fail()
            raise EmptyInputError("No captures to stitch")

        try:
            if callable(mode) and not isinstance(mode, StitchMode):
                mode = mode()

            fsm.load()
            images = self._load_images(captures)

            header = 0
            if len(images) >= 2:
                window = mode.header_window(images, self._compare_height(mode))
                if window is not None:
                    fsm.detect_header()
                    header = self.header_detector.detect(images[0], images[1], window)

            fsm.composite()
            layout = resolve_layout(
                mode,
                images,
                header,
                default_width=self.config.default_width,
                default_height=self.config.default_height,
                max_dimension=self.config.max_dimension,
            )
            surface = self.compositor.compose(images, layout)

            if layout.drawn_height < layout.height:
                fsm.trim()
                surface = self.compositor.trim(surface, layout.drawn_height)

            fsm.encode()
            png = self.compositor.encode(surface)

            fsm.finish()
            return png
        except StitchError as e:
            fsm.fail()
            self.log.error(f"Failed to stitch captures: {e}")
            raise
        except Exception as e:
            fsm.fail()
            self.log.error(f"Failed to stitch captures: {e}", exc_info=True)
            raise StitchError(f"Failed to stitch captures: {e}") from e

    def save(self, png: bytes, path: Path) -> bool:
        return self.compositor.save(png, path)

    # ----------------------------------------------------------------------
    # HELPERS
    # ----------------------------------------------------------------------

    def _overlap(self, overlap_height: Optional[float]) -> float:
        return self.config.overlap_height if overlap_height is None else overlap_height

    def _compare_height(self, mode: StitchMode) -> int:
        return to_device_px(self.config.header_compare_height, mode.device_pixel_ratio)

    def _load_images(self, captures: Sequence[Capture]) -> List[np.ndarray]:
        self.log.info("Loading all captured images...")
        images = []
        for i, capture in enumerate(captures):
            self.log.debug(f"Loading capture {i + 1}/{len(captures)}...")
            images.append(decode_image(capture.image))
        return images
