"""
Longshot: full-page and full-element screenshots stitched from
overlapping viewport captures.
"""

from longshot.capture.models import BoundingRect, Capture, ContainerBounds, CropBounds, ElementBounds
from longshot.config import StitchConfig, load_config
from longshot.errors import (
    DecodeError,
    EmptyInputError,
    EncodingError,
    StitchError,
    SurfaceAllocationError,
)
from longshot.pipeline.controller import StitchController

__version__ = "0.1.0"


def stitch_full_page(captures, overlap_height=None, use_custom_container=False,
                     container_bounds=None, device_pixel_ratio=1.0) -> bytes:
    return StitchController().stitch_full_page(
        captures, overlap_height, use_custom_container, container_bounds, device_pixel_ratio
    )


def stitch_custom_container(captures, container_bounds, overlap_height=None, device_pixel_ratio=1.0) -> bytes:
    return StitchController().stitch_custom_container(
        captures, container_bounds, overlap_height, device_pixel_ratio
    )


def stitch_element(captures, element_bounds, overlap_height=None) -> bytes:
    return StitchController().stitch_element(captures, element_bounds, overlap_height)


def stitch_named_region(captures, crop_bounds, overlap_height=None) -> bytes:
    return StitchController().stitch_named_region(captures, crop_bounds, overlap_height)


__all__ = [
    "BoundingRect",
    "Capture",
    "ContainerBounds",
    "CropBounds",
    "ElementBounds",
    "StitchConfig",
    "load_config",
    "DecodeError",
    "EmptyInputError",
    "EncodingError",
    "StitchError",
    "SurfaceAllocationError",
    "StitchController",
    "stitch_full_page",
    "stitch_custom_container",
    "stitch_element",
    "stitch_named_region",
]
