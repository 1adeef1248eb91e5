"""Capture-side data: the screenshots handed to the stitcher and how they are planned."""

from .models import BoundingRect, Capture, ContainerBounds, CropBounds, ElementBounds
from .planner import CaptureSlot, plan_captures
from .manifest import Manifest, load_manifest

__all__ = [
    "BoundingRect",
    "Capture",
    "ContainerBounds",
    "CropBounds",
    "ElementBounds",
    "CaptureSlot",
    "plan_captures",
    "Manifest",
    "load_manifest",
]
