"""
Stitching pipeline.

This package contains the components responsible for:
- Decoding captures into pixel surfaces (decoder)
- Clamping requested surface sizes (dimensions)
- Cutting regions out of captures (crop)
- Detecting sticky headers between captures (similarity)
- Resolving per-capture source rectangles (geometry)
- Drawing, trimming and encoding the output (compositor)
- Running a whole stitch call (controller)
"""

from .crop import Cropper, Rect
from .decoder import decode_image
from .dimensions import sanitize_dimension
from .similarity import HeaderDetector
from .geometry import (
    CustomContainer,
    DrawInstruction,
    ElementInternalScroll,
    ElementPageScroll,
    Layout,
    NamedRegion,
    StitchMode,
    WholePage,
    resolve_layout,
)
from .compositor import Compositor
from .controller import StitchController


__all__ = [
    "Cropper",
    "Rect",
    "decode_image",
    "sanitize_dimension",
    "HeaderDetector",
    "CustomContainer",
    "DrawInstruction",
    "ElementInternalScroll",
    "ElementPageScroll",
    "Layout",
    "NamedRegion",
    "StitchMode",
    "WholePage",
    "resolve_layout",
    "Compositor",
    "StitchController",
]
