"""Capture manifests: a capture run stored on disk.

A manifest is a YAML (or JSON) document::

    mode: element            # full_page | custom_container | element | named_region
    overlap_height: 75
    device_pixel_ratio: 2
    bounds:
      width: 640
      height: 2400
      offset_x: 100
      offset_y: 0
      has_internal_scroll: false
    captures:
      - image: capture_000.png
        scroll_y: 0
        viewport_height: 900
        viewport_width: 1280
        bounding_rect: {x: 100, y: 0, width: 640, height: 2400}
      - image: capture_001.png
        scroll_y: 825
        is_last_capture: true

Image paths are resolved relative to the manifest file.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

import yaml
from loguru import logger

from .models import Capture, ContainerBounds, CropBounds, ElementBounds

MODES = ("full_page", "custom_container", "element", "named_region")


@dataclass
class Manifest:
    mode: str = "full_page"
    overlap_height: Optional[float] = None
    device_pixel_ratio: float = 1.0
    bounds: dict = field(default_factory=dict)
    captures: List[Capture] = field(default_factory=list)

    def run(self, controller) -> bytes:
        """Stitch the manifest's captures with a StitchController."""
        if self.mode == "full_page":
            return controller.stitch_full_page(
                self.captures,
                self.overlap_height,
                device_pixel_ratio=self.device_pixel_ratio,
            )

        if self.mode == "custom_container":
            return controller.stitch_custom_container(
                self.captures,
                ContainerBounds.from_dict(self.bounds),
                self.overlap_height,
                self.device_pixel_ratio,
            )

        if self.mode == "element":
            bounds = dict(self.bounds)
            bounds.setdefault("device_pixel_ratio", self.device_pixel_ratio)
            return controller.stitch_element(
                self.captures,
                ElementBounds.from_dict(bounds),
                self.overlap_height,
            )

        if self.mode == "named_region":
            bounds = dict(self.bounds)
            bounds.setdefault("device_pixel_ratio", self.device_pixel_ratio)
            return controller.stitch_named_region(
                self.captures,
                CropBounds.from_dict(bounds),
                self.overlap_height,
            )

        raise ValueError(f"Unknown mode '{self.mode}'. Choose from {list(MODES)}")


def _read_document(path: Path) -> dict:
    with open(path, "r") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Manifest {path} must contain a mapping at the top level")
    return data


def load_manifest(path: Union[str, Path]) -> Manifest:
    path = Path(path)
    data = _read_document(path)

    mode = data.get("mode", "full_page")
    if mode not in MODES:
        raise ValueError(f"Unknown mode '{mode}'. Choose from {list(MODES)}")

    entries = data.get("captures") or []
    captures = []
    for entry in entries:
        entry = dict(entry)
        image = entry.get("image")
        if isinstance(image, str) and not image.startswith("data:"):
            entry["image"] = path.parent / image
        captures.append(Capture.from_dict(entry))

    logger.info(f"Loaded manifest {path.name}: {len(captures)} captures, mode={mode}")

    overlap = data.get("overlap_height")
    return Manifest(
        mode=mode,
        overlap_height=float(overlap) if overlap is not None else None,
        device_pixel_ratio=float(data.get("device_pixel_ratio", 1.0)),
        bounds=data.get("bounds") or {},
        captures=captures,
    )
