from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Union

import yaml


@dataclass
class StitchConfig:
    """Tuning knobs for a stitch call.

    Heights given here are logical (CSS) pixels unless noted otherwise;
    they are scaled by the device pixel ratio at stitch time.
    """
    overlap_height: int = 75              # band repeated between consecutive captures
    header_compare_height: int = 200      # window scanned for a sticky header
    pixel_diff_threshold: int = 30        # summed |dR|+|dG|+|dB| above which a pixel differs
    row_mismatch_ratio: float = 0.05      # fraction of differing pixels that breaks a row
    min_header_height: int = 20           # device px, shorter runs are noise
    max_dimension: int = 32767            # raster ceiling in either axis
    default_width: int = 800
    default_height: int = 600
    max_captures: int = 100

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "StitchConfig":
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "StitchConfig":
        if not isinstance(data, dict):
            raise ValueError(f"Config must be a mapping, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}")

        return cls(**data)

    def to_dict(self) -> dict:
        return asdict(self)


def load_config(path: Union[str, Path, None] = None) -> StitchConfig:
    """Load a config file, or return defaults when no path is given."""
    if path is None:
        return StitchConfig()
    return StitchConfig.from_yaml(path)
