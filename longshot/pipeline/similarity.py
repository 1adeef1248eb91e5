import logging

import numpy as np

from longshot.pipeline.crop import Cropper, Rect


class HeaderDetector:
    """
    Detects a sticky / fixed header repeated at the top of consecutive captures.

    Two equally sized windows are cut from the same position in two captures
    and compared row by row. The header is the leading run of rows that match
    within tolerance; anti-aliasing and compression noise are tolerated.
    """

    def __init__(
        self,
        pixel_diff_threshold: int = 30,     # summed |dB|+|dG|+|dR| above which a pixel differs
        row_mismatch_ratio: float = 0.05,   # a row matches while fewer pixels than this differ
        min_header_height: int = 20,        # shorter runs are treated as noise
    ):
        self.log = logging.getLogger("HeaderDetector")
        self.pixel_diff_threshold = pixel_diff_threshold
        self.row_mismatch_ratio = row_mismatch_ratio
        self.min_header_height = min_header_height
        self.cropper = Cropper()

    def matching_rows(self, region1: np.ndarray, region2: np.ndarray) -> int:
        """
        Length of the leading run of matching rows between two regions.
        Alpha is ignored.
        """
        if region1.shape[:2] != region2.shape[:2]:
            raise ValueError(f"Region shapes differ: {region1.shape[:2]} vs {region2.shape[:2]}")

        a = region1[:, :, :3].astype(np.int16)
        b = region2[:, :, :3].astype(np.int16)

        pixel_diff = np.abs(a - b).sum(axis=2)
        differing = (pixel_diff > self.pixel_diff_threshold).sum(axis=1)

        width = region1.shape[1]
        row_matches = differing < width * self.row_mismatch_ratio

        mismatches = np.flatnonzero(~row_matches)
        return int(mismatches[0]) if mismatches.size else len(row_matches)

    def detect(self, img1: np.ndarray, img2: np.ndarray, rect: Rect) -> int:
        """
        Height of the sticky header found in ``rect`` of both images, or 0.

        The run is accepted only if it is at least ``min_header_height`` rows
        and shorter than the compared window (a run spanning the whole window
        means near-identical captures, not a header). Any failure yields 0.
        """
        try:
            region1 = self.cropper.crop(img1, rect)
            region2 = self.cropper.crop(img2, rect)

            if region1 is None or region2 is None:
                self.log.warning(f"Header comparison window {rect} lies outside the captures")
                return 0

            if region1.shape != region2.shape:
                self.log.warning(
                    f"Header comparison windows differ in size: {region1.shape} vs {region2.shape}"
                )
                return 0

            max_height = region1.shape[0]
            header = self.matching_rows(region1, region2)
        except Exception as e:
            self.log.warning(f"Failed to detect sticky header: {e}")
            return 0

        if self.min_header_height <= header < max_height:
            self.log.info(f"Detected sticky header height: {header}px")
            return header

        self.log.debug(f"No sticky header (matching run {header}px of {max_height}px window)")
        return 0
