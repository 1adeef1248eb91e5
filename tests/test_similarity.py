"""Tests for sticky header detection."""

import numpy as np

from longshot.pipeline.crop import Rect
from longshot.pipeline.similarity import HeaderDetector
from tests.helpers import noise


def _pair(window: int, shared_rows: int, width: int = 120):
    first = noise(window, width, seed=10)
    second = noise(window, width, seed=20)
    second[:shared_rows] = first[:shared_rows]
    return first, second


class TestHeaderDetector:
    def test_identical_window_is_rejected(self):
        """A run spanning the whole 40px window means identical captures, not a header."""
        img = noise(40, 120, seed=3)
        detector = HeaderDetector()

        assert detector.detect(img, img.copy(), Rect(0, 0, 120, 40)) == 0

    def test_leading_run_is_reported(self):
        first, second = _pair(100, 25)
        detector = HeaderDetector()

        assert detector.detect(first, second, Rect(0, 0, 120, 100)) == 25

    def test_short_run_is_noise(self):
        first, second = _pair(100, 12)

        assert HeaderDetector().detect(first, second, Rect(0, 0, 120, 100)) == 0

    def test_minimum_height_is_inclusive(self):
        first, second = _pair(100, 20)

        assert HeaderDetector().detect(first, second, Rect(0, 0, 120, 100)) == 20

    def test_tolerates_small_noise(self):
        first, second = _pair(100, 30)
        jitter = np.random.default_rng(5).integers(-4, 5, size=(30, 120, 3))
        shifted = np.clip(second[:30, :, :3].astype(np.int16) + jitter, 0, 255).astype(np.uint8)
        second[:30, :, :3] = shifted

        assert HeaderDetector().detect(first, second, Rect(0, 0, 120, 100)) == 30

    def test_few_differing_pixels_still_match(self):
        first, second = _pair(100, 30)
        # 4 of 120 pixels per row (3.3%) differ strongly
        second[:30, :4, :3] = 255 - second[:30, :4, :3]

        assert HeaderDetector().detect(first, second, Rect(0, 0, 120, 100)) == 30

    def test_alpha_is_ignored(self):
        first, second = _pair(100, 30)
        second[:, :, 3] = 0

        assert HeaderDetector().detect(first, second, Rect(0, 0, 120, 100)) == 30

    def test_window_offset_is_respected(self):
        first = noise(100, 300, seed=1)
        second = noise(100, 300, seed=2)
        second[:40, 100:220] = first[:40, 100:220]

        detector = HeaderDetector()
        assert detector.detect(first, second, Rect(100, 0, 120, 100)) == 40
        assert detector.detect(first, second, Rect(0, 0, 120, 100)) == 0

    def test_window_outside_images_yields_zero(self):
        img = noise(50, 50)

        assert HeaderDetector().detect(img, img, Rect(500, 0, 50, 20)) == 0

    def test_mismatched_sizes_yield_zero(self):
        first = noise(100, 120, seed=1)
        second = noise(60, 120, seed=2)

        assert HeaderDetector().detect(first, second, Rect(0, 0, 120, 100)) == 0

    def test_invalid_input_yields_zero(self):
        assert HeaderDetector().detect(None, None, Rect(0, 0, 10, 10)) == 0

    def test_matching_rows_counts_leading_run_only(self):
        first, second = _pair(60, 10)
        second[30:40] = first[30:40]

        assert HeaderDetector().matching_rows(first, second) == 10
