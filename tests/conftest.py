"""Pytest fixtures for the longshot tests."""

import pytest

from tests.helpers import make_capture, noise


@pytest.fixture
def page():
    """A 2250 x 1000 page: exactly three 800px viewports at 75px overlap."""
    return noise(2250, 1000, seed=1)


@pytest.fixture
def page_captures(page):
    offsets = [0, 725, 1450]
    return [
        make_capture(page[y:y + 800], scroll_y=y, last=(i == len(offsets) - 1))
        for i, y in enumerate(offsets)
    ]
