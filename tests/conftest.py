"""Pytest configuration and shared fixtures for pixelscan tests."""

import numpy as np
import pytest

BACKGROUND = (255, 255, 255, 255)
INK = (0, 0, 0, 255)

# Pixel-art shape used across tests; '#' is ink, '.' background.
CREWMATE = (
    ".###",
    "##..",
    "####",
    ".#.#",
)


def pytest_addoption(parser):
    parser.addoption(
        "--run-slow", action="store_true", default=False,
        help="Run large-canvas scan tests",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: large-canvas scan, needs --run-slow")


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--run-slow"):
        skip_slow = pytest.mark.skip(reason="needs --run-slow option to run")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


def shape_coordinates(rows):
    """(x, y) pairs of the '#' cells in a list of strings."""
    return [(x, y) for y, row in enumerate(rows) for x, ch in enumerate(row) if ch == "#"]


def make_canvas(width, height, color=BACKGROUND):
    """RGBA uint8 canvas filled with ``color``."""
    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[:, :] = color
    return canvas


def stamp(canvas, coordinates, offset_x, offset_y, color=INK):
    """Paint ``coordinates`` shifted by the offset onto ``canvas`` in place."""
    for x, y in coordinates:
        canvas[y + offset_y, x + offset_x] = color
    return canvas


@pytest.fixture
def crewmate_template():
    """Tightly cropped crewmate template: ink on white."""
    coords = shape_coordinates(CREWMATE)
    return stamp(make_canvas(4, 4), coords, 0, 0)


@pytest.fixture
def crewmate_coords():
    return shape_coordinates(CREWMATE)
