"""Shared pytest fixtures for the generator tests."""

import random

import numpy as np
import pytest

from model.tile import TILE_CONNECTION_MAP


class ConstantSampler:
    """Height sampler that returns the same height everywhere."""

    def __init__(self, height: float = 0.0):
        self.height = height

    def get(self, x: float, y: float) -> float:
        return self.height


class ArraySampler:
    """Height sampler reading a flat, row-major list of heights of a square grid."""

    def __init__(self, heights, grid_size: int):
        self.heights = list(heights)
        self.grid_size = grid_size

    def get(self, x: float, y: float) -> float:
        return self.heights[int(y) * self.grid_size + int(x)]


@pytest.fixture
def flat_sampler() -> ConstantSampler:
    """A sampler describing a perfectly flat plane."""
    return ConstantSampler(0.0)


@pytest.fixture
def bumpy_sampler() -> ArraySampler:
    """A deterministic, irregular 5x5 height field (terrain size 4)."""
    rng = np.random.default_rng(7)
    return ArraySampler(rng.random(25).tolist(), 5)


@pytest.fixture
def rng() -> random.Random:
    """A seeded random generator."""
    return random.Random(1234)


@pytest.fixture
def connection_map():
    """The read-only sockets of every valid tile."""
    return TILE_CONNECTION_MAP


@pytest.fixture
def reset_logging():
    """Detaches the handlers installed by setup_logging() after the test."""
    import logging

    import logging_config

    yield
    for name in logging_config.PROJECT_LOGGERS:
        logger = logging.getLogger(name)
        for handler in list(logging_config._handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
    for handler in logging_config._handlers:
        handler.close()
    logging_config._handlers.clear()
