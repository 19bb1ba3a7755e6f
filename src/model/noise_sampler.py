"""Height samplers for terrain generation: fractal noise layers and pre-sampled height arrays."""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any, TYPE_CHECKING

import numpy as np
import opensimplex
from perlin_noise import PerlinNoise

import constants
from enums import NoiseType

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

    from model.rtin import PlaneSampler


@dataclass
class FbmLayer:
    """Fractal Brownian motion: several octaves of the same noise function added on top of each other.

    Octave i is sampled at 'frequency' * 'lacunarity' ** i and weighted with 'persistence' ** i. The sum is divided by
    the total weight, so a layer stays roughly within [-1, 1].
    """

    noise_type: NoiseType = constants.NOISE_TYPE_DEFAULT
    seed: int = 0
    octaves: int = constants.NOISE_OCTAVES_DEFAULT
    frequency: float = constants.NOISE_FREQUENCY_DEFAULT
    lacunarity: float = constants.NOISE_LACUNARITY_DEFAULT
    persistence: float = constants.NOISE_PERSISTENCE_DEFAULT

    # The seeded noise generator, created in __post_init__().
    _noise: Any = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.octaves < 1:
            raise ValueError(f"a noise layer needs at least one octave, got {self.octaves}")

        match self.noise_type:
            case NoiseType.PERLIN:
                # PerlinNoise replaces a seed of 0 with a random one.
                self._noise = PerlinNoise(octaves=1, seed=self.seed + 1)
            case NoiseType.OPENSIMPLEX:
                self._noise = opensimplex.OpenSimplex(seed=self.seed)

    def get(self, x: float, y: float) -> float:
        total = 0.0
        total_weight = 0.0
        frequency = self.frequency
        weight = 1.0
        for _ in range(self.octaves):
            total += weight * self._sample(x * frequency, y * frequency)
            total_weight += weight
            frequency *= self.lacunarity
            weight *= self.persistence
        return total / total_weight

    def _sample(self, x: float, y: float) -> float:
        """Samples a single octave, normalized to [-1, 1]."""
        match self.noise_type:
            case NoiseType.PERLIN:
                # Perlin noise values lie within [-sqrt(0.5), sqrt(0.5)] and rarely slightly outside of it.
                return max(-1.0, min(1.0, self._noise([x, y]) * math.sqrt(2)))
            case NoiseType.OPENSIMPLEX:
                return self._noise.noise2(x, y) * 2 / math.sqrt(3)
        raise ValueError(f"unsupported noise type {self.noise_type}")


class NoiseSampler:
    """Height sampler that adds up any number of noise layers."""

    layers: list[FbmLayer]

    def __init__(self, layers: list[FbmLayer] | None = None) -> None:
        self.layers = list(layers) if layers is not None else []

    @classmethod
    def single_layer(cls, layer: FbmLayer) -> NoiseSampler:
        return cls([layer])

    def add_layer(self, layer: FbmLayer) -> None:
        self.layers.append(layer)

    def get(self, x: float, y: float) -> float:
        return sum(layer.get(x, y) for layer in self.layers)


class HeightmapSampler:
    """Height sampler backed by a 2D array of heights (row = y, column = x).

    Coordinates are rounded down to the nearest sample and clamped to the array bounds.
    """

    heights: NDArray[np.double]

    def __init__(self, heights: ArrayLike) -> None:
        self.heights = np.asarray(heights, dtype=np.double)
        if self.heights.ndim != 2:
            raise ValueError(f"a heightmap must be a 2D array, got shape {self.heights.shape}")

    def get(self, x: float, y: float) -> float:
        rows, cols = self.heights.shape
        col = min(max(int(x), 0), cols - 1)
        row = min(max(int(y), 0), rows - 1)
        return float(self.heights[row, col])


def sample_grid(sampler: PlaneSampler, grid_size: int) -> NDArray[np.double]:
    """Samples every integer point of a 'grid_size' x 'grid_size' grid into a height array (row = y)."""
    heights = np.full((grid_size, grid_size), 0.0, dtype=np.double)
    for row in range(grid_size):
        for col in range(grid_size):
            heights[row, col] = sampler.get(float(col), float(row))
    return heights
