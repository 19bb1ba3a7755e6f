"""Holds the world generation settings and runs the terrain and tile generators."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import random
from typing import TYPE_CHECKING

import constants
from enums import NoiseType
from model.noise_sampler import FbmLayer, HeightmapSampler, NoiseSampler, sample_grid
from model.rtin import build_terrain, is_power_of_2, TerrainSizeError
from model.wave_grid import count_adjacency_violations, WaveGrid

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

    from model.rtin import TerrainMeshData
    from model.wave_grid import AdjacencyReport, TileCell

logger = logging.getLogger(__name__)


@dataclass
class WorldSettings:
    """All parameters of a world generation run. Defaults come from 'constants'.

    Attributes:
        terrain_size: Side length of the terrain in cells, a power of two.
        height_multiplier: Factor applied to sampled heights when emitting terrain vertices.
        error_threshold: Maximum height error (in sampler units) of a terrain triangle.
        noise_type: Noise function of the default layer.
        noise_octaves: Number of octaves of the default layer.
        noise_layers: The noise layers summed up by the height sampler. If empty, a single default layer seeded with
            'seed' is used.
        grid_size: Number of cells along each side of the tile grid.
        tries_allowed: Maximum number of tiles a single propagation step may remove, None for no limit.
        seed: Seed for the tile solver and the default noise layer. A random seed is drawn if None.
    """

    terrain_size: int = constants.TERRAIN_SIZE_DEFAULT
    height_multiplier: float = constants.TERRAIN_HEIGHT_MULTIPLIER_DEFAULT
    error_threshold: float = constants.TERRAIN_ERROR_THRESHOLD_DEFAULT
    noise_type: NoiseType = constants.NOISE_TYPE_DEFAULT
    noise_octaves: int = constants.NOISE_OCTAVES_DEFAULT
    noise_layers: list[FbmLayer] = field(default_factory=list)
    grid_size: int = constants.WFC_GRID_SIZE_DEFAULT
    tries_allowed: int | None = constants.WFC_TRIES_ALLOWED_DEFAULT
    seed: int | None = None

    def __post_init__(self) -> None:
        if not (
            constants.TERRAIN_SIZE_MIN_LIMIT <= self.terrain_size <= constants.TERRAIN_SIZE_MAX_LIMIT
            and is_power_of_2(self.terrain_size)
        ):
            raise TerrainSizeError(
                f"terrain size must be a power of two between {constants.TERRAIN_SIZE_MIN_LIMIT} and "
                f"{constants.TERRAIN_SIZE_MAX_LIMIT}, got {self.terrain_size}"
            )
        if not constants.WFC_GRID_SIZE_MIN_LIMIT <= self.grid_size <= constants.WFC_GRID_SIZE_MAX_LIMIT:
            raise ValueError(
                f"grid size must be between {constants.WFC_GRID_SIZE_MIN_LIMIT} and "
                f"{constants.WFC_GRID_SIZE_MAX_LIMIT}, got {self.grid_size}"
            )
        if self.tries_allowed is not None and self.tries_allowed < 0:
            raise ValueError(f"tries allowed must not be negative, got {self.tries_allowed}")


@dataclass
class GeneratedWorld:
    """Everything a generation run produces."""

    # The sampled heights of the terrain grid (row = y), in sampler units.
    heights: NDArray[np.double]
    # The simplified terrain mesh.
    mesh: TerrainMeshData
    # The solved tile cells in collapse order.
    tiles: list[TileCell]
    # How many adjacent tile pairs do not connect.
    adjacency: AdjacencyReport


class WorldModel:
    """Runs terrain and tile generation for a set of WorldSettings.

    Attributes:
        settings: The generation parameters.
        random_seed: The seed actually used, equal to 'settings.seed' unless that was None.
    """

    settings: WorldSettings
    random_seed: int

    def __init__(self, settings: WorldSettings | None = None) -> None:
        """Stores the settings and fixes the random seed of this model.

        Args:
            settings: The generation parameters, defaults if None.
        """
        self.settings = settings if settings is not None else WorldSettings()
        if self.settings.seed is not None:
            self.random_seed = self.settings.seed
        else:
            self.random_seed = random.randint(0, constants.RANDOM_SEED_MAX)

    def build_sampler(self) -> NoiseSampler:
        """Returns the height sampler described by the settings."""
        if self.settings.noise_layers:
            return NoiseSampler(self.settings.noise_layers)
        return NoiseSampler.single_layer(
            FbmLayer(noise_type=self.settings.noise_type, seed=self.random_seed, octaves=self.settings.noise_octaves)
        )

    def generate_terrain(self) -> tuple[NDArray[np.double], TerrainMeshData]:
        """Samples the height function once per grid point and simplifies it into a terrain mesh.

        Returns:
            The sampled height array and the terrain mesh built from it.
        """
        size = self.settings.terrain_size
        heights = sample_grid(self.build_sampler(), size + 1)
        mesh = build_terrain(
            HeightmapSampler(heights), self.settings.height_multiplier, size, self.settings.error_threshold
        )
        return heights, mesh

    def generate_tiles(self) -> list[TileCell]:
        """Solves a fresh tile grid. The same seed always yields the same tiles."""
        grid = WaveGrid(
            self.settings.grid_size,
            rng=random.Random(self.random_seed),
            tries_allowed=self.settings.tries_allowed,
        )
        return grid.collapse_all_into_vec()

    def generate(self) -> GeneratedWorld:
        """Runs the terrain and the tile generator."""
        heights, mesh = self.generate_terrain()
        tiles = self.generate_tiles()
        adjacency = count_adjacency_violations(tiles)
        logger.info(
            "Generated world with seed %d: %d terrain triangles, %d tiles, %d of %d tile pairs not connecting",
            self.random_seed,
            mesh.triangle_count,
            len(tiles),
            adjacency.violations,
            adjacency.pairs,
        )
        return GeneratedWorld(heights, mesh, tiles, adjacency)
