"""Serves as the command line entry point of the world generator."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

import constants
from enums import NoiseType
from logging_config import setup_logging
from model.preview import heightmap_img, save_img, terrain_wireframe_img, TilePreviewRenderer
from model.wave_grid import tile_grid_from_cells
from model.world_model import WorldModel, WorldSettings

logger = logging.getLogger(__name__)

_NOISE_TYPES = {"opensimplex": NoiseType.OPENSIMPLEX, "perlin": NoiseType.PERLIN}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generates a simplified terrain mesh and a Wave Function Collapse tile grid"
    )
    parser.add_argument(
        "--terrain-size",
        type=int,
        default=constants.TERRAIN_SIZE_DEFAULT,
        help=f"Terrain side length in cells, a power of two (default: {constants.TERRAIN_SIZE_DEFAULT})",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=constants.TERRAIN_ERROR_THRESHOLD_DEFAULT,
        help=f"Maximum height error of a terrain triangle (default: {constants.TERRAIN_ERROR_THRESHOLD_DEFAULT})",
    )
    parser.add_argument(
        "--height-multiplier",
        type=float,
        default=constants.TERRAIN_HEIGHT_MULTIPLIER_DEFAULT,
        help=f"Factor applied to sampled heights (default: {constants.TERRAIN_HEIGHT_MULTIPLIER_DEFAULT})",
    )
    parser.add_argument(
        "--noise-type",
        choices=sorted(_NOISE_TYPES),
        default="opensimplex",
        help="Noise function used for the terrain heights (default: opensimplex)",
    )
    parser.add_argument(
        "--octaves",
        type=int,
        default=constants.NOISE_OCTAVES_DEFAULT,
        help=f"Number of noise octaves (default: {constants.NOISE_OCTAVES_DEFAULT})",
    )
    parser.add_argument(
        "--grid-size",
        type=int,
        default=constants.WFC_GRID_SIZE_DEFAULT,
        help=f"Tile grid side length in cells (default: {constants.WFC_GRID_SIZE_DEFAULT})",
    )
    parser.add_argument(
        "--tries-allowed",
        type=int,
        metavar="N",
        help="Remove at most N incompatible tiles from a neighbor per propagation step (default: no limit)",
    )
    parser.add_argument(
        "--legacy-relaxation",
        action="store_true",
        help=f"Shortcut for --tries-allowed {constants.WFC_TRIES_ALLOWED_LEGACY}",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed (default: a random one)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        metavar="DIR",
        help="Write preview PNGs of the tile grid, height map and terrain mesh into DIR",
    )
    parser.add_argument(
        "--tile-px",
        type=int,
        default=constants.PREVIEW_TILE_PX_DEFAULT,
        help=f"Pixels per tile in the tile grid preview (default: {constants.PREVIEW_TILE_PX_DEFAULT})",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write DEBUG logs to this file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log generation summaries to the console",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging on the console",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> WorldSettings:
    """Turns parsed command line arguments into world settings."""
    tries_allowed = constants.WFC_TRIES_ALLOWED_LEGACY if args.legacy_relaxation else args.tries_allowed
    return WorldSettings(
        terrain_size=args.terrain_size,
        height_multiplier=args.height_multiplier,
        error_threshold=args.threshold,
        noise_type=_NOISE_TYPES[args.noise_type],
        noise_octaves=args.octaves,
        grid_size=args.grid_size,
        tries_allowed=tries_allowed,
        seed=args.seed,
    )


def main(argv: list[str] | None = None) -> int:
    """Parses the arguments, generates a world and prints a summary.

    Args:
        argv: Command line arguments without the program name, sys.argv[1:] if None.

    Returns:
        The process exit code.
    """
    args = build_parser().parse_args(argv)

    if args.debug:
        console_level = logging.DEBUG
    elif args.verbose:
        console_level = logging.INFO
    else:
        console_level = logging.WARNING
    log_path = setup_logging(console_level, log_file=args.log_file)
    if log_path is not None:
        print(f"Logging to: {log_path}")

    try:
        model = WorldModel(settings_from_args(args))
        world = model.generate()
    except Exception:
        logger.exception("World generation failed")
        raise

    print(f"Seed: {model.random_seed}")
    print(f"Terrain: {len(world.mesh.vertices)} vertices, {world.mesh.triangle_count} triangles")
    print(
        f"Tiles: {len(world.tiles)} cells, {world.adjacency.violations} of {world.adjacency.pairs} adjacent pairs "
        f"not connecting ({world.adjacency.rate:.1%})"
    )

    if args.output is not None:
        grid_size = model.settings.grid_size
        renderer = TilePreviewRenderer(args.tile_px)
        save_img(renderer.get_tilemap_img(tile_grid_from_cells(world.tiles, grid_size)), args.output / "tiles.png")
        save_img(heightmap_img(world.heights), args.output / "heightmap.png")
        save_img(terrain_wireframe_img(world.mesh, model.settings.terrain_size), args.output / "terrain.png")
        print(f"Previews written to: {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
