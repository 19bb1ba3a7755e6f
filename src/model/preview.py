"""Renders preview images of solved tile grids, height maps and terrain meshes."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import matplotlib
from matplotlib.figure import Figure
import numpy as np
from PIL import Image, ImageDraw

import constants
from enums import Connection, Orientation
from model.tile import outgoing_connection, TILE_CONNECTION_MAP, TileID
from model.wave_grid import tile_grid_from_cells

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from numpy.typing import NDArray

    from model.rtin import TerrainMeshData
    from model.tile import ConnectionMap
    from model.wave_grid import TileCell


class TilePreviewRenderer:
    """Draws solved tile grids as top-down images.

    Every tile gets a glyph of 'tile_px' x 'tile_px' pixels: a floor square with a wall stroke running from the center to
    every edge that carries a wall connection. Strokes of the first wall segment and of the second one are drawn in
    different colors. Grid y grows upwards, so the row of cell z = 1 is the bottom row of the image.
    """

    # The width and height of a single tile glyph in pixels.
    _tile_px: int
    # A completely black glyph used for cells without a tile.
    _uncollapsed_tile: Image.Image
    # Maps tile bytes to their glyphs.
    _tiles: dict[int, Image.Image]

    def __init__(
        self,
        tile_px: int = constants.PREVIEW_TILE_PX_DEFAULT,
        connection_map: Mapping[TileID, ConnectionMap] = TILE_CONNECTION_MAP,
    ) -> None:
        """Draws the glyphs of all tiles of the connection map.

        Args:
            tile_px: The width and height of a single tile glyph in pixels.
            connection_map: The sockets of every tile, used to decide which edges get a wall stroke.
        """
        if tile_px < 3:
            raise ValueError(f"tile glyphs need at least 3 pixels per side, got {tile_px}")

        self._tile_px = tile_px
        self._uncollapsed_tile = Image.new("RGB", (tile_px, tile_px))
        self._tiles = {tile.value: self._draw_tile(tile, connection_map) for tile in connection_map}

    @property
    def tile_px(self) -> int:
        return self._tile_px

    def get_tile_img(self, tile: TileID) -> Image.Image:
        """Returns the glyph of a single tile, black for unknown tiles."""
        return self._tiles.get(tile.value, self._uncollapsed_tile)

    def get_tilemap_img(self, tile_grid: NDArray[np.int_]) -> Image.Image:
        """Renders a grid of tile bytes (indexed [z - 1, x - 1], -1 for missing cells) into an image.

        Args:
            tile_grid: A 2D array as returned by 'tile_grid_from_cells()'.

        Returns:
            A PIL Image of (columns * tile_px, rows * tile_px) pixels.
        """
        rows, cols = tile_grid.shape
        tilemap_img = Image.new("RGB", (cols * self._tile_px, rows * self._tile_px))
        for row in range(rows):
            for col in range(cols):
                # Image rows grow downwards while grid z grows upwards.
                box = (col * self._tile_px, (rows - 1 - row) * self._tile_px)
                value = int(tile_grid[row, col])
                if value != -1:
                    tilemap_img.paste(self._tiles.get(value, self._uncollapsed_tile), box)
                else:
                    tilemap_img.paste(self._uncollapsed_tile, box)
        return tilemap_img

    def render_cells(self, cells: Iterable[TileCell], size: int) -> Image.Image:
        """Renders the output of the WFC solver for a grid of 'size' x 'size' cells."""
        return self.get_tilemap_img(tile_grid_from_cells(cells, size))

    def _draw_tile(self, tile: TileID, connection_map: Mapping[TileID, ConnectionMap]) -> Image.Image:
        """Draws the glyph of a single tile."""
        img = Image.new("RGB", (self._tile_px, self._tile_px), constants.PREVIEW_FLOOR_RGB)
        if tile == TileID.EMPTY:
            return img

        draw = ImageDraw.Draw(img)
        center = (self._tile_px - 1) / 2
        last = self._tile_px - 1
        edge_points = {
            Orientation.TOP: (center, 0),
            Orientation.RIGHT: (last, center),
            Orientation.BOTTOM: (center, last),
            Orientation.LEFT: (0, center),
        }
        width = max(1, self._tile_px // 6)
        for orientation, socket in connection_map[tile].items():
            match outgoing_connection(socket):
                case Connection.FIRST:
                    color = constants.PREVIEW_FIRST_WALL_RGB
                case Connection.SECOND:
                    color = constants.PREVIEW_SECOND_WALL_RGB
                case _:
                    continue
            draw.line([(center, center), edge_points[orientation]], fill=color, width=width)
        return img


def heightmap_img(heights: NDArray[np.floating], colormap: str = constants.HEIGHTMAP_COLORMAP) -> Image.Image:
    """Maps a height array (row = y) through a matplotlib colormap.

    Heights are scaled to the colormap's [0, 1] range by their minimum and maximum. The row of y = 0 is the bottom row
    of the image.
    """
    low = float(np.min(heights))
    high = float(np.max(heights))
    if high > low:
        normalized = (heights - low) / (high - low)
    else:
        normalized = np.zeros_like(heights, dtype=np.double)

    rgba = matplotlib.colormaps[colormap](np.flipud(normalized))
    rgb = (rgba[..., :3] * 255).round().astype(np.uint8)
    return Image.fromarray(rgb)


def heightmap_figure(heights: NDArray[np.floating], colormap: str = constants.HEIGHTMAP_COLORMAP) -> Figure:
    """Plots a height array with a colorbar, for inspecting the sampled terrain."""
    figure = Figure(figsize=(6, 6))
    ax = figure.add_subplot(111)
    ax.set_title("Height Map")
    ax.set_axis_off()
    image = ax.imshow(heights, cmap=colormap, origin="lower")
    figure.colorbar(image, ax=ax)
    return figure


def terrain_wireframe_img(
    mesh: TerrainMeshData, size: int, scale: int = constants.PREVIEW_WIREFRAME_SCALE_DEFAULT
) -> Image.Image:
    """Draws the triangles of a terrain mesh from above.

    Args:
        mesh: The terrain mesh, its vertices are (x, height, y).
        size: The terrain size in cells.
        scale: Pixels per cell.

    Returns:
        A PIL Image of (size * scale + 1) x (size * scale + 1) pixels.
    """
    side = size * scale + 1
    img = Image.new("RGB", (side, side))
    draw = ImageDraw.Draw(img)

    points = [(float(vertex[0]) * scale, (size - float(vertex[2])) * scale) for vertex in mesh.vertices]
    for triangle in mesh.indices.reshape(-1, 3):
        corners = [points[int(index)] for index in triangle]
        draw.polygon(corners, outline=constants.PREVIEW_WIREFRAME_RGB)
    return img


def save_img(img: Image.Image, file_path: str | Path) -> None:
    """Saves an image, creating missing parent directories.

    Args:
        img: The PIL Image object to be saved.
        file_path: The destination path (including filename and extension).
    """
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    img.save(path)
