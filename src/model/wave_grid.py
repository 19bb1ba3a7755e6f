"""Implements a Wave Function Collapse solver that fills a square grid with wall, corner and floor tiles.

Cells are kept in a MinHeapMap ordered by the number of tiles still possible for them. The solver repeatedly pops the
most constrained cell, collapses it into one of its remaining tiles, and removes the tiles that no longer fit from its
four neighbors. There is no backtracking: when a neighbor would lose its last candidate, that candidate is kept and the
resulting mismatch is accepted (see 'count_adjacency_violations()').
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging
import random
from typing import TYPE_CHECKING

import numpy as np

import constants
from enums import Orientation
from model.heap_map import MinHeapMap
from model.tile import ALL_VALID_IDS, TILE_CONNECTION_MAP, TileID

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from model.tile import ConnectionMap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileCell:
    """A collapsed tile at its 1-based grid position, as handed to tile placement code."""

    id: TileID
    x: int
    z: int


@dataclass
class Wave:
    """The set of tiles that are still possible for an uncollapsed cell."""

    possible: set[TileID] = field(default_factory=lambda: set(ALL_VALID_IDS))

    def __len__(self) -> int:
        return len(self.possible)

    def update(
        self,
        collapsed_tile: TileID,
        collapsed_orientation: Orientation,
        connection_map: Mapping[TileID, ConnectionMap],
        tries_allowed: int | None,
    ) -> int:
        """Removes the tiles that cannot sit next to a collapsed neighbor.

        Args:
            collapsed_tile: The tile the neighbor collapsed into.
            collapsed_orientation: Side of this cell the neighbor lies on, e.g. LEFT for a neighbor at x - 1.
            connection_map: The sockets of every tile.
            tries_allowed: Maximum number of tiles to remove, None for no limit.

        Returns:
            The number of tiles that were removed.
        """
        neighbor_socket = connection_map[collapsed_tile][collapsed_orientation.invert()]

        ids_to_remove = []
        for tile in sorted(self.possible):
            if tries_allowed is not None and len(ids_to_remove) >= tries_allowed:
                break
            if not connection_map[tile][collapsed_orientation].accepts_incoming_connection(neighbor_socket):
                logger.debug("Removing %s next to %s on the %s side", tile, collapsed_tile, collapsed_orientation.name)
                ids_to_remove.append(tile)

        removed = 0
        for tile in ids_to_remove:
            if len(self.possible) == 1:
                logger.warning(
                    "Could not remove all tiles incompatible with %s, keeping %s",
                    collapsed_tile,
                    next(iter(self.possible)),
                )
                break
            self.possible.remove(tile)
            removed += 1
        return removed


class _GridCell(ABC):
    """Common part of the two cell states, orders cells for the heap."""

    x: int
    y: int

    @abstractmethod
    def _order_key(self) -> tuple[int, int]:
        """Returns the sort key of the cell, smaller keys are popped first."""

    def __lt__(self, other: _GridCell) -> bool:
        return self._order_key() < other._order_key()


@dataclass(eq=False)
class WaveCell(_GridCell):
    """Uncollapsed cell, still holding a set of possible tiles."""

    wave: Wave
    x: int
    y: int

    def _order_key(self) -> tuple[int, int]:
        return 0, len(self.wave)

    def __str__(self) -> str:
        tiles = ", ".join(str(tile) for tile in sorted(self.wave.possible))
        return f"Wave(Possible Tiles: [{tiles}])"

    def force_collapse(self, rng: random.Random) -> CollapsedCell:
        """Picks one of the remaining tiles at random.

        The empty tile is only picked if it is the last candidate. A cell without candidates becomes an empty tile.
        """
        candidates = sorted(self.wave.possible)
        if len(candidates) > 1:
            candidates = [tile for tile in candidates if tile != TileID.EMPTY]

        if not candidates:
            logger.warning("Cell (%d, %d) has no possible tiles left, falling back to %s", self.x, self.y, TileID.EMPTY)
            tile = TileID.EMPTY
        else:
            tile = rng.choice(candidates)
        return CollapsedCell(tile, self.x, self.y)


@dataclass(eq=False)
class CollapsedCell(_GridCell):
    """Cell that has been assigned its final tile. Always sorts after every uncollapsed cell."""

    tile: TileID
    x: int
    y: int

    def _order_key(self) -> tuple[int, int]:
        return 1, 0

    def __str__(self) -> str:
        return str(self.tile)

    def to_tile_cell(self) -> TileCell:
        return TileCell(self.tile, self.x, self.y)


GridCell = WaveCell | CollapsedCell


class WaveGrid:
    """Square grid of cells that is solved with Wave Function Collapse.

    Cells use 1-based (x, y) coordinates. x grows to the RIGHT and y grows to the TOP.
    """

    # Number of cells along each side of the grid.
    _size: int
    # Source of randomness for picking tiles.
    _rng: random.Random
    # The sockets every tile offers on each edge.
    _connection_map: Mapping[TileID, ConnectionMap]
    # Maximum number of tiles a single propagation step may remove from a neighbor (None for no limit).
    _tries_allowed: int | None
    # The cells that still have to be collapsed, most constrained first.
    _heap_map: MinHeapMap[GridCell]

    def __init__(
        self,
        size: int,
        rng: random.Random | None = None,
        connection_map: Mapping[TileID, ConnectionMap] = TILE_CONNECTION_MAP,
        tries_allowed: int | None = constants.WFC_TRIES_ALLOWED_DEFAULT,
    ) -> None:
        """Fills the grid with uncollapsed cells that allow every tile.

        Args:
            size: Number of cells along each side of the grid.
            rng: Source of randomness, a fresh unseeded generator if None.
            connection_map: The sockets of every tile that may be placed.
            tries_allowed: Maximum number of tiles a single propagation step may remove from a neighbor, None for no
                limit.
        """
        if size < 0:
            raise ValueError(f"grid size must not be negative, got {size}")

        self._size = size
        self._rng = rng if rng is not None else random.Random()
        self._connection_map = connection_map
        self._tries_allowed = tries_allowed
        self._heap_map = MinHeapMap(
            WaveCell(Wave(set(connection_map)), x, y) for y in range(1, size + 1) for x in range(1, size + 1)
        )

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        """Returns the number of cells that are not collapsed yet."""
        return len(self._heap_map)

    def lookup(self, x: int, y: int) -> GridCell | None:
        """Returns the cell at the given coordinates while it is still waiting to be collapsed."""
        return self._heap_map.lookup((x, y))

    def collapse_all_into_vec(self) -> list[TileCell]:
        """Collapses every cell of the grid.

        Returns:
            One tile cell per grid cell, in the order the cells were collapsed (not row by row).
        """
        collapsed_cells: list[TileCell] = []
        remaining = self._size * self._size

        while remaining > 0 and self._heap_map:
            current = self._heap_map.pop()
            if isinstance(current, CollapsedCell):
                logger.warning("Popped already collapsed cell (%d, %d), stopping", current.x, current.y)
                break

            collapsed = current.force_collapse(self._rng)
            self._propagate(collapsed)
            collapsed_cells.append(collapsed.to_tile_cell())
            remaining -= 1

        logger.info("Collapsed %d cells of a %dx%d grid", len(collapsed_cells), self._size, self._size)
        return collapsed_cells

    def neighbor_coords(self, x: int, y: int) -> list[tuple[Orientation, tuple[int, int]]]:
        """Returns the direction and coordinates of every neighbor of a cell that lies inside the grid."""
        neighbors = []
        for orientation in (Orientation.LEFT, Orientation.RIGHT, Orientation.TOP, Orientation.BOTTOM):
            dx, dy = orientation.to_vector()
            neighbor_x, neighbor_y = x + dx, y + dy
            if 1 <= neighbor_x <= self._size and 1 <= neighbor_y <= self._size:
                neighbors.append((orientation, (neighbor_x, neighbor_y)))
        return neighbors

    def _propagate(self, collapsed: CollapsedCell) -> None:
        """Removes the tiles that do not fit next to a freshly collapsed cell from its uncollapsed neighbors."""
        for orientation, coords in self.neighbor_coords(collapsed.x, collapsed.y):
            if coords not in self._heap_map:
                continue

            def update_wave(cell: GridCell) -> None:
                if isinstance(cell, WaveCell):
                    cell.wave.update(
                        collapsed.tile, orientation.invert(), self._connection_map, self._tries_allowed
                    )

            self._heap_map.lookup_and_mutate(coords, update_wave)


@dataclass(frozen=True)
class AdjacencyReport:
    """Result of checking every pair of adjacent tiles of a solved grid."""

    # Number of adjacent pairs whose shared edge does not connect.
    violations: int
    # Number of adjacent pairs that were checked.
    pairs: int

    @property
    def rate(self) -> float:
        return self.violations / self.pairs if self.pairs else 0.0


def count_adjacency_violations(
    cells: Iterable[TileCell], connection_map: Mapping[TileID, ConnectionMap] = TILE_CONNECTION_MAP
) -> AdjacencyReport:
    """Counts the adjacent tile pairs whose shared edges do not connect.

    Every horizontally or vertically adjacent pair is checked once, with the same rule the solver uses during
    propagation.
    """
    tiles = {(cell.x, cell.z): cell.id for cell in cells}
    violations = 0
    pairs = 0
    for (x, z), tile in tiles.items():
        for orientation in (Orientation.RIGHT, Orientation.TOP):
            dx, dz = orientation.to_vector()
            neighbor = tiles.get((x + dx, z + dz))
            if neighbor is None:
                continue
            pairs += 1
            socket = connection_map[tile][orientation]
            if not connection_map[neighbor][orientation.invert()].accepts_incoming_connection(socket):
                violations += 1
    return AdjacencyReport(violations, pairs)


def tile_grid_from_cells(cells: Iterable[TileCell], size: int) -> NDArray[np.int_]:
    """Arranges tile cells into a (size, size) array of tile bytes indexed [z - 1, x - 1], -1 for missing cells."""
    tile_grid = np.full((size, size), -1, dtype=np.int_)
    for cell in cells:
        tile_grid[cell.z - 1, cell.x - 1] = cell.id.value
    return tile_grid
