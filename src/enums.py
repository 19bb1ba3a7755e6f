"""Contains all global enumeration classes used throughout the project."""

from __future__ import annotations

from enum import Enum, IntEnum


class NoiseType(Enum):
    """Defines the available noise functions used for height sampling."""

    PERLIN = "Perlin Noise"
    """Standard Perlin noise function, known for its soft, cloud-like gradients."""
    OPENSIMPLEX = "OpenSimplex Noise"
    """Unpatented alternative to simplex noise, offers improvements over Perlin noise in terms of visual artifacts."""


class TileType(IntEnum):
    """Defines the tile categories stored in the low four bits of a tile ID."""

    EMPTY = 0b0000
    """Open floor. Compatible with any edge that carries a wall connector."""
    WALL = 0b0001
    """A straight wall segment running across the tile."""
    CORNER = 0b0010
    """Two wall segments meeting in the middle of the tile."""

    # The floor tile is the empty tile, the name is kept for mesh placement code.
    FLOOR = 0b0000


class Rotation(IntEnum):
    """Defines the four tile rotations as they are packed into bits 4-6 of a tile ID.

    The patterns are not a plain 0..3 counter. Persisted tile data depends on these exact values.
    """

    ROT_0 = 0b001_0000
    ROT_90 = 0b011_0000
    ROT_180 = 0b101_0000
    ROT_270 = 0b111_0000

    @property
    def degrees(self) -> int:
        """Returns the clockwise rotation angle in degrees."""
        match self:
            case Rotation.ROT_0:
                return 0
            case Rotation.ROT_90:
                return 90
            case Rotation.ROT_180:
                return 180
            case Rotation.ROT_270:
                return 270

    @classmethod
    def from_degrees(cls, degrees: int) -> Rotation:
        """Returns the rotation for an angle of 0, 90, 180 or 270 degrees."""
        for rotation in cls:
            if rotation.degrees == degrees:
                return rotation
        raise ValueError(f"rotation cannot be built from value of {degrees}")


class Orientation(Enum):
    """Defines the four tile edges used for connection matching and neighbor lookup."""

    TOP = 0
    """Edge towards y + 1."""
    RIGHT = 1
    """Edge towards x + 1."""
    BOTTOM = 2
    """Edge towards y - 1."""
    LEFT = 3
    """Edge towards x - 1."""

    def invert(self) -> Orientation:
        """Returns the opposite orientation of the current orientation."""
        match self:
            case Orientation.TOP:
                return Orientation.BOTTOM
            case Orientation.RIGHT:
                return Orientation.LEFT
            case Orientation.BOTTOM:
                return Orientation.TOP
            case Orientation.LEFT:
                return Orientation.RIGHT

    def to_vector(self) -> tuple[int, int]:
        """Returns the (dx, dy) grid offset for the orientation."""
        match self:
            case Orientation.TOP:
                return (0, 1)
            case Orientation.RIGHT:
                return (1, 0)
            case Orientation.BOTTOM:
                return (0, -1)
            case Orientation.LEFT:
                return (-1, 0)


class Connection(Enum):
    """Defines what a tile offers on one of its edges."""

    NONE = 0
    """Open edge without a wall connector."""
    FIRST = 1
    """The first wall segment of the tile faces this edge."""
    SECOND = 2
    """The second wall segment of the tile faces this edge."""
    EITHER = 3
    """Wildcard, matches every connection except NONE."""

    def matches(self, other: Connection) -> bool:
        """Returns True if two edges carrying these connections may touch.

        Equal connections match. EITHER matches anything but NONE, on either side.
        """
        if self is Connection.EITHER:
            return other is not Connection.NONE
        if other is Connection.EITHER:
            return self is not Connection.NONE
        return self is other

