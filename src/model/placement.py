"""Maps solved tile cells to 3D transforms and world positions to chunk coordinates.

World space is y-up. Tile grids lie in the x/z plane, one chunk of 'size' world units per cell.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import TYPE_CHECKING

import constants
from enums import Rotation

if TYPE_CHECKING:
    from model.wave_grid import TileCell

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]
Quat = tuple[float, float, float, float]

IDENTITY_QUAT: Quat = (0.0, 0.0, 0.0, 1.0)


@dataclass(frozen=True)
class Transform:
    """Translation plus rotation, the rotation stored as an (x, y, z, w) unit quaternion."""

    translation: Vec3 = (0.0, 0.0, 0.0)
    rotation: Quat = IDENTITY_QUAT

    def transform_point(self, point: Vec3) -> Vec3:
        """Rotates a point and then translates it."""
        qx, qy, qz, qw = self.rotation
        px, py, pz = point
        # v' = v + 2w(q x v) + 2(q x (q x v))
        cx = qy * pz - qz * py
        cy = qz * px - qx * pz
        cz = qx * py - qy * px
        rx = px + 2 * (qw * cx + qy * cz - qz * cy)
        ry = py + 2 * (qw * cy + qz * cx - qx * cz)
        rz = pz + 2 * (qw * cz + qx * cy - qy * cx)
        tx, ty, tz = self.translation
        return rx + tx, ry + ty, rz + tz


def rotation_quat(rotation: Rotation) -> Quat:
    """Returns the quaternion that turns a tile mesh clockwise (seen from above) by the given rotation."""
    match rotation:
        case Rotation.ROT_0:
            return IDENTITY_QUAT
        case Rotation.ROT_90:
            angle = -math.pi / 2
        case Rotation.ROT_180:
            angle = math.pi
        case Rotation.ROT_270:
            angle = math.pi / 2
    return 0.0, math.sin(angle / 2), 0.0, math.cos(angle / 2)


def local_transform(cell: TileCell, mesh_size: float = constants.TILE_MESH_SIZE_DEFAULT) -> Transform:
    """Returns the transform that moves a tile mesh to the edge of its cell and turns it to the tile's rotation.

    Walls are modelled centered on the cell, so they get pushed by half a mesh (minus half the wall thickness) towards
    the side their rotation faces.
    """
    rotation = cell.id.rotation_identity()
    offset = mesh_size / 2 - 0.5
    x, z = 0.0, 0.0
    match rotation:
        case Rotation.ROT_0:
            z -= offset
        case Rotation.ROT_90:
            x += offset
        case Rotation.ROT_180:
            z += offset
        case Rotation.ROT_270:
            x -= offset
    logger.debug("Rotating tile %s by %d degrees", cell.id, rotation.degrees)
    return Transform((x, 0.0, z), rotation_quat(rotation))


def global_transform(cell: TileCell, origin: Vec3, size: float = constants.CHUNK_SIZE_DEFAULT) -> Transform:
    """Returns the world position of a tile cell, relative to the world position of cell (1, 1).

    Grid x runs along world z and grid z runs along negative world x.
    """
    z, x = cell.x - 1, cell.z - 1
    return Transform((origin[0] - size * x, origin[1], origin[2] + size * z))


def x_and_y_from_pos(position: Vec3, chunk_size: float = constants.CHUNK_SIZE_DEFAULT) -> tuple[int, int]:
    """Returns the 1-based chunk coordinates containing a world position, using its x and z components.

    Positions at or below 0 belong to the first chunk.
    """
    return max(1, math.ceil(position[0] / chunk_size)), max(1, math.ceil(position[2] / chunk_size))
