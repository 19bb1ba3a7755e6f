"""Builds simplified terrain meshes with a Right-Triangulated Irregular Network (RTIN).

The terrain is a square of 'size' x 'size' cells ('size' + 1 sample points per side) that is recursively split into
right triangles (see 'model.binary_node'). For every triangle the height error that would be introduced by not
splitting it any further is stored at its hypotenuse midpoint. Mesh building then walks the triangle tree from the two
roots and stops descending as soon as a triangle's error is within the threshold.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Protocol, TYPE_CHECKING

import numpy as np

from model.binary_node import BinaryNode, level_start_index

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from model.binary_node import Point2d

logger = logging.getLogger(__name__)

# Vertex order of the three edges of a triangle when it is drawn as a line list.
_WIREFRAME_EDGE_ORDER: tuple[int, ...] = (0, 1, 1, 2, 2, 0)


class PlaneSampler(Protocol):
    """Anything that returns a height for a point of the terrain plane."""

    def get(self, x: float, y: float) -> float: ...


class TerrainSizeError(ValueError):
    """Raised when the terrain size is not a power of two of at least 2."""


@dataclass
class MeshBuffers:
    """Flat, render-ready vertex attribute buffers of a terrain mesh."""

    # Vertex positions, shape (n, 3).
    positions: NDArray[np.float32]
    # Texture coordinates in [0, 1], shape (n, 2).
    uvs: NDArray[np.float32]
    # Triangle list (3 indices per triangle) or line list (6 indices per triangle).
    indices: NDArray[np.uint32]
    # Smooth vertex normals, shape (n, 3). None for line lists.
    normals: NDArray[np.float32] | None
    # True if 'indices' is a line list.
    wireframe: bool


@dataclass
class TerrainMeshData:
    """Deduplicated vertices and triangle indices of a terrain mesh.

    Vertices are (x, height, y) with x and y being integer grid positions.
    """

    vertices: NDArray[np.float32]
    indices: NDArray[np.uint32]

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def to_buffers(self, size: float, wireframe: bool = False) -> MeshBuffers:
        """Converts the mesh into vertex attribute buffers.

        Args:
            size: The terrain size in cells, used to scale the uv coordinates into [0, 1].
            wireframe: If True, every triangle is emitted as its three edges (line list) and no normals are computed.

        Returns:
            The position, uv, index and normal buffers of the mesh.
        """
        positions = self.vertices.astype(np.float32, copy=True)
        uvs = np.stack((positions[:, 0] / size, positions[:, 2] / size), axis=1).astype(np.float32)

        triangles = self.indices.reshape(-1, 3)
        if wireframe:
            indices = triangles[:, list(_WIREFRAME_EDGE_ORDER)].reshape(-1).astype(np.uint32)
            normals = None
        else:
            indices = self.indices.astype(np.uint32, copy=True)
            normals = _compute_smooth_normals(positions, triangles)

        return MeshBuffers(positions, uvs, indices, normals, wireframe)


def is_power_of_2(value: int) -> bool:
    """Returns True for 1, 2, 4, 8, ..."""
    return value > 0 and value & (value - 1) == 0


def build_terrain(
    sampler: PlaneSampler, height_multiplier: float, size: int, error_threshold: float
) -> TerrainMeshData:
    """Samples a height function and returns the simplified mesh that approximates it within an error bound.

    Args:
        sampler: The height function. Errors are measured in its units, before 'height_multiplier' is applied.
        height_multiplier: Factor applied to every sampled height of the emitted vertices.
        size: Side length of the terrain in cells, a power of two of at least 2.
        error_threshold: Maximum allowed height error of a triangle. A negative threshold yields the full-resolution
            mesh.

    Returns:
        The deduplicated vertices and the triangle indices of the selected triangles.

    Raises:
        TerrainSizeError: If 'size' is not a power of two of at least 2.
    """
    if size < 2 or not is_power_of_2(size):
        raise TerrainSizeError(f"terrain size must be a power of two of at least 2, got {size}")

    grid_size = size + 1
    errors = get_errors_vec(sampler, grid_size)
    logger.debug("Average terrain error for size %d: %f", size, float(errors.mean()))

    vertices: list[tuple[float, float, float]] = []
    indices: list[int] = []
    vertex_positions: dict[tuple[int, int], int] = {}

    nodes = select_nodes(size, errors, error_threshold)
    for node in nodes:
        for corner in node.triangle_coords(grid_size):
            key = (int(corner[0]), int(corner[1]))
            vertex_index = vertex_positions.get(key)
            if vertex_index is None:
                vertex_index = len(vertices)
                vertex_positions[key] = vertex_index
                height = sample_corner(sampler, grid_size, corner) * height_multiplier
                vertices.append((float(key[0]), height, float(key[1])))
            indices.append(vertex_index)

    logger.info(
        "Built terrain of size %d with %d vertices and %d triangles (threshold %s)",
        size,
        len(vertices),
        len(nodes),
        error_threshold,
    )
    return TerrainMeshData(
        np.array(vertices, dtype=np.float32).reshape(-1, 3),
        np.array(indices, dtype=np.uint32),
    )


def sample_corner(sampler: PlaneSampler, grid_size: int, point: Point2d) -> float:
    """Samples the height at a grid point, clamping coordinates that lie outside the grid to its last row/column."""
    last = grid_size - 1
    x = min(point[0], last)
    y = min(point[1], last)
    return float(sampler.get(x, y))


def get_errors_vec(sampler: PlaneSampler, grid_size: int) -> NDArray[np.float32]:
    """Builds the error grid of a terrain with 'grid_size' sample points per side.

    Triangles are visited from the finest level whose hypotenuse midpoints still land on grid points up to the roots.
    Every slot ends up holding the largest error of the triangle stored there and of all its descendants.

    Returns:
        A flat, row-major array of 'grid_size' * 'grid_size' errors.
    """
    errors = np.zeros(grid_size * grid_size, dtype=np.float32)

    tile_size = grid_size - 1
    if tile_size < 2:
        return errors

    number_of_triangles = 2 * tile_size * tile_size - 2
    number_of_levels = 2 * (tile_size.bit_length() - 1)
    last_level_start = level_start_index(number_of_levels - 1)

    for index in range(number_of_triangles - 1, -1, -1):
        node = BinaryNode.from_triangle_index(index)
        a, b, _ = node.triangle_coords(grid_size)
        midpoint = ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)

        interpolated = (sample_corner(sampler, grid_size, a) + sample_corner(sampler, grid_size, b)) / 2
        own_error = abs(interpolated - sample_corner(sampler, grid_size, midpoint))

        slot = int(midpoint[1] * grid_size + midpoint[0])
        if index >= last_level_start:
            errors[slot] = own_error
        else:
            left, right = node.children_ids()
            errors[slot] = max(
                float(errors[slot]),
                own_error,
                float(errors[left.errors_vec_index(grid_size)]),
                float(errors[right.errors_vec_index(grid_size)]),
            )

    return errors


def select_nodes(size: int, errors: NDArray[np.float32], error_threshold: float) -> list[BinaryNode]:
    """Selects the coarsest set of triangles whose errors are within the threshold.

    Args:
        size: Side length of the terrain in cells.
        errors: The error grid built by 'get_errors_vec()' for 'size' + 1 points per side.
        error_threshold: Maximum allowed error of a selected triangle.

    Returns:
        The selected nodes, left subtree before right subtree, starting with the root of triangle index 0.
    """
    grid_size = size + 1
    # Triangles down to the finest level, whose legs are one cell long.
    number_of_triangles = 4 * size * size - 2

    nodes: list[BinaryNode] = []
    stack = [BinaryNode.from_triangle_index(1), BinaryNode.from_triangle_index(0)]
    while stack:
        node = stack.pop()
        left, right = node.children_ids()
        is_leaf = right.triangle_index() >= number_of_triangles
        error = float(errors[node.errors_vec_index(grid_size)])

        if is_leaf or error <= error_threshold:
            logger.debug("Selected node %d (error %f)", node.node_id, error)
            nodes.append(node)
        else:
            stack.append(right)
            stack.append(left)

    return nodes


def _compute_smooth_normals(positions: NDArray[np.float32], triangles: NDArray[np.uint32]) -> NDArray[np.float32]:
    """Averages the face normals around every vertex, weighted by the face area."""
    normals = np.zeros_like(positions, dtype=np.float32)
    if len(triangles) == 0:
        return normals

    v0 = positions[triangles[:, 0]]
    v1 = positions[triangles[:, 1]]
    v2 = positions[triangles[:, 2]]
    # The length of the cross product is twice the face area, so no extra weighting is needed.
    face_normals = np.cross(v1 - v0, v2 - v0)
    for corner in range(3):
        np.add.at(normals, triangles[:, corner], face_normals)

    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    np.divide(normals, lengths, out=normals, where=lengths > 0)
    return normals
