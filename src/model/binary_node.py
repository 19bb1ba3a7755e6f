"""Maps the nodes of an implicit binary tree onto a recursive right-triangle subdivision of a square grid.

Node ids start at 2. The two root triangles (ids 2 and 3) split the square along its main diagonal, and every node
n is split at its right-angle vertex into the children 2n and 2n + 1. No tree is ever built: the triangle of a node
is reconstructed from the bits of its id, which encode the left/right steps taken from the root.

The triangle index is a second, zero-based numbering of the same nodes in level order (0 and 1 are the roots, 2..5
the next level, and so on).
"""

from __future__ import annotations

from dataclasses import dataclass

Point2d = tuple[float, float]
Triangle2d = tuple[Point2d, Point2d, Point2d]


class InvalidNodeError(ValueError):
    """Raised when a node id or triangle index does not name a node of the tree."""


def msb(value: int) -> int:
    """Returns the 1-based position of the most significant set bit, e.g. 4 for 0b1010 and 0 for 0."""
    return value.bit_length()


def level_start_index(level: int) -> int:
    """Returns the triangle index of the first node one level below the given level.

    Level 0 starts at 0, level 1 at 2, level 2 at 6, level 3 at 14.
    """
    return ((2 << level) - 1) & ~1


def _mid(a: Point2d, b: Point2d) -> Point2d:
    return (a[0] + b[0]) / 2, (a[1] + b[1]) / 2


@dataclass(frozen=True, order=True)
class BinaryNode:
    """A node of the triangle tree, identified by its binary id (>= 2)."""

    node_id: int

    def __post_init__(self) -> None:
        if self.node_id < 2:
            raise InvalidNodeError(f"binary node ids start at 2, got {self.node_id}")

    @classmethod
    def from_triangle_index(cls, index: int) -> BinaryNode:
        """Returns the node with the given zero-based level-order triangle index."""
        if index < 0:
            raise InvalidNodeError(f"triangle indices start at 0, got {index}")

        level = 0
        start = 0
        while level_start_index(level + 1) <= index:
            level += 1
            start = level_start_index(level)
        return cls((1 << (level + 1)) + (index - start))

    @property
    def level(self) -> int:
        """Depth of the node, 1 for the two root triangles."""
        return msb(self.node_id) - 1

    @property
    def index_in_level(self) -> int:
        """Position of the node within its level, counted from 0."""
        return self.node_id - (1 << self.level)

    def triangle_index(self) -> int:
        """Returns the zero-based level-order index of the node."""
        return level_start_index(self.level - 1) + self.index_in_level

    def children_ids(self) -> tuple[BinaryNode, BinaryNode]:
        """Returns the (left, right) children of the node."""
        left = self.node_id * 2
        return BinaryNode(left), BinaryNode(left + 1)

    def steps_to_node(self) -> list[bool]:
        """Returns the branch sequence from the root level down to the node, True for a left (even) step."""
        level = self.level
        return [not ((self.node_id >> (level - 1 - i)) & 1) for i in range(level)]

    def triangle_coords(self, grid_size: int) -> Triangle2d:
        """Reconstructs the corners of the node's triangle in a square grid with 'grid_size' points per side.

        The first two corners span the hypotenuse, the third one is the right-angle vertex.
        """
        last = float(grid_size - 1)
        steps = self.steps_to_node()

        if steps[0]:
            a, b, c = (last, last), (0.0, 0.0), (0.0, last)
        else:
            a, b, c = (0.0, 0.0), (last, last), (last, 0.0)

        for left_step in steps[1:]:
            if left_step:
                a, b, c = c, a, _mid(a, b)
            else:
                a, b, c = b, c, _mid(a, b)

        return a, b, c

    def midpoint_pixel_coords(self, grid_size: int) -> Point2d:
        """Returns the midpoint of the triangle's hypotenuse."""
        a, b, _ = self.triangle_coords(grid_size)
        return _mid(a, b)

    def errors_vec_index(self, grid_size: int) -> int:
        """Returns the slot of the hypotenuse midpoint in a flat, row-major error grid."""
        x, y = self.midpoint_pixel_coords(grid_size)
        return int(y * grid_size + x)
