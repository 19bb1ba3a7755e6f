"""Tests for enums module."""

import pytest

from enums import Connection, Orientation, Rotation, TileType


class TestRotation:
    """Tests for Rotation."""

    def test_packed_values(self):
        """Test the bit patterns stored in tile IDs."""
        assert [int(rotation) for rotation in Rotation] == [0b001_0000, 0b011_0000, 0b101_0000, 0b111_0000]

    @pytest.mark.parametrize("degrees", [0, 90, 180, 270])
    def test_degrees_roundtrip(self, degrees):
        assert Rotation.from_degrees(degrees).degrees == degrees

    @pytest.mark.parametrize("degrees", [45, 360, -90])
    def test_invalid_degrees_raise(self, degrees):
        with pytest.raises(ValueError):
            Rotation.from_degrees(degrees)


class TestTileType:
    """Tests for TileType."""

    def test_floor_is_empty(self):
        """Test FLOOR is an alias of EMPTY."""
        assert TileType.FLOOR is TileType.EMPTY


class TestOrientation:
    """Tests for Orientation."""

    @pytest.mark.parametrize("orientation", list(Orientation))
    def test_invert_twice(self, orientation):
        assert orientation.invert().invert() is orientation

    @pytest.mark.parametrize("orientation", list(Orientation))
    def test_inverted_vectors_cancel(self, orientation):
        dx, dy = orientation.to_vector()
        ix, iy = orientation.invert().to_vector()
        assert (dx + ix, dy + iy) == (0, 0)

    def test_vectors(self):
        """Test y grows towards TOP and x grows towards RIGHT."""
        assert Orientation.TOP.to_vector() == (0, 1)
        assert Orientation.RIGHT.to_vector() == (1, 0)
        assert Orientation.BOTTOM.to_vector() == (0, -1)
        assert Orientation.LEFT.to_vector() == (-1, 0)


class TestConnection:
    """Tests for Connection.matches."""

    @pytest.mark.parametrize(
        "one,other,expected",
        [
            (Connection.NONE, Connection.NONE, True),
            (Connection.FIRST, Connection.FIRST, True),
            (Connection.SECOND, Connection.SECOND, True),
            (Connection.FIRST, Connection.SECOND, False),
            (Connection.FIRST, Connection.NONE, False),
            (Connection.EITHER, Connection.FIRST, True),
            (Connection.EITHER, Connection.SECOND, True),
            (Connection.EITHER, Connection.EITHER, True),
            (Connection.EITHER, Connection.NONE, False),
        ],
    )
    def test_matches(self, one, other, expected):
        assert one.matches(other) is expected
        assert other.matches(one) is expected
