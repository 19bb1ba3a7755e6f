"""Defines the tile IDs placed by the WFC solver and the connections each tile offers on its four edges."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import cache
from types import MappingProxyType
from typing import ClassVar

from enums import Connection, Orientation, Rotation, TileType


class InvalidTileError(ValueError):
    """Raised for tile bytes that do not encode a known tile type and rotation."""


@dataclass(frozen=True, order=True)
class TileID:
    """Immutable tile identity packed into a single byte.

    The low four bits hold the TileType, bits 4-6 hold the Rotation. Equality, ordering and hashing use the raw byte.
    """

    value: int

    TYPE_MASK: ClassVar[int] = 0b0000_1111
    ROT_MASK: ClassVar[int] = 0b111_0000

    EMPTY: ClassVar[TileID]
    FLOOR: ClassVar[TileID]
    WALL: ClassVar[TileID]
    CORNER: ClassVar[TileID]

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFF:
            raise InvalidTileError(f"tile IDs are single bytes, got {self.value}")

    @classmethod
    def from_parts(cls, tile_type: TileType, rotation: Rotation | None = None) -> TileID:
        """Packs a tile type and an optional rotation into a tile ID."""
        return cls(int(tile_type) | (int(rotation) if rotation is not None else 0))

    @property
    def type_value(self) -> int:
        return self.value & self.TYPE_MASK

    @property
    def tile_type(self) -> TileType:
        """Returns the tile type stored in the low four bits.

        Raises:
            InvalidTileError: If the bits do not encode a known type.
        """
        try:
            return TileType(self.type_value)
        except ValueError as error:
            raise InvalidTileError(f"{self.value:#010b} has no valid tile type") from error

    def rotation_identity(self) -> Rotation:
        """Returns the rotation stored in bits 4-6. Tiles without rotation bits count as not rotated.

        Raises:
            InvalidTileError: If the bits do not encode one of the four rotations.
        """
        rotation_bits = self.value & self.ROT_MASK
        if rotation_bits == 0:
            return Rotation.ROT_0
        try:
            return Rotation(rotation_bits)
        except ValueError as error:
            raise InvalidTileError(f"{self.value:#010b} has no valid rotation") from error

    def __str__(self) -> str:
        match self.type_value:
            case TileType.EMPTY:
                return "EMPTY"
            case TileType.WALL:
                prefix = "WALL_"
            case TileType.CORNER:
                prefix = "CORNER_"
            case _:
                prefix = "UNDEFINED_"
        try:
            degrees = self.rotation_identity().degrees
        except InvalidTileError:
            degrees = 0
        return f"{prefix}{degrees}"


TileID.EMPTY = TileID(int(TileType.EMPTY))
TileID.FLOOR = TileID.EMPTY
TileID.WALL = TileID(int(TileType.WALL))
TileID.CORNER = TileID(int(TileType.CORNER))

# The empty tile followed by every wall and corner rotation, in ascending byte order per type.
ALL_VALID_IDS: tuple[TileID, ...] = (TileID.EMPTY,) + tuple(
    TileID.from_parts(tile_type, rotation)
    for tile_type in (TileType.WALL, TileType.CORNER)
    for rotation in Rotation
)


@dataclass(frozen=True)
class EitherSocket:
    """Symmetric socket, offers and accepts the same connection."""

    connection: Connection

    def accepts_incoming_connection(self, other: ConnectionSocket) -> bool:
        """Checks the own connection against the other socket's outgoing (male) connection."""
        return self.connection.matches(outgoing_connection(other))


@dataclass(frozen=True)
class MaleFemaleSocket:
    """Directional socket, offers its male connection and accepts connections that match its female one."""

    male: Connection
    female: Connection

    def accepts_incoming_connection(self, other: ConnectionSocket) -> bool:
        """Checks the own female connection against the other socket's outgoing (male) connection."""
        return self.female.matches(outgoing_connection(other))


ConnectionSocket = EitherSocket | MaleFemaleSocket
ConnectionMap = Mapping[Orientation, ConnectionSocket]


def outgoing_connection(socket: ConnectionSocket) -> Connection:
    """Returns the connection a socket offers to its neighbor."""
    match socket:
        case EitherSocket(connection=connection):
            return connection
        case MaleFemaleSocket(male=outgoing):
            return outgoing
    raise TypeError(f"not a connection socket: {socket!r}")


def male(connection: Connection) -> MaleFemaleSocket:
    """Returns a socket that only offers the given connection."""
    return MaleFemaleSocket(male=connection, female=Connection.NONE)


def female(connection: Connection) -> MaleFemaleSocket:
    """Returns a socket that only accepts the given connection."""
    return MaleFemaleSocket(male=Connection.NONE, female=connection)


_N = Connection.NONE
_F = Connection.FIRST
_S = Connection.SECOND
_E = Connection.EITHER

# (top, right, bottom, left) connections of every valid tile. FIRST and SECOND name the wall segment facing the edge.
_CONNECTION_TABLE: dict[tuple[TileType, Rotation | None], tuple[Connection, Connection, Connection, Connection]] = {
    (TileType.EMPTY, None): (_E, _E, _E, _E),
    (TileType.WALL, Rotation.ROT_0): (_F, _N, _F, _N),
    (TileType.CORNER, Rotation.ROT_0): (_N, _F, _F, _N),
    (TileType.WALL, Rotation.ROT_90): (_N, _F, _N, _F),
    (TileType.CORNER, Rotation.ROT_90): (_N, _N, _S, _F),
    (TileType.WALL, Rotation.ROT_180): (_S, _N, _S, _N),
    (TileType.CORNER, Rotation.ROT_180): (_S, _N, _N, _S),
    (TileType.WALL, Rotation.ROT_270): (_N, _S, _N, _S),
    (TileType.CORNER, Rotation.ROT_270): (_F, _S, _N, _N),
}

_EDGE_ORDER = (Orientation.TOP, Orientation.RIGHT, Orientation.BOTTOM, Orientation.LEFT)


def connection_map(tile: TileID) -> ConnectionMap:
    """Returns the socket a tile offers on each of its four edges.

    WALL and CORNER bytes without rotation bits share the sockets of their ROT_0 variant.

    Raises:
        InvalidTileError: If the tile is not one of the valid tile IDs.
    """
    tile_type = tile.tile_type
    if tile_type == TileType.EMPTY:
        if tile.value != TileType.EMPTY:
            raise InvalidTileError(f"{tile} ({tile.value:#010b}) has no connection map")
        key: tuple[TileType, Rotation | None] = (TileType.EMPTY, None)
    else:
        key = (tile_type, tile.rotation_identity())

    connections = _CONNECTION_TABLE.get(key)
    if connections is None:
        raise InvalidTileError(f"{tile} ({tile.value:#010b}) has no connection map")
    return MappingProxyType(
        {orientation: EitherSocket(connection) for orientation, connection in zip(_EDGE_ORDER, connections)}
    )


@cache
def tile_connection_map() -> Mapping[TileID, ConnectionMap]:
    """Builds the read-only connection maps of all valid tile IDs. The result is built once and shared."""
    return MappingProxyType({tile: connection_map(tile) for tile in ALL_VALID_IDS})


TILE_CONNECTION_MAP: Mapping[TileID, ConnectionMap] = tile_connection_map()
