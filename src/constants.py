"""Contains global constants and default values used throughout the project."""

from enums import NoiseType

# === TERRAIN CONSTANTS ===

TERRAIN_SIZE_DEFAULT: int = 64
TERRAIN_SIZE_MIN_LIMIT: int = 2
TERRAIN_SIZE_MAX_LIMIT: int = 1024

TERRAIN_HEIGHT_MULTIPLIER_DEFAULT: float = 50.0
TERRAIN_ERROR_THRESHOLD_DEFAULT: float = 0.01

# === NOISE CONSTANTS ===

NOISE_TYPE_DEFAULT: NoiseType = NoiseType.OPENSIMPLEX
NOISE_OCTAVES_DEFAULT: int = 2
NOISE_FREQUENCY_DEFAULT: float = 0.0125
NOISE_LACUNARITY_DEFAULT: float = 0.2
NOISE_PERSISTENCE_DEFAULT: float = 0.2

RANDOM_SEED_MAX: int = 999999999

# === WFC CONSTANTS ===

WFC_GRID_SIZE_DEFAULT: int = 9
WFC_GRID_SIZE_MIN_LIMIT: int = 1
WFC_GRID_SIZE_MAX_LIMIT: int = 256

# Maximum number of candidates a single propagation step may remove from a neighbor. None removes every incompatible
# candidate (the last one always survives).
WFC_TRIES_ALLOWED_DEFAULT: int | None = None
# The cap used by the first prototype of the solver.
WFC_TRIES_ALLOWED_LEGACY: int = 3

# === PLACEMENT CONSTANTS ===

CHUNK_SIZE_DEFAULT: float = 50.0
TILE_MESH_SIZE_DEFAULT: float = 16.0

# === PREVIEW CONSTANTS ===

PREVIEW_TILE_PX_DEFAULT: int = 16
PREVIEW_WIREFRAME_SCALE_DEFAULT: int = 4
PREVIEW_FLOOR_RGB: tuple[int, int, int] = (54, 54, 62)
PREVIEW_FIRST_WALL_RGB: tuple[int, int, int] = (214, 196, 120)
PREVIEW_SECOND_WALL_RGB: tuple[int, int, int] = (120, 170, 214)
PREVIEW_WIREFRAME_RGB: tuple[int, int, int] = (220, 220, 220)
HEIGHTMAP_COLORMAP: str = "gist_earth"

# === LOGGING CONSTANTS ===

LOG_FORMAT: str = "%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-22s | %(message)s"
LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
LOG_CONSOLE_FORMAT: str = "%(levelname)-8s | %(name)-22s | %(message)s"
LOG_MAX_BYTES: int = 5 * 1024 * 1024
LOG_BACKUP_COUNT: int = 3
