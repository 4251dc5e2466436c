from enum import Enum

# Earth radius for Web Mercator (meters)
EARTH_RADIUS_M = 6378137.0

# Half of the Web Mercator world width (meters), pi * R
MERCATOR_HALF_EXTENT_M = 20037508.342789244

# Base Web Mercator tile size (pixels)
TILE_SIZE = 256

# Zoom range of the predefined global spherical mercator schema
MIN_ZOOM = 0
MAX_ZOOM = 20

# Latitude limit of Web Mercator (degrees)
MERCATOR_MAX_LAT_DEG = 85.05112878

WORLD_LNG_HALF_SPAN_DEG = 180.0

# SRS of the global spherical mercator schema
MERCATOR_SRS = 'EPSG:3857'
WGS84_SRS = 'EPSG:4326'

# Default tile image format (used as the cache file extension)
DEFAULT_TILE_FORMAT = 'png'

# Tokens allowed in tile URL templates
URL_TOKEN_LEVEL = '{z}'
URL_TOKEN_COL = '{x}'
URL_TOKEN_ROW = '{y}'
URL_TOKEN_SUBDOMAIN = '{s}'
URL_TOKEN_KEY = '{k}'
URL_TOKEN_QUADKEY = '{quadkey}'

# --- Tile cache
# Default cache directory (relative paths resolve against the user cache root)
TILE_CACHE_DIR = 'tiles'
# SQLite cache file name inside the cache directory
TILE_CACHE_DB_NAME = 'tiles.db'
# Max SQLite cache size for LRU cleanup (MB)
TILE_CACHE_MAX_SIZE_MB = 2048
# Suffix of in-progress cache files (never returned by lookups)
TILE_CACHE_TMP_SUFFIX = '.part'

# --- HTTP
HTTP_TIMEOUT_DEFAULT = 20.0
# Max number of parallel tile requests
DOWNLOAD_CONCURRENCY = 16
# Max number of pooled connections per session
HTTP_CONNECTION_LIMIT = 64
DEFAULT_USER_AGENT = 'tiledepot/0.1 (+https://pypi.org/project/tiledepot/)'

HTTP_OK_MIN = 200
HTTP_OK_MAX = 300

# Number of visible API key characters when masking
API_KEY_VISIBLE_PREFIX_LEN = 4

# Log format used by setup_logging
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class YAxis(str, Enum):
    """Direction in which tile rows grow."""

    # Origin at top-left, rows increase downward (OSM / Google / Bing)
    TOP_LEFT = 'top-left'
    # Origin at bottom-left, rows increase upward (TMS)
    BOTTOM_LEFT = 'bottom-left'
