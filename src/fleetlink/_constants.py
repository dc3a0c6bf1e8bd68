"""Internal constants shared across the library."""

# Backend candidates probed in order when no address is known yet.
DEFAULT_CANDIDATE_URLS: tuple[str, ...] = (
    "http://10.0.0.74:5000",
    "http://10.0.0.27:5000",
    "http://192.168.0.111:5000",
    "http://localhost:5000",
)

HEALTH_PATH = "/health/"
USER_AGENT = "fleetlink/0.1"

PROBE_TIMEOUT_S: float = 2.0
REQUEST_TIMEOUT_S: float = 10.0

# Object storage is reachable directly on this port, or through the reverse
# proxy under ``/<STORAGE_PREFIX>/``.
STORAGE_PORT = 9000
STORAGE_PREFIX = "storage"

# ------------------------------------------------------------------
# Cache lifetimes per entity kind (seconds)
# ------------------------------------------------------------------

BALANCE_TTL_S: float = 5 * 60
NOTIFICATION_TTL_S: float = 2 * 60
DOCUMENT_TTL_S: float = 30 * 60

# Documents expiring within this many days are flagged.
DOCUMENT_EXPIRY_WINDOW_DAYS = 30
