DOMAIN = "entrance_logger"
VERSION = "0.3.0"

# Remote store query modes
MODE_DATA = "data"
MODE_LOG = "log"
MODE_DELETE = "delete"

# HTTP
REQUEST_TIMEOUT = 10  # seconds, multiplied by attempt number for each retry
REQUEST_ATTEMPTS = 2  # only timeouts are retried
PROBE_INTERVAL = 15   # seconds between connectivity probes

# Geolocation
GEO_TIMEOUT = 30.0            # seconds per device location request
GEO_MAXIMUM_AGE = 0.0         # cached fixes are never accepted
GEO_ACCURACY_THRESHOLD = 10.0 # metres; enhanced mode retries while accuracy is worse
GEO_MAX_ATTEMPTS = 3
GEO_RETRY_DELAY = 2.0         # seconds between enhanced-mode attempts

DEFAULT_ENTRANCES_MAX = 5
ANONYMOUS_USER_ID = "anon"

# Local durable storage keys
STORAGE_KEY_QUEUE = "pendingSubmissions"
STORAGE_KEY_CACHED_BUILDINGS = "cachedBuildings"
STORAGE_KEY_CACHED_LOGS = "cachedLogs"
STORAGE_KEY_INSTALL_PROMPT_SEEN = "installPromptSeen"
STORAGE_KEY_USER_ID = "uid"

# Sheet layout of the remote store
SHEET_BUILDINGS = "buildings"
SHEET_LOGS = "logs"
BUILDINGS_HEADER = ["id", "name", "entrancesMax"]
LOGS_HEADER = [
    "timestamp", "userId", "buildingId", "buildingName", "entrance",
    "lat", "lng", "accuracy", "underConstruction",
]

# Used when neither the remote store nor the local cache can provide buildings
BUNDLED_BUILDINGS: list[dict] = [
    {"id": "ENG-01", "name": "Engineering Building A", "entrancesMax": 3},
    {"id": "ENG-02", "name": "Engineering Building B", "entrancesMax": 4},
    {"id": "LIB-01", "name": "Main Library", "entrancesMax": 2},
    {"id": "STU-01", "name": "Student Center", "entrancesMax": 5},
    {"id": "SCI-01", "name": "Science Building", "entrancesMax": 5},
    {"id": "ADM-01", "name": "Administration Building", "entrancesMax": 2},
    {"id": "GYM-01", "name": "Recreation Center", "entrancesMax": 3},
    {"id": "ART-01", "name": "Arts & Humanities Hall", "entrancesMax": 5},
]

GEOLOCATION_MESSAGES = {
    "permission_denied": "Location permission was denied. Allow location access and try again.",
    "position_unavailable": "Your position is currently unavailable. Move to an open area and try again.",
    "timeout": "Timed out while getting your location. Please try again.",
    "unsupported": "This device does not support geolocation.",
    "unknown": "An unknown error occurred while getting your location.",
}

MESSAGE_LOGGED = "Successfully logged {name} entrance {entrance}!"
MESSAGE_LOGGED_OFFLINE = "Logged {name} entrance {entrance} offline, will sync when back online."
MESSAGE_INCORRECT_PASSWORD = "Incorrect password. Please try again."
