"""High-value constants for the Prelude client package."""

# Package metadata
PACKAGE_VERSION = "0.3.0"
SERVER_NAME = "prelude-client"
USER_AGENT = f"{SERVER_NAME}/{PACKAGE_VERSION}"

# External API contract consts
API_URL_SUFFIX = "/api"
TOKEN_URL_PATH = "/oauth/token"
RETRIEVE_ACTION = "retrieve"

# Default projections for the two resource kinds
ALERT_PATHS = ["alert.create_time", "alert.classification.text"]
LOG_PATHS = ["log.timestamp", "log.host"]
DEFAULT_LIMIT = 100
DEFAULT_OFFSET = 0

# Business logic consts
DEFAULT_TOKEN_EXPIRY_SECONDS = 3600  # when the server omits expires_in
DEFAULT_TIMEOUT_SECONDS = 30
EMBEDDED_ERROR_KEY = "errno"

# Status labels
STATUS_TOKEN_LABEL = "Prelude access token"
STATUS_ALERTS_LABEL = "Prelude alerts"
STATUS_LOGS_LABEL = "Prelude logs"
