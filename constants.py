import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

STATIC_DIR = os.getenv("STATIC_DIR", os.path.join(os.path.dirname(os.path.abspath(__file__)), "public"))

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Reject a second publisher for an active room instead of overwriting it
STRICT_PUBLISHER_JOIN = _env_flag("STRICT_PUBLISHER_JOIN")
# Tell the publisher when a viewer leaves or disconnects
ANNOUNCE_VIEWER_DEPARTURE = _env_flag("ANNOUNCE_VIEWER_DEPARTURE")

OUTBOX_MAX_SIZE = int(os.getenv("OUTBOX_MAX_SIZE", 256))

ERROR_STREAM_NOT_FOUND = "Stream not found"
ERROR_STREAM_ALREADY_ACTIVE = "Stream already active"
