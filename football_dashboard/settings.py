import os
from dotenv import load_dotenv

from .constants import SPORTRADAR_DEFAULT_BASE, PROXY_URL_PREFIX, DEV_SERVER_PORT

# Load .env from repo root (dotenv auto-walks up from CWD)
load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _read_secret_file(path: str | None) -> str | None:
    if not path:
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return None


# --- Sportradar upstream ---
# No built-in key: the proxy refuses to call upstream without one.
SPORTRADAR_API_KEY = os.getenv("SPORTRADAR_API_KEY") or _read_secret_file(
    os.getenv("SPORTRADAR_API_KEY_FILE")
)
SPORTRADAR_BASE = os.getenv("SPORTRADAR_BASE", SPORTRADAR_DEFAULT_BASE).rstrip("/")
SPORTRADAR_TIMEOUT_MS = int(os.getenv("SPORTRADAR_TIMEOUT_MS", "8000"))

# Serve literal demo payloads when upstream fails (development only)
SPORTRADAR_DEMO_FALLBACK = _get_bool("SPORTRADAR_DEMO_FALLBACK", False)

# --- Client side ---
PROXY_BASE_URL = os.getenv(
    "DASHBOARD_PROXY_BASE_URL", f"http://localhost:{DEV_SERVER_PORT}{PROXY_URL_PREFIX}"
).rstrip("/")
