import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables (only in development)
# In containers, environment variables are set directly
if os.getenv("ENVIRONMENT") != "production":
    load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Backing store - a JSON document or a SQLite database
# Options: 'json', 'sqlite', or empty to detect from the DATA_FILE suffix
STORE_TYPE = os.getenv("STORE_TYPE", "").lower() or None

DATA_DIR_STR = os.getenv("DATA_DIR", str(BASE_DIR / "data"))
DATA_DIR = Path(DATA_DIR_STR)
DATA_FILE = Path(os.getenv("DATA_FILE", str(DATA_DIR / "urls.json")))

# Table consumed by the SQLite store (first usable table when unset)
STORE_TABLE = os.getenv("STORE_TABLE") or None

# JSON store watcher tuning (seconds)
RECONCILE_DELAY = float(os.getenv("RECONCILE_DELAY", "0.05"))
WATCH_POLL_INTERVAL = float(os.getenv("WATCH_POLL_INTERVAL", "0.1"))

# HTTP server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))

# Disable the shortening endpoint and redirect everything unknown
NOUI = os.getenv("NOUI", "").lower() in ("1", "true", "yes", "on")
REDIRECT_URI = os.getenv("REDIRECT_URI") or os.getenv("REDIRECTURI")

MAX_LINK_ID_LENGTH = int(os.getenv("MAX_LINK_ID_LENGTH", "20"))
GENERATED_ID_LENGTH = int(os.getenv("GENERATED_ID_LENGTH", "10"))

# Rate Limiting
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RATE_LIMIT_PER_MINUTE = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))

# Signals that flush the binding and exit. uvicorn already shuts down
# gracefully on SIGINT and SIGTERM, so only the ones it ignores go here.
EXIT_FLUSH_SIGNALS = tuple(
    name.strip().upper()
    for name in os.getenv("EXIT_FLUSH_SIGNALS", "SIGHUP,SIGQUIT").split(",")
    if name.strip()
)
