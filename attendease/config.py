# attendease/config.py
import os, logging

# ── Helpers ───────────────────────────────────────────────────────────────────
def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    try:
        return int(raw) if raw.strip() else default
    except ValueError:
        return default

def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    try:
        return float(raw) if raw.strip() else default
    except ValueError:
        return default

# ── Storage ──────────────────────────────────────────────────────────────────
# file | sql | remote
STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "file").strip().lower()
DATA_FILE       = os.environ.get("DATA_FILE", os.path.join(os.getcwd(), "db.json"))
DATABASE_URL    = os.environ.get("DATABASE_URL", "sqlite:///attendease.db")

# Remote JSON document (GET to load, PUT the whole blob to save)
REMOTE_DATA_URL     = os.environ.get("REMOTE_DATA_URL", "")
REMOTE_TIMEOUT      = _env_float("REMOTE_TIMEOUT", 10.0)
STORAGE_MAX_RETRIES = _env_int("STORAGE_MAX_RETRIES", 3)

# ── Local timezone ───────────────────────────────────────────────────────────
# IANA zone of the studio, e.g. "Europe/London". Empty means the host's local zone.
TZ_NAME = os.environ.get("TZ_NAME", "").strip()

# ── Payments ─────────────────────────────────────────────────────────────────
# Simulated gateway delay before a purchase settles
PAYMENT_DELAY_SECONDS = _env_float("PAYMENT_DELAY_SECONDS", 1.5)

# ── Server ───────────────────────────────────────────────────────────────────
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
PORT      = _env_int("PORT", 3000)

# ── Startup logging ──────────────────────────────────────────────────────────
logger = logging.getLogger(__name__)
logger.info(f"[CONFIG] STORAGE_BACKEND={STORAGE_BACKEND}, TZ_NAME={TZ_NAME}")
