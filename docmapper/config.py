import os
import logging


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)).strip())
    except Exception:
        return default


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


# ───────────────────────────────────────
# 🔍 OPENSEARCH
# ───────────────────────────────────────
# Engine URL including the index path, e.g. http://localhost:9200/docmapper
DOCMAPPER_URL = os.getenv("DOCMAPPER_URL", "http://localhost:9200/docmapper")
OPENSEARCH_REQUEST_TIMEOUT = _env_int("OPENSEARCH_REQUEST_TIMEOUT", 60)
DOCMAPPER_VERIFY_CERTS = _env_bool("DOCMAPPER_VERIFY_CERTS", False)

# ───────────────────────────────────────
# 🔎 Query defaults
# ───────────────────────────────────────
DEFAULT_PAGE_SIZE = 10  # engine default for "size"
EXACT_MATCH_BOOST = "5"
FUZZY_MATCH_BOOST = "1"

# ───────────────────────────────────────
# 📋 Logging
# ───────────────────────────────────────
LOG_LEVEL = os.getenv("DOCMAPPER_LOG_LEVEL", "INFO").strip().upper()

logger = logging.getLogger("docmapper")
logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

handler = logging.StreamHandler()
formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
handler.setFormatter(formatter)

if not logger.hasHandlers():
    logger.addHandler(handler)
