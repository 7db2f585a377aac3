import logging
import os

from .services.recalculate import REPLAY_ORDERS

logger = logging.getLogger(__name__)


def _canon_prefix(val):
    """
    Normalize API prefix to always be exactly like '/api':
      - defaults to '/api' when unset/empty
      - ensures a single leading slash
      - removes any trailing slash (except for root)
    """
    val = (val or "/api").strip()
    if not val.startswith("/"):
        val = "/" + val
    if len(val) > 1 and val.endswith("/"):
        val = val[:-1]
    return val


def _replay_order(val):
    """Return the configured match replay order, defaulting to 'id'."""
    val = (val or "id").strip().lower()
    if val not in REPLAY_ORDERS:
        logger.warning("REPLAY_ORDER must be one of %s (got %r); using 'id'", REPLAY_ORDERS, val)
        return "id"
    return val


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))


def get_replay_order() -> str:
    return _replay_order(os.getenv("REPLAY_ORDER"))


def rate_limits_disabled() -> bool:
    return (os.getenv("DISABLE_RATE_LIMITS") or "").lower() == "true"
