"""
Overpass mirror configuration
Ordered mirror list and per-attempt limits for the failover client.
"""

import os
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple

from logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_OVERPASS_MIRRORS: Tuple[str, ...] = (
    "https://overpass-api.de/api/interpreter",
    "https://overpass.kumi.systems/api/interpreter",
    "https://overpass.osm.ch/api/interpreter",
)

# Rate limiting / server overload: try the next mirror
RETRYABLE_STATUSES: FrozenSet[int] = frozenset({429, 502, 503, 504})

DEFAULT_USER_AGENT = "HealthPredict Facility Finder/1.0 (contact: demo@example.com)"
DEFAULT_ATTEMPT_TIMEOUT = 15.0
DEFAULT_NOMINATIM_URL = "https://nominatim.openstreetmap.org"


@dataclass
class MirrorConfig:
    """Configuration for the mirror failover loop."""
    endpoints: List[str] = field(default_factory=lambda: list(DEFAULT_OVERPASS_MIRRORS))
    attempt_timeout: float = DEFAULT_ATTEMPT_TIMEOUT
    connect_timeout: float = 5.0
    retryable_statuses: FrozenSet[int] = RETRYABLE_STATUSES
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        """Validate configuration."""
        self.endpoints = _dedupe(self.endpoints)
        if not self.endpoints:
            raise ValueError("at least one Overpass endpoint is required")
        if self.attempt_timeout <= 0:
            raise ValueError("attempt_timeout must be > 0")
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be > 0")


def _dedupe(endpoints) -> List[str]:
    """Strip blanks and duplicates while preserving order."""
    result: List[str] = []
    for endpoint in endpoints:
        if not endpoint:
            continue
        endpoint = endpoint.strip()
        if endpoint and endpoint not in result:
            result.append(endpoint)
    return result


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


def load_mirror_config() -> MirrorConfig:
    """
    Build a MirrorConfig from the environment.

    OVERPASS_MIRRORS replaces the default list (comma separated);
    OVERPASS_URL is tried first when set.
    """
    mirrors_env = os.getenv("OVERPASS_MIRRORS")
    if mirrors_env:
        endpoints = [m for m in mirrors_env.split(",")]
    else:
        endpoints = list(DEFAULT_OVERPASS_MIRRORS)

    preferred = os.getenv("OVERPASS_URL")
    if preferred:
        endpoints.insert(0, preferred)

    return MirrorConfig(
        endpoints=_dedupe(endpoints),
        attempt_timeout=_float_env("OVERPASS_TIMEOUT", DEFAULT_ATTEMPT_TIMEOUT),
        user_agent=os.getenv("FACILITY_FINDER_USER_AGENT", DEFAULT_USER_AGENT),
    )


def get_nominatim_url(override: Optional[str] = None) -> str:
    """Base URL for the Nominatim geocoder, without a trailing slash."""
    url = override or os.getenv("NOMINATIM_URL") or DEFAULT_NOMINATIM_URL
    return url.rstrip("/")
