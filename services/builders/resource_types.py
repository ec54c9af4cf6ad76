"""Process-wide resource type lookup backed by the resource-type endpoint."""

import logging
import threading
import time
from typing import List, Optional

import requests

from config.models import ResourceTypeReference
from config.settings import get_curation_config

logger = logging.getLogger(__name__)


class ResourceTypeLookup:
    """Caches the resource type list for a fixed TTL; concurrent callers share one fetch."""

    def __init__(self, url: Optional[str] = None, ttl: Optional[int] = None, timeout: Optional[float] = None):
        config = get_curation_config()
        self.url = url or config.resource_types_url
        self.ttl = ttl if ttl is not None else config.resource_type_cache_ttl
        self.timeout = timeout if timeout is not None else config.request_timeout_seconds

        self._cache: Optional[List[ResourceTypeReference]] = None
        self._fetched_at = 0.0
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get_all(self) -> List[ResourceTypeReference]:
        """Return cached resource types, fetching when missing or expired."""
        if self._is_fresh():
            return list(self._cache)

        with self._lock:
            # another caller may have completed the fetch while we waited
            if self._is_fresh():
                return list(self._cache)

            types = self._fetch()
            if types is not None:
                self._cache = types
                self._fetched_at = time.monotonic()
                return list(types)
            return []

    def resolve_id(self, name: Optional[str]) -> Optional[str]:
        """Map a resource type name to its id (as string), case-insensitively."""
        if not name or not name.strip():
            return None

        wanted = name.strip().lower()
        for resource_type in self.get_all():
            if resource_type.name.strip().lower() == wanted:
                return str(resource_type.id)
        return None

    def reset(self) -> None:
        """Drop the cached list."""
        with self._lock:
            self._cache = None
            self._fetched_at = 0.0

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _is_fresh(self) -> bool:
        return self._cache is not None and (time.monotonic() - self._fetched_at) < self.ttl

    def _fetch(self) -> Optional[List[ResourceTypeReference]]:
        try:
            response = requests.get(self.url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Failed to fetch resource types from {self.url}: {e}")
            return None

        if not response.ok:
            logger.warning("Resource type endpoint returned HTTP %s", response.status_code)
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.error("Resource type endpoint returned invalid JSON", exc_info=True)
            return None

        if not isinstance(payload, list):
            logger.warning("Unexpected resource type payload: %s", type(payload).__name__)
            return None

        types = []
        for entry in payload:
            try:
                types.append(ResourceTypeReference(**entry))
            except (TypeError, ValueError) as e:
                logger.warning("Skipping malformed resource type %r: %s", entry, e)
        logger.info("Loaded %d resource types", len(types))
        return types


_lookup: Optional[ResourceTypeLookup] = None
_lookup_lock = threading.Lock()


def get_resource_type_lookup() -> ResourceTypeLookup:
    """Return the shared lookup instance."""
    global _lookup
    with _lookup_lock:
        if _lookup is None:
            _lookup = ResourceTypeLookup()
        return _lookup


def reset_resource_type_lookup() -> None:
    """Forget the shared instance and its cache."""
    global _lookup
    with _lookup_lock:
        _lookup = None
