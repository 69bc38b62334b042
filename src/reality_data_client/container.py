"""Blob container URL cache.

Signed container URLs are valid for an hour on the platform side. Each reality
data keeps the last URL obtained per access mode and reuses it for
FRESHNESS_WINDOW, after which the next caller transparently fetches a new one.

Staleness is detected lazily; there is no background refresh. Concurrent misses
for the same entity and mode share a single in-flight request. A credential is
only served for the entity id it was obtained for.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

from .errors import InvalidStateError
from .ports import ContainerFetcher
from .types import AccessMode

log = logging.getLogger(__name__)

# Signatures live 60 minutes; refresh with a 10 minute margin
FRESHNESS_WINDOW = timedelta(minutes=50)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CachedCredential:
    """Signed container URL and the instant it was obtained.

    Attributes:
        container_url: Absolute URL; its query string is the access signature
        obtained_at: When the URL was fetched from the API
        entity_id: Reality data the URL was issued for
    """
    container_url: str
    obtained_at: datetime
    entity_id: Optional[str] = None


def is_fresh(credential: CachedCredential, now: datetime) -> bool:
    """True while ``now`` is strictly inside the freshness window."""
    return now - credential.obtained_at < FRESHNESS_WINDOW


def redact_url(url: str) -> str:
    """Strip the query string (the signature) so a URL is safe to log."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


class ContainerCache:
    """Two slots, one per access mode, for a single reality data.

    Slots are replaced wholesale; a CachedCredential is never mutated.
    """

    def __init__(self):
        self._slots: Dict[AccessMode, CachedCredential] = {}

    def get(self, mode: AccessMode) -> Optional[CachedCredential]:
        return self._slots.get(mode)

    def put(self, mode: AccessMode, credential: CachedCredential) -> None:
        self._slots[mode] = credential


class ContainerUrlResolver:
    """Serve container URLs from the cache, fetching on miss or staleness.

    The lock only guards slot lookups and in-flight bookkeeping; it is never
    held across network I/O, so a caller with a fresh entry never waits on a
    request issued for the other mode or by another caller.
    """

    def __init__(self, cache: Optional[ContainerCache] = None, clock: Optional[Clock] = None):
        self.cache = cache if cache is not None else ContainerCache()
        self._clock = clock or utc_now
        self._lock = threading.Lock()
        self._in_flight: Dict[Tuple[str, AccessMode], Future] = {}

    # Copies start empty: signed URLs and in-flight requests stay with the original.

    def __copy__(self) -> "ContainerUrlResolver":
        return type(self)(clock=self._clock)

    def __deepcopy__(self, memo) -> "ContainerUrlResolver":
        return self.__copy__()

    def __getstate__(self) -> Dict[str, Any]:
        return {"clock": self._clock}

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self.__init__(clock=state["clock"])

    def resolve(
        self,
        fetcher: ContainerFetcher,
        access_token: str,
        entity_id: Optional[str],
        project_id: Optional[str] = None,
        mode: AccessMode = AccessMode.READ,
        now: Optional[datetime] = None,
    ) -> str:
        """Return a fresh container URL for ``mode``.

        Args:
            fetcher: Port used to request a new URL on miss
            access_token: Token forwarded to the fetcher
            entity_id: Reality data identifier (required)
            project_id: Owning project; omitted from the request when None
            mode: Requested permission, read by default
            now: Evaluation instant, defaults to the resolver's clock

        Returns:
            Signed container URL

        Raises:
            InvalidStateError: If entity_id is missing (no request is made)
            ValueError: If now is a naive datetime
            ContainerResolutionError: If the request fails; the cache is left untouched
        """
        if not entity_id:
            raise InvalidStateError("reality data id is not set")
        if now is None:
            now = self._clock()
        if now.tzinfo is None or now.utcoffset() is None:
            raise ValueError(f"now must be timezone-aware, got {now!r}")

        key = (entity_id, mode)
        with self._lock:
            cached = self.cache.get(mode)
            if cached is not None and cached.entity_id == entity_id and is_fresh(cached, now):
                log.debug("Container cache hit for %s (%s)", entity_id, mode.value)
                return cached.container_url
            pending = self._in_flight.get(key)
            leader = pending is None
            if leader:
                pending = Future()
                self._in_flight[key] = pending

        if not leader:
            log.debug("Waiting on in-flight container request for %s (%s)", entity_id, mode.value)
            return pending.result()

        log.debug("Container cache miss for %s (%s)", entity_id, mode.value)
        try:
            url = fetcher.fetch_container_url(access_token, entity_id, project_id, mode)
        except BaseException as exc:
            with self._lock:
                self._in_flight.pop(key, None)
            pending.set_exception(exc)
            raise

        with self._lock:
            self.cache.put(mode, CachedCredential(container_url=url, obtained_at=now, entity_id=entity_id))
            self._in_flight.pop(key, None)
        pending.set_result(url)
        log.debug("Cached %s container %s", mode.value, redact_url(url))
        return url


__all__ = [
    "FRESHNESS_WINDOW",
    "CachedCredential",
    "ContainerCache",
    "ContainerUrlResolver",
    "is_fresh",
    "redact_url",
    "utc_now",
]
