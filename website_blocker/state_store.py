"""
Blocklist persistence for Website Blocker.

Holds the permanent and timed blocklists plus the global on/off switch, and
stores them as JSON in the user's application data directory. Nothing is
written implicitly: callers mutate, then call `save()`.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from website_blocker.errors import SerializationError, StoreSaveError

logger = logging.getLogger(__name__)


def _parse_expiry(value) -> Optional[float]:
    """Accept seconds since epoch, or the older {"secs_since_epoch", "nanos_since_epoch"} form."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise SerializationError(f"Invalid expiry: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, dict) and "secs_since_epoch" in value:
        secs = value["secs_since_epoch"]
        nanos = value.get("nanos_since_epoch", 0)
        if not isinstance(secs, int) or not isinstance(nanos, int):
            raise SerializationError(f"Invalid expiry: {value!r}")
        return secs + nanos / 1e9
    raise SerializationError(f"Invalid expiry: {value!r}")


class StateStore:
    """JSON-backed blocklist.

    Schema:
    {
        "permanent_sites": List[str],
        "timed_sites": Dict[str, float],  # seconds since epoch
        "is_blocking_enabled": bool,
    }

    A domain is kept in at most one of the two collections, and timed entries
    always carry an expiry; a timed block without one is stored as permanent.
    """

    def __init__(self, state_path: Optional[Path] = None):
        self.state_path = Path(state_path) if state_path is not None else None
        self.permanent_sites: Set[str] = set()
        self.timed_sites: Dict[str, float] = {}
        self.is_blocking_enabled = False

    # Serialization
    def to_dict(self) -> Dict:
        return {
            "permanent_sites": sorted(self.permanent_sites),
            "timed_sites": {d: self.timed_sites[d] for d in sorted(self.timed_sites)},
            "is_blocking_enabled": self.is_blocking_enabled,
        }

    @classmethod
    def from_dict(cls, data, state_path: Optional[Path] = None) -> "StateStore":
        if not isinstance(data, dict):
            raise SerializationError("Blocklist state must be a JSON object")
        store = cls(state_path)
        permanent = data.get("permanent_sites", [])
        timed = data.get("timed_sites", {})
        enabled = data.get("is_blocking_enabled", False)
        if not isinstance(permanent, list) or not all(isinstance(d, str) for d in permanent):
            raise SerializationError("permanent_sites must be a list of strings")
        if not isinstance(timed, dict):
            raise SerializationError("timed_sites must be an object")
        if not isinstance(enabled, bool):
            raise SerializationError("is_blocking_enabled must be a boolean")

        for domain in permanent:
            store.add_permanent(domain)
        for domain, raw_expiry in timed.items():
            store.add_timed(domain, _parse_expiry(raw_expiry))
        store.is_blocking_enabled = enabled
        return store

    @classmethod
    def load(cls, state_path: Path) -> "StateStore":
        """Load the blocklist, or start empty and disabled if it is missing or corrupt."""
        state_path = Path(state_path)
        if not state_path.exists():
            return cls(state_path)
        try:
            data = json.loads(state_path.read_text(encoding="utf-8"))
            return cls.from_dict(data, state_path)
        except (OSError, ValueError, SerializationError) as exc:
            # Corrupt file is left in place; the next save replaces it.
            logger.warning("Could not read blocklist %s, starting empty: %s", state_path, exc)
            return cls(state_path)

    def save(self) -> None:
        if self.state_path is None:
            raise StoreSaveError("No state file configured")
        try:
            self.state_path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.state_path.with_suffix(".tmp")
            tmp.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
            tmp.replace(self.state_path)
        except OSError as exc:
            raise StoreSaveError(f"Failed to save blocked sites: {exc}") from exc
        logger.debug("Saved blocklist to %s", self.state_path)

    # Mutations
    def add_permanent(self, domain: str) -> None:
        self.timed_sites.pop(domain, None)
        self.permanent_sites.add(domain)

    def add_timed(self, domain: str, expiry: Optional[float]) -> bool:
        """Block `domain` until `expiry`.

        Returns False (and changes nothing) if the domain is already blocked
        permanently. A None expiry is a permanent block.
        """
        if expiry is None:
            self.add_permanent(domain)
            return True
        if domain in self.permanent_sites:
            return False
        self.timed_sites[domain] = float(expiry)
        return True

    def remove(self, domain: str) -> bool:
        removed = domain in self.permanent_sites or domain in self.timed_sites
        self.permanent_sites.discard(domain)
        self.timed_sites.pop(domain, None)
        return removed

    def toggle_enabled(self) -> bool:
        self.is_blocking_enabled = not self.is_blocking_enabled
        return self.is_blocking_enabled

    def sweep_expired(self, now: Optional[float] = None) -> List[str]:
        """Drop timed entries whose expiry is at or before `now`; return them."""
        if now is None:
            now = time.time()
        expired = sorted(d for d, expiry in self.timed_sites.items() if expiry <= now)
        for domain in expired:
            del self.timed_sites[domain]
        if expired:
            logger.info("Timed blocks expired: %s", ", ".join(expired))
        return expired

    # Queries
    def has_expired(self, now: Optional[float] = None) -> bool:
        if now is None:
            now = time.time()
        return any(expiry <= now for expiry in self.timed_sites.values())

    def is_blocked(self, domain: str) -> bool:
        return domain in self.permanent_sites or domain in self.timed_sites

    def blocked_domains(self) -> List[str]:
        """Every stored domain, expired or not."""
        return sorted(self.permanent_sites | set(self.timed_sites))

    def active_domains(self, now: Optional[float] = None) -> List[str]:
        if now is None:
            now = time.time()
        active = set(self.permanent_sites)
        active.update(d for d, expiry in self.timed_sites.items() if expiry > now)
        return sorted(active)

    def entries(self) -> List[Tuple[str, Optional[float]]]:
        """(domain, expiry) pairs for display; expiry is None for permanent blocks."""
        rows: List[Tuple[str, Optional[float]]] = [(d, None) for d in sorted(self.permanent_sites)]
        rows.extend(sorted(self.timed_sites.items()))
        return rows
