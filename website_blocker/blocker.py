"""
Command interface between the UI and the blocklist core.

Each user action maps to one method returning an ActionResult with a
human-readable message. Mutations are saved and synced to the hosts file
right away; nothing is batched.
"""

from __future__ import annotations

import logging
import time
from typing import NamedTuple, Optional

from website_blocker.domains import validate_domain
from website_blocker.durations import parse_duration
from website_blocker.errors import BlockerError, PermissionDeniedError
from website_blocker.hosts_manager import HostsManager
from website_blocker.permissions import PermissionCheck, has_hosts_privileges
from website_blocker.state_store import StateStore

logger = logging.getLogger(__name__)


class ActionResult(NamedTuple):
    ok: bool
    message: str
    error: Optional[BlockerError] = None

    @classmethod
    def failure(cls, error: BlockerError, prefix: str = "Error") -> "ActionResult":
        return cls(False, f"{prefix}: {error}", error)


class WebsiteBlocker:
    def __init__(
        self,
        store: StateStore,
        hosts: HostsManager,
        permission_check: PermissionCheck = has_hosts_privileges,
    ):
        self.store = store
        self.hosts = hosts
        self.permission_check = permission_check
        # Set when an expiry sync was refused; cleared by the next permitted action.
        self.expiry_paused = False

    def check_permissions(self) -> None:
        if not self.permission_check():
            raise PermissionDeniedError()
        self.expiry_paused = False

    def _save_and_sync(self, now: Optional[float] = None) -> None:
        self.store.save()
        expired = self.hosts.sync(self.store, now)
        if expired:
            self.store.save()

    def add_site(self, raw: str, duration_text: str = "", now: Optional[float] = None) -> ActionResult:
        if now is None:
            now = time.time()
        try:
            domain = validate_domain(raw)
        except BlockerError as exc:
            return ActionResult.failure(exc, "Invalid URL")
        try:
            self.check_permissions()
        except PermissionDeniedError as exc:
            return ActionResult.failure(exc)

        expiry = parse_duration(duration_text, now)
        if not self.store.add_timed(domain, expiry):
            return ActionResult(False, f"Site {domain} is already blocked permanently")
        try:
            self._save_and_sync(now)
        except BlockerError as exc:
            logger.error("Adding %s failed: %s", domain, exc)
            return ActionResult.failure(exc)

        if expiry is None:
            logger.info("Blocked %s permanently", domain)
            return ActionResult(True, f"Site {domain} blocked permanently")
        until = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(expiry))
        logger.info("Blocked %s until %s", domain, until)
        return ActionResult(True, f"Site {domain} blocked until {until}")

    def remove_site(self, domain: str) -> ActionResult:
        try:
            self.check_permissions()
        except PermissionDeniedError as exc:
            return ActionResult.failure(exc)
        if not self.store.remove(domain):
            return ActionResult(False, f"Site {domain} is not blocked")
        try:
            self._save_and_sync()
        except BlockerError as exc:
            logger.error("Removing %s failed: %s", domain, exc)
            return ActionResult.failure(exc)
        logger.info("Unblocked %s", domain)
        return ActionResult(True, "Site removed successfully")

    def toggle_blocking(self) -> ActionResult:
        try:
            self.check_permissions()
        except PermissionDeniedError as exc:
            return ActionResult.failure(exc)
        enabled = self.store.toggle_enabled()
        try:
            self._save_and_sync()
        except BlockerError as exc:
            logger.error("Toggling blocking failed: %s", exc)
            return ActionResult.failure(exc)
        if enabled:
            return ActionResult(True, "Blocking enabled")
        return ActionResult(True, "Blocking disabled and hosts file cleaned")

    def sync(self, now: Optional[float] = None) -> ActionResult:
        """Re-run save and sync, e.g. after a failed attempt."""
        try:
            self.check_permissions()
            self._save_and_sync(now)
        except BlockerError as exc:
            return ActionResult.failure(exc)
        return ActionResult(True, "Hosts file synchronized")

    def expire_due(self, now: Optional[float] = None) -> Optional[ActionResult]:
        """Lift timed blocks that have lapsed.

        Returns None when nothing is due, or while retries are paused after a
        permission denial (until an add, remove, toggle or sync is permitted).
        """
        if self.expiry_paused or not self.store.has_expired(now):
            return None
        try:
            self.check_permissions()
        except PermissionDeniedError as exc:
            self.expiry_paused = True
            logger.warning("Expired blocks kept until permissions allow a sync: %s", exc)
            return ActionResult.failure(exc)
        try:
            self._save_and_sync(now)
        except BlockerError as exc:
            return ActionResult.failure(exc)
        return ActionResult(True, "Expired blocks removed")
