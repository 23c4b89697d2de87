"""
Startup checks and self-healing logic.

- Trims stray content between the hosts file's DNS comment and our section.
- If blocking is on but our section was removed externally, re-applies it.
Neither step is allowed to stop the app from launching.
"""

from __future__ import annotations

import logging

from website_blocker.blocker import WebsiteBlocker
from website_blocker.errors import DnsMarkerNotFoundError
from website_blocker.hosts_manager import HostsManager

logger = logging.getLogger(__name__)


class Startup:
    @staticmethod
    def normalize_hosts(hosts: HostsManager) -> bool:
        try:
            return hosts.normalize()
        except DnsMarkerNotFoundError as exc:
            logger.warning("Hosts file processing skipped: %s", exc)
        except OSError as exc:
            logger.warning("Hosts file processing failed: %s", exc)
        return False

    @staticmethod
    def ensure_consistency(blocker: WebsiteBlocker) -> None:
        store = blocker.store
        if not store.is_blocking_enabled:
            return
        try:
            if blocker.hosts.is_block_active(store.active_domains()) and not store.has_expired():
                return
        except OSError as exc:
            logger.warning("Could not read hosts file: %s", exc)
            return
        result = blocker.sync()
        if result.ok:
            logger.info("Re-applied blocks at startup")
        else:
            # Typically missing privileges; the window shows the status.
            logger.warning("Could not re-apply blocks at startup: %s", result.message)
