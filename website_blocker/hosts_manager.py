"""
System hosts file manager for Website Blocker.

Redirects blocked domains (and their www./m./app. variants) to 127.0.0.1 and
::1 inside a marker-delimited section of the hosts file.
- Backup first: every sync copies the hosts file to hosts.bak before editing.
- Owned section: lines between BLOCK_START and BLOCK_END are rewritten freely.
- Outside the section only host names that exactly equal a stored variant
  are removed from loopback lines; other names on the same line stay.

Note: Modifying the hosts file requires administrator/root privileges.
Callers are expected to consult the permission gate before calling `sync`.
"""

from __future__ import annotations

import logging
import platform
import shutil
import subprocess
import time
from pathlib import Path
from typing import Iterable, List, Optional, Set

from website_blocker.config import resolve_hosts_path
from website_blocker.domains import domain_variants
from website_blocker.errors import BackupFailedError, DnsMarkerNotFoundError, SyncError
from website_blocker.state_store import StateStore

logger = logging.getLogger(__name__)

MARKER = "# Website Blocker"
BLOCK_START = "# Website Blocker - Start"
BLOCK_END = "# Website Blocker - End"
DNS_MARKER = "# localhost name resolution is handled within DNS itself."
LOOPBACK_ADDRESSES = ("127.0.0.1", "::1")


def entry_lines(domains: Iterable[str]) -> List[str]:
    lines = []
    for domain in domains:
        for variant in domain_variants(domain):
            for address in LOOPBACK_ADDRESSES:
                lines.append(f"{address} {variant}")
    return lines


def _without_blocked_hosts(line: str, variants: Set[str]) -> Optional[str]:
    """Remove blocked variants from a hosts line.

    Loopback lines lose only the matching host names and are dropped once
    none remain; a bare variant line is dropped. Other lines pass unchanged.
    """
    entry, sep, comment = line.partition("#")
    tokens = entry.split()
    if len(tokens) == 1:
        return None if tokens[0] in variants else line
    if len(tokens) < 2 or tokens[0] not in LOOPBACK_ADDRESSES:
        return line
    hosts = [host for host in tokens[1:] if host not in variants]
    if len(hosts) == len(tokens) - 1:
        return line
    if not hosts:
        return None
    kept = " ".join([tokens[0]] + hosts)
    if sep:
        kept += f" #{comment}"
    return kept


class HostsManager:
    def __init__(self, hosts_path: Optional[Path] = None, flush_dns_cache: bool = True):
        self.hosts_path = Path(hosts_path) if hosts_path is not None else resolve_hosts_path()
        self.flush_dns_cache = flush_dns_cache

    @property
    def backup_path(self) -> Path:
        return self.hosts_path.with_suffix(".bak")

    def _read_hosts(self) -> str:
        return self.hosts_path.read_text(encoding="utf-8", errors="ignore")

    def _write_hosts(self, content: str) -> None:
        # In place, so the file keeps its owner and permissions.
        self.hosts_path.write_text(content, encoding="utf-8")

    def backup(self) -> Path:
        try:
            shutil.copyfile(self.hosts_path, self.backup_path)
        except OSError as exc:
            raise BackupFailedError(f"Failed to back up hosts file: {exc}") from exc
        return self.backup_path

    def clean_lines(self, content: str, domains: Iterable[str]) -> List[str]:
        variants: Set[str] = set()
        for domain in domains:
            variants.update(domain_variants(domain))

        kept = []
        in_block = False
        for line in content.splitlines():
            stripped = line.strip()
            if stripped == BLOCK_START:
                in_block = True
                continue
            if stripped == BLOCK_END:
                in_block = False
                continue
            if in_block or not stripped or MARKER in stripped:
                continue
            cleaned = _without_blocked_hosts(stripped, variants)
            if cleaned is not None:
                kept.append(cleaned)
        return kept

    def clean(self, domains: Iterable[str]) -> List[str]:
        """Strip our section and any stray entries for `domains`; return the kept lines."""
        try:
            kept = self.clean_lines(self._read_hosts(), domains)
            self._write_hosts("".join(f"{line}\n" for line in kept))
        except OSError as exc:
            raise SyncError(f"Failed to clean hosts file: {exc}") from exc
        return kept

    def sync(self, store: StateStore, now: Optional[float] = None) -> List[str]:
        """Back up, clean and rewrite the hosts file to match `store`.

        Expired timed entries are swept from `store` along the way; the swept
        domains are returned so the caller can persist the change.
        """
        if now is None:
            now = time.time()
        self.backup()
        kept = self.clean(store.blocked_domains())
        expired = store.sweep_expired(now)

        if store.is_blocking_enabled:
            domains = store.active_domains(now)
            lines = kept + ["", BLOCK_START] + entry_lines(domains) + [BLOCK_END]
            try:
                self._write_hosts("\n".join(lines) + "\n")
            except OSError as exc:
                raise SyncError(f"Failed to update hosts file: {exc}") from exc
            logger.info("Hosts file updated. Blocking %d domains", len(domains))
        else:
            logger.info("Blocking disabled; hosts file cleaned")

        if self.flush_dns_cache:
            self.flush_dns()
        return expired

    def managed_lines(self) -> Optional[List[str]]:
        """Lines inside our section, or None when no complete section exists."""
        content = self._read_hosts()
        if BLOCK_START not in content or BLOCK_END not in content:
            return None
        section = content.split(BLOCK_START, 1)[1].split(BLOCK_END, 1)[0]
        return [line.strip() for line in section.splitlines() if line.strip()]

    def is_block_active(self, domains: List[str]) -> bool:
        lines = self.managed_lines()
        if lines is None:
            return False
        return set(entry_lines(domains)) <= set(lines)

    def normalize(self) -> bool:
        """Drop anything between the DNS comment and our section.

        Keeps everything through the DNS comment line, then our section (from
        its start marker to the end of the file) if there is one. Returns
        whether the file changed.
        """
        content = self._read_hosts()
        index = content.find(DNS_MARKER)
        if index < 0:
            raise DnsMarkerNotFoundError(f"DNS marker not found in {self.hosts_path}")

        line_end = content.find("\n", index + len(DNS_MARKER))
        cut = len(content) if line_end < 0 else line_end + 1
        normalized = content[:cut]
        start = content.find(BLOCK_START, cut)
        if start >= 0:
            if not normalized.endswith("\n"):
                normalized += "\n"
            normalized += content[start:]

        if normalized == content:
            return False
        self._write_hosts(normalized)
        logger.info("Normalized hosts file %s", self.hosts_path)
        return True

    def flush_dns(self) -> None:
        """Ask the resolver cache to forget stale answers after a sync.

        Every command for the platform is tried; a missing tool is only
        logged, since the hosts file is already correct without it.
        """
        system = platform.system().lower()
        if system == "darwin":
            commands = [["/usr/bin/dscacheutil", "-flushcache"], ["/usr/bin/killall", "-HUP", "mDNSResponder"]]
        elif system == "windows":
            commands = [["ipconfig", "/flushdns"]]
        else:
            commands = [["resolvectl", "flush-caches"], ["systemd-resolve", "--flush-caches"], ["nscd", "-i", "hosts"]]
        for command in commands:
            try:
                subprocess.run(command, check=False, capture_output=True)
            except OSError as exc:
                logger.debug("DNS flush command %s unavailable: %s", command[0], exc)
