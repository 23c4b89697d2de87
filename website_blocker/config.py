"""
Runtime configuration for Website Blocker.

Paths follow the platform conventions:
- hosts file: /etc/hosts, or the drivers\\etc\\hosts file on Windows
- state: the user's OS-specific application data directory

Environment overrides (useful for trying the app against a scratch file):
WEBSITE_BLOCKER_HOSTS_FILE, WEBSITE_BLOCKER_STATE_FILE,
WEBSITE_BLOCKER_LOG_LEVEL, WEBSITE_BLOCKER_FLUSH_DNS ("0" disables).
"""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path
from typing import Mapping, NamedTuple, Optional

APP_NAME = "WebsiteBlocker"
STATE_FILENAME = "blocked_sites.json"
LOG_FORMAT = "%(asctime)s - [%(name)s] - %(levelname)s - %(message)s"


WINDOWS_HOSTS_PATH = Path(r"C:\Windows\System32\drivers\etc\hosts")
UNIX_HOSTS_PATH = Path("/etc/hosts")


def _is_windows() -> bool:
    return platform.system().lower() == "windows"


def resolve_hosts_path() -> Path:
    return WINDOWS_HOSTS_PATH if _is_windows() else UNIX_HOSTS_PATH


def resolve_app_data_dir(app_name: str = APP_NAME) -> Path:
    """Per-user directory holding the blocklist file."""
    home = Path.home()
    if _is_windows():
        roaming = os.environ.get("APPDATA") or home / "AppData" / "Roaming"
        return Path(roaming) / app_name
    if platform.system().lower() == "darwin":
        return home / "Library" / "Application Support" / app_name
    # Hidden dot-directory elsewhere, e.g. ~/.websiteblocker
    return home / f".{app_name.lower()}"


class Settings(NamedTuple):
    hosts_path: Path
    state_path: Path
    log_level: str = "INFO"
    flush_dns: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        hosts = env.get("WEBSITE_BLOCKER_HOSTS_FILE")
        state = env.get("WEBSITE_BLOCKER_STATE_FILE")
        return cls(
            hosts_path=Path(hosts) if hosts else resolve_hosts_path(),
            state_path=Path(state) if state else resolve_app_data_dir() / STATE_FILENAME,
            log_level=env.get("WEBSITE_BLOCKER_LOG_LEVEL", "INFO").upper(),
            flush_dns=env.get("WEBSITE_BLOCKER_FLUSH_DNS", "1") != "0",
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
