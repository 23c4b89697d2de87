"""
Privilege probe used before touching the hosts file.

Windows: `whoami /priv` must list SeTakeOwnershipPrivilege (elevated prompt).
Unix: `id -u` must print 0.
A probe that cannot run counts as "not permitted".
"""

from __future__ import annotations

import logging
import platform
import subprocess
from typing import Callable

logger = logging.getLogger(__name__)

PermissionCheck = Callable[[], bool]

WINDOWS_ADMIN_PRIVILEGE = "SeTakeOwnershipPrivilege"


def has_hosts_privileges() -> bool:
    if platform.system().lower() == "windows":
        command = ["whoami", "/priv"]
    else:
        command = ["id", "-u"]
    try:
        result = subprocess.run(command, capture_output=True, text=True, check=False)
    except OSError as exc:
        logger.warning("Privilege probe %s failed: %s", command[0], exc)
        return False
    if command[0] == "whoami":
        return WINDOWS_ADMIN_PRIVILEGE in result.stdout
    return result.stdout.strip() == "0"
