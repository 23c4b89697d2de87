"""
Website Blocker - desktop app that blocks websites through the hosts file.

Entry point: configures logging, tidies the hosts file, loads the blocklist
and boots the PyQt6 UI.

- Permanent or timed blocks (30m, 2h, 1d ...) for any domain you enter.
- Each domain is blocked together with its www., m. and app. variants.
- Requires admin/root to modify hosts; the window says so when missing.
"""

import logging
import sys
import traceback

from PyQt6.QtWidgets import QApplication, QMessageBox

from website_blocker.blocker import WebsiteBlocker
from website_blocker.config import APP_NAME, Settings, configure_logging
from website_blocker.errors import PermissionDeniedError
from website_blocker.hosts_manager import HostsManager
from website_blocker.startup import Startup
from website_blocker.state_store import StateStore
from website_blocker.ui import WebsiteBlockerWindow

logger = logging.getLogger("website_blocker")


def main() -> None:
    def excepthook(type_, value, tb):
        msg = ''.join(traceback.format_exception(type_, value, tb))
        logger.critical(msg)
        if QApplication.instance() is not None:
            QMessageBox.critical(None, "Unexpected Error", msg)
    sys.excepthook = excepthook

    settings = Settings.from_env()
    configure_logging(settings.log_level)

    hosts = HostsManager(settings.hosts_path, flush_dns_cache=settings.flush_dns)
    Startup.normalize_hosts(hosts)

    store = StateStore.load(settings.state_path)
    blocker = WebsiteBlocker(store, hosts)

    startup_message = None
    try:
        blocker.check_permissions()
    except PermissionDeniedError as exc:
        startup_message = str(exc)
        logger.warning(startup_message)
    else:
        Startup.ensure_consistency(blocker)

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    window = WebsiteBlockerWindow(blocker, startup_message)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
