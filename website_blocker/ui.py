"""
Minimal PyQt6 UI for Website Blocker.

Provides:
- Inputs: website text and an optional duration (e.g. 30m, 2h, 1d).
- Buttons: Add Website, Enable/Disable Blocking, Remove per listed site.
- A list of blocked sites showing "(Permanent)" or the time left.

All logic lives in WebsiteBlocker; this window only forwards clicks and
shows the returned status text.
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QLabel,
    QPushButton,
    QHBoxLayout,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QGroupBox,
)

from website_blocker.blocker import ActionResult, WebsiteBlocker
from website_blocker.durations import format_remaining

REFRESH_INTERVAL_MS = 1000


class SiteRow(QWidget):
    def __init__(self, text: str, on_remove, parent: QWidget | None = None):
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 2, 4, 2)
        self.label = QLabel(text, self)
        remove_btn = QPushButton("Remove", self)
        remove_btn.clicked.connect(on_remove)
        layout.addWidget(self.label, 1)
        layout.addWidget(remove_btn)


class WebsiteBlockerWindow(QWidget):
    def __init__(self, blocker: WebsiteBlocker, startup_message: Optional[str] = None):
        super().__init__()
        self.blocker = blocker

        self.setWindowTitle("Website Blocker")
        self.resize(620, 440)

        title = QLabel("Website Blocker", self)
        title.setStyleSheet("font-size:24px; font-weight:600;")

        self.site_input = QLineEdit(self)
        self.site_input.setPlaceholderText("Enter website...")
        self.duration_input = QLineEdit(self)
        self.duration_input.setPlaceholderText("Enter block duration (e.g., 1s, 1m, 1h, 1d)...")
        self.add_btn = QPushButton("Add Website", self)
        self.toggle_btn = QPushButton("", self)

        input_row = QHBoxLayout()
        input_row.addWidget(self.site_input, 2)
        input_row.addWidget(self.duration_input, 2)
        input_row.addWidget(self.add_btn)

        self.sites_list = QListWidget(self)
        self.sites_list.setSelectionMode(QListWidget.SelectionMode.NoSelection)

        self.status_label = QLabel(startup_message or "", self)
        self.status_label.setWordWrap(True)

        layout = QVBoxLayout(self)
        layout.addWidget(title)
        layout.addLayout(input_row)
        layout.addWidget(self.toggle_btn)

        sites_box = QGroupBox("Blocked Websites")
        sites_layout = QVBoxLayout(sites_box)
        sites_layout.addWidget(self.sites_list)
        layout.addWidget(sites_box)
        layout.addWidget(self.status_label)

        self.site_input.setToolTip("A domain or URL, e.g. example.com")
        self.duration_input.setToolTip("Leave empty to block permanently")

        self.add_btn.clicked.connect(self._add_site)
        self.site_input.returnPressed.connect(self._add_site)
        self.toggle_btn.clicked.connect(self._toggle_blocking)

        self.timer = QTimer(self)
        self.timer.setInterval(REFRESH_INTERVAL_MS)
        self.timer.timeout.connect(self._tick)
        self.timer.start()

        self._refresh()

    def _show(self, result: Optional[ActionResult]) -> None:
        if result is not None:
            self.status_label.setText(result.message)
        self._refresh()

    def _add_site(self) -> None:
        raw = self.site_input.text()
        if not raw.strip():
            return
        result = self.blocker.add_site(raw, self.duration_input.text())
        if result.ok:
            self.site_input.clear()
        self._show(result)

    def _remove_site(self, domain: str) -> None:
        self._show(self.blocker.remove_site(domain))

    def _toggle_blocking(self) -> None:
        self._show(self.blocker.toggle_blocking())

    def _tick(self) -> None:
        result = self.blocker.expire_due()
        if result is not None:
            self._show(result)
        else:
            self._update_labels()

    def _refresh(self) -> None:
        store = self.blocker.store
        self.toggle_btn.setText("Disable Blocking" if store.is_blocking_enabled else "Enable Blocking")
        self.sites_list.clear()
        for domain, expiry in store.entries():
            item = QListWidgetItem(self.sites_list)
            row = SiteRow(self._row_text(domain, expiry), lambda _=False, d=domain: self._remove_site(d))
            item.setSizeHint(row.sizeHint())
            self.sites_list.setItemWidget(item, row)

    def _update_labels(self) -> None:
        entries = self.blocker.store.entries()
        if len(entries) != self.sites_list.count():
            self._refresh()
            return
        for index, (domain, expiry) in enumerate(entries):
            row = self.sites_list.itemWidget(self.sites_list.item(index))
            if isinstance(row, SiteRow):
                row.label.setText(self._row_text(domain, expiry))

    @staticmethod
    def _row_text(domain: str, expiry: Optional[float]) -> str:
        if expiry is None:
            return f"{domain} (Permanent)"
        return f"{domain} ({format_remaining(expiry)})"
