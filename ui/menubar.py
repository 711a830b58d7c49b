"""Menübar-Controller für Clive."""

from __future__ import annotations

import logging
from pathlib import Path

import objc
from Foundation import NSObject  # type: ignore[import-not-found]

from cli.types import DisplayMode, RefreshInterval
from config import LOG_FILE
from ui.charts import create_bar_chart_image, create_pie_chart_image
from ui.render import (
    TIER_COLORS,
    format_session_item,
    format_status_title,
    format_weekly_item,
    title_tier,
)
from usage.parser import UsageSnapshot
from utils.settings import DISPLAY_MODE_KEY, REFRESH_INTERVAL_KEY, Settings

logger = logging.getLogger("clive")


class _MenuActionHandler(NSObject):
    """Objective-C Target für Menü-Actions."""

    refresh_callback = None
    display_mode_callback = None
    refresh_interval_callback = None

    def initWithLogPath_(self, log_path: str):
        self = objc.super(_MenuActionHandler, self).init()
        if self is None:
            return None
        self.log_path = log_path
        return self

    @objc.signature(b"v@:@")
    def refreshNow_(self, _sender) -> None:
        """Manueller Refresh (wird ignoriert, falls bereits einer läuft)."""
        if self.refresh_callback:
            self.refresh_callback()

    @objc.signature(b"v@:@")
    def selectDisplayMode_(self, sender) -> None:
        if self.display_mode_callback:
            self.display_mode_callback(str(sender.representedObject()))

    @objc.signature(b"v@:@")
    def selectRefreshInterval_(self, sender) -> None:
        if self.refresh_interval_callback:
            self.refresh_interval_callback(int(sender.representedObject()))

    @objc.signature(b"v@:@")
    def openLogs_(self, _sender) -> None:
        """Öffnet die Log-Datei im Standard-Viewer."""
        from AppKit import NSWorkspace  # type: ignore[import-not-found]

        log_path = Path(self.log_path)
        if not log_path.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)
            log_path.touch()
        NSWorkspace.sharedWorkspace().openFile_(str(log_path))


class MenuBarController:
    """
    Menübar-Status-Anzeige via NSStatusBar.

    Zeigt den letzten Usage-Snapshot als Text, Pie- oder Bar-Chart.
    Kein Polling - wird vom Scheduler via Callback aktualisiert.
    """

    def __init__(self, settings: Settings, on_refresh=None):
        from AppKit import (  # type: ignore[import-not-found]
            NSMenu,
            NSMenuItem,
            NSStatusBar,
            NSVariableStatusItemLength,
        )

        self._settings = settings
        self._snapshot: UsageSnapshot | None = None

        # Target für Menü-Callbacks
        self._action_handler = _MenuActionHandler.alloc().initWithLogPath_(
            str(LOG_FILE)
        )
        self._action_handler.refresh_callback = on_refresh
        self._action_handler.display_mode_callback = self._select_display_mode
        self._action_handler.refresh_interval_callback = self._select_refresh_interval

        self._status_bar = NSStatusBar.systemStatusBar()
        self._status_item = self._status_bar.statusItemWithLength_(
            NSVariableStatusItemLength
        )

        menu = NSMenu.alloc().init()
        menu.setAutoenablesItems_(False)

        # Info-Items (nicht klickbar)
        self._session_item = NSMenuItem.alloc().initWithTitle_action_keyEquivalent_(
            format_session_item(None), None, ""
        )
        self._session_item.setEnabled_(False)
        menu.addItem_(self._session_item)

        self._weekly_item = NSMenuItem.alloc().initWithTitle_action_keyEquivalent_(
            format_weekly_item(None), None, ""
        )
        self._weekly_item.setEnabled_(False)
        menu.addItem_(self._weekly_item)

        menu.addItem_(NSMenuItem.separatorItem())

        refresh_item = NSMenuItem.alloc().initWithTitle_action_keyEquivalent_(
            "Refresh Now", "refreshNow:", "r"
        )
        refresh_item.setTarget_(self._action_handler)
        menu.addItem_(refresh_item)

        menu.addItem_(NSMenuItem.separatorItem())

        # Display-Modus Submenü
        self._mode_items = {}
        mode_menu = NSMenu.alloc().initWithTitle_("Display Mode")
        for mode in DisplayMode:
            item = NSMenuItem.alloc().initWithTitle_action_keyEquivalent_(
                mode.display_name, "selectDisplayMode:", ""
            )
            item.setTarget_(self._action_handler)
            item.setRepresentedObject_(mode.value)
            mode_menu.addItem_(item)
            self._mode_items[mode] = item
        mode_root = NSMenuItem.alloc().initWithTitle_action_keyEquivalent_(
            "Display Mode", None, ""
        )
        mode_root.setSubmenu_(mode_menu)
        menu.addItem_(mode_root)

        # Refresh-Intervall Submenü
        self._interval_items = {}
        interval_menu = NSMenu.alloc().initWithTitle_("Refresh Interval")
        for interval in RefreshInterval:
            item = NSMenuItem.alloc().initWithTitle_action_keyEquivalent_(
                interval.display_name, "selectRefreshInterval:", ""
            )
            item.setTarget_(self._action_handler)
            item.setRepresentedObject_(interval.value)
            interval_menu.addItem_(item)
            self._interval_items[interval] = item
        interval_root = NSMenuItem.alloc().initWithTitle_action_keyEquivalent_(
            "Refresh Interval", None, ""
        )
        interval_root.setSubmenu_(interval_menu)
        menu.addItem_(interval_root)

        menu.addItem_(NSMenuItem.separatorItem())

        logs_item = NSMenuItem.alloc().initWithTitle_action_keyEquivalent_(
            "Open Logs", "openLogs:", ""
        )
        logs_item.setTarget_(self._action_handler)
        menu.addItem_(logs_item)

        menu.addItem_(NSMenuItem.separatorItem())

        # Quit läuft über NSApp (nil-Target → Responder-Chain)
        quit_item = NSMenuItem.alloc().initWithTitle_action_keyEquivalent_(
            "Quit", "terminate:", "q"
        )
        menu.addItem_(quit_item)

        self._status_item.setMenu_(menu)

        self._unsubscribe = settings.subscribe(self._on_setting_changed)
        self._update_checkmarks()
        self._render()

    def update(self, snapshot: UsageSnapshot) -> None:
        """Neuer Snapshot vom Scheduler (Main-Thread)."""
        self._snapshot = snapshot
        self._render()

    def close(self) -> None:
        self._unsubscribe()
        self._status_bar.removeStatusItem_(self._status_item)

    def _select_display_mode(self, value: str) -> None:
        mode = DisplayMode.parse(value)
        if mode is not None:
            self._settings.display_mode = mode

    def _select_refresh_interval(self, value: int) -> None:
        interval = RefreshInterval.parse(value)
        if interval is not None:
            self._settings.refresh_interval = interval

    def _on_setting_changed(self, key: str, _value) -> None:
        self._update_checkmarks()
        if key == DISPLAY_MODE_KEY:
            self._render()
        elif key == REFRESH_INTERVAL_KEY:
            logger.debug("Menü: Intervall-Auswahl aktualisiert")

    def _update_checkmarks(self) -> None:
        from AppKit import NSOffState, NSOnState  # type: ignore[import-not-found]

        for mode, item in self._mode_items.items():
            item.setState_(NSOnState if mode == self._settings.display_mode else NSOffState)
        for interval, item in self._interval_items.items():
            item.setState_(
                NSOnState if interval == self._settings.refresh_interval else NSOffState
            )

    def _render(self) -> None:
        from AppKit import (  # type: ignore[import-not-found]
            NSImageRight,
            NSNoImage,
        )

        snapshot = self._snapshot
        mode = self._settings.display_mode

        self._session_item.setTitle_(format_session_item(snapshot))
        self._weekly_item.setTitle_(format_weekly_item(snapshot))

        button = self._status_item.button()
        session = snapshot.session_percent if snapshot else None
        weekly = snapshot.weekly_percent if snapshot else None

        if mode is DisplayMode.pieChart:
            button.setImage_(create_pie_chart_image(session, weekly))
            button.setImagePosition_(NSImageRight)
            button.setTitle_(format_status_title(snapshot, mode))
        elif mode is DisplayMode.barChart:
            button.setImage_(create_bar_chart_image(session, weekly))
            button.setImagePosition_(NSImageRight)
            button.setTitle_(format_status_title(snapshot, mode))
        else:
            button.setImage_(None)
            button.setImagePosition_(NSNoImage)
            self._set_text_title(button, snapshot, mode)

    def _set_text_title(self, button, snapshot, mode) -> None:
        """Text-Modus: Titel in der Farbstufe des höheren Werts."""
        from AppKit import (  # type: ignore[import-not-found]
            NSAttributedString,
            NSColor,
            NSForegroundColorAttributeName,
        )

        title = format_status_title(snapshot, mode)
        tier = title_tier(snapshot)
        if tier is None:
            button.setTitle_(title)
            return
        r, g, b = TIER_COLORS[tier]
        color = NSColor.colorWithSRGBRed_green_blue_alpha_(r, g, b, 1.0)
        attributed = NSAttributedString.alloc().initWithString_attributes_(
            title, {NSForegroundColorAttributeName: color}
        )
        button.setAttributedTitle_(attributed)
