"""Decides between joining a network as a station and starting the captive portal."""

from __future__ import annotations

import enum
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Protocol

from .items import WiFiItems, WiFiLog

_logger = logging.getLogger(__name__)


class WiFiEvent(enum.IntEnum):
    """Wi-Fi driver events reported to the manager."""

    READY = 0
    SCAN_DONE = 1
    STA_START = 2
    STA_STOP = 3
    STA_CONNECTED = 4
    STA_DISCONNECTED = 5


_EVENT_MESSAGES = {
    WiFiEvent.SCAN_DONE: "[WIFI] Wi-Fi scan done",
    WiFiEvent.STA_START: "[WIFI] Wi-Fi STA started",
    WiFiEvent.STA_STOP: "[WIFI] Wi-Fi STA stopped",
    WiFiEvent.STA_CONNECTED: "[WIFI] Wi-Fi STA connected",
    WiFiEvent.STA_DISCONNECTED: "[WIFI] Wi-Fi STA disconnected",
}

_STATUS_EVENTS = (WiFiEvent.STA_CONNECTED, WiFiEvent.STA_DISCONNECTED)


class _Portal(Protocol):
    def begin(self) -> None: ...


class Station(ABC):
    """A Wi-Fi client interface; reports events through ``event_handler``."""

    event_handler: Callable[[Any], None] | None = None

    @abstractmethod
    def connect(self, wifi: WiFiItems) -> None:
        """Start joining the network, applying static addressing when DHCP is off."""

    @abstractmethod
    def is_connected(self) -> bool:
        """Return whether the station is associated and has an address."""

    @abstractmethod
    def disconnect(self) -> None:
        """Drop the connection and switch the interface off."""


class WiFiManager:
    """Connects with stored credentials, or falls back to the setup portal."""

    max_attempts: int = 50
    poll_interval: float = 0.2

    def __init__(
        self,
        portal: _Portal,
        station: Station,
        log: WiFiLog = WiFiLog.DISABLE,
    ) -> None:
        self._portal = portal
        self._station = station
        self._log_enabled = log is WiFiLog.ENABLE
        self._wifi = WiFiItems()

    @property
    def wifi(self) -> WiFiItems:
        """The configuration currently held by the manager."""
        return self._wifi

    def _emit(self, level: int, message: str, *args: Any) -> None:
        if self._log_enabled:
            _logger.log(level, message, *args)

    def begin(self, wifi: WiFiItems, log: WiFiLog | None = None) -> None:
        """Join the network described by ``wifi`` or start the portal.

        Without ``log``, only a loaded configuration acts, and the decision is
        taken on the SSID the manager already holds.
        """
        if log is None:
            if wifi.config_loaded:
                if self.is_ssid():
                    self.connect_to_wifi(wifi)
                else:
                    self._portal.begin()
            return

        self._log_enabled = log is WiFiLog.ENABLE
        self._wifi = wifi
        if self.is_credentials():
            self.connect_to_wifi(wifi)
            self._emit(logging.INFO, "[WIFI] Started Wi-Fi as client")
        else:
            self._emit(logging.WARNING, "[WIFI] Starting AP")
            self._portal.begin()

    def is_credentials(self) -> bool:
        """Return whether a loaded SSID and password are held."""
        return bool(self._wifi.config_loaded and self._wifi.ssid and self._wifi.password)

    def is_config_loaded(self) -> bool:
        return self._wifi.config_loaded

    def is_dhcp(self) -> bool:
        return self._wifi.dhcp_flag

    def is_ssid(self) -> bool:
        return len(self._wifi.ssid) > 0

    def connect_to_wifi(self, wifi: WiFiItems) -> bool:
        """Join ``wifi`` and wait for the link; disconnect and return False on timeout."""
        self._emit(logging.DEBUG, "[WIFI] Connecting to Wi-Fi...")
        self._emit(logging.DEBUG, "[WIFI] SSID: %s", wifi.ssid)
        self._station.event_handler = self.handle_event
        self._station.connect(wifi)

        print("Connecting.", end="", flush=True)
        attempts = 0
        while not self._station.is_connected() and attempts < self.max_attempts:
            time.sleep(self.poll_interval)
            print(".", end="", flush=True)
            attempts += 1
        print()

        if self._station.is_connected():
            self._emit(logging.INFO, "[WIFI] Connected to Wi-Fi!")
            return True
        self._emit(logging.WARNING, "[WIFI] Failed to connect to Wi-Fi.")
        self._station.disconnect()
        return False

    def handle_event(self, event: WiFiEvent | int) -> None:
        """Log a driver event and track connect/disconnect in the status."""
        try:
            kind = WiFiEvent(event)
        except ValueError:
            kind = None
        message = _EVENT_MESSAGES.get(kind) if kind is not None else None
        if message is None:
            self._emit(logging.INFO, "[WIFI] Unhandled Wi-Fi event: %d", int(event))
            return
        self._emit(logging.INFO, message)
        if kind in _STATUS_EVENTS:
            self._wifi.connection_status = int(kind)