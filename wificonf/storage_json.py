"""Credential store backed by a JSON file."""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any

from .items import CredentialStore, WiFiItems, WiFiLog

_logger = logging.getLogger(__name__)

DEFAULT_FILE_PATH = "configWi.json"

_ADDRESS_FIELDS = (
    ("ip", "ip", "[WIFI] IP address invalid"),
    ("gateway", "gateway", "[WIFI] Gateway address invalid"),
    ("subnet", "subnet", "[WIFI] Subnet mask invalid"),
)


def config_to_dict(config: WiFiItems) -> dict[str, Any]:
    """Return the JSON document that represents ``config``."""
    doc: dict[str, Any] = {
        "ssid": config.ssid,
        "password": config.password,
        "dhcp": config.dhcp_flag,
    }
    if not config.dhcp_flag:
        doc["ip"] = list(config.ip)
        doc["gateway"] = list(config.gateway)
        doc["subnet"] = list(config.subnet)
    return doc


def _is_octet(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 255


class JsonCredentialStore(CredentialStore):
    """Stores Wi-Fi credentials as a JSON document in a file."""

    def __init__(
        self,
        path: str | os.PathLike[str] = DEFAULT_FILE_PATH,
        log: WiFiLog = WiFiLog.ENABLE,
    ) -> None:
        self.path = Path(path)
        self._log_enabled = log is WiFiLog.ENABLE
        self._wifi = WiFiItems()

    def _emit(self, level: int, message: str, *args: Any) -> None:
        if self._log_enabled:
            _logger.log(level, message, *args)

    def save_credentials(self, config: WiFiItems) -> bool:
        self._emit(logging.DEBUG, "[WIFI] Saving configuration to file: %s", self.path)
        text = json.dumps(config_to_dict(config), separators=(",", ":"), ensure_ascii=False)
        try:
            with self.path.open("w", encoding="utf-8") as handle:
                written = handle.write(text)
        except OSError:
            self._emit(logging.ERROR, "[WIFI] Failed to create file: %s", self.path)
            return False
        if written == 0:
            self._emit(logging.ERROR, "[WIFI] Failed to write file: %s", self.path)
            return False
        self._emit(
            logging.INFO,
            "[WIFI] Configuration saved to: %s (%d bytes)",
            self.path,
            written,
        )
        return True

    def _fail(self) -> WiFiItems:
        self._wifi.config_loaded = False
        return WiFiItems()

    def load_credentials(self) -> WiFiItems:
        self._emit(logging.DEBUG, "[WIFI] Loading configuration...")

        if not self.path.exists():
            self._emit(logging.ERROR, "[WIFI] Configuration file not found: %s", self.path)
            return WiFiItems()

        try:
            raw = self.path.read_bytes()
        except OSError:
            self._emit(logging.ERROR, "[WIFI] Error opening %s", self.path)
            return WiFiItems()

        if not raw:
            self._emit(logging.ERROR, "[WIFI] Empty file: %s", self.path)
            self._wifi.reset()
            return WiFiItems()

        try:
            doc = json.loads(raw)
        except ValueError as exc:
            self._emit(logging.ERROR, "[WIFI] Failed to parse JSON: %s", exc)
            return WiFiItems()
        if not isinstance(doc, dict):
            doc = {}

        ssid = doc.get("ssid")
        if not isinstance(ssid, str):
            return self._fail()
        self._wifi.ssid = ssid
        if not ssid:
            self._wifi.config_loaded = False
            return copy.deepcopy(self._wifi)

        secret = doc.get("password")
        if not isinstance(secret, str):
            return self._fail()
        self._wifi.password = secret

        dhcp = doc.get("dhcp")
        self._wifi.dhcp_flag = dhcp if isinstance(dhcp, bool) else False

        if not self._wifi.dhcp_flag:
            self._emit(logging.INFO, "[WIFI] Reading fixed IP configuration")
            for key, attr, invalid_message in _ADDRESS_FIELDS:
                value = doc.get(key)
                if not isinstance(value, list) or len(value) != 4:
                    self._emit(logging.ERROR, "[WIFI] Key '%s' missing or invalid.", key)
                    return self._fail()
                if not all(_is_octet(octet) for octet in value):
                    self._emit(logging.ERROR, invalid_message)
                    return self._fail()
                setattr(self._wifi, attr, list(value))
        else:
            self._emit(logging.INFO, "[WIFI] Selected DHCP")

        self._wifi.config_loaded = True
        self._emit(logging.INFO, "[WIFI] Configuration loaded successfully.")
        return copy.deepcopy(self._wifi)

    def delete_credentials(self) -> bool:
        if not self.path.exists():
            self._emit(logging.WARNING, "[WIFI] File does not exist: %s", self.path)
            return False
        try:
            self.path.unlink()
        except OSError:
            self._emit(logging.ERROR, "[WIFI] Failed to remove file: %s", self.path)
            return False
        self._emit(logging.INFO, "[WIFI] File removed: %s", self.path)
        return True

    def config_exists(self) -> bool:
        return self.path.exists()

    def create_default_config(self) -> bool:
        """Write an empty DHCP configuration."""
        return self.save_credentials(WiFiItems(dhcp_flag=True, config_loaded=False))

    def modify_credentials(self, new_config: WiFiItems) -> bool:
        """Overwrite an existing configuration; fail if none is stored."""
        if not self.config_exists():
            self._emit(logging.ERROR, "[WIFI] File to modify does not exist: %s", self.path)
            return False
        return self.save_credentials(new_config)