"""Credential store backed by a namespaced key-value preferences file."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from .items import CredentialStore, WiFiItems

NVS_NAMESPACE = "wifi_credentials"
DEFAULT_NVS_PATH = "nvs.json"

_ADDRESS_KEYS = ("ip", "gateway", "subnet")


def _encode(value: Any) -> dict[str, Any]:
    if isinstance(value, bool):
        return {"type": "bool", "value": value}
    if isinstance(value, int):
        return {"type": "int", "value": value}
    if isinstance(value, str):
        return {"type": "str", "value": value}
    if isinstance(value, (bytes, bytearray)):
        return {"type": "bytes", "value": bytes(value).hex()}
    raise TypeError(f"unsupported preference value type: {type(value).__name__}")


def _decode(entry: Any) -> Any:
    if not isinstance(entry, dict):
        return None
    kind = entry.get("type")
    value = entry.get("value")
    if kind == "bytes":
        return bytes.fromhex(value)
    return value


class Preferences:
    """Persistent key-value storage, partitioned into namespaces, kept in one file."""

    def __init__(self, path: str | os.PathLike[str], namespace: str) -> None:
        self.path = Path(path)
        self.namespace = namespace

    def _read_all(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, Any]) -> bool:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp.write_text(json.dumps(data), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError:
            return False
        return True

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key``, or ``default``."""
        entries = self._read_all().get(self.namespace, {})
        if not isinstance(entries, dict) or key not in entries:
            return default
        return _decode(entries[key])

    def put(self, key: str, value: Any) -> bool:
        """Store ``value`` under ``key``; return whether it was committed."""
        encoded = _encode(value)
        data = self._read_all()
        entries = data.get(self.namespace)
        if not isinstance(entries, dict):
            entries = {}
        entries[key] = encoded
        data[self.namespace] = entries
        return self._write_all(data)

    def clear(self) -> bool:
        """Remove every key in this namespace."""
        data = self._read_all()
        data.pop(self.namespace, None)
        return self._write_all(data)


def _octet_bytes(octets: list[int]) -> bytes:
    if len(octets) != 4:
        raise ValueError("an address needs exactly 4 octets")
    return bytes(octets)


class NvsCredentialStore(CredentialStore):
    """Stores Wi-Fi credentials as individual preference keys."""

    def __init__(self, path: str | os.PathLike[str] = DEFAULT_NVS_PATH) -> None:
        self._prefs = Preferences(path, NVS_NAMESPACE)

    def save_credentials(self, config: WiFiItems) -> bool:
        writes: list[tuple[str, Any]] = [
            ("ssid", config.ssid),
            ("password", config.password),
            ("dhcpFlag", config.dhcp_flag),
        ]
        if not config.dhcp_flag:
            writes.extend(
                (key, _octet_bytes(getattr(config, key))) for key in _ADDRESS_KEYS
            )
        writes.append(("configLoaded", config.config_loaded))
        results = [self._prefs.put(key, value) for key, value in writes]
        return all(results)

    def load_credentials(self) -> WiFiItems:
        config = WiFiItems(
            ssid=self._prefs.get("ssid", ""),
            password=self._prefs.get("password", ""),
            dhcp_flag=self._prefs.get("dhcpFlag", True),
        )
        if not config.dhcp_flag:
            for key in _ADDRESS_KEYS:
                stored = self._prefs.get(key)
                if isinstance(stored, bytes) and len(stored) == 4:
                    setattr(config, key, list(stored))
        config.config_loaded = self._prefs.get("configLoaded", False)
        return config

    def delete_credentials(self) -> bool:
        return self._prefs.clear()

    def config_exists(self) -> bool:
        return self.has_credentials()

    def update_credentials(self, config: WiFiItems) -> bool:
        """Overwrite the stored credentials."""
        return self.save_credentials(config)

    def clear_credentials(self) -> bool:
        """Erase all stored credentials."""
        return self._prefs.clear()

    def has_credentials(self) -> bool:
        """Return whether stored credentials are marked as loaded."""
        return bool(self._prefs.get("configLoaded", False))