"""Wi-Fi configuration record and the interface every credential store implements."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field


def _octets() -> list[int]:
    return [0, 0, 0, 0]


class WiFiLog(enum.Enum):
    """Whether a component writes log messages."""

    DISABLE = 0
    ENABLE = 1


@dataclass
class WiFiItems:
    """Credentials and addressing for one Wi-Fi network, plus runtime state."""

    ssid: str = ""
    password: str = ""
    dhcp_flag: bool = False
    ip: list[int] = field(default_factory=_octets)
    gateway: list[int] = field(default_factory=_octets)
    subnet: list[int] = field(default_factory=_octets)
    config_loaded: bool = False
    connection_status: int = 0
    power: int = 0

    def reset(self) -> None:
        """Forget the credentials and the loaded/connection state."""
        self.ssid = ""
        self.password = ""
        self.config_loaded = False
        self.connection_status = 0


class CredentialStore(ABC):
    """Persistent storage for a single set of Wi-Fi credentials."""

    @abstractmethod
    def save_credentials(self, config: WiFiItems) -> bool:
        """Persist ``config``; return whether it was written."""

    @abstractmethod
    def load_credentials(self) -> WiFiItems:
        """Return the stored configuration."""

    @abstractmethod
    def delete_credentials(self) -> bool:
        """Remove the stored configuration; return whether anything was removed."""

    @abstractmethod
    def config_exists(self) -> bool:
        """Return whether a stored configuration is present."""