"""Wi-Fi credential stores, a captive setup portal and a station connection manager."""

__version__ = "0.1.0"
__all__ = ["items", "storage_json", "storage_nvs", "portal", "manager"]