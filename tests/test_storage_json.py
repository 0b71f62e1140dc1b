import json
import logging

import pytest

from wificonf.items import WiFiItems, WiFiLog
from wificonf.storage_json import JsonCredentialStore, config_to_dict


@pytest.fixture
def store(tmp_path):
    return JsonCredentialStore(tmp_path / "configWi.json", WiFiLog.DISABLE)


def _static_config():
    password = "password"
    return WiFiItems(
        ssid="office",
        password=password,
        dhcp_flag=False,
        ip=[192, 168, 1, 50],
        gateway=[192, 168, 1, 1],
        subnet=[255, 255, 255, 0],
    )


def _write(store, doc):
    store.path.write_text(json.dumps(doc), encoding="utf-8")


def test_config_to_dict_dhcp_has_no_addresses():
    password = "password"
    doc = config_to_dict(WiFiItems(ssid="home", password=password, dhcp_flag=True))
    assert doc == {"ssid": "home", "password": "password", "dhcp": True}


def test_config_to_dict_static_includes_addresses():
    config = _static_config()
    doc = config_to_dict(config)
    assert doc["dhcp"] is False
    assert doc["ip"] == config.ip
    assert doc["gateway"] == config.gateway
    assert doc["subnet"] == config.subnet


def test_save_writes_compact_json(store):
    password = "password"
    assert store.save_credentials(WiFiItems(ssid="home", password=password, dhcp_flag=True))
    raw = store.path.read_text(encoding="utf-8")
    assert " " not in raw
    assert json.loads(raw) == {"ssid": "home", "password": "password", "dhcp": True}


def test_round_trip_dhcp(store):
    password = "password"
    store.save_credentials(WiFiItems(ssid="home", password=password, dhcp_flag=True))
    loaded = store.load_credentials()
    assert loaded.ssid == "home"
    assert loaded.password == "password"
    assert loaded.dhcp_flag is True
    assert loaded.config_loaded is True


def test_round_trip_static(store):
    config = _static_config()
    store.save_credentials(config)
    loaded = store.load_credentials()
    assert loaded.config_loaded is True
    assert loaded.dhcp_flag is False
    assert (loaded.ip, loaded.gateway, loaded.subnet) == (
        config.ip,
        config.gateway,
        config.subnet,
    )


def test_load_missing_file(store):
    loaded = store.load_credentials()
    assert loaded.config_loaded is False
    assert loaded.ssid == ""


def test_load_empty_file(store):
    store.path.write_text("", encoding="utf-8")
    loaded = store.load_credentials()
    assert loaded == WiFiItems()


def test_load_invalid_json(store):
    store.path.write_text("{not json", encoding="utf-8")
    assert store.load_credentials() == WiFiItems()


def test_load_empty_ssid_is_not_loaded(store):
    _write(store, {"ssid": "", "password": "password", "dhcp": True})
    loaded = store.load_credentials()
    assert loaded.config_loaded is False
    assert loaded.ssid == ""


def test_load_non_string_ssid(store):
    _write(store, {"ssid": 5, "password": "password", "dhcp": True})
    assert store.load_credentials().config_loaded is False


def test_load_missing_password(store):
    _write(store, {"ssid": "home", "dhcp": True})
    loaded = store.load_credentials()
    assert loaded.config_loaded is False
    assert loaded.ssid == ""


def test_load_static_without_ip(store):
    _write(store, {"ssid": "home", "password": "password", "dhcp": False})
    assert store.load_credentials().config_loaded is False


def test_load_static_wrong_length(store):
    doc = config_to_dict(_static_config())
    doc["gateway"] = doc["gateway"][:3]
    _write(store, doc)
    assert store.load_credentials().config_loaded is False


def test_load_static_out_of_range_octet(store):
    doc = config_to_dict(_static_config())
    doc["subnet"] = [255, 255, 256, 0]
    _write(store, doc)
    assert store.load_credentials().config_loaded is False


def test_non_bool_dhcp_means_static(store):
    _write(store, {"ssid": "home", "password": "password", "dhcp": "yes"})
    loaded = store.load_credentials()
    assert loaded.config_loaded is False


def test_delete_missing_file(store):
    assert store.delete_credentials() is False


def test_delete_existing_file(store):
    store.save_credentials(_static_config())
    assert store.config_exists() is True
    assert store.delete_credentials() is True
    assert store.config_exists() is False
    assert not store.path.exists()


def test_create_default_config(store):
    assert store.create_default_config() is True
    assert json.loads(store.path.read_text(encoding="utf-8")) == {
        "ssid": "",
        "password": "",
        "dhcp": True,
    }
    assert store.load_credentials().config_loaded is False


def test_modify_requires_existing_file(store):
    assert store.modify_credentials(_static_config()) is False
    assert store.config_exists() is False


def test_modify_overwrites(store):
    store.create_default_config()
    assert store.modify_credentials(_static_config()) is True
    assert store.load_credentials().ssid == "office"


def test_save_to_missing_directory_fails(tmp_path):
    store = JsonCredentialStore(tmp_path / "absent" / "configWi.json", WiFiLog.DISABLE)
    assert store.save_credentials(_static_config()) is False


def test_logging_disabled_is_silent(store, caplog):
    with caplog.at_level(logging.DEBUG, logger="wificonf.storage_json"):
        store.save_credentials(_static_config())
        store.load_credentials()
    assert caplog.records == []


def test_logging_enabled_emits(tmp_path, caplog):
    store = JsonCredentialStore(tmp_path / "configWi.json", WiFiLog.ENABLE)
    with caplog.at_level(logging.DEBUG, logger="wificonf.storage_json"):
        store.load_credentials()
    assert any(record.levelno == logging.ERROR for record in caplog.records)