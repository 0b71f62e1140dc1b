# wificonf

Keep Wi-Fi credentials on disk, hand them to a station connection, and fall back to
a captive setup portal when no usable credentials are stored. Pure standard library.

## Install

    pip install wificonf

## Modules

### `wificonf.items`

- `WiFiItems` – a dataclass with `ssid`, `password`, `dhcp_flag`, `ip`, `gateway`,
  `subnet` (four octets each, default `[0, 0, 0, 0]`), `config_loaded`,
  `connection_status` and `power`. `reset()` clears the ssid, password,
  `config_loaded` and `connection_status`.
- `WiFiLog` – `ENABLE` / `DISABLE`, switching log messages (sent through the
  standard `logging` module) on or off.
- `CredentialStore` – abstract base with `save_credentials(config)`,
  `load_credentials()`, `delete_credentials()` and `config_exists()`.

### `wificonf.storage_json`

`JsonCredentialStore(path="configWi.json", log=WiFiLog.ENABLE)` stores the settings
as a compact JSON object. `config_to_dict(config)` returns that object: `ssid`,
`password`, `dhcp`, and, when DHCP is off, `ip`, `gateway` and `subnet` lists.

`load_credentials()` returns a `WiFiItems` whose `config_loaded` is `True` only when
the ssid is a non-empty string, the password is a string and, without DHCP, `ip`,
`gateway` and `subnet` are each lists of four integers in 0–255. A missing, empty or
unparsable file, or any failed check, gives a `WiFiItems` with `config_loaded` false.

Also: `create_default_config()` writes an empty DHCP configuration, and
`modify_credentials(new_config)` overwrites the file only if it already exists.

### `wificonf.storage_nvs`

- `Preferences(path, namespace)` – a small key/value store kept in one JSON file,
  partitioned by namespace. `get(key, default)`, `put(key, value)` (bool, int, str
  or bytes) and `clear()`. Writes go through a temporary file and a rename.
- `NvsCredentialStore(path="nvs.json")` – keeps the credentials as separate keys in
  the `wifi_credentials` namespace. `config_exists()` and `has_credentials()` report
  the stored `configLoaded` flag; `update_credentials()` saves, and
  `clear_credentials()` / `delete_credentials()` erase the namespace.

### `wificonf.portal`

- `CaptivePortal(storage, web_root=".", host="0.0.0.0", port=80, scanner=None)` –
  `begin()` starts an HTTP server (and a `WildcardDnsServer` on `dns_port`, 53 by
  default; set the attribute to `None` to skip it), `end()` stops them, and
  `is_running()` reports the state. `server_address` gives the bound address.
  Routes:
  - `GET /` → `index.html`, `GET /styles.css`, `GET /script.js` from `web_root`;
  - `GET /scan` → JSON array of `{"ssid": ..., "rssi": ...}` from `scanner()`, a
    callable returning `(ssid, rssi)` pairs (none given: an empty array);
  - `POST /connect` with form fields `ssid` and `password` → saves them (with DHCP on)
    in `storage`, answers 200 or 500 with a JSON status, then stops the portal after
    `shutdown_delay` seconds (1.0);
  - anything else → `index.html`. A missing file gives a plain-text 404 listing the
    URI, method and arguments.
- `WildcardDnsServer(ip="192.168.4.1", host="0.0.0.0", port=53)` – answers every
  standard DNS query with an A record for `ip`; `start()`, `stop()`, `address`.
- `content_type(filename)`, `scan_json(networks)` and
  `build_dns_response(query, ip)` are the helpers behind them.

Ports 80 and 53 usually need elevated privileges; pass other ports for testing.

### `wificonf.manager`

- `Station` – abstract Wi-Fi client: `connect(wifi)`, `is_connected()`,
  `disconnect()`, and an `event_handler` attribute the manager fills in.
- `WiFiEvent` – the driver events (`SCAN_DONE`, `STA_START`, `STA_STOP`,
  `STA_CONNECTED`, `STA_DISCONNECTED`, ...).
- `WiFiManager(portal, station, log=WiFiLog.DISABLE)` – `begin(wifi, log)` connects
  when `is_credentials()` holds (loaded, with ssid and password) and calls
  `portal.begin()` otherwise. Without `log`, it acts only on a loaded configuration.
  `connect_to_wifi(wifi)` polls `is_connected()` up to `max_attempts` (50) times,
  every `poll_interval` (0.2 s), printing progress dots, and disconnects and returns
  `False` on timeout. `handle_event(event)` logs events and records connect and
  disconnect in `wifi.connection_status`.

## Example

```python
from wificonf.items import WiFiItems, WiFiLog
from wificonf.storage_json import JsonCredentialStore

store = JsonCredentialStore("config.json", WiFiLog.ENABLE)

wifi = WiFiItems()
wifi.ssid = "HomeNetwork"
wifi.password = "password"
wifi.dhcp_flag = True
store.save_credentials(wifi)

loaded = store.load_credentials()
print(loaded.ssid, loaded.config_loaded)
```

## What it does not do

The package does not drive a Wi-Fi interface. There is no concrete `Station`, no
network scanning and no access-point setup: supply your own `Station` subclass and
`scanner` callable for the platform you run on. It ships no setup web page either;
put `index.html`, `styles.css` and `script.js` in the portal's `web_root`. There is
no command-line program.

## Tests

    pip install .[test]
    pytest