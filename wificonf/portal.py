"""Captive portal: a wildcard DNS responder plus a small HTTP configuration server."""

from __future__ import annotations

import ipaddress
import json
import logging
import os
import socket
import struct
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Callable, Iterable
from urllib.parse import parse_qsl, urlsplit

from .items import CredentialStore, WiFiItems

_logger = logging.getLogger(__name__)

CAPTIVE_PORTAL_SSID = "ESP32-Captive-Portal"
CAPTIVE_PORTAL_DNS_PORT = 53
AP_IP = "192.168.4.1"
AP_NETMASK = "255.255.255.0"
DNS_TTL = 60

_HEADER = struct.Struct("!HHHHHH")
_ANSWER = struct.Struct("!HHHIH")
_QR_BIT = 0x8000
_RCODE_MASK = 0x000F

_CONTENT_TYPES = (
    (".html", "text/html"),
    (".css", "text/css"),
    (".js", "application/javascript"),
    (".ico", "image/x-icon"),
    (".png", "image/png"),
    (".jpg", "image/jpeg"),
    (".jpeg", "image/jpeg"),
    (".gif", "image/gif"),
    (".svg", "image/svg+xml"),
    (".json", "application/json"),
    (".txt", "text/plain"),
    (".xml", "text/xml"),
)

_FILE_ROUTES = {
    "/": "/index.html",
    "/styles.css": "/styles.css",
    "/script.js": "/script.js",
}

_SUCCESS_BODY = '{"status":"success","message":"Credentials saved successfully"}'
_ERROR_BODY = '{"status":"error","message":"Failed to save credentials"}'


def content_type(filename: str) -> str:
    """Return the MIME type served for ``filename``, judged by its extension."""
    for suffix, mime in _CONTENT_TYPES:
        if filename.endswith(suffix):
            return mime
    return "application/octet-stream"


def scan_json(networks: Iterable[tuple[str, int]]) -> str:
    """Render scan results, given as ``(ssid, rssi)`` pairs, as a JSON array."""
    return json.dumps(
        [{"ssid": ssid, "rssi": rssi} for ssid, rssi in networks],
        separators=(",", ":"),
        ensure_ascii=False,
    )


def _question_end(query: bytes) -> int | None:
    pos = _HEADER.size
    while True:
        if pos >= len(query):
            return None
        length = query[pos]
        if length == 0:
            pos += 1
            break
        if length & 0xC0:
            return None
        pos += 1 + length
    end = pos + 4
    return end if end <= len(query) else None


def build_dns_response(query: bytes, ip: str) -> bytes | None:
    """Answer a standard DNS query with an A record for ``ip``.

    Returns ``None`` for packets that are not a single-question standard query.
    Raises ``ValueError`` if ``ip`` is not an IPv4 address.
    """
    address = ipaddress.IPv4Address(ip).packed
    if len(query) < _HEADER.size:
        return None
    ident, flags, qdcount, _, _, _ = _HEADER.unpack_from(query)
    opcode = (flags >> 11) & 0xF
    if flags & _QR_BIT or opcode != 0 or qdcount != 1:
        return None
    end = _question_end(query)
    if end is None:
        return None
    header = _HEADER.pack(ident, (flags | _QR_BIT) & ~_RCODE_MASK & 0xFFFF, 1, 1, 0, 0)
    answer = _ANSWER.pack(0xC000 | _HEADER.size, 1, 1, DNS_TTL, len(address)) + address
    return header + query[_HEADER.size:end] + answer


class WildcardDnsServer:
    """UDP DNS server that resolves every name to one IPv4 address."""

    def __init__(
        self,
        ip: str = AP_IP,
        host: str = "0.0.0.0",
        port: int = CAPTIVE_PORTAL_DNS_PORT,
    ) -> None:
        self.ip = str(ipaddress.IPv4Address(ip))
        self.host = host
        self.port = port
        self._sock: socket.socket | None = None
        self._thread: threading.Thread | None = None
        self._stop = threading.Event()

    @property
    def address(self) -> tuple[str, int] | None:
        """The bound ``(host, port)``, or ``None`` while stopped."""
        return self._sock.getsockname() if self._sock is not None else None

    def start(self) -> None:
        """Bind the socket and answer queries in a background thread."""
        if self._sock is not None:
            return
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind((self.host, self.port))
        except OSError:
            sock.close()
            raise
        sock.settimeout(0.1)
        self._sock = sock
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._serve, args=(sock,), name="captive-dns", daemon=True
        )
        self._thread.start()

    def _serve(self, sock: socket.socket) -> None:
        while not self._stop.is_set():
            try:
                data, peer = sock.recvfrom(512)
            except socket.timeout:
                continue
            except OSError:
                break
            reply = build_dns_response(data, self.ip)
            if reply is None:
                continue
            try:
                sock.sendto(reply, peer)
            except OSError:
                _logger.debug("DNS reply to %s failed", peer)

    def stop(self) -> None:
        """Stop answering and release the socket."""
        if self._sock is None:
            return
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
        self._sock.close()
        self._sock = None
        self._thread = None


def _make_handler(portal: CaptivePortal) -> type[BaseHTTPRequestHandler]:
    class _Handler(BaseHTTPRequestHandler):
        def log_message(self, format: str, *args: object) -> None:  # noqa: A002
            _logger.debug("%s - " + format, self.address_string(), *args)

        def _parse(self) -> tuple[str, list[tuple[str, str]]]:
            parts = urlsplit(self.path)
            args = parse_qsl(parts.query, keep_blank_values=True)
            length = int(self.headers.get("Content-Length") or 0)
            if length > 0:
                body = self.rfile.read(length).decode("utf-8", errors="replace")
                kind = self.headers.get("Content-Type", "")
                if kind.startswith("application/x-www-form-urlencoded"):
                    args.extend(parse_qsl(body, keep_blank_values=True))
                else:
                    args.append(("plain", body))
            return parts.path or "/", args

        def _send(self, code: int, mime: str, body: bytes) -> None:
            self.send_response(code)
            self.send_header("Content-Type", mime)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def _send_file(self, file_path: str, uri: str, args: list[tuple[str, str]]) -> None:
            target = portal.web_root / file_path.lstrip("/")
            try:
                data = target.read_bytes()
            except OSError:
                method = "GET" if self.command == "GET" else "POST"
                message = (
                    f"File not found\n\nURI: {uri}\nMethod: {method}\n"
                    f"Arguments: {len(args)}\n"
                )
                message += "".join(f" {name}: {value}\n" for name, value in args)
                self._send(404, "text/plain", message.encode("utf-8"))
                return
            self._send(200, content_type(file_path), data)

        def _not_found(self) -> None:
            path, args = self._parse()
            self._send_file("/index.html", path, args)

        def do_GET(self) -> None:
            path, args = self._parse()
            if path == "/scan":
                body = scan_json(portal.scanner()).encode("utf-8")
                self._send(200, "application/json", body)
            else:
                self._send_file(_FILE_ROUTES.get(path, "/index.html"), path, args)

        def do_POST(self) -> None:
            path, args = self._parse()
            if path != "/connect":
                self._send_file("/index.html", path, args)
                return
            values = dict(reversed(args))
            config = WiFiItems(
                ssid=values.get("ssid", ""),
                password=values.get("password", ""),
                dhcp_flag=True,
            )
            if portal.storage.save_credentials(config):
                self._send(200, "application/json", _SUCCESS_BODY.encode("utf-8"))
            else:
                self._send(500, "application/json", _ERROR_BODY.encode("utf-8"))
            portal._schedule_end()

        do_PUT = _not_found
        do_DELETE = _not_found
        do_PATCH = _not_found

    return _Handler


class CaptivePortal:
    """Serves the Wi-Fi setup page and stores the credentials submitted to it."""

    dns_port: int | None = CAPTIVE_PORTAL_DNS_PORT
    shutdown_delay: float = 1.0

    def __init__(
        self,
        storage: CredentialStore,
        web_root: str | os.PathLike[str] = ".",
        host: str = "0.0.0.0",
        port: int = 80,
        scanner: Callable[[], Iterable[tuple[str, int]]] | None = None,
    ) -> None:
        self.storage = storage
        self.web_root = Path(web_root)
        self.host = host
        self.port = port
        self.scanner = scanner if scanner is not None else (lambda: [])
        self._httpd: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None
        self._dns: WildcardDnsServer | None = None
        self._running = False
        self._lock = threading.Lock()

    @property
    def server_address(self) -> tuple[str, int] | None:
        """The bound HTTP ``(host, port)``, or ``None`` while stopped."""
        if self._httpd is None:
            return None
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    def begin(self) -> None:
        """Start the DNS responder and the HTTP server; no-op if running."""
        with self._lock:
            if self._running:
                return
            _logger.info("AP %s IP address: %s", CAPTIVE_PORTAL_SSID, AP_IP)
            if self.dns_port is not None:
                self._dns = WildcardDnsServer(AP_IP, self.host, self.dns_port)
                self._dns.start()
            try:
                httpd = ThreadingHTTPServer((self.host, self.port), _make_handler(self))
            except OSError:
                if self._dns is not None:
                    self._dns.stop()
                    self._dns = None
                raise
            httpd.daemon_threads = True
            self._httpd = httpd
            self._thread = threading.Thread(
                target=httpd.serve_forever,
                kwargs={"poll_interval": 0.05},
                name="captive-portal",
                daemon=True,
            )
            self._thread.start()
            self._running = True

    def end(self) -> None:
        """Stop both servers; no-op if not running."""
        with self._lock:
            if not self._running:
                return
            if self._httpd is not None:
                self._httpd.shutdown()
                self._httpd.server_close()
            if self._thread is not None:
                self._thread.join()
            if self._dns is not None:
                self._dns.stop()
            self._httpd = None
            self._thread = None
            self._dns = None
            self._running = False

    def is_running(self) -> bool:
        """Return whether the portal is serving."""
        return self._running

    def _schedule_end(self) -> None:
        timer = threading.Timer(self.shutdown_delay, self.end)
        timer.daemon = True
        timer.start()