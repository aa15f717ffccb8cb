# /kenuts/domain/address.py
from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from kenuts.domain.errors import InvalidHost, InvalidPort, InvalidScheme

SCHEME = "kenuts"
PREFIX = f"{SCHEME}://"
DEFAULT_PORT = 6969
PROTOCOL_VERSION = "ZG/1.0"


@dataclass(frozen=True, slots=True)
class Address:
    host: str
    port: int = DEFAULT_PORT
    path: str = "/"
    scheme: str = SCHEME

    def __str__(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}{self.path}"

    def request_frame(self) -> bytes:
        """Exact bytes of the single request sent for this address."""
        return (
            f"KENUTS GET {self.path} {PROTOCOL_VERSION}\r\n"
            "ZG-Mode: HTML\r\n"
            "\r\n"
        ).encode("utf-8")


def _raw_port(netloc: str) -> str:
    # text after the last ':' of the host part, "" when absent
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        hostport = hostport.partition("]")[2]
    return hostport.partition(":")[2]


def _raw_host(netloc: str) -> str:
    # host as written, case preserved, without brackets or port
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        return hostport[1:].partition("]")[0]
    return hostport.partition(":")[0]


def parse_address(text: str, *, default_port: int = DEFAULT_PORT) -> Address:
    if not text.startswith(PREFIX):
        raise InvalidScheme(f"unsupported address: {text!r}")

    try:
        parts = urlsplit(text)
    except ValueError as e:
        raise InvalidHost(str(e)) from e

    raw_port = _raw_port(parts.netloc)
    if raw_port == "":
        port = default_port
    else:
        if not (raw_port.isascii() and raw_port.isdigit()):
            raise InvalidPort(raw_port)
        port = int(raw_port)
        if port <= 0 or port >= 65536:
            raise InvalidPort(raw_port)

    host = _raw_host(parts.netloc).strip()
    if not host:
        raise InvalidHost(f"missing host in {text!r}")

    return Address(host=host, port=port, path=parts.path or "/")
