# /tests/test_server.py
from __future__ import annotations
import asyncio
import os
from pathlib import Path

import pytest

from kenuts.adapters.server.kenuts_server import (
    IndexFile,
    KenutsServer,
    RequestError,
    ServerConfig,
    build_response,
    parse_request_line,
)
from kenuts.adapters.tcp.asyncio_transport import AsyncioTransport
from kenuts.domain.address import Address
from kenuts.domain.fetch_service import FetchService, Success
from kenuts.domain.response import decode_response

INDEX = "<html><body>kenuts &amp; friends\r\n\r\nsecond part</body></html>"


@pytest.mark.parametrize(
    "line, expected",
    [
        ("KENUTS GET /docs ZG/1.0\r\n", ("GET", "/docs")),
        ("KENUTS GET ZG/1.0\r\n", ("GET", "/")),
        ("kenuts head /x zg/1.0\r\n", ("HEAD", "/x")),
        ("GET /plain\r\n", ("GET", "/plain")),
        ("POST\r\n", ("POST", "/")),
    ],
)
def test_parse_request_line(line: str, expected: tuple[str, str]) -> None:
    assert parse_request_line(line) == expected


def test_parse_empty_request_line() -> None:
    with pytest.raises(RequestError):
        parse_request_line("   \r\n")


def test_build_response() -> None:
    assert build_response("200 OK", b"hi", extra_headers=["A: 1"]) == b"ZG/1.0 200 OK\r\nA: 1\r\n\r\nhi"
    assert build_response("200 OK", b"hi", head_only=True) == b"ZG/1.0 200 OK\r\n\r\n"


def test_index_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        IndexFile(str(tmp_path / "nope.html")).load()


def test_index_empty(tmp_path: Path) -> None:
    p = tmp_path / "index.html"
    p.write_bytes(b"")
    with pytest.raises(ValueError):
        IndexFile(str(p)).load()


def test_index_reloads_on_change(tmp_path: Path) -> None:
    p = tmp_path / "index.html"
    p.write_text("v1", encoding="utf-8")
    idx = IndexFile(str(p))
    assert idx.load() == b"v1"
    p.write_text("v2", encoding="utf-8")
    st = p.stat()
    os.utime(p, (st.st_atime, st.st_mtime + 10))
    assert idx.load() == b"v2"


def _server(tmp_path: Path) -> KenutsServer:
    p = tmp_path / "index.html"
    p.write_text(INDEX, encoding="utf-8")
    return KenutsServer(ServerConfig(host="127.0.0.1", port=0, index_file=str(p), read_timeout=2.0))


async def _raw_exchange(port: int, frame: bytes) -> bytes:
    reader, writer = await asyncio.open_connection("127.0.0.1", port)
    writer.write(frame)
    await writer.drain()
    try:
        data = await reader.read()
    except ConnectionResetError:
        data = b""
    writer.close()
    try:
        await writer.wait_closed()
    except ConnectionResetError:
        pass
    return data


@pytest.mark.asyncio
async def test_client_against_server(tmp_path: Path) -> None:
    srv = _server(tmp_path)
    await srv.start()
    try:
        raw = await AsyncioTransport().exchange(Address(host="127.0.0.1", port=srv.port, path="/any"))
        result = await FetchService(AsyncioTransport()).fetch(f"kenuts://127.0.0.1:{srv.port}/")
    finally:
        await srv.stop()

    d = decode_response(raw)
    assert d.status_code == 200
    assert d.header_fields["zg-power"] == "MAXIMUM"
    assert d.header_fields["content-length"] == str(len(INDEX.encode()))
    assert d.body == INDEX
    assert result == Success(body=INDEX)


@pytest.mark.asyncio
async def test_older_framing_without_path(tmp_path: Path) -> None:
    srv = _server(tmp_path)
    await srv.start()
    try:
        data = await _raw_exchange(srv.port, b"KENUTS GET ZG/1.0\r\nZG-Mode: HTML\r\n\r\n")
    finally:
        await srv.stop()
    assert data.startswith(b"ZG/1.0 200 OK\r\n")
    assert data.endswith(INDEX.encode())


@pytest.mark.asyncio
async def test_head_has_no_body(tmp_path: Path) -> None:
    srv = _server(tmp_path)
    await srv.start()
    try:
        data = await _raw_exchange(srv.port, b"KENUTS HEAD / ZG/1.0\r\n\r\n")
    finally:
        await srv.stop()
    assert data.startswith(b"ZG/1.0 200 OK\r\n")
    assert data.endswith(b"\r\n\r\n")


@pytest.mark.asyncio
async def test_method_not_allowed(tmp_path: Path) -> None:
    srv = _server(tmp_path)
    await srv.start()
    try:
        data = await _raw_exchange(srv.port, b"KENUTS POST / ZG/1.0\r\n\r\n")
    finally:
        await srv.stop()
    assert data == b"ZG/1.0 405 Method Not Allowed\r\n\r\nMethod Not Allowed"


@pytest.mark.asyncio
async def test_too_many_headers_drops_connection(tmp_path: Path) -> None:
    p = tmp_path / "index.html"
    p.write_text(INDEX, encoding="utf-8")
    srv = KenutsServer(ServerConfig(host="127.0.0.1", port=0, index_file=str(p), max_header_lines=2))
    await srv.start()
    try:
        data = await _raw_exchange(srv.port, b"KENUTS GET / ZG/1.0\r\nA: 1\r\nB: 2\r\nC: 3\r\n\r\n")
    finally:
        await srv.stop()
    assert data == b""


@pytest.mark.asyncio
async def test_start_fails_without_index(tmp_path: Path) -> None:
    srv = KenutsServer(ServerConfig(host="127.0.0.1", port=0, index_file=str(tmp_path / "missing.html")))
    with pytest.raises(FileNotFoundError):
        await srv.start()


@pytest.mark.asyncio
async def test_silent_client_is_dropped_after_read_timeout(tmp_path: Path) -> None:
    p = tmp_path / "index.html"
    p.write_text(INDEX, encoding="utf-8")
    srv = KenutsServer(ServerConfig(host="127.0.0.1", port=0, index_file=str(p), read_timeout=0.2))
    await srv.start()
    try:
        reader, writer = await asyncio.open_connection("127.0.0.1", srv.port)
        async with asyncio.timeout(2.0):
            data = await reader.read()
        writer.close()
        await writer.wait_closed()
    finally:
        await srv.stop()
    assert data == b""
