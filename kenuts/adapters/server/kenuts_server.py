# /kenuts/adapters/server/kenuts_server.py
from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass
from pathlib import Path

from kenuts.config import settings
from kenuts.adapters.system.logging_cfg import configure_logger
from kenuts.domain.address import PROTOCOL_VERSION

LOG = logging.getLogger("adapter.server")


@dataclass(slots=True)
class ServerConfig:
    host: str = settings.SERVER_HOST
    port: int = settings.SERVER_PORT
    index_file: str = settings.SERVER_INDEX_FILE
    read_timeout: float = settings.SERVER_READ_TIMEOUT_SECONDS
    write_timeout: float = settings.SERVER_WRITE_TIMEOUT_SECONDS
    max_header_lines: int = settings.SERVER_MAX_HEADER_LINES


class RequestError(Exception):
    pass


class IndexFile:
    """Caches the served document and re-reads it whenever its mtime changes."""

    def __init__(self, path: str) -> None:
        self._path = Path(path)
        self._mtime: float | None = None
        self._data = b""

    def load(self) -> bytes:
        try:
            mtime = self._path.stat().st_mtime
        except OSError as e:
            if self._mtime is None:
                raise FileNotFoundError(f"index file not found: {self._path}") from e
            LOG.error("index.stat_failed", extra={"extra": {"path": str(self._path), "error": str(e)}})
            return self._data

        if mtime != self._mtime:
            data = self._path.read_bytes()
            if not data:
                if self._mtime is None:
                    raise ValueError(f"index file is empty: {self._path}")
                LOG.error("index.reload_empty", extra={"extra": {"path": str(self._path)}})
                return self._data
            if self._mtime is not None:
                LOG.info("index.reloaded", extra={"extra": {"path": str(self._path), "bytes": len(data)}})
            self._data = data
            self._mtime = mtime
        return self._data


def parse_request_line(line: str) -> tuple[str, str]:
    """
    Return (method, path). Accepts `KENUTS GET <path> ZG/1.0`, the older
    `KENUTS GET ZG/1.0` framing, and a bare `GET <path>`.
    """
    parts = line.strip().split(" ")
    parts = [p for p in parts if p]
    if not parts:
        raise RequestError("empty request line")

    if parts[0].upper() == "KENUTS" and len(parts) >= 2:
        method, rest = parts[1].upper(), parts[2:]
    else:
        method, rest = parts[0].upper(), parts[1:]

    if rest and rest[-1].upper().startswith("ZG/"):
        rest = rest[:-1]
    path = rest[0] if rest else "/"
    return method, path


def build_response(status: str, body: bytes, *, extra_headers: list[str] | None = None, head_only: bool = False) -> bytes:
    lines = [f"{PROTOCOL_VERSION} {status}", *(extra_headers or [])]
    head = ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")
    return head if head_only else head + body


class KenutsServer:
    def __init__(self, config: ServerConfig | None = None, index: IndexFile | None = None) -> None:
        self.config = config or ServerConfig()
        self.index = index or IndexFile(self.config.index_file)
        self._server: asyncio.Server | None = None

    @property
    def port(self) -> int:
        """Bound port; differs from the configured one when that was 0."""
        if self._server is None or not self._server.sockets:
            return self.config.port
        return self._server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        self.index.load()
        self._server = await asyncio.start_server(self._handle, self.config.host, self.config.port)
        LOG.info("server.listening", extra={"extra": {"host": self.config.host, "port": self.port}})

    async def stop(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
            LOG.info("server.stopped")

    async def _read_request(self, reader: asyncio.StreamReader) -> tuple[str, str, dict[str, str]]:
        request_line = (await reader.readline()).decode("utf-8", errors="replace")
        if not request_line.endswith("\n"):
            raise RequestError("connection closed before request line")
        method, path = parse_request_line(request_line)

        headers: dict[str, str] = {}
        for _ in range(self.config.max_header_lines):
            raw = await reader.readline()
            if not raw:
                raise RequestError("connection closed inside headers")
            line = raw.decode("utf-8", errors="replace").strip()
            if not line:
                return method, path, headers
            k, sep, v = line.partition(":")
            if sep and k.strip():
                headers[k.strip().lower()] = v.strip()
        raise RequestError("too many header lines")

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        remote = writer.get_extra_info("peername")
        LOG.info("server.connection", extra={"extra": {"remote": str(remote)}})
        try:
            try:
                async with asyncio.timeout(self.config.read_timeout):
                    method, path, _headers = await self._read_request(reader)
            except (RequestError, TimeoutError, ValueError) as e:
                LOG.error("server.bad_request", extra={"extra": {"remote": str(remote), "error": str(e) or "timeout"}})
                return

            if method not in ("GET", "HEAD"):
                payload = build_response("405 Method Not Allowed", b"Method Not Allowed")
                status = 405
            else:
                body = self.index.load()
                payload = build_response(
                    "200 OK",
                    body,
                    extra_headers=[
                        "ZG-Power: MAXIMUM",
                        f"Content-Length: {len(body)}",
                        "Content-Type: text/html; charset=utf-8",
                    ],
                    head_only=method == "HEAD",
                )
                status = 200

            async with asyncio.timeout(self.config.write_timeout):
                writer.write(payload)
                await writer.drain()
            LOG.info("server.responded", extra={"extra": {"remote": str(remote), "method": method, "path": path, "status": status}})
        except (OSError, TimeoutError) as e:
            LOG.error("server.write_failed", extra={"extra": {"remote": str(remote), "error": str(e) or "timeout"}})
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                LOG.debug("server.close_failed", extra={"extra": {"remote": str(remote), "error": str(e)}})


async def serve(config: ServerConfig | None = None) -> None:
    server = KenutsServer(config)
    await server.start()

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    await stop.wait()
    LOG.info("server.shutdown_requested")
    await server.stop()


def main() -> None:
    configure_logger()
    asyncio.run(serve())


if __name__ == "__main__":
    main()
