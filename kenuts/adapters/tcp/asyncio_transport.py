# /kenuts/adapters/tcp/asyncio_transport.py
from __future__ import annotations

import asyncio
import logging

from kenuts.config import settings
from kenuts.domain.address import Address
from kenuts.domain.errors import KenutsConnectionError

LOG = logging.getLogger("adapter.tcp_transport")

CHUNK_SIZE = 64 * 1024


def _describe(e: BaseException) -> str:
    return str(e) or type(e).__name__


class AsyncioTransport:
    """
    One TCP session per call: connect, write the request frame, read until the
    peer closes. The receive buffer is local to the call and only returned once
    EOF has been observed; on any failure it is dropped.
    """

    def __init__(
        self,
        *,
        connect_timeout: float | None = None,
        read_timeout: float | None = None,
        max_bytes: int | None = None,
    ) -> None:
        connect_timeout = settings.CONNECT_TIMEOUT_SECONDS if connect_timeout is None else connect_timeout
        self._connect_timeout = connect_timeout if connect_timeout > 0 else None
        read_timeout = settings.READ_TIMEOUT_SECONDS if read_timeout is None else read_timeout
        self._read_timeout = read_timeout if read_timeout > 0 else None
        self._max_bytes = settings.MAX_BYTES if max_bytes is None else max_bytes

    async def _connect(self, address: Address) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        try:
            async with asyncio.timeout(self._connect_timeout):
                return await asyncio.open_connection(address.host, address.port)
        except TimeoutError as e:
            raise KenutsConnectionError(
                f"connect to {address.host}:{address.port} timed out",
                reason=KenutsConnectionError.TIMEOUT,
            ) from e
        except (OSError, UnicodeError) as e:
            # UnicodeError: host name rejected by the idna codec during lookup
            raise KenutsConnectionError(_describe(e)) from e

    async def _read_all(self, reader: asyncio.StreamReader, address: Address) -> bytes:
        buf = bytearray()
        try:
            async with asyncio.timeout(self._read_timeout):
                while chunk := await reader.read(CHUNK_SIZE):
                    buf.extend(chunk)
                    if len(buf) > self._max_bytes:
                        raise KenutsConnectionError(
                            f"response exceeds {self._max_bytes} bytes",
                            reason=KenutsConnectionError.TOO_LARGE,
                        )
        except TimeoutError as e:
            raise KenutsConnectionError(
                f"no close from {address.host}:{address.port} within {self._read_timeout}s",
                reason=KenutsConnectionError.TIMEOUT,
            ) from e
        except OSError as e:
            raise KenutsConnectionError(_describe(e)) from e
        return bytes(buf)

    async def exchange(self, address: Address) -> bytes:
        reader, writer = await self._connect(address)
        frame = address.request_frame()
        try:
            LOG.info(
                "sending request",
                extra={"extra": {"address": str(address), "frame": frame.decode("utf-8").replace("\r\n", "\\r\\n")}},
            )
            try:
                writer.write(frame)
                await writer.drain()
            except OSError as e:
                raise KenutsConnectionError(_describe(e)) from e

            data = await self._read_all(reader, address)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                LOG.debug("close failed", extra={"extra": {"address": str(address), "error": _describe(e)}})

        LOG.info("response received", extra={"extra": {"address": str(address), "bytes": len(data)}})
        return data
