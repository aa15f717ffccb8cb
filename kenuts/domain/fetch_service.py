# /kenuts/domain/fetch_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from kenuts.domain.address import DEFAULT_PORT, parse_address
from kenuts.domain.errors import FetchFailed, KenutsError, MalformedResponse
from kenuts.domain.messages import catalog, message_for
from kenuts.domain.response import decode_response
from kenuts.ports.transport import TransportPort

LOG = logging.getLogger("fetch_service")

# ==== Results ====


@dataclass(frozen=True, slots=True)
class Success:
    body: str
    ok = True


@dataclass(frozen=True, slots=True)
class Failure:
    message: str
    kind: str
    ok = False


FetchResult = Success | Failure


# ==== Service ====


class FetchService:
    """Parses an address, runs one exchange over the injected transport and extracts the body."""

    def __init__(
        self,
        transport: TransportPort,
        *,
        default_port: int = DEFAULT_PORT,
        encoding: str = "utf-8",
        locale: str = "en",
    ) -> None:
        self.transport = transport
        self.default_port = default_port
        self.encoding = encoding
        self.locale = locale

    def _failure(self, err: KenutsError, address: str) -> Failure:
        msg = message_for(err, self.locale)
        LOG.warning("fetch.failed", extra={"extra": {"address": address, "kind": err.kind, "detail": str(err)}})
        return Failure(message=msg, kind=err.kind)

    async def fetch(self, address: str) -> FetchResult:
        try:
            addr = parse_address(address, default_port=self.default_port)
            raw = await self.transport.exchange(addr)
        except KenutsError as e:
            return self._failure(e, address)

        try:
            decoded = decode_response(raw, encoding=self.encoding)
        except MalformedResponse:
            # soft failure: the placeholder is delivered as an ordinary body
            LOG.warning("fetch.malformed_response", extra={"extra": {"address": address, "bytes": len(raw)}})
            return Success(body=catalog(self.locale)["malformed_response"])

        LOG.info(
            "fetch.done",
            extra={"extra": {"address": str(addr), "status": decoded.status_line, "body_len": len(decoded.body)}},
        )
        return Success(body=decoded.body)

    async def fetch_html(self, address: str) -> str:
        result = await self.fetch(address)
        if isinstance(result, Failure):
            raise FetchFailed(result.message, result.kind)
        return result.body
