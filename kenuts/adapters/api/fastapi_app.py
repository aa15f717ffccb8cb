# /kenuts/adapters/api/fastapi_app.py
from __future__ import annotations
import html
import logging

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from kenuts.config import settings
from kenuts.adapters.system.logging_cfg import configure_logger
from kenuts.adapters.tcp.asyncio_transport import AsyncioTransport
from kenuts.domain.fetch_service import Failure, FetchService

LOG = logging.getLogger("adapter.api")
app = FastAPI(title="kenuts-browser")
configure_logger()

_service: FetchService | None = None

_STATUS_BY_KIND = {
    "invalid_scheme": 400,
    "invalid_host": 400,
    "invalid_port": 400,
    "invalid_address": 400,
    "connection_error": 502,
}


def get_service() -> FetchService:
    global _service
    if _service is None:
        _service = FetchService(
            AsyncioTransport(),
            default_port=settings.DEFAULT_PORT,
            encoding=settings.ENCODING,
            locale=settings.LOCALE,
        )
    return _service


def _check_key(x_api_key: str | None) -> None:
    if settings.API_KEY and x_api_key != settings.API_KEY:
        raise HTTPException(status_code=401, detail="invalid api key")


def render_document(body: str) -> str:
    """Entity-decode a raw body so the markup renders instead of showing as text."""
    return html.unescape(body)


def render_error(message: str) -> str:
    return f'<p style="color:red;">ERROR: {html.escape(message)}</p>'


class FetchResponseModel(BaseModel):
    address: str
    body: str


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/fetch")
async def fetch(
    address: str = Query(..., min_length=1),
    x_api_key: str | None = Header(default=None),
    service: FetchService = Depends(get_service),
) -> FetchResponseModel:
    _check_key(x_api_key)
    result = await service.fetch(address)
    if isinstance(result, Failure):
        LOG.info("api.fetch.failed", extra={"extra": {"address": address, "kind": result.kind}})
        raise HTTPException(status_code=_STATUS_BY_KIND.get(result.kind, 500), detail=result.message)
    return FetchResponseModel(address=address, body=result.body)


@app.get("/view", response_class=HTMLResponse)
async def view(
    address: str = Query(..., min_length=1),
    x_api_key: str | None = Header(default=None),
    service: FetchService = Depends(get_service),
) -> HTMLResponse:
    _check_key(x_api_key)
    result = await service.fetch(address)
    if isinstance(result, Failure):
        return HTMLResponse(render_error(result.message))
    return HTMLResponse(render_document(result.body))
