# /kenuts/domain/messages.py
from __future__ import annotations

from kenuts.domain.errors import InvalidPort, KenutsConnectionError, KenutsError

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "invalid_scheme": "Only kenuts:// addresses are supported",
        "invalid_host": "Invalid host address",
        "invalid_port": "Invalid port number: {port}",
        "invalid_address": "Invalid address",
        "connection_error": "Connection error: {detail}",
        "malformed_response": "Invalid response",
        "error": "Unexpected error: {detail}",
    },
    "tr": {
        "invalid_scheme": "Sadece kenuts:// destekleniyor",
        "invalid_host": "Geçersiz host adresi",
        "invalid_port": "Geçersiz port numarası: {port}",
        "invalid_address": "Geçersiz adres",
        "connection_error": "Bağlantı hatası: {detail}",
        "malformed_response": "Geçersiz yanıt",
        "error": "Beklenmeyen hata: {detail}",
    },
}


def catalog(locale: str) -> dict[str, str]:
    return MESSAGES.get(locale.lower().split("_")[0], MESSAGES["en"])


def message_for(err: KenutsError, locale: str = "en") -> str:
    template = catalog(locale).get(err.kind, catalog(locale)["error"])
    if isinstance(err, InvalidPort):
        return template.format(port=err.raw_port)
    if isinstance(err, KenutsConnectionError):
        return template.format(detail=err.message)
    return template.format(detail=str(err))
