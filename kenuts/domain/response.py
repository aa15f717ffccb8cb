# /kenuts/domain/response.py
from __future__ import annotations

from dataclasses import dataclass

from kenuts.domain.errors import MalformedResponse

SEPARATOR = "\r\n\r\n"


@dataclass(frozen=True, slots=True)
class DecodedResponse:
    """
    Terminal view of one response: raw header block and raw body text.
    The head is parsed on demand and never raises; servers are free to send
    anything before the separator.
    """

    headers: str
    body: str

    @property
    def _lines(self) -> list[str]:
        return self.headers.split("\r\n") if self.headers else []

    @property
    def status_line(self) -> str | None:
        lines = self._lines
        if not lines or ":" in lines[0]:
            return None
        return lines[0].strip() or None

    @property
    def status_code(self) -> int | None:
        line = self.status_line
        if line is None:
            return None
        parts = line.split(" ", 2)
        if len(parts) < 2 or not parts[1].isdigit():
            return None
        return int(parts[1])

    @property
    def header_fields(self) -> dict[str, str]:
        out: dict[str, str] = {}
        start = 1 if self.status_line is not None else 0
        for line in self._lines[start:]:
            k, sep, v = line.partition(":")
            if not sep or not k.strip():
                continue
            out[k.strip().lower()] = v.strip()
        return out


def decode_response(raw: bytes, *, encoding: str = "utf-8") -> DecodedResponse:
    text = raw.decode(encoding, errors="replace")
    head, sep, body = text.partition(SEPARATOR)
    if not sep:
        raise MalformedResponse(f"no header/body separator in {len(raw)} bytes")
    # later separators are body content and stay untouched
    return DecodedResponse(headers=head, body=body)
