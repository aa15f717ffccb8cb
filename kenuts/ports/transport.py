# /kenuts/ports/transport.py
from __future__ import annotations

from typing import Protocol

from kenuts.domain.address import Address


class TransportPort(Protocol):
    async def exchange(self, address: Address) -> bytes:
        """Send one request frame; return every byte received until the peer closes."""
