"""Composition root for ledger transports."""

from __future__ import annotations

from backend.repositories.ledger_repository import InMemoryLedgerRepository
from backend.transport import (
    HttpTransport,
    HttpTransportSettings,
    InProcessTransport,
    LedgerTransport,
)
from shared import config


def build_transport() -> LedgerTransport:
    """Build the ledger transport.

    A remote API is used when `LEDGER_API_URL` is configured; otherwise the
    in-memory ledger is served in-process.
    """

    api_url = config.ledger_api_url()
    if api_url:
        return HttpTransport(
            settings=HttpTransportSettings(
                base_url=api_url,
                timeout_seconds=config.ledger_api_timeout_seconds(),
            )
        )

    return InProcessTransport(
        InMemoryLedgerRepository(),
        page_size=config.ledger_page_size(),
        employee_page_size=config.employee_page_size(),
        latency_ms=config.fake_latency_ms(),
    )
