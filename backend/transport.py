"""Ledger transports: in-process dispatch and a minimal HTTP client.

Both transports speak the same JSON-shaped payloads so the cached fetch client
can validate responses the same way regardless of where they came from.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from backend.repositories.ledger_repository import LedgerRepository


logger = logging.getLogger(__name__)


EMPLOYEES_REQUEST = "employees"
PAGINATED_TRANSACTIONS_REQUEST = "paginatedTransactions"
TRANSACTIONS_BY_EMPLOYEE_REQUEST = "transactionsByEmployee"


class LedgerTransportError(RuntimeError):
    """Raised when a ledger request cannot be completed."""


class LedgerTransport(Protocol):
    async def request(self, name: str, params: dict[str, Any] | None) -> Any:
        """Execute a named request and return its JSON-compatible payload."""


class InProcessTransport:
    """Dispatch named requests straight to a repository."""

    def __init__(
        self,
        repository: LedgerRepository,
        *,
        page_size: int,
        employee_page_size: int,
        latency_ms: int = 0,
    ) -> None:
        self._repository = repository
        self._page_size = page_size
        self._employee_page_size = employee_page_size
        self._latency_ms = latency_ms
        self._handlers: dict[str, Callable[[dict[str, Any]], Any]] = {
            EMPLOYEES_REQUEST: self._employees,
            PAGINATED_TRANSACTIONS_REQUEST: self._paginated_transactions,
            TRANSACTIONS_BY_EMPLOYEE_REQUEST: self._transactions_by_employee,
        }

    async def request(self, name: str, params: dict[str, Any] | None) -> Any:
        if self._latency_ms:
            await asyncio.sleep(self._latency_ms / 1000)

        handler = self._handlers.get(name)
        if handler is None:
            raise LedgerTransportError(f"Unknown ledger request: {name}")

        try:
            return handler(params or {})
        except (KeyError, TypeError, ValueError) as exc:
            raise LedgerTransportError(f"Ledger request {name} failed: {exc}") from exc

    def _employees(self, _params: dict[str, Any]) -> list[dict[str, Any]]:
        return [
            employee.model_dump(mode="json", by_alias=True)
            for employee in self._repository.employees()
        ]

    def _paginated_transactions(self, params: dict[str, Any]) -> dict[str, Any]:
        page = params.get("page")
        response = self._repository.paginated_transactions(
            int(page) if page is not None else 0, self._page_size
        )
        return response.model_dump(mode="json", by_alias=True)

    def _transactions_by_employee(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        rows = self._repository.transactions_by_employee(
            str(params["employeeId"]),
            int(params.get("page") or 0),
            self._employee_page_size,
        )
        return [row.model_dump(mode="json", by_alias=True) for row in rows]


@dataclass(slots=True)
class HttpTransportSettings:
    base_url: str
    timeout_seconds: float = 10.0


class HttpTransport:
    """Call a remote ledger API with `GET {base_url}/{name}?{params}`."""

    def __init__(self, settings: HttpTransportSettings) -> None:
        self.settings = settings

    async def request(self, name: str, params: dict[str, Any] | None) -> Any:
        return await asyncio.to_thread(self._get, name, params or {})

    def _get(self, name: str, params: dict[str, Any]) -> Any:
        query = {key: value for key, value in params.items() if value is not None}
        url = f"{self.settings.base_url.rstrip('/')}/{name}"
        if query:
            url = f"{url}?{urlencode(query, doseq=True)}"

        request = Request(url=url, headers={"Accept": "application/json"}, method="GET")
        logger.debug("ledger_http_request url=%s", url)
        try:
            with urlopen(request, timeout=self.settings.timeout_seconds) as response:  # noqa: S310 - URL comes from trusted env config
                return json.loads(response.read().decode("utf-8"))
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace")[:500]
            raise LedgerTransportError(
                f"Ledger request failed with status {exc.code}: {body}"
            ) from exc
        except URLError as exc:
            raise LedgerTransportError(f"Ledger request failed: {exc.reason}") from exc
        except (TimeoutError, OSError) as exc:
            raise LedgerTransportError(f"Ledger request failed: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise LedgerTransportError(f"Ledger response is not valid UTF-8: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise LedgerTransportError(f"Ledger response is not valid JSON: {exc}") from exc
