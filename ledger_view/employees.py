"""One-shot employee directory load."""

from __future__ import annotations

import logging

from backend.transport import EMPLOYEES_REQUEST
from ledger_view.fetch_client import CachedFetchClient
from shared.models import Employee


logger = logging.getLogger(__name__)


class EmployeeDirectory:
    """Employee list loaded once through the cached fetch client."""

    def __init__(self, client: CachedFetchClient) -> None:
        self._client = client
        self._employees: list[Employee] | None = None
        self._loading = False

    @property
    def data(self) -> list[Employee] | None:
        return self._employees

    @property
    def loading(self) -> bool:
        return self._loading

    async def fetch_all(self) -> list[Employee] | None:
        self._loading = True
        try:
            employees = await self._client.fetch(EMPLOYEES_REQUEST, response_type=list[Employee])
        finally:
            self._loading = False

        if employees is None:
            logger.warning("employee_directory_unavailable")
            return None

        self._employees = list(employees)
        logger.info("employee_directory_loaded count=%s", len(self._employees))
        return self._employees
