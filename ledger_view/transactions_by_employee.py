"""Paginator over one employee's transactions."""

from __future__ import annotations

import logging

from backend.transport import TRANSACTIONS_BY_EMPLOYEE_REQUEST
from ledger_view.fetch_client import CachedFetchClient
from shared.models import Transaction, TransactionsByEmployeeParams


logger = logging.getLogger(__name__)


DEFAULT_PAGE_SIZE = 10


class TransactionsByEmployee:
    """Accumulate pages of a single employee's transactions.

    The endpoint returns a bare list with no next-page pointer, so a page
    shorter than `page_size` is taken as the last one.
    """

    def __init__(self, client: CachedFetchClient, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self._client = client
        self.page_size = page_size
        self._transactions: list[Transaction] | None = None
        self._employee_id: str | None = None
        self._has_more = True
        # None once the employee's pages are exhausted.
        self._next_page: int | None = 0
        self._generation = 0
        self._pending_generation: int | None = None

    @property
    def data(self) -> list[Transaction] | None:
        return list(self._transactions) if self._transactions is not None else None

    @property
    def employee_id(self) -> str | None:
        return self._employee_id

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def next_page(self) -> int | None:
        return self._next_page

    @property
    def loading(self) -> bool:
        return self._client.loading

    @property
    def generation(self) -> int:
        return self._generation

    async def fetch_by_id(self, employee_id: str) -> None:
        if self._employee_id is not None and employee_id != self._employee_id:
            logger.debug(
                "transactions_by_employee_switch previous=%s current=%s",
                self._employee_id,
                employee_id,
            )
            self.invalidate_data()

        if not self._has_more or self._next_page is None:
            return
        if self._pending_generation == self._generation:
            logger.debug("transactions_by_employee_fetch_in_progress employee_id=%s", employee_id)
            return

        generation = self._generation
        page = self._next_page
        self._employee_id = employee_id
        self._pending_generation = generation
        try:
            response: list[Transaction] | None = await self._client.fetch(
                TRANSACTIONS_BY_EMPLOYEE_REQUEST,
                TransactionsByEmployeeParams(employee_id=employee_id, page=page),
                response_type=list[Transaction],
            )
        finally:
            if self._pending_generation == generation:
                self._pending_generation = None

        if generation != self._generation:
            logger.debug(
                "transactions_by_employee_stale_response employee_id=%s page=%s issued_generation=%s current_generation=%s",
                employee_id,
                page,
                generation,
                self._generation,
            )
            return

        if not response:
            self._has_more = False
            self._next_page = None
            return

        self._transactions = [*(self._transactions or []), *response]
        if len(response) < self.page_size:
            self._has_more = False
            self._next_page = None
        else:
            self._next_page = page + 1

        logger.debug(
            "transactions_by_employee_page_loaded employee_id=%s page=%s rows=%s total=%s",
            employee_id,
            page,
            len(response),
            len(self._transactions),
        )

    def invalidate_data(self) -> None:
        self._transactions = None
        self._employee_id = None
        self._has_more = True
        self._next_page = 0
        self._generation += 1
