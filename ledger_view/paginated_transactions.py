"""Paginator over the unfiltered transaction ledger."""

from __future__ import annotations

import logging

from backend.transport import PAGINATED_TRANSACTIONS_REQUEST
from ledger_view.fetch_client import CachedFetchClient
from shared.models import PaginatedRequestParams, PaginatedResponse, Transaction


logger = logging.getLogger(__name__)


class PaginatedTransactions:
    """Accumulate pages of the full ledger, following the server's next-page pointer.

    Pagination stops on an empty page, a `None` next-page pointer, or a failed
    request, and stays stopped until `invalidate_data()`.

    Each fetch remembers the generation it was issued under. `invalidate_data()`
    bumps the generation, so a response that lands after an invalidation is
    dropped instead of being merged into the fresh state.
    """

    def __init__(self, client: CachedFetchClient) -> None:
        self._client = client
        self._data: PaginatedResponse | None = None
        self._has_more = True
        self._generation = 0
        self._pending_generation: int | None = None

    @property
    def data(self) -> PaginatedResponse | None:
        return self._data

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._data.data) if self._data is not None else []

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def loading(self) -> bool:
        return self._client.loading

    @property
    def generation(self) -> int:
        return self._generation

    async def fetch_next_page(self) -> None:
        if not self._has_more:
            return
        if self._pending_generation == self._generation:
            logger.debug("paginated_transactions_fetch_in_progress generation=%s", self._generation)
            return

        generation = self._generation
        page = 0 if self._data is None else self._data.next_page
        self._pending_generation = generation
        try:
            response: PaginatedResponse | None = await self._client.fetch(
                PAGINATED_TRANSACTIONS_REQUEST,
                PaginatedRequestParams(page=page),
                response_type=PaginatedResponse,
            )
        finally:
            if self._pending_generation == generation:
                self._pending_generation = None

        if generation != self._generation:
            logger.debug(
                "paginated_transactions_stale_response page=%s issued_generation=%s current_generation=%s",
                page,
                generation,
                self._generation,
            )
            return

        if response is None or not response.data:
            self._has_more = False
            return

        previous = self._data.data if self._data is not None else []
        self._data = PaginatedResponse(data=[*previous, *response.data], next_page=response.next_page)
        if response.next_page is None:
            self._has_more = False

        logger.debug(
            "paginated_transactions_page_loaded page=%s rows=%s total=%s next_page=%s",
            page,
            len(response.data),
            len(self._data.data),
            response.next_page,
        )

    def invalidate_data(self) -> None:
        self._data = None
        self._has_more = True
        self._generation += 1
