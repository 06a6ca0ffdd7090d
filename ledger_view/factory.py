"""Composition root for the ledger view."""

from __future__ import annotations

from backend.factory import build_transport
from backend.transport import LedgerTransport
from ledger_view.controller import SelectionController
from ledger_view.employees import EmployeeDirectory
from ledger_view.fetch_client import CachedFetchClient, ResponseCache
from ledger_view.paginated_transactions import PaginatedTransactions
from ledger_view.transactions_by_employee import TransactionsByEmployee
from shared import config


def build_selection_controller(transport: LedgerTransport | None = None) -> SelectionController:
    """Build a selection controller wired to a fresh response cache.

    The cache is owned by the returned controller's fetch client and lives as
    long as the controller does.
    """

    client = CachedFetchClient(
        transport=transport if transport is not None else build_transport(),
        cache=ResponseCache(),
    )
    return SelectionController(
        client=client,
        employees=EmployeeDirectory(client),
        paginated_transactions=PaginatedTransactions(client),
        transactions_by_employee=TransactionsByEmployee(
            client, page_size=config.employee_page_size()
        ),
    )
