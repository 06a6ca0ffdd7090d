"""Selection controller: picks the active paginator and derives the unified view."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator

from ledger_view.employees import EmployeeDirectory
from ledger_view.fetch_client import CachedFetchClient
from ledger_view.paginated_transactions import PaginatedTransactions
from ledger_view.transactions_by_employee import TransactionsByEmployee
from shared.models import (
    EMPTY_EMPLOYEE,
    Employee,
    SelectOption,
    TransactionsView,
    is_all_employees,
)


logger = logging.getLogger(__name__)


class ControllerState(str, Enum):
    """Loading phase of the selection controller."""

    UNLOADED = "unloaded"
    LOADING_ALL = "loading_all"
    SHOWING_ALL = "showing_all"
    LOADING_FILTERED = "loading_filtered"
    SHOWING_FILTERED = "showing_filtered"


class SelectionController:
    """Own the employee selection and route loading to the matching paginator.

    On every selection change the inactive paginator is invalidated before the
    active one is asked to fetch, so a slow response for the previous selection
    can never be merged into what is displayed now.
    """

    def __init__(
        self,
        client: CachedFetchClient,
        employees: EmployeeDirectory,
        paginated_transactions: PaginatedTransactions,
        transactions_by_employee: TransactionsByEmployee,
    ) -> None:
        self.client = client
        self.employees = employees
        self.paginated_transactions = paginated_transactions
        self.transactions_by_employee = transactions_by_employee
        self._selected_employee: Employee = EMPTY_EMPLOYEE
        self._state = ControllerState.UNLOADED
        self._busy = 0
        self._selection_token = 0

    @property
    def selected_employee(self) -> Employee:
        return self._selected_employee

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def is_filtered(self) -> bool:
        return not is_all_employees(self._selected_employee)

    @property
    def loading(self) -> bool:
        return self._busy > 0 or self.client.loading

    @contextmanager
    def _hold_loading(self) -> Iterator[None]:
        self._busy += 1
        try:
            yield
        finally:
            self._busy -= 1

    def view(self) -> TransactionsView:
        """Derive the displayed list from whichever paginator the selection makes active."""

        if self.is_filtered:
            transactions = self.transactions_by_employee.data or []
            has_more = self.transactions_by_employee.has_more
        else:
            transactions = self.paginated_transactions.transactions
            has_more = self.paginated_transactions.has_more
        return TransactionsView(transactions=transactions, has_more=has_more, loading=self.loading)

    def employee_options(self) -> list[SelectOption]:
        """Return picker options, the "all employees" sentinel first."""

        employees = self.employees.data
        if employees is None:
            return []
        return [SelectOption.from_employee(employee) for employee in [EMPTY_EMPLOYEE, *employees]]

    def find_employee(self, employee_id: str | None) -> Employee | None:
        if not employee_id:
            return EMPTY_EMPLOYEE
        for employee in self.employees.data or []:
            if employee.id == employee_id:
                return employee
        return None

    async def mount(self) -> None:
        """Load the employee directory and the first ledger page, once."""

        if self._state is not ControllerState.UNLOADED:
            return
        if self.employees.data is not None or self.employees.loading:
            return
        await self._load_all_transactions(load_directory=True)

    async def select_employee(self, employee: Employee | None) -> None:
        """Switch the filter; `None` is ignored."""

        if employee is None:
            logger.debug("select_employee_ignored reason=no_employee")
            return

        self._selected_employee = employee
        self._selection_token += 1
        logger.info("select_employee employee_id=%s", employee.id or "all")

        if is_all_employees(employee):
            await self._load_all_transactions(load_directory=False)
        else:
            await self._load_transactions_by_employee(employee.id)

    async def load_more(self) -> None:
        """Fetch the next page of the active source while more rows are available."""

        current = self.view()
        if not current.has_more or not current.transactions:
            logger.debug(
                "load_more_ignored has_more=%s displayed=%s",
                current.has_more,
                len(current.transactions),
            )
            return

        if self.is_filtered:
            await self.transactions_by_employee.fetch_by_id(self._selected_employee.id)
        else:
            await self.paginated_transactions.fetch_next_page()

    async def _load_all_transactions(self, *, load_directory: bool) -> None:
        token = self._selection_token
        self.transactions_by_employee.invalidate_data()
        self._state = ControllerState.LOADING_ALL
        with self._hold_loading():
            if load_directory:
                await self.employees.fetch_all()
                if token != self._selection_token:
                    logger.debug("load_all_transactions_superseded during=employee_directory")
                    return
            await self.paginated_transactions.fetch_next_page()

        if token == self._selection_token:
            self._state = ControllerState.SHOWING_ALL

    async def _load_transactions_by_employee(self, employee_id: str) -> None:
        token = self._selection_token
        self.paginated_transactions.invalidate_data()
        self._state = ControllerState.LOADING_FILTERED
        with self._hold_loading():
            await self.transactions_by_employee.fetch_by_id(employee_id)

        if token == self._selection_token:
            self._state = ControllerState.SHOWING_FILTERED
