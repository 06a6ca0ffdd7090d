"""Ledger repository adapters.

The in-memory adapter stands in for the ledger backend: it owns a fixed set of
employees and a deterministic list of card transactions spread across them.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Protocol

from shared.models import Employee, PaginatedResponse, Transaction


class LedgerRepository(Protocol):
    def employees(self) -> list[Employee]:
        """Return the full employee directory."""

    def paginated_transactions(self, page: int, page_size: int) -> PaginatedResponse:
        """Return one page of the unfiltered ledger."""

    def transactions_by_employee(
        self, employee_id: str, page: int, page_size: int
    ) -> list[Transaction]:
        """Return one page of transactions belonging to an employee."""


_SEED_EMPLOYEES: tuple[Employee, ...] = (
    Employee(id="7f3a2c1e", first_name="James", last_name="Smith"),
    Employee(id="9b4d6e2a", first_name="Mary", last_name="Johnson"),
    Employee(id="1c8e5f7b", first_name="Robert", last_name="Williams"),
    Employee(id="4e2b9a6d", first_name="Patricia", last_name="Brown"),
)

_SEED_MERCHANTS: tuple[str, ...] = (
    "Social Media Ads Inc",
    "Uber",
    "Delta Air Lines",
    "Figma",
    "Amazon Web Services",
    "Staples",
    "Blue Bottle Coffee",
)

# Transactions per employee, chosen so per-employee pages end on both a full
# and a short page.
_SEED_COUNTS: tuple[int, ...] = (14, 10, 7, 0)


def _seed_transactions(employees: tuple[Employee, ...]) -> list[Transaction]:
    start = date(2024, 1, 2)
    rows: list[Transaction] = []
    for employee, count in zip(employees, _SEED_COUNTS):
        for index in range(count):
            sequence = len(rows)
            rows.append(
                Transaction(
                    id=f"txn-{sequence:04d}",
                    amount=Decimal(17 + (sequence * 37) % 900) + Decimal("0.99"),
                    employee=employee,
                    merchant=_SEED_MERCHANTS[sequence % len(_SEED_MERCHANTS)],
                    date=start + timedelta(days=sequence),
                    approved=index % 3 == 0,
                )
            )
    rows.sort(key=lambda row: row.date, reverse=True)
    return rows


class InMemoryLedgerRepository:
    """In-memory ledger used for local runs and tests."""

    def __init__(
        self,
        employees: list[Employee] | None = None,
        transactions: list[Transaction] | None = None,
    ) -> None:
        self._employees: list[Employee] = list(employees if employees is not None else _SEED_EMPLOYEES)
        self._transactions: list[Transaction] = (
            list(transactions)
            if transactions is not None
            else _seed_transactions(tuple(self._employees))
        )

    def employees(self) -> list[Employee]:
        return list(self._employees)

    def paginated_transactions(self, page: int, page_size: int) -> PaginatedResponse:
        if page < 0:
            raise ValueError(f"Invalid page: {page}")

        start = page * page_size
        if start > 0 and start >= len(self._transactions):
            raise ValueError(f"Invalid page: {page}")

        end = start + page_size
        next_page = page + 1 if end < len(self._transactions) else None
        return PaginatedResponse(data=self._transactions[start:end], next_page=next_page)

    def transactions_by_employee(
        self, employee_id: str, page: int, page_size: int
    ) -> list[Transaction]:
        if not employee_id:
            raise ValueError("Employee id cannot be empty")
        if all(employee.id != employee_id for employee in self._employees):
            raise ValueError(f"Unknown employee: {employee_id}")
        if page < 0:
            raise ValueError(f"Invalid page: {page}")

        rows = [row for row in self._transactions if row.employee.id == employee_id]
        start = page * page_size
        return rows[start : start + page_size]
