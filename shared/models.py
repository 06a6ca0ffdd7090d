"""Pydantic contracts shared across the ledger backend and the ledger view."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class Employee(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


EMPTY_EMPLOYEE = Employee(id="", first_name="All", last_name="Employees")


def is_all_employees(employee: Employee | None) -> bool:
    """Return whether the employee is the "no filter" sentinel (or missing)."""

    return employee is None or employee.id == EMPTY_EMPLOYEE.id


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    amount: Decimal
    employee: Employee
    merchant: str
    date: date
    approved: bool = False


class PaginatedResponse(BaseModel):
    """One page of the unfiltered ledger, or the accumulated pages so far."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    data: list[Transaction]
    next_page: int | None = Field(default=None, alias="nextPage")


class PaginatedRequestParams(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    page: int | None = Field(default=None, ge=0)


class TransactionsByEmployeeParams(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    employee_id: str = Field(alias="employeeId")
    page: int = Field(default=0, ge=0)


class TransactionsView(BaseModel):
    """Unified view consumed by the display layer."""

    model_config = ConfigDict(frozen=True)

    transactions: list[Transaction]
    has_more: bool
    loading: bool


class SelectOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    label: str

    @classmethod
    def from_employee(cls, employee: Employee) -> SelectOption:
        return cls(value=employee.id, label=employee.display_name)
