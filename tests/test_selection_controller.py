"""Tests for selection-driven loading and the unified transactions view."""

from __future__ import annotations

import asyncio

from backend.transport import (
    EMPLOYEES_REQUEST,
    PAGINATED_TRANSACTIONS_REQUEST,
    TRANSACTIONS_BY_EMPLOYEE_REQUEST,
)
from ledger_view.controller import ControllerState, SelectionController
from ledger_view.factory import build_selection_controller
from shared.models import EMPTY_EMPLOYEE, SelectOption
from tests.fakes import ALICE, BOB, FakeTransport, transaction_batch, wait_until


def _transport() -> FakeTransport:
    transport = FakeTransport()
    transport.respond_employees([ALICE, BOB])
    return transport


def _controller(transport: FakeTransport) -> SelectionController:
    return build_selection_controller(transport=transport)


def test_mount_loads_directory_then_first_page() -> None:
    transport = _transport()
    transport.respond_page(0, transaction_batch(0, 10), 1)
    controller = _controller(transport)

    assert controller.state is ControllerState.UNLOADED
    asyncio.run(controller.mount())

    assert [name for name, _ in transport.calls] == [
        EMPLOYEES_REQUEST,
        PAGINATED_TRANSACTIONS_REQUEST,
    ]
    assert controller.state is ControllerState.SHOWING_ALL
    view = controller.view()
    assert len(view.transactions) == 10
    assert view.has_more is True
    assert view.loading is False


def test_mount_runs_only_once() -> None:
    transport = _transport()
    transport.respond_page(0, transaction_batch(0, 10), 1)
    controller = _controller(transport)

    async def scenario() -> None:
        await controller.mount()
        await controller.mount()

    asyncio.run(scenario())

    assert transport.count(EMPLOYEES_REQUEST) == 1
    assert transport.count(PAGINATED_TRANSACTIONS_REQUEST) == 1


def test_loading_flag_is_held_for_the_whole_initial_load() -> None:
    transport = _transport()
    transport.respond_page(0, transaction_batch(0, 10), 1)
    gate = transport.hold(EMPLOYEES_REQUEST, None)
    controller = _controller(transport)

    async def scenario() -> list[bool]:
        task = asyncio.create_task(controller.mount())
        await wait_until(lambda: transport.count(EMPLOYEES_REQUEST) == 1)
        observed = [controller.view().loading, controller.state is ControllerState.LOADING_ALL]
        gate.set()
        await task
        observed.append(controller.view().loading)
        return observed

    assert asyncio.run(scenario()) == [True, True, False]


def test_employee_options_include_all_sentinel_first() -> None:
    transport = _transport()
    transport.respond_page(0, [], None)
    controller = _controller(transport)

    assert controller.employee_options() == []
    asyncio.run(controller.mount())

    assert controller.employee_options() == [
        SelectOption(value="", label="All Employees"),
        SelectOption(value=ALICE.id, label="Alice Martin"),
        SelectOption(value=BOB.id, label="Bob Keller"),
    ]


def test_load_more_reaches_end_of_ledger() -> None:
    transport = _transport()
    transport.respond_page(0, transaction_batch(0, 10), 1)
    transport.respond_page(1, transaction_batch(10, 3), None)
    controller = _controller(transport)

    async def scenario() -> None:
        await controller.mount()
        await controller.load_more()
        await controller.load_more()

    asyncio.run(scenario())

    view = controller.view()
    assert len(view.transactions) == 13
    assert view.has_more is False
    assert transport.count(PAGINATED_TRANSACTIONS_REQUEST) == 2


def test_load_more_with_nothing_displayed_is_noop() -> None:
    transport = _transport()
    controller = _controller(transport)

    asyncio.run(controller.load_more())

    assert transport.calls == []


def test_selecting_employee_invalidates_ledger_before_fetching() -> None:
    transport = _transport()
    transport.respond_page(0, transaction_batch(0, 10), 1)
    transport.respond_employee_page(ALICE.id, 0, transaction_batch(0, 4, ALICE))
    controller = _controller(transport)
    observed: list[object] = []

    def _on_request(name: str, _params: dict[str, object]) -> None:
        if name == TRANSACTIONS_BY_EMPLOYEE_REQUEST:
            observed.append(controller.paginated_transactions.data)

    async def scenario() -> None:
        await controller.mount()
        transport.on_request = _on_request
        await controller.select_employee(ALICE)

    asyncio.run(scenario())

    assert observed == [None]
    assert controller.state is ControllerState.SHOWING_FILTERED
    view = controller.view()
    assert {row.employee.id for row in view.transactions} == {ALICE.id}
    assert view.has_more is False


def test_selecting_all_invalidates_filtered_before_fetching() -> None:
    transport = _transport()
    transport.respond_page(0, transaction_batch(0, 10), 1)
    transport.respond_employee_page(ALICE.id, 0, transaction_batch(0, 10, ALICE))
    controller = _controller(transport)
    observed: list[object] = []

    def _on_request(name: str, _params: dict[str, object]) -> None:
        if name == PAGINATED_TRANSACTIONS_REQUEST:
            observed.append(controller.transactions_by_employee.data)

    async def scenario() -> None:
        await controller.mount()
        await controller.select_employee(ALICE)
        transport.on_request = _on_request
        await controller.select_employee(EMPTY_EMPLOYEE)

    asyncio.run(scenario())

    assert observed == [None]
    assert controller.state is ControllerState.SHOWING_ALL
    assert len(controller.view().transactions) == 10


def test_filtered_load_more_pages_through_employee() -> None:
    transport = _transport()
    transport.respond_page(0, transaction_batch(0, 10), 1)
    transport.respond_employee_page(ALICE.id, 0, transaction_batch(0, 10, ALICE))
    transport.respond_employee_page(ALICE.id, 1, transaction_batch(10, 4, ALICE))
    controller = _controller(transport)

    async def scenario() -> None:
        await controller.mount()
        await controller.select_employee(ALICE)
        assert controller.view().has_more is True
        await controller.load_more()

    asyncio.run(scenario())

    view = controller.view()
    assert len(view.transactions) == 14
    assert view.has_more is False
    assert controller.paginated_transactions.data is None


def test_late_ledger_page_does_not_leak_into_filtered_view() -> None:
    transport = _transport()
    transport.respond_page(0, transaction_batch(0, 10), 1)
    transport.respond_page(1, transaction_batch(10, 10, BOB), 2)
    transport.respond_employee_page(ALICE.id, 0, transaction_batch(0, 3, ALICE))
    gate = transport.hold(PAGINATED_TRANSACTIONS_REQUEST, {"page": 1})
    controller = _controller(transport)

    async def scenario() -> None:
        await controller.mount()
        load_more = asyncio.create_task(controller.load_more())
        await wait_until(lambda: transport.count(PAGINATED_TRANSACTIONS_REQUEST) == 2)
        await controller.select_employee(ALICE)
        gate.set()
        await load_more

    asyncio.run(scenario())

    view = controller.view()
    assert [row.id for row in view.transactions] == [
        row["id"] for row in transaction_batch(0, 3, ALICE)
    ]
    assert controller.paginated_transactions.data is None
    assert controller.paginated_transactions.has_more is True
    assert controller.state is ControllerState.SHOWING_FILTERED


def test_late_employee_page_does_not_leak_after_switching_employee() -> None:
    transport = _transport()
    transport.respond_page(0, [], None)
    transport.respond_employee_page(ALICE.id, 0, transaction_batch(0, 10, ALICE))
    transport.respond_employee_page(BOB.id, 0, transaction_batch(0, 2, BOB))
    gate = transport.hold(TRANSACTIONS_BY_EMPLOYEE_REQUEST, {"employeeId": ALICE.id, "page": 0})
    controller = _controller(transport)

    async def scenario() -> None:
        await controller.mount()
        select_alice = asyncio.create_task(controller.select_employee(ALICE))
        await wait_until(lambda: transport.count(TRANSACTIONS_BY_EMPLOYEE_REQUEST) == 1)
        await controller.select_employee(BOB)
        gate.set()
        await select_alice

    asyncio.run(scenario())

    view = controller.view()
    assert controller.selected_employee == BOB
    assert {row.employee.id for row in view.transactions} == {BOB.id}
    assert len(view.transactions) == 2
    assert controller.state is ControllerState.SHOWING_FILTERED


def test_failed_first_page_reports_no_more_without_raising() -> None:
    transport = _transport()
    transport.fail(PAGINATED_TRANSACTIONS_REQUEST, {"page": 0})
    controller = _controller(transport)

    asyncio.run(controller.mount())

    view = controller.view()
    assert view.transactions == []
    assert view.has_more is False
    assert view.loading is False
    assert controller.state is ControllerState.SHOWING_ALL


def test_select_none_is_ignored() -> None:
    transport = _transport()
    transport.respond_page(0, transaction_batch(0, 10), 1)
    controller = _controller(transport)

    async def scenario() -> None:
        await controller.mount()
        await controller.select_employee(None)

    asyncio.run(scenario())

    assert controller.selected_employee == EMPTY_EMPLOYEE
    assert transport.count(PAGINATED_TRANSACTIONS_REQUEST) == 1


def test_find_employee_maps_empty_id_to_all_sentinel() -> None:
    transport = _transport()
    transport.respond_page(0, [], None)
    controller = _controller(transport)
    asyncio.run(controller.mount())

    assert controller.find_employee(None) == EMPTY_EMPLOYEE
    assert controller.find_employee("") == EMPTY_EMPLOYEE
    assert controller.find_employee(BOB.id) == BOB
    assert controller.find_employee("missing") is None


def test_selection_during_mount_keeps_ledger_untouched() -> None:
    transport = _transport()
    transport.respond_page(0, transaction_batch(0, 10), 1)
    transport.respond_employee_page(ALICE.id, 0, transaction_batch(0, 3, ALICE))
    gate = transport.hold(EMPLOYEES_REQUEST, None)
    controller = _controller(transport)

    async def scenario() -> None:
        mount = asyncio.create_task(controller.mount())
        await wait_until(lambda: transport.count(EMPLOYEES_REQUEST) == 1)
        await controller.select_employee(ALICE)
        gate.set()
        await mount

    asyncio.run(scenario())

    assert transport.count(PAGINATED_TRANSACTIONS_REQUEST) == 0
    assert controller.paginated_transactions.data is None
    assert controller.paginated_transactions.has_more is True
    assert controller.state is ControllerState.SHOWING_FILTERED
    assert len(controller.view().transactions) == 3
    assert controller.employees.data == [ALICE, BOB]


def test_selecting_all_after_interrupted_mount_starts_from_first_page() -> None:
    transport = _transport()
    transport.respond_page(0, transaction_batch(0, 10), 1)
    transport.respond_employee_page(ALICE.id, 0, transaction_batch(0, 3, ALICE))
    gate = transport.hold(EMPLOYEES_REQUEST, None)
    controller = _controller(transport)

    async def scenario() -> None:
        mount = asyncio.create_task(controller.mount())
        await wait_until(lambda: transport.count(EMPLOYEES_REQUEST) == 1)
        await controller.select_employee(ALICE)
        gate.set()
        await mount
        await controller.select_employee(EMPTY_EMPLOYEE)

    asyncio.run(scenario())

    ledger_pages = [
        params["page"] for name, params in transport.calls if name == PAGINATED_TRANSACTIONS_REQUEST
    ]
    assert ledger_pages == [0]
    assert len(controller.view().transactions) == 10


def test_loading_flag_is_held_while_switching_selection() -> None:
    transport = _transport()
    transport.respond_page(0, transaction_batch(0, 10), 1)
    transport.respond_employee_page(ALICE.id, 0, transaction_batch(0, 3, ALICE))
    gate = transport.hold(TRANSACTIONS_BY_EMPLOYEE_REQUEST, {"employeeId": ALICE.id, "page": 0})
    controller = _controller(transport)

    async def scenario() -> list[object]:
        await controller.mount()
        select = asyncio.create_task(controller.select_employee(ALICE))
        await wait_until(lambda: transport.count(TRANSACTIONS_BY_EMPLOYEE_REQUEST) == 1)
        observed: list[object] = [controller.view().loading, controller.state]
        gate.set()
        await select
        observed.extend([controller.view().loading, controller.state])
        return observed

    assert asyncio.run(scenario()) == [
        True,
        ControllerState.LOADING_FILTERED,
        False,
        ControllerState.SHOWING_FILTERED,
    ]
