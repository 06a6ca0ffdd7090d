"""FastAPI entrypoint exposing the unified ledger view to a display layer."""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ledger_view.controller import SelectionController
from ledger_view.factory import build_selection_controller
from shared import config as _config
from shared.models import SelectOption, TransactionsView


logger = logging.getLogger(__name__)


class SelectEmployeeRequest(BaseModel):
    employee_id: str | None = None


def create_app(
    controller_factory: Callable[[], SelectionController] = build_selection_controller,
) -> FastAPI:
    """Build the HTTP app around one selection controller."""

    app = FastAPI(title="Ledger View API")
    app.state.controller = controller_factory()

    allow_origins = _config.cors_allow_origins()

    @app.middleware("http")
    async def log_http_requests(request: Request, call_next):
        """Log incoming requests, HTTP status codes and unexpected errors."""

        logger.info("http_request_received method=%s path=%s", request.method, request.url.path)
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "http_request_failed method=%s path=%s",
                request.method,
                request.url.path,
            )
            raise

        logger.info(
            "http_response_sent method=%s path=%s status_code=%s",
            request.method,
            request.url.path,
            response.status_code,
        )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.info("cors_allow_origins=%s", allow_origins)

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
        """Return a JSON 500 response for unhandled exceptions."""

        logger.exception(
            "unhandled_exception method=%s path=%s exception_type=%s message=%s",
            request.method,
            request.url.path,
            type(exc).__name__,
            str(exc),
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})

    def _controller() -> SelectionController:
        return app.state.controller

    @app.get("/health")
    def health() -> dict[str, str]:
        """Healthcheck endpoint."""

        return {"status": "ok"}

    @app.get("/employees")
    async def list_employees() -> list[SelectOption]:
        controller = _controller()
        await controller.mount()
        return controller.employee_options()

    @app.get("/transactions")
    async def get_transactions() -> TransactionsView:
        controller = _controller()
        await controller.mount()
        return controller.view()

    @app.post("/transactions/select")
    async def select_employee(payload: SelectEmployeeRequest) -> TransactionsView:
        controller = _controller()
        await controller.mount()
        employee = controller.find_employee(payload.employee_id)
        if employee is None:
            raise HTTPException(status_code=404, detail=f"Unknown employee: {payload.employee_id}")

        await controller.select_employee(employee)
        return controller.view()

    @app.post("/transactions/load-more")
    async def load_more() -> TransactionsView:
        controller = _controller()
        await controller.load_more()
        return controller.view()

    return app


app = create_app()
