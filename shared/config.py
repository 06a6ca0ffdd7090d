"""Configuration helpers for environment variables."""

from __future__ import annotations

import os
import logging

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


_DEFAULT_PAGE_SIZE = 5
_DEFAULT_EMPLOYEE_PAGE_SIZE = 10
_DEFAULT_API_TIMEOUT_SECONDS = 10.0


def _should_load_dotenv() -> bool:
    """Return whether local dotenv loading should run."""
    app_env = os.getenv("APP_ENV", "dev").strip().lower()
    return app_env in {"dev", "local"}


if _should_load_dotenv():
    load_dotenv()


def get_env(name: str, default: str | None = None) -> str | None:
    """Return a raw environment value or default."""
    return os.getenv(name, default)


def _get_positive_int(name: str, default: int, *, allow_zero: bool = False) -> int:
    raw_value = (get_env(name, "") or "").strip()
    if not raw_value:
        return default

    try:
        value = int(raw_value)
    except ValueError:
        logger.warning("config_invalid_int name=%s value=%r default=%s", name, raw_value, default)
        return default

    if value < 0 or (value == 0 and not allow_zero):
        logger.warning("config_out_of_range name=%s value=%s default=%s", name, value, default)
        return default
    return value


def app_env() -> str:
    """Return the current application environment."""
    return (get_env("APP_ENV", "dev") or "dev").strip() or "dev"


def cors_allow_origins() -> list[str]:
    """Return CORS allowed origins from env with safe environment defaults."""
    raw_origins = get_env("CORS_ALLOW_ORIGINS", "") or ""
    parsed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]

    if parsed_origins:
        return parsed_origins

    if app_env().strip().lower() in {"dev", "local"}:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]

    ui_origin = (get_env("UI_ORIGIN", "") or "").strip()
    if ui_origin:
        return [ui_origin]

    logger.warning(
        "cors_allow_origins_empty_in_prod app_env=%s; define CORS_ALLOW_ORIGINS or UI_ORIGIN",
        app_env(),
    )

    return []


def ledger_api_url() -> str | None:
    """Return the remote ledger API base URL when configured."""
    raw_value = (get_env("LEDGER_API_URL", "") or "").strip()
    return raw_value.rstrip("/") or None


def ledger_api_timeout_seconds() -> float:
    """Return the remote ledger API timeout with a safe default."""
    raw_value = (get_env("LEDGER_API_TIMEOUT_SECONDS", "") or "").strip()
    if not raw_value:
        return _DEFAULT_API_TIMEOUT_SECONDS

    try:
        value = float(raw_value)
    except ValueError:
        logger.warning(
            "config_invalid_float name=LEDGER_API_TIMEOUT_SECONDS value=%r default=%s",
            raw_value,
            _DEFAULT_API_TIMEOUT_SECONDS,
        )
        return _DEFAULT_API_TIMEOUT_SECONDS
    return value if value > 0 else _DEFAULT_API_TIMEOUT_SECONDS


def ledger_page_size() -> int:
    """Return the number of rows per all-transactions page on the in-memory ledger."""
    return _get_positive_int("LEDGER_PAGE_SIZE", _DEFAULT_PAGE_SIZE)


def employee_page_size() -> int:
    """Return the page size of the per-employee endpoint."""
    return _get_positive_int("LEDGER_EMPLOYEE_PAGE_SIZE", _DEFAULT_EMPLOYEE_PAGE_SIZE)


def fake_latency_ms() -> int:
    """Return the artificial latency applied by the in-process transport."""
    return _get_positive_int("LEDGER_FAKE_LATENCY_MS", 0, allow_zero=True)
