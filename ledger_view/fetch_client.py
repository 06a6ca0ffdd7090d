"""Cached fetch client shared by the ledger paginators and the employee directory."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable, Mapping
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from backend.transport import LedgerTransport, LedgerTransportError


logger = logging.getLogger(__name__)


def serialize_params(params: BaseModel | Mapping[str, Any] | None) -> dict[str, Any]:
    """Return request params as a JSON-compatible dict using wire aliases."""

    if params is None:
        return {}
    if isinstance(params, BaseModel):
        return params.model_dump(mode="json", by_alias=True)
    return dict(params)


def cache_key(name: str, params: dict[str, Any]) -> str:
    return f"{name}@{json.dumps(params, sort_keys=True, default=str)}"


@lru_cache(maxsize=None)
def _adapter(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


class ResponseCache:
    """Memoized responses keyed by request name and params.

    Owned by whoever builds the fetch client; its lifetime is the owner's.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any:
        return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()

    def clear_by_endpoint(self, names: Iterable[str]) -> None:
        prefixes = tuple(f"{name}@" for name in names)
        if not prefixes:
            return
        for key in [key for key in self._entries if key.startswith(prefixes)]:
            del self._entries[key]


class CachedFetchClient:
    """Execute named ledger requests, memoizing successful responses.

    Failures never raise: transport errors and responses that do not match the
    expected shape are logged and reported as `None`, and are not cached.
    """

    def __init__(self, transport: LedgerTransport, cache: ResponseCache | None = None) -> None:
        self._transport = transport
        self.cache = cache if cache is not None else ResponseCache()
        self._in_flight = 0
        self._pending: dict[str, asyncio.Task[Any]] = {}

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    async def fetch(
        self,
        name: str,
        params: BaseModel | Mapping[str, Any] | None = None,
        response_type: Any = None,
    ) -> Any | None:
        payload = serialize_params(params)
        key = cache_key(name, payload)
        if key in self.cache:
            logger.debug("ledger_fetch_cache_hit key=%s", key)
            return self.cache.get(key)

        pending = self._pending.get(key)
        if pending is not None:
            logger.debug("ledger_fetch_join_pending key=%s", key)
            return await asyncio.shield(pending)

        self._in_flight += 1
        task = asyncio.ensure_future(self._request(name, payload, response_type))
        self._pending[key] = task
        try:
            result = await asyncio.shield(task)
        finally:
            if self._pending.get(key) is task:
                del self._pending[key]

        if result is not None:
            self.cache.set(key, result)
        return result

    async def fetch_without_cache(
        self,
        name: str,
        params: BaseModel | Mapping[str, Any] | None = None,
        response_type: Any = None,
    ) -> Any | None:
        self._in_flight += 1
        return await self._request(name, serialize_params(params), response_type)

    def clear_cache(self) -> None:
        self.cache.clear()

    def clear_cache_by_endpoint(self, names: Iterable[str]) -> None:
        self.cache.clear_by_endpoint(names)

    async def _request(
        self, name: str, payload: dict[str, Any], response_type: Any
    ) -> Any | None:
        """Run one transport round trip; the caller has already counted it in flight."""

        try:
            raw = await self._transport.request(name, payload)
        except LedgerTransportError as exc:
            logger.warning("ledger_fetch_failed name=%s params=%s error=%s", name, payload, exc)
            return None
        finally:
            self._in_flight -= 1

        if response_type is None:
            return raw

        try:
            return _adapter(response_type).validate_python(raw)
        except ValidationError as exc:
            logger.warning(
                "ledger_fetch_invalid_response name=%s params=%s errors=%s",
                name,
                payload,
                exc.error_count(),
            )
            return None
