"""
Key-Value Store

Flat key-value namespace holding one JSON document per application.
Keys are application identifiers; values are JSON-serializable dicts.

Two backends share the `KeyValueStore` protocol:
- RedisKeyValueStore: production backend on top of redis.asyncio
- MemoryKeyValueStore: process-local dict used for development and tests

The store is opaque to the rest of the system. Write-once and read-only
semantics are enforced by the repository, not here.
"""

import json
import logging
from typing import Any, Protocol

from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the underlying store cannot complete an operation."""


class KeyValueStore(Protocol):
    async def get(self, key: str) -> dict[str, Any] | None: ...

    async def set_if_absent(self, key: str, value: dict[str, Any]) -> bool: ...

    async def delete(self, key: str) -> bool: ...

    async def list_all(self) -> list[dict[str, Any]]: ...

    async def get_by_prefix(self, prefix: str) -> list[dict[str, Any]]: ...

    async def ping(self) -> bool: ...


class MemoryKeyValueStore:
    """In-process store. State is lost on restart."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> dict[str, Any] | None:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    async def set_if_absent(self, key: str, value: dict[str, Any]) -> bool:
        if key in self._data:
            return False
        self._data[key] = json.dumps(value, ensure_ascii=False)
        return True

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def list_all(self) -> list[dict[str, Any]]:
        return [json.loads(raw) for raw in self._data.values()]

    async def get_by_prefix(self, prefix: str) -> list[dict[str, Any]]:
        return [json.loads(raw) for key, raw in self._data.items() if key.startswith(prefix)]

    async def ping(self) -> bool:
        return True


class RedisKeyValueStore:
    """
    Redis-backed store.

    Keys are stored as `{namespace}{key}` so the application records can share
    a Redis database with the rate limiter.
    """

    SCAN_COUNT = 200

    def __init__(self, client: Redis, namespace: str = "") -> None:
        self._client = client
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    async def get(self, key: str) -> dict[str, Any] | None:
        try:
            raw = await self._client.get(self._key(key))
        except Exception as e:
            raise StoreError(f"Failed to read {key}: {e}") from e
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt value stored at {key}: {e}") from e

    async def set_if_absent(self, key: str, value: dict[str, Any]) -> bool:
        try:
            created = await self._client.set(
                self._key(key), json.dumps(value, ensure_ascii=False), nx=True
            )
        except Exception as e:
            raise StoreError(f"Failed to write {key}: {e}") from e
        return bool(created)

    async def delete(self, key: str) -> bool:
        try:
            removed = await self._client.delete(self._key(key))
        except Exception as e:
            raise StoreError(f"Failed to delete {key}: {e}") from e
        return removed > 0

    async def list_all(self) -> list[dict[str, Any]]:
        return await self.get_by_prefix("")

    async def get_by_prefix(self, prefix: str) -> list[dict[str, Any]]:
        pattern = f"{self._namespace}{prefix}*"
        try:
            keys = [key async for key in self._client.scan_iter(match=pattern, count=self.SCAN_COUNT)]
            if not keys:
                return []
            values = await self._client.mget(keys)
        except Exception as e:
            raise StoreError(f"Failed to list keys with prefix '{prefix}': {e}") from e

        records = []
        for key, raw in zip(keys, values, strict=True):
            if raw is None:
                # Deleted between SCAN and MGET
                continue
            try:
                record = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning(f"Skipping non-JSON value stored at {key}")
                continue
            if isinstance(record, dict):
                records.append(record)
        return records

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except Exception as e:
            logger.warning(f"Store ping failed: {e}")
            return False


# Process-wide store instance, set during startup
_store: KeyValueStore | None = None


def set_store(store: KeyValueStore | None) -> None:
    global _store
    _store = store


def get_store() -> KeyValueStore:
    """
    FastAPI dependency returning the configured store.

    Raises:
        StoreError: If the store was never configured
    """
    if _store is None:
        raise StoreError("Key-value store is not initialized")
    return _store
