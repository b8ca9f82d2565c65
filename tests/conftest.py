# tests/conftest.py
"""Shared test fixtures.

FakeRedis is an in-memory test double covering the Redis commands the store
issues. It records every command and can be told to fail a command, raising
the same exception class a dropped connection raises in redis-py.
"""

from __future__ import annotations

import threading
import time
from typing import Any

import pytest
import redis
import structlog

from slangbucket import BucketStore


class FakeRedis:
    """In-memory stand-in for `redis.Redis(decode_responses=True)`."""

    def __init__(self) -> None:
        self.strings: dict[str, str] = {}
        self.hashes: dict[str, dict[str, str]] = {}
        self.zsets: dict[str, dict[str, float]] = {}
        self.calls: list[tuple[str, str]] = []
        self.closed = False
        self._failures: dict[str, int] = {}
        self._delays: dict[str, float] = {}
        self._lock = threading.Lock()

    def fail(self, command: str, after: int = 0) -> None:
        """Make the (after + 1)th next call of `command` raise ConnectionError."""
        self._failures[command] = after

    def delay(self, command: str, seconds: float) -> None:
        """Make the next call of `command` block for `seconds` before running."""
        self._delays[command] = seconds

    def _wait(self, command: str) -> None:
        # sleeps outside the lock, like a slow network round trip
        seconds = self._delays.pop(command, None)
        if seconds is not None:
            time.sleep(seconds)

    def _record(self, command: str, key: str) -> None:
        self.calls.append((command, key))
        if command in self._failures:
            if self._failures[command] == 0:
                del self._failures[command]
                raise redis.exceptions.ConnectionError("Connection reset by peer")
            self._failures[command] -= 1

    def commands(self, command: str) -> list[str]:
        return [key for name, key in self.calls if name == command]

    def get(self, key: str) -> str | None:
        self._wait("get")
        with self._lock:
            self._record("get", key)
            return self.strings.get(key)

    def set(self, key: str, value: str, nx: bool = False) -> bool | None:
        self._wait("set")
        with self._lock:
            self._record("set", key)
            if nx and key in self.strings:
                return None
            self.strings[key] = value
            return True

    def delete(self, *keys: str) -> int:
        self._wait("delete")
        with self._lock:
            self._record("delete", keys[0])
            removed = 0
            for key in keys:
                for space in (self.strings, self.hashes, self.zsets):
                    if key in space:
                        del space[key]
                        removed += 1
            return removed

    def hset(self, key: str, mapping: dict[str, str]) -> int:
        self._wait("hset")
        with self._lock:
            self._record("hset", key)
            fields = self.hashes.setdefault(key, {})
            added = len(set(mapping) - set(fields))
            fields.update(mapping)
            return added

    def hget(self, key: str, field: str) -> str | None:
        self._wait("hget")
        with self._lock:
            self._record("hget", key)
            return self.hashes.get(key, {}).get(field)

    def hgetall(self, key: str) -> dict[str, str]:
        self._wait("hgetall")
        with self._lock:
            self._record("hgetall", key)
            return dict(self.hashes.get(key, {}))

    def zadd(self, key: str, mapping: dict[str, float]) -> int:
        self._wait("zadd")
        with self._lock:
            self._record("zadd", key)
            members = self.zsets.setdefault(key, {})
            added = len(set(mapping) - set(members))
            members.update(mapping)
            return added

    def zrange(self, key: str, start: int, end: int) -> list[str]:
        self._wait("zrange")
        with self._lock:
            self._record("zrange", key)
            members = self.zsets.get(key, {})
            ordered = [m for m, _ in sorted(members.items(), key=lambda i: (i[1], i[0]))]
            return ordered[start:] if end == -1 else ordered[start : end + 1]

    def zrem(self, key: str, *members: str) -> int:
        self._wait("zrem")
        with self._lock:
            self._record("zrem", key)
            zset = self.zsets.get(key, {})
            removed = 0
            for member in members:
                if member in zset:
                    del zset[member]
                    removed += 1
            if key in self.zsets and not zset:
                # redis drops empty sorted sets
                del self.zsets[key]
            return removed

    def close(self) -> None:
        self.closed = True

    def snapshot(self) -> dict[str, Any]:
        return {
            "strings": dict(self.strings),
            "hashes": {k: dict(v) for k, v in self.hashes.items()},
            "zsets": {k: dict(v) for k, v in self.zsets.items()},
        }


@pytest.fixture(autouse=True, scope="session")
def stdlib_structlog():
    """Route structlog through stdlib logging so caplog sees it and nothing
    is printed to stdout."""
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer(key_order=["event"])],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def client() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def store(client: FakeRedis) -> BucketStore:
    return BucketStore(client)  # type: ignore[arg-type]
