"""Access to the key-value backend.

The backend is a Redis client (or anything exposing the same command methods).
Each command is blocking and runs on a worker thread. A failed command is logged
with its label and key, then surfaced as
[`BackendUnavailable`][slangbucket.errors.BackendUnavailable]. There is no retry.
"""

from __future__ import annotations

from typing import Callable, TypeVar

import redis
import structlog

from ._utils import run_blocking
from .config import StoreSettings
from .errors import BackendUnavailable

T = TypeVar("T")

logger = structlog.get_logger(__name__)


def connect(settings: StoreSettings) -> redis.Redis:
    """Build a client for `settings.redis_url`.

    The client checks connections out of its own pool, so one instance can be
    shared by concurrent operations.
    """
    logger.info("redis address set", redis_url=settings.redis_url)
    return redis.Redis.from_url(settings.redis_url, decode_responses=True)


async def execute(label: str, key: str, command: Callable[[], T]) -> T:
    """Run a single backend `command` addressed at `key`.

    Parameters:
        label: Operation name reported on failure, e.g. ``GET_STR_K_SLANG``.
        key: Key the command touches, for diagnostics only.
        command: Zero-argument callable issuing the command.

    Raises:
        BackendUnavailable: If the command raised a `RedisError`.
    """
    try:
        result = await run_blocking(command)
    except redis.exceptions.RedisError as exc:
        logger.error("backend command failed", op=label, key=key, error=str(exc))
        raise BackendUnavailable(label) from exc

    logger.debug("backend command", op=label, key=key)
    return result
