from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

from anyio import to_thread

T = TypeVar("T")

FIELD_MIME = "mime"
FIELD_DATA = "data"
FIELD_RSA = "rsa"

# Every alias goes into the id's sorted set with the same score, so the set
# orders lexically by alias.
SLANG_SCORE = 0


def slang_key(slang: str) -> str:
    """Key of the alias -> id string entry."""
    return f"idx:str:slg:{slang}"


def bucket_key(checksum: str) -> str:
    """Key of the per-id hash holding `mime`, `data` and `rsa`."""
    return f"bkt:hash:id:{checksum}"


def slangs_key(checksum: str) -> str:
    """Key of the per-id sorted set of aliases."""
    return f"slgs:zset:id:{checksum}"


def compact(items: dict[str, Any]) -> dict[str, Any]:
    """Return only the entries of `items` whose value is not `None`."""
    return {key: value for key, value in items.items() if value is not None}


async def run_blocking(func: Callable[..., T], *args: Any) -> T:
    # backend clients are blocking; keep the event loop free
    return await to_thread.run_sync(func, *args)


Undo = Callable[[], Awaitable[Any]]
