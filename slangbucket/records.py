from __future__ import annotations

from functools import partial

import redis
import structlog

from ._utils import FIELD_DATA, FIELD_MIME, FIELD_RSA, bucket_key, compact
from .backend import execute
from .compensation import Rollback

logger = structlog.get_logger(__name__)


class RecordStore:
    """Content records: one hash per id holding `mime`, `data` and, optionally,
    `rsa`.

    Parameters:
        client: Backend client. Must return `str` values (``decode_responses``).
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    async def put(
        self,
        checksum: str,
        data: str,
        mime: str,
        rsa: str | None = None,
        rollback: Rollback | None = None,
    ) -> None:
        """Write the record fields for `checksum`. No existence check is made, so
        an existing record is overwritten field by field. An `rsa` left over from
        an earlier write survives when `rsa` is `None`.

        If `rollback` is given, the previous fields are snapshotted first and an
        action restoring them is registered.
        """
        key = bucket_key(checksum)
        if rollback is not None:
            previous = await self.get_all(checksum)
            rollback.push(f"restore {key}", partial(self.restore, checksum, previous))

        fields = compact({FIELD_MIME: mime, FIELD_DATA: data, FIELD_RSA: rsa})
        await execute(
            "SET_HASH_K_ID", key, partial(self._client.hset, key, mapping=fields)
        )

    async def get_field(self, checksum: str, field: str) -> str | None:
        """Return a single field of the record, or `None` if either the record
        or the field is missing."""
        key = bucket_key(checksum)
        value = await execute(
            f"GET_HASH_KF_{field.upper()}", key, partial(self._client.hget, key, field)
        )
        if value is None:
            logger.warning("hash field missing", key=key, field=field)
        return value

    async def get_all(self, checksum: str) -> dict[str, str]:
        key = bucket_key(checksum)
        return await execute("GET_HASH_K_ID", key, partial(self._client.hgetall, key))

    async def restore(self, checksum: str, fields: dict[str, str]) -> None:
        """Replace the record with exactly `fields`; an empty snapshot deletes it."""
        key = bucket_key(checksum)
        await execute("DEL_HASH_K_ID", key, partial(self._client.delete, key))
        if fields:
            await execute(
                "SET_HASH_K_ID", key, partial(self._client.hset, key, mapping=fields)
            )

    async def delete(self, checksum: str, rollback: Rollback | None = None) -> None:
        key = bucket_key(checksum)
        if rollback is not None:
            previous = await self.get_all(checksum)
            rollback.push(f"restore {key}", partial(self.restore, checksum, previous))

        await execute("DEL_HASH_K_ID", key, partial(self._client.delete, key))
