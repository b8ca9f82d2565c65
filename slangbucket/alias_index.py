from __future__ import annotations

from functools import partial

import redis
import structlog

from ._utils import SLANG_SCORE, slang_key, slangs_key
from .backend import execute
from .compensation import Rollback

logger = structlog.get_logger(__name__)


class AliasIndex:
    """Bidirectional alias index.

    alias -> id is a plain string key per alias; id -> aliases is a sorted set
    per id whose members all share score `0`, so reads come back in lexical
    order.

    The index does not arbitrate conflicts on its own, except through
    [`bind_exclusive()`][slangbucket.alias_index.AliasIndex.bind_exclusive].

    Parameters:
        client: Backend client. Must return `str` values (``decode_responses``).
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    async def resolve(self, slang: str) -> str | None:
        """Return the id `slang` is bound to, or `None`."""
        key = slang_key(slang)
        checksum = await execute("GET_STR_K_SLANG", key, partial(self._client.get, key))
        if checksum is None:
            logger.warning("slang not bound", key=key)
        return checksum

    async def aliases_of(self, checksum: str) -> list[str]:
        """Return every alias bound to `checksum` in lexical order. Empty if
        there are none."""
        key = slangs_key(checksum)
        return list(
            await execute("GET_ZSET_K_ID", key, partial(self._client.zrange, key, 0, -1))
        )

    async def bind(self, slang: str, checksum: str) -> None:
        """Bind `slang` to `checksum`, overwriting any existing binding of the
        alias key. Callers wanting uniqueness use `bind_exclusive()`."""
        key = slang_key(slang)
        await execute("SET_STR_K_SLANG", key, partial(self._client.set, key, checksum))
        await self._add_member(checksum, slang)

    async def bind_exclusive(
        self, slang: str, checksum: str, rollback: Rollback | None = None
    ) -> bool:
        """Bind `slang` to `checksum` only if `slang` is currently unbound.

        The alias key is written with a set-if-not-exists command, so two
        concurrent callers cannot both win.

        Returns:
            bound: `False` if `slang` was already bound; nothing is written then.
        """
        key = slang_key(slang)
        bound = await execute(
            "SET_STR_K_SLANG", key, partial(self._client.set, key, checksum, nx=True)
        )
        if not bound:
            return False

        if rollback is not None:
            rollback.push(f"unset {key}", partial(self._delete_slang, slang))

        added = await self._add_member(checksum, slang)
        if rollback is not None and added:
            rollback.push(
                f"remove {slang} from {slangs_key(checksum)}",
                partial(self._remove_member, checksum, slang),
            )
        return True

    async def unbind(
        self, slang: str, checksum: str, rollback: Rollback | None = None
    ) -> None:
        """Remove the alias key and the alias from `checksum`'s set. Either
        being absent already is fine."""
        deleted = await self._delete_slang(slang)
        if rollback is not None and deleted:
            rollback.push(
                f"reset {slang_key(slang)}", partial(self._set_slang, slang, checksum)
            )

        removed = await self._remove_member(checksum, slang)
        if rollback is not None and removed:
            rollback.push(
                f"re-add {slang} to {slangs_key(checksum)}",
                partial(self._add_member, checksum, slang),
            )

    async def drop_all(
        self,
        checksum: str,
        slangs: list[str] | None = None,
        rollback: Rollback | None = None,
    ) -> None:
        """Delete every alias key bound to `checksum`, then the alias set.

        Parameters:
            slangs: Aliases to drop, if the caller already read them.
        """
        if slangs is None:
            slangs = await self.aliases_of(checksum)

        for slang in slangs:
            deleted = await self._delete_slang(slang)
            if rollback is not None and deleted:
                rollback.push(
                    f"reset {slang_key(slang)}",
                    partial(self._set_slang, slang, checksum),
                )

        key = slangs_key(checksum)
        await execute("DEL_ZSET_K_ID", key, partial(self._client.delete, key))
        if rollback is not None and slangs:
            rollback.push(f"recreate {key}", partial(self._add_members, checksum, slangs))

    async def _set_slang(self, slang: str, checksum: str) -> None:
        key = slang_key(slang)
        await execute("SET_STR_K_SLANG", key, partial(self._client.set, key, checksum))

    async def _delete_slang(self, slang: str) -> int:
        key = slang_key(slang)
        return await execute("DEL_STR_K_SLANG", key, partial(self._client.delete, key))

    async def _add_member(self, checksum: str, slang: str) -> int:
        return await self._add_members(checksum, [slang])

    async def _add_members(self, checksum: str, slangs: list[str]) -> int:
        key = slangs_key(checksum)
        mapping = {slang: SLANG_SCORE for slang in slangs}
        return await execute(
            "SET_ZSET_K_ID", key, partial(self._client.zadd, key, mapping)
        )

    async def _remove_member(self, checksum: str, slang: str) -> int:
        key = slangs_key(checksum)
        return await execute("DEL_ZSET_K_ID", key, partial(self._client.zrem, key, slang))
