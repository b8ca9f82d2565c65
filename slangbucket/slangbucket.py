from __future__ import annotations

import redis
import structlog

from .__meta__ import __version__
from ._utils import FIELD_DATA, FIELD_MIME, FIELD_RSA
from .alias_index import AliasIndex
from .backend import connect
from .compensation import Rollback
from .config import StoreSettings
from .derive import derive_alias, derive_id
from .entries import Bucket, BucketContext, BucketMeta
from .errors import AlreadyExists, NotFound, Unsupported
from .records import RecordStore

logger = structlog.get_logger(__name__)


class BucketStore:
    """Manages CRUD actions on buckets: content records addressed by the
    SHA-256 of their data and reachable through one or more aliases ("slangs").

    Every id that has a record has at least one alias. The alias derived from
    the id at creation is the primary alias; later ones are added with
    [`add_alias()`][slangbucket.slangbucket.BucketStore.add_alias].

    Each operation issues several independent backend commands. Nothing is
    transactional: concurrent operations on the same id can interleave. When a
    command fails midway, the commands already applied by that operation are
    compensated (see [`Rollback`][slangbucket.compensation.Rollback]) and the
    failure is raised as
    [`BackendUnavailable`][slangbucket.errors.BackendUnavailable]. A crash
    midway still leaves partial state behind.

    Unless otherwise indicated, failures are raised as subclasses of
    [`BucketError`][slangbucket.errors.BucketError].

    Parameters:
        client: Backend client, e.g. `redis.Redis(decode_responses=True)`. It is
            shared by all operations and must be safe for concurrent use.
    """

    def __init__(self, client: redis.Redis):
        self._client = client
        self._index = AliasIndex(client)
        self._records = RecordStore(client)

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> BucketStore:
        """Connect to the backend described by `settings`."""
        return cls(connect(settings))

    @property
    def client(self) -> redis.Redis:
        """The backend client this store issues commands through"""
        return self._client

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def api_version() -> str:
        return __version__

    async def query_context(self, slang: str) -> BucketContext:
        """Return the data and mime of the bucket `slang` resolves to.

        A missing `data` or `mime` field reads as an empty string.

        Raises:
            NotFound: `slang` is not bound (``NO_SLANG``).
        """
        checksum = await self._resolve(slang)

        data = await self._records.get_field(checksum, FIELD_DATA)
        mime = await self._records.get_field(checksum, FIELD_MIME)

        return BucketContext(checksum, data or "", mime or "")

    async def query_meta(self, slang: str) -> BucketMeta:
        """Return the id, aliases and `rsa` of the bucket `slang` resolves to.

        Raises:
            NotFound: `slang` is not bound (``NO_SLANG``).
        """
        checksum = await self._resolve(slang)

        slangs = await self._index.aliases_of(checksum)
        rsa = await self._records.get_field(checksum, FIELD_RSA)

        return BucketMeta(checksum, tuple(slangs), rsa)

    async def create(self, data: str, mime: str, rsa: str | None = None) -> BucketMeta:
        """Store `data` under its content id and bind the primary alias.

        Creating the same data twice overwrites the record and leaves the
        primary alias bound as before.

        Parameters:
            data: Payload to store.
            mime: Content-type label of `data`.
            rsa: Public key to keep with the record. Stored verbatim, `data` is
                not encrypted with it.

        Returns:
            BucketMeta: The id, its current aliases and the supplied `rsa`.

        Raises:
            AlreadyExists: The primary alias is bound to a different id
                (``SLANG_EXISTS``). The record write is rolled back.
        """
        checksum = derive_id(data)
        slang = derive_alias(checksum)

        async with Rollback("create") as rollback:
            await self._records.put(checksum, data, mime, rsa, rollback)

            if not await self._index.bind_exclusive(slang, checksum, rollback):
                owner = await self._index.resolve(slang)
                if owner is not None and owner != checksum:
                    logger.warning(
                        "primary slang collision", slang=slang, id=checksum, owner=owner
                    )
                    raise AlreadyExists("SLANG_EXISTS")
                # same content created again; make sure the set has the alias
                await self._index.bind(slang, checksum)

            slangs = await self._index.aliases_of(checksum)

        logger.info("bucket created", id=checksum, slang=slang)
        return BucketMeta(checksum, tuple(slangs), rsa)

    async def add_alias(self, checksum: str, slang: str) -> BucketMeta:
        """Bind a new alias to an existing id. Content fields and the existing
        aliases are left untouched.

        Raises:
            NotFound: `checksum` has no record (``NO_ID``).
            AlreadyExists: `slang` is already bound, to any id
                (``SLANG_EXISTS``).
        """
        async with Rollback("add_alias") as rollback:
            if await self._records.get_field(checksum, FIELD_MIME) is None:
                raise NotFound("NO_ID")

            if not await self._index.bind_exclusive(slang, checksum, rollback):
                raise AlreadyExists("SLANG_EXISTS")

            meta = await self._meta_of(checksum)

        logger.info("slang added", id=checksum, slang=slang)
        return meta

    async def remove_alias(self, checksum: str, slang: str) -> BucketMeta:
        """Unbind `slang` from `checksum`.

        The last alias of an id cannot be removed; use
        [`delete()`][slangbucket.slangbucket.BucketStore.delete] instead.

        Raises:
            NotFound: `checksum` has no aliases (``NO_ID``).
            Unsupported: `slang` is the only alias of `checksum`
                (``ID_LAST_SLANG``), or `slang` is bound to another id
                (``ID_SLANG_MISMATCH``).
        """
        async with Rollback("remove_alias") as rollback:
            slangs = await self._index.aliases_of(checksum)
            if not slangs:
                raise NotFound("NO_ID")
            if slangs == [slang]:
                raise Unsupported("ID_LAST_SLANG")

            owner = await self._index.resolve(slang)
            if owner is not None and owner != checksum:
                raise Unsupported("ID_SLANG_MISMATCH")

            await self._index.unbind(slang, checksum, rollback)

            meta = await self._meta_of(checksum)

        logger.info("slang dropped", id=checksum, slang=slang)
        return meta

    async def delete(self, checksum: str) -> Bucket:
        """Delete the record of `checksum` and every alias bound to it.

        Returns:
            Bucket: Context and metadata as they were before deletion, read
            through the lexically-first alias.

        Raises:
            NotFound: `checksum` has no aliases (``NO_ID``).
        """
        slangs = await self._index.aliases_of(checksum)
        if not slangs:
            raise NotFound("NO_ID")

        context = await self.query_context(slangs[0])
        meta = await self.query_meta(slangs[0])

        async with Rollback("delete") as rollback:
            await self._records.delete(checksum, rollback)
            await self._index.drop_all(checksum, slangs, rollback)

        logger.info("bucket deleted", id=checksum, slangs=len(slangs))
        return Bucket(context, meta)

    async def exists(self, checksum: str) -> bool:
        """Whether `checksum` is live, i.e. has at least one alias."""
        return bool(await self._index.aliases_of(checksum))

    async def _resolve(self, slang: str) -> str:
        checksum = await self._index.resolve(slang)
        if checksum is None:
            raise NotFound("NO_SLANG")
        return checksum

    async def _meta_of(self, checksum: str) -> BucketMeta:
        rsa = await self._records.get_field(checksum, FIELD_RSA)
        slangs = await self._index.aliases_of(checksum)
        return BucketMeta(checksum, tuple(slangs), rsa)
