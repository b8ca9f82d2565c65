from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class BucketContext:
    """The content stored under an id.

    Attributes:
        id: SHA-256 hexdigest of `data`.
        data: The stored payload.
        mime: Content-type label supplied at creation.
    """

    id: str
    data: str
    mime: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "data": self.data, "mime": self.mime}


@dataclass(frozen=True)
class BucketMeta:
    """Metadata of an id.

    Attributes:
        id: SHA-256 hexdigest of the bucket's data.
        slangs: Every alias currently bound to `id`, in lexical order.
        rsa: Public key supplied at creation, if any. Stored verbatim; the
            payload is not encrypted with it.
    """

    id: str
    slangs: tuple[str, ...]
    rsa: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "slang": list(self.slangs), "rsa": self.rsa}


@dataclass(frozen=True)
class Bucket:
    """Context and metadata of an id, as captured before deletion."""

    context: BucketContext
    meta: BucketMeta

    def to_dict(self) -> dict[str, Any]:
        return {
            "bucketContext": self.context.to_dict(),
            "bucketMeta": self.meta.to_dict(),
        }
