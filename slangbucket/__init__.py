# -*- coding: utf-8 -*-
"""SlangBucket is a content-addressed bucket store with pronounceable aliases.
Data is saved under the SHA-256 of its content, and can be read back through
short aliases ("slangs") such as ``avuyuwesebe``.

Each bucket gets a primary alias derived from its id when created. More aliases
can be bound and unbound later, as long as at least one remains.
"""

from .__meta__ import __version__
from .derive import derive_alias, derive_id
from .entries import Bucket, BucketContext, BucketMeta
from .errors import (
    AlreadyExists,
    BackendUnavailable,
    BucketError,
    ErrorKind,
    NotFound,
    Unsupported,
)
from .slangbucket import BucketStore

__all__ = (
    "__version__",
    "AlreadyExists",
    "BackendUnavailable",
    "Bucket",
    "BucketContext",
    "BucketError",
    "BucketMeta",
    "BucketStore",
    "ErrorKind",
    "NotFound",
    "Unsupported",
    "derive_alias",
    "derive_id",
)
