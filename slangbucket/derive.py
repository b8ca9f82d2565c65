# -*- coding: utf-8 -*-
"""Content identifiers and the pronounceable aliases derived from them.

Both functions are pure and must stay bit-exact: aliases already stored in a
backend were produced by this exact mapping.
"""

from __future__ import annotations

import hashlib
import re

VOWELS = "aiueo"
CONSONANTS = "bcdghjklmnprstvwy"

SLANG_LENGTH = 11

_CONTENT_ID_RE = re.compile(r"[0-9a-f]{64}")


def derive_id(content: bytes | str) -> str:
    """Return the SHA-256 hexdigest of `content`.

    Strings are hashed as their UTF-8 bytes.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    return hashlib.sha256(content).hexdigest()


def derive_alias(checksum: str) -> str:
    """Map the first `SLANG_LENGTH` characters of `checksum` to a pronounceable
    alias, alternating vowel and consonant starting with a vowel.

    Each letter is picked by the character's code point modulo the size of the
    alphabet in use at that position.
    """
    letters = []
    for i, char in enumerate(checksum[:SLANG_LENGTH]):
        if i % 2 == 0:
            letters.append(VOWELS[ord(char) % len(VOWELS)])
        else:
            letters.append(CONSONANTS[ord(char) % len(CONSONANTS)])

    return "".join(letters)


def is_content_id(value: str) -> bool:
    """`True` if `value` looks like an id produced by `derive_id`."""
    return _CONTENT_ID_RE.fullmatch(value) is not None
