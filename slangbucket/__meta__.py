# -*- coding: utf-8 -*-
"""Define project metadata
"""

__title__ = "slangbucket"
__summary__ = "A content-addressed bucket store with pronounceable aliases."
__url__ = "https://github.com/slangbucket/slangbucket"

__version__ = "0.3.1"

__install_requires__ = ["anyio", "pydantic", "redis", "structlog", "typer"]
__tests_require__ = ["pytest", "hypothesis"]

__author__ = "SlangBucket Developers"
__email__ = "dev@slangbucket.org"

__license__ = "MIT License"
