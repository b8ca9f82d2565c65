"""Compensating actions for multi-step bucket mutations.

The backend only offers atomic single commands, so a mutation such as `create`
or `delete` is a sequence of independent commands. After each command succeeds
the caller registers an undo action on a [`Rollback`][slangbucket.compensation.Rollback].
If a later step raises, or the calling task is cancelled, the registered actions
run in reverse order, shielded from cancellation, and the original error (or
cancellation) propagates.

Warning: Partial state is still possible
    Compensation only runs inside the process that issued the commands. A crash
    between two steps leaves whatever was already written. Undo actions are
    themselves backend commands and can fail; such failures are logged and the
    remaining undo actions still run. Concurrent readers may observe
    intermediate state, since nothing is isolated.
"""

from __future__ import annotations

from types import TracebackType

import anyio
import structlog

from ._utils import Undo
from .errors import BucketError

logger = structlog.get_logger(__name__)


class Rollback:
    """Stack of undo actions for one logical operation.

    Use as an async context manager. Undo actions run only if the block exits
    with an exception, cancellation included.

    Parameters:
        operation: Name of the logical operation, for logging.
    """

    def __init__(self, operation: str) -> None:
        self._operation = operation
        self._actions: list[tuple[str, Undo]] = []

    def push(self, description: str, undo: Undo) -> None:
        self._actions.append((description, undo))

    def __len__(self) -> int:
        return len(self._actions)

    async def unwind(self) -> None:
        """Run every registered action, newest first, then forget them."""
        while self._actions:
            description, undo = self._actions.pop()
            try:
                await undo()
            except BucketError as exc:
                logger.error(
                    "compensation step failed",
                    operation=self._operation,
                    step=description,
                    label=exc.label,
                )
            else:
                logger.info(
                    "compensation step applied",
                    operation=self._operation,
                    step=description,
                )

    async def __aenter__(self) -> Rollback:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is not None and self._actions:
            logger.warning(
                "rolling back partial operation",
                operation=self._operation,
                steps=len(self._actions),
                cancelled=not isinstance(exc, Exception),
            )
            with anyio.CancelScope(shield=True):
                await self.unwind()
        self._actions.clear()
