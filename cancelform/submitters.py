"""Submit collaborators.

The core calls the submit collaborator once per validated submit and awaits
exactly one outcome: returning means success, raising means failure.
Latency and failure behavior are opaque to the core.
"""

import asyncio
import logging

from typing_extensions import Protocol, runtime_checkable

from cancelform.types import FormValues

logger = logging.getLogger(__name__)


@runtime_checkable
class SubmitCollaborator(Protocol):
    """Async callable that delivers a cancellation reason."""

    async def __call__(self, values: FormValues) -> None:
        ...


class DelayedSubmitter:
    """Stand-in collaborator that waits a fixed delay.

    Takes the place of a real API request until one exists.

    Attributes:
        delay_seconds: Simulated network latency
        fail: When True, every call raises ConnectionError after the delay
    """

    def __init__(self, delay_seconds: float = 1.0, fail: bool = False):
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be non-negative")
        self.delay_seconds = delay_seconds
        self.fail = fail

    async def __call__(self, values: FormValues) -> None:
        logger.info("Submitting cancellation reason: %s", values.to_dict())
        await asyncio.sleep(self.delay_seconds)
        if self.fail:
            raise ConnectionError("Simulated submission failure")


__all__ = [
    "SubmitCollaborator",
    "DelayedSubmitter",
]
