"""
Transcript post-processors.

Callbacks run once per loop iteration, after tool dispatch, in registration order.  Each one
receives the transcript produced by the previous one and returns the transcript that replaces it.
"""

from abc import (
    ABC,
    abstractmethod,
)

from fanout.core.schema import Transcript


class Callback(ABC):
    """A transcript-transforming step of the callback chain."""

    @abstractmethod
    async def call(self, transcript: Transcript) -> Transcript:
        """Return the (possibly transformed) transcript."""
