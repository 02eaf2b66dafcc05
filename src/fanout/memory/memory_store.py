"""Key-value scratch memory shared by an agent's memory tools."""

import logging
import threading
from typing import (
    Dict,
    List,
    Optional,
)

logger = logging.getLogger(__name__)


class MemoryStore:
    """
    A ``str -> str`` mapping where every read and write is its own critical section.

    Several tool views hold the same store, so access goes through one lock even though an
    agent's tools currently run one at a time.
    """

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def keys(self) -> List[str]:
        """Return the keys in insertion order."""
        with self._lock:
            return list(self._data)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value
        logger.debug("Memory key '%s' set (%d chars)", key, len(value))

    def tools(self) -> list:
        """Return the list/get/set tool views over this store."""
        # Lazy import - the tool module imports this one
        from fanout.tools.memory_tools import (  # pylint: disable=import-outside-toplevel
            MemoryGetTool,
            MemoryListTool,
            MemorySetTool,
        )

        return [MemoryListTool(self), MemoryGetTool(self), MemorySetTool(self)]
