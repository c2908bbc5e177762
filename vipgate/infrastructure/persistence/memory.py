import threading
from typing import Dict, List, Optional, Tuple

from ...domain.ports.persistence import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store used by tests and throwaway deployments."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def list_keys(
        self,
        prefix: str = "",
        cursor: Optional[str] = None,
        limit: int = 100,
    ) -> Tuple[List[str], Optional[str]]:
        if limit <= 0:
            raise ValueError("limit must be positive")
        with self._lock:
            keys = sorted(k for k in self._data if k.startswith(prefix))
        if cursor:
            keys = [k for k in keys if k > cursor]
        if len(keys) > limit:
            page = keys[:limit]
            return page, page[-1]
        return keys, None

    def close(self) -> None:
        pass
