from __future__ import annotations

from typing import List, Optional, Protocol, Tuple


class KeyValueStore(Protocol):
    """Abstract key-value storage with read-after-write consistency per key."""

    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...

    def list_keys(
        self,
        prefix: str = "",
        cursor: Optional[str] = None,
        limit: int = 100,
    ) -> Tuple[List[str], Optional[str]]:
        """Return up to ``limit`` keys after ``cursor`` and the cursor for the next page."""
        ...

    def close(self) -> None:
        ...
