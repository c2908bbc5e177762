"""Repository for UserAccount persistence."""

import json
from typing import Iterator, List, Optional, Tuple

from vipgate.domain.errors import StorageError
from vipgate.domain.models.account import UserAccount, normalize_username
from vipgate.domain.ports.persistence import KeyValueStore

KEY_PREFIX = "user:"


class AccountRepository:
    """Stores one JSON document per account, keyed by lowercase username."""

    def __init__(self, store: KeyValueStore, page_size: int = 100):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.store = store
        self.page_size = page_size

    @staticmethod
    def key_for(username: str) -> str:
        return f"{KEY_PREFIX}{normalize_username(username)}"

    def get(self, username: str) -> Optional[UserAccount]:
        """Get account by username, ignoring case."""
        raw = self.store.get(self.key_for(username))
        if raw is None:
            return None
        return self._decode(raw)

    def exists(self, username: str) -> bool:
        return self.store.get(self.key_for(username)) is not None

    def save(self, account: UserAccount) -> None:
        """Write the full record, replacing any previous version."""
        self.store.put(
            self.key_for(account.username),
            json.dumps(account.to_dict(), ensure_ascii=False),
        )

    def delete(self, username: str) -> int:
        """Delete an account and return how many records were removed."""
        return 1 if self.store.delete(self.key_for(username)) else 0

    def page(
        self, cursor: Optional[str] = None, limit: Optional[int] = None
    ) -> Tuple[List[UserAccount], Optional[str]]:
        """Return one page of accounts and the cursor of the next page."""
        keys, next_cursor = self.store.list_keys(
            prefix=KEY_PREFIX, cursor=cursor, limit=limit or self.page_size
        )
        accounts = []
        for key in keys:
            raw = self.store.get(key)
            # Deleted between listing and reading.
            if raw is not None:
                accounts.append(self._decode(raw))
        return accounts, next_cursor

    def iter_all(self) -> Iterator[UserAccount]:
        """Lazily walk every stored account page by page."""
        cursor: Optional[str] = None
        while True:
            accounts, cursor = self.page(cursor)
            yield from accounts
            if cursor is None:
                break

    @staticmethod
    def _decode(raw: str) -> UserAccount:
        try:
            return UserAccount.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            raise StorageError("Corrupt account record") from exc
