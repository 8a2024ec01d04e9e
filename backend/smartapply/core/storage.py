"""Client key-value storage.

The browser app keeps its session and profile snapshot in ``localStorage``.
Each server-side workspace gets an equivalent: a synchronous string-to-string
store with no transactions. Readers must parse values defensively because
anything may have written them.

Well-known keys are collected here so services agree on them.
"""

from typing import Protocol

# Session keys written by the authentication service
JWT_KEY = "jwt"
USER_KEY = "user"
EXPIRATION_KEY = "expirationDate"
REDIRECT_AFTER_LOGIN_KEY = "redirectAfterLogin"

# Persisted application snapshot (profile store serialization)
PROFILE_SNAPSHOT_KEY = "career-mentor-store"

SESSION_KEYS = (JWT_KEY, USER_KEY, EXPIRATION_KEY)


class ClientStorage(Protocol):
    """Synchronous key-value storage with string values."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def clear(self) -> None: ...

    def keys(self) -> list[str]: ...


class InMemoryStorage:
    """Dict-backed ClientStorage.

    Args:
        initial: Optional starting contents (copied).
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def keys(self) -> list[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items
