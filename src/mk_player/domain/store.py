"""Key-value storage seam for the player cart."""

from typing import Protocol


class LocalStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...
