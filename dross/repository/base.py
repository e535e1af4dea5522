"""Base repository interface shared by every SQLite-backed store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

Item = TypeVar("Item", bound=BaseModel)


class Repository(ABC, Generic[Item]):
    """Abstract CRUD store for one domain table.

    `create_table()` must be idempotent: the migration engine calls it on
    new installs and again from upgrade steps.
    """

    table_name: str = ""

    def __init__(self, db_path: str):
        self._db_path = db_path

    async def create(self, item: Item) -> int:
        """Insert a new item, return its row ID."""
        return await self.save(item)

    @abstractmethod
    async def save(self, item: Item) -> int:
        """Insert or update an item, return its row ID."""
        ...

    @abstractmethod
    async def get(self, item_id: int) -> Item:
        """Fetch one item. Raises NotFoundError if absent."""
        ...

    @abstractmethod
    async def get_all(self) -> list[Item]:
        ...

    @abstractmethod
    async def delete(self, item_id: int) -> bool:
        """Remove an item. Returns True if it existed."""
        ...

    @abstractmethod
    async def create_table(self) -> None:
        ...

    @abstractmethod
    async def drop_table(self) -> None:
        ...
