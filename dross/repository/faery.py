"""Faeries — dross holders managed by administrators."""

from __future__ import annotations

import aiosqlite
from pydantic import BaseModel, Field

from dross.exceptions import NotFoundError
from dross.repository.base import Repository


class Faery(BaseModel):
    id: int | None = None
    name: str
    email: str
    is_admin: bool = False
    dross: int = Field(default=0, ge=0)


def _row_to_faery(row: aiosqlite.Row) -> Faery:
    return Faery(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        is_admin=bool(row["is_admin"]),
        dross=row["dross"] or 0,
    )


class FaeryRepository(Repository[Faery]):
    """SQLite store for faeries."""

    table_name = "faeries"

    async def create_table(self) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS faeries (
                    id INTEGER PRIMARY KEY,
                    name VARCHAR(255) NOT NULL,
                    is_admin BOOLEAN NOT NULL,
                    email VARCHAR(255) NOT NULL,
                    dross INTEGER
                )
            """)
            await db.commit()

    async def drop_table(self) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("DROP TABLE IF EXISTS faeries")
            await db.commit()

    async def save(self, item: Faery) -> int:
        async with aiosqlite.connect(self._db_path) as db:
            if item.id is None:
                cursor = await db.execute(
                    "INSERT INTO faeries (name, is_admin, email, dross) VALUES (?, ?, ?, ?)",
                    (item.name, int(item.is_admin), item.email, item.dross),
                )
                row_id = cursor.lastrowid
            else:
                await db.execute(
                    "UPDATE faeries SET name = ?, is_admin = ?, email = ?, dross = ? "
                    "WHERE id = ?",
                    (item.name, int(item.is_admin), item.email, item.dross, item.id),
                )
                row_id = item.id
            await db.commit()
        return row_id

    async def get(self, item_id: int) -> Faery:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT id, name, is_admin, email, dross FROM faeries WHERE id = ?",
                (item_id,),
            ) as cursor:
                row = await cursor.fetchone()
        if row is None:
            raise NotFoundError(f"Faery {item_id} not found")
        return _row_to_faery(row)

    async def get_all(self) -> list[Faery]:
        faeries = []
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT id, name, is_admin, email, dross FROM faeries ORDER BY id"
            ) as cursor:
                async for row in cursor:
                    faeries.append(_row_to_faery(row))
        return faeries

    async def delete(self, item_id: int) -> bool:
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute("DELETE FROM faeries WHERE id = ?", (item_id,))
            await db.commit()
            return cursor.rowcount > 0
