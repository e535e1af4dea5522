"""Players — the people who hold dross, including administrators."""

from __future__ import annotations

import aiosqlite
from pydantic import BaseModel

from dross.exceptions import NotFoundError
from dross.repository.base import Repository

_COLUMNS = (
    "id, first_name, last_name, auth_email, auth_token, "
    "auth_token_expires, mailing_address, is_admin"
)


class Player(BaseModel):
    id: int | None = None
    first_name: str
    last_name: str
    auth_email: str
    auth_token: str | None = None
    auth_token_expires: int | None = None  # epoch milliseconds
    mailing_address: str
    is_admin: bool = False


def _row_to_player(row: aiosqlite.Row) -> Player:
    return Player(
        id=row["id"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        auth_email=row["auth_email"],
        auth_token=row["auth_token"],
        auth_token_expires=row["auth_token_expires"],
        mailing_address=row["mailing_address"],
        is_admin=bool(row["is_admin"]),
    )


class PlayerRepository(Repository[Player]):
    """SQLite store for players."""

    table_name = "players"

    async def create_table(self) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS players (
                    id INTEGER PRIMARY KEY,
                    first_name TEXT NOT NULL,
                    last_name TEXT NOT NULL,
                    auth_email TEXT NOT NULL,
                    auth_token TEXT,
                    auth_token_expires INTEGER,
                    mailing_address TEXT NOT NULL,
                    is_admin BOOLEAN NOT NULL
                )
            """)
            await db.commit()

    async def drop_table(self) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("DROP TABLE IF EXISTS players")
            await db.commit()

    async def save(self, item: Player) -> int:
        async with aiosqlite.connect(self._db_path) as db:
            if item.id is None:
                # Auth token data is written by the login flow, never on insert
                cursor = await db.execute(
                    "INSERT INTO players "
                    "(first_name, last_name, auth_email, mailing_address, is_admin) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (
                        item.first_name,
                        item.last_name,
                        item.auth_email,
                        item.mailing_address,
                        int(item.is_admin),
                    ),
                )
                row_id = cursor.lastrowid
            else:
                await db.execute(
                    "UPDATE players SET first_name = ?, last_name = ?, auth_email = ?, "
                    "auth_token = ?, auth_token_expires = ?, mailing_address = ?, "
                    "is_admin = ? WHERE id = ?",
                    (
                        item.first_name,
                        item.last_name,
                        item.auth_email,
                        item.auth_token,
                        item.auth_token_expires,
                        item.mailing_address,
                        int(item.is_admin),
                        item.id,
                    ),
                )
                row_id = item.id
            await db.commit()
        return row_id

    async def get(self, item_id: int) -> Player:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                f"SELECT {_COLUMNS} FROM players WHERE id = ?", (item_id,)
            ) as cursor:
                row = await cursor.fetchone()
        if row is None:
            raise NotFoundError(f"Player {item_id} not found")
        return _row_to_player(row)

    async def get_all(self) -> list[Player]:
        players = []
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(f"SELECT {_COLUMNS} FROM players ORDER BY id") as cursor:
                async for row in cursor:
                    players.append(_row_to_player(row))
        return players

    async def delete(self, item_id: int) -> bool:
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute("DELETE FROM players WHERE id = ?", (item_id,))
            await db.commit()
            return cursor.rowcount > 0

    async def admin_count(self) -> int:
        """Exact number of players flagged as administrators."""
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM players WHERE is_admin = 1")
            row = await cursor.fetchone()
            return row[0]
