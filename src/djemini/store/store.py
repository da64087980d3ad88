"""
SQLite persistence for djemini.

One Store instance owns one connection. Components receive the Store at
construction; nothing reaches for a module-level database.

The connection runs in autocommit mode and every write goes through
transaction(), which nests by depth so a stage can wrap several store
calls into one atomic unit.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

from djemini import config
from djemini.errors import ConstraintViolation
from djemini.store.models import (
    SOURCE_KIND_LIKED,
    SOURCE_KINDS,
    Category,
    Item,
    ItemProfile,
    Playlist,
    PlaylistWithStats,
    Source,
    SourceWithStats,
)
from djemini.store.schema import SCHEMA_STATEMENTS, SCHEMA_VERSION

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def new_playlist_id() -> str:
    return f"{config.PLAYLIST_ID_PREFIX}{uuid.uuid4().hex}"


# ------------------------------------------------------------
# Row mappers
# ------------------------------------------------------------


def _source(row: sqlite3.Row) -> Source:
    return Source(
        id=row["id"],
        kind=row["kind"],
        name=row["name"],
        remote_id=row["remote_id"],
        last_synced=row["last_synced"],
        created_at=row["created_at"],
    )


def _item(row: sqlite3.Row) -> Item:
    return Item(
        id=row["id"],
        title=row["title"],
        artist=row["artist"],
        source_id=row["source_id"],
        added_at=row["added_at"],
        classified=bool(row["classified"]),
    )


def _category(row: sqlite3.Row) -> Category:
    return Category(
        item_id=row["item_id"],
        type=row["type"],
        value=row["value"],
        confidence=row["confidence"],
        created_at=row["created_at"],
    )


def _playlist_fields(row: sqlite3.Row) -> dict:
    return {
        "id": row["id"],
        "name": row["name"],
        "remote_id": row["remote_id"],
        "category_type": row["category_type"],
        "category_value": row["category_value"],
        "description": row["description"],
        "published_at": row["published_at"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


class Store:
    def __init__(self, path: str | Path = MEMORY):
        self.path = str(path)
        if self.path != MEMORY:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(self.path, timeout=30.0, isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        if self.path != MEMORY:
            self._conn.execute("PRAGMA journal_mode=WAL")

        self._depth = 0
        self._init_schema()

    def _init_schema(self) -> None:
        with self.transaction() as conn:
            for stmt in SCHEMA_STATEMENTS:
                conn.execute(stmt)
            conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Run the enclosed statements atomically.

        Nested calls join the outermost transaction. Integrity failures
        surface as ConstraintViolation after the rollback.
        """
        if self._depth:
            self._depth += 1
            try:
                yield self._conn
            except sqlite3.IntegrityError as e:
                raise ConstraintViolation(str(e)) from e
            finally:
                self._depth -= 1
            return

        self._conn.execute("BEGIN")
        self._depth = 1
        try:
            yield self._conn
        except sqlite3.IntegrityError as e:
            self._conn.execute("ROLLBACK")
            raise ConstraintViolation(str(e)) from e
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        else:
            self._conn.execute("COMMIT")
        finally:
            self._depth = 0

    def _one(self, sql: str, params: Sequence = ()) -> Optional[sqlite3.Row]:
        return self._conn.execute(sql, params).fetchone()

    def _all(self, sql: str, params: Sequence = ()) -> list[sqlite3.Row]:
        return self._conn.execute(sql, params).fetchall()

    # ------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------

    def upsert_source(
        self, kind: str, name: str, remote_id: Optional[str] = None
    ) -> Source:
        """
        Insert a source, or refresh the name of the one already holding
        the same remote id (or the liked collection).
        """
        if kind not in SOURCE_KINDS:
            raise ConstraintViolation(f"Unknown source kind: {kind}")
        if kind != SOURCE_KIND_LIKED and not remote_id:
            raise ConstraintViolation(f"A {kind} source needs a remote id")

        existing = (
            self.find_liked_source()
            if kind == SOURCE_KIND_LIKED
            else self.find_source_by_remote_id(remote_id)
        )

        with self.transaction() as conn:
            if existing is not None:
                conn.execute(
                    "UPDATE sources SET name = ? WHERE id = ?", (name, existing.id)
                )
                source_id = existing.id
            else:
                cur = conn.execute(
                    "INSERT INTO sources (kind, name, remote_id, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (kind, name, remote_id, utc_now()),
                )
                source_id = cur.lastrowid

        source = self.get_source(source_id)
        if source is None:
            raise ConstraintViolation(f"Source {source_id} vanished during upsert")
        return source

    def get_source(self, source_id: int) -> Optional[Source]:
        row = self._one("SELECT * FROM sources WHERE id = ?", (source_id,))
        return _source(row) if row else None

    def find_source_by_remote_id(self, remote_id: str) -> Optional[Source]:
        row = self._one("SELECT * FROM sources WHERE remote_id = ?", (remote_id,))
        return _source(row) if row else None

    def find_liked_source(self) -> Optional[Source]:
        row = self._one(
            "SELECT * FROM sources WHERE kind = ?", (SOURCE_KIND_LIKED,)
        )
        return _source(row) if row else None

    def list_sources(self) -> list[SourceWithStats]:
        rows = self._all(
            """
            SELECT s.*, COUNT(i.id) AS item_count
            FROM sources s
            LEFT JOIN items i ON i.source_id = s.id
            GROUP BY s.id
            ORDER BY s.id
            """
        )
        return [
            SourceWithStats(**_source(r).__dict__, item_count=r["item_count"])
            for r in rows
        ]

    def delete_source(self, source_id: int) -> bool:
        with self.transaction() as conn:
            cur = conn.execute("DELETE FROM sources WHERE id = ?", (source_id,))
        return cur.rowcount > 0

    def touch_source_sync_time(
        self, source_id: int, when: Optional[str] = None
    ) -> str:
        stamp = when or utc_now()
        with self.transaction() as conn:
            conn.execute(
                "UPDATE sources SET last_synced = ? WHERE id = ?", (stamp, source_id)
            )
        return stamp

    # ------------------------------------------------------------
    # Items
    # ------------------------------------------------------------

    def upsert_items(self, items: Iterable[Item]) -> int:
        """
        Insert-if-absent keyed by item id. All-or-nothing across the batch.

        Returns the number of rows actually inserted.
        """
        inserted = 0
        now = utc_now()
        with self.transaction() as conn:
            for item in items:
                cur = conn.execute(
                    "INSERT OR IGNORE INTO items "
                    "(id, title, artist, source_id, added_at, classified) "
                    "VALUES (?, ?, ?, ?, ?, 0)",
                    (item.id, item.title, item.artist, item.source_id, item.added_at or now),
                )
                inserted += cur.rowcount
        return inserted

    def get_item(self, item_id: str) -> Optional[Item]:
        row = self._one("SELECT * FROM items WHERE id = ?", (item_id,))
        return _item(row) if row else None

    def list_items(self, source_id: Optional[int] = None) -> list[Item]:
        if source_id is None:
            rows = self._all("SELECT * FROM items ORDER BY rowid")
        else:
            rows = self._all(
                "SELECT * FROM items WHERE source_id = ? ORDER BY rowid", (source_id,)
            )
        return [_item(r) for r in rows]

    def list_unclassified_items(self, limit: Optional[int] = None) -> list[Item]:
        sql = "SELECT * FROM items WHERE classified = 0 ORDER BY rowid"
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (int(limit),)
        return [_item(r) for r in self._all(sql, params)]

    def mark_classified(self, item_id: str) -> bool:
        """Flip the flag if unset. True only when this call flipped it."""
        with self.transaction() as conn:
            cur = conn.execute(
                "UPDATE items SET classified = 1 WHERE id = ? AND classified = 0",
                (item_id,),
            )
        return cur.rowcount > 0

    def count_items(self) -> int:
        return self._one("SELECT COUNT(*) AS n FROM items")["n"]

    def count_classified(self) -> int:
        return self._one("SELECT COUNT(*) AS n FROM items WHERE classified = 1")["n"]

    # ------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------

    def insert_categories(self, categories: Iterable[Category]) -> int:
        written = 0
        now = utc_now()
        with self.transaction() as conn:
            for c in categories:
                conn.execute(
                    "INSERT INTO categories "
                    "(item_id, type, value, confidence, created_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (c.item_id, c.type, c.value, c.confidence, c.created_at or now),
                )
                written += 1
        return written

    def record_classification(
        self, categories: Iterable[Category], item_ids: Iterable[str]
    ) -> int:
        """Write a batch's categories and flag its items in one transaction."""
        with self.transaction():
            written = self.insert_categories(categories)
            for item_id in item_ids:
                self.mark_classified(item_id)
        return written

    def list_categories_for_item(self, item_id: str) -> list[Category]:
        rows = self._all(
            "SELECT * FROM categories WHERE item_id = ? ORDER BY id", (item_id,)
        )
        return [_category(r) for r in rows]

    def list_distinct_category_values(self, category_type: str) -> list[str]:
        rows = self._all(
            "SELECT DISTINCT value FROM categories WHERE type = ? ORDER BY value",
            (category_type,),
        )
        return [r["value"] for r in rows]

    def category_breakdown(self, category_type: str) -> list[tuple[str, int]]:
        rows = self._all(
            """
            SELECT value, COUNT(*) AS n
            FROM categories
            WHERE type = ?
            GROUP BY value
            ORDER BY n DESC, value
            """,
            (category_type,),
        )
        return [(r["value"], r["n"]) for r in rows]

    def classified_item_profiles(self) -> list[ItemProfile]:
        """Every classified item with its mood/genre/energy values folded in."""
        moods: dict[str, set[str]] = {}
        genres: dict[str, set[str]] = {}
        energy: dict[str, str] = {}

        for r in self._all(
            """
            SELECT c.item_id, c.type, c.value
            FROM categories c
            JOIN items i ON i.id = c.item_id
            WHERE i.classified = 1
            ORDER BY c.id
            """
        ):
            if r["type"] == "mood":
                moods.setdefault(r["item_id"], set()).add(r["value"])
            elif r["type"] == "genre":
                genres.setdefault(r["item_id"], set()).add(r["value"])
            elif r["type"] == "energy":
                energy.setdefault(r["item_id"], r["value"])

        return [
            ItemProfile(
                item_id=r["id"],
                moods=frozenset(moods.get(r["id"], ())),
                genres=frozenset(genres.get(r["id"], ())),
                energy=energy.get(r["id"]),
            )
            for r in self._all(
                "SELECT id FROM items WHERE classified = 1 ORDER BY rowid"
            )
        ]

    # ------------------------------------------------------------
    # Playlists
    # ------------------------------------------------------------

    def upsert_playlist(
        self,
        name: str,
        *,
        category_type: str,
        category_value: str,
        description: Optional[str] = None,
    ) -> tuple[Playlist, bool]:
        """
        Create a playlist keyed by name, or refresh the existing one.

        Returns (playlist, created). Remote id and publish progress are
        never touched here.
        """
        now = utc_now()
        existing = self.find_playlist_by_name(name)
        with self.transaction() as conn:
            if existing is not None:
                conn.execute(
                    "UPDATE playlists SET description = ?, updated_at = ? WHERE id = ?",
                    (description, now, existing.id),
                )
                playlist_id = existing.id
            else:
                playlist_id = new_playlist_id()
                conn.execute(
                    "INSERT INTO playlists "
                    "(id, name, category_type, category_value, description, "
                    "created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (playlist_id, name, category_type, category_value, description, now, now),
                )

        playlist = self.get_playlist(playlist_id)
        if playlist is None:
            raise ConstraintViolation(f"Playlist {name!r} vanished during upsert")
        return playlist, existing is None

    def get_playlist(self, playlist_id: str) -> Optional[Playlist]:
        row = self._one("SELECT * FROM playlists WHERE id = ?", (playlist_id,))
        return Playlist(**_playlist_fields(row)) if row else None

    def find_playlist_by_name(self, name: str) -> Optional[Playlist]:
        row = self._one("SELECT * FROM playlists WHERE name = ?", (name,))
        return Playlist(**_playlist_fields(row)) if row else None

    def list_playlists(self) -> list[PlaylistWithStats]:
        rows = self._all(
            """
            SELECT p.*,
                (SELECT COUNT(*) FROM memberships m
                 WHERE m.playlist_id = p.id) AS member_count,
                (SELECT COUNT(*) FROM memberships m
                 JOIN publish_attempts a
                   ON a.playlist_id = m.playlist_id AND a.item_id = m.item_id
                 WHERE m.playlist_id = p.id) AS attempted_count
            FROM playlists p
            ORDER BY p.rowid
            """
        )
        return [
            PlaylistWithStats(
                **_playlist_fields(r),
                member_count=r["member_count"],
                attempted_count=r["attempted_count"],
            )
            for r in rows
        ]

    def set_playlist_remote_id(self, playlist_id: str, remote_id: str) -> bool:
        """Set the remote id once. An already-published id is never replaced."""
        with self.transaction() as conn:
            cur = conn.execute(
                "UPDATE playlists SET remote_id = ?, published_at = NULL, updated_at = ? "
                "WHERE id = ? AND remote_id IS NULL",
                (remote_id, utc_now(), playlist_id),
            )
            if cur.rowcount:
                conn.execute(
                    "DELETE FROM publish_attempts WHERE playlist_id = ?", (playlist_id,)
                )
        return cur.rowcount > 0

    def clear_playlist_remote_id(self, playlist_id: str) -> bool:
        """Forget the remote playlist and every add attempted on it."""
        with self.transaction() as conn:
            cur = conn.execute(
                "UPDATE playlists SET remote_id = NULL, published_at = NULL, "
                "updated_at = ? WHERE id = ?",
                (utc_now(), playlist_id),
            )
            conn.execute(
                "DELETE FROM publish_attempts WHERE playlist_id = ?", (playlist_id,)
            )
        return cur.rowcount > 0

    def record_publish_attempt(self, playlist_id: str, item_id: str) -> bool:
        with self.transaction() as conn:
            cur = conn.execute(
                "INSERT OR IGNORE INTO publish_attempts "
                "(playlist_id, item_id, attempted_at) VALUES (?, ?, ?)",
                (playlist_id, item_id, utc_now()),
            )
        return cur.rowcount > 0

    def list_pending_members(self, playlist_id: str) -> list[str]:
        """Current members not yet attempted on the remote playlist, in order."""
        rows = self._all(
            """
            SELECT m.item_id
            FROM memberships m
            LEFT JOIN publish_attempts a
              ON a.playlist_id = m.playlist_id AND a.item_id = m.item_id
            WHERE m.playlist_id = ? AND a.item_id IS NULL
            ORDER BY m.rowid
            """,
            (playlist_id,),
        )
        return [r["item_id"] for r in rows]

    def mark_playlist_published(self, playlist_id: str) -> str:
        stamp = utc_now()
        with self.transaction() as conn:
            conn.execute(
                "UPDATE playlists SET published_at = ?, updated_at = ? WHERE id = ?",
                (stamp, stamp, playlist_id),
            )
        return stamp

    def delete_playlist(self, playlist_id: str) -> bool:
        with self.transaction() as conn:
            cur = conn.execute("DELETE FROM playlists WHERE id = ?", (playlist_id,))
        return cur.rowcount > 0

    # ------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------

    def clear_membership(self, playlist_id: str) -> int:
        with self.transaction() as conn:
            cur = conn.execute(
                "DELETE FROM memberships WHERE playlist_id = ?", (playlist_id,)
            )
        return cur.rowcount

    def add_member(self, playlist_id: str, item_id: str) -> bool:
        with self.transaction() as conn:
            cur = conn.execute(
                "INSERT OR IGNORE INTO memberships (playlist_id, item_id, added_at) "
                "VALUES (?, ?, ?)",
                (playlist_id, item_id, utc_now()),
            )
        return cur.rowcount > 0

    def list_members(self, playlist_id: str) -> list[str]:
        rows = self._all(
            "SELECT item_id FROM memberships WHERE playlist_id = ? ORDER BY rowid",
            (playlist_id,),
        )
        return [r["item_id"] for r in rows]

    def count_members(self, playlist_id: str) -> int:
        return self._one(
            "SELECT COUNT(*) AS n FROM memberships WHERE playlist_id = ?",
            (playlist_id,),
        )["n"]

    # ------------------------------------------------------------
    # Bulk resets
    # ------------------------------------------------------------

    def clear_playlists(self) -> int:
        with self.transaction() as conn:
            conn.execute("DELETE FROM memberships")
            cur = conn.execute("DELETE FROM playlists")
        logger.info("Cleared %d local playlists", cur.rowcount)
        return cur.rowcount

    def reset_classification_state(self) -> None:
        """
        Drop everything derived from the remote library.

        Sources survive with their names; their sync timestamps are unset
        so the next sync refetches.
        """
        with self.transaction() as conn:
            conn.execute("DELETE FROM memberships")
            conn.execute("DELETE FROM playlists")
            conn.execute("DELETE FROM categories")
            conn.execute("DELETE FROM items")
            conn.execute("UPDATE sources SET last_synced = NULL")
        logger.info("Library reset: items, categories and playlists removed")


__all__ = ["MEMORY", "Store", "new_playlist_id", "utc_now"]
