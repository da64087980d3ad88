from __future__ import annotations

SCHEMA_VERSION = 2

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS sources (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        kind TEXT NOT NULL CHECK (kind IN ('liked', 'playlist')),
        name TEXT NOT NULL,
        remote_id TEXT UNIQUE,
        last_synced TEXT,
        created_at TEXT NOT NULL,
        CHECK (kind = 'liked' OR remote_id IS NOT NULL)
    )
    """,
    # Only one implicit liked-items collection
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_sources_single_liked
        ON sources (kind) WHERE kind = 'liked'
    """,
    """
    CREATE TABLE IF NOT EXISTS items (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        artist TEXT,
        source_id INTEGER,
        added_at TEXT NOT NULL,
        classified INTEGER NOT NULL DEFAULT 0,
        FOREIGN KEY (source_id) REFERENCES sources (id) ON DELETE SET NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_items_source_id ON items (source_id)",
    "CREATE INDEX IF NOT EXISTS idx_items_classified ON items (classified)",
    """
    CREATE TABLE IF NOT EXISTS categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        item_id TEXT NOT NULL,
        type TEXT NOT NULL CHECK (type IN ('mood', 'genre', 'energy')),
        value TEXT NOT NULL,
        confidence REAL NOT NULL DEFAULT 1.0,
        created_at TEXT NOT NULL,
        FOREIGN KEY (item_id) REFERENCES items (id) ON DELETE CASCADE,
        UNIQUE (item_id, type, value)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_categories_type_value ON categories (type, value)",
    # energy is single-valued per item
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_categories_single_energy
        ON categories (item_id) WHERE type = 'energy'
    """,
    """
    CREATE TABLE IF NOT EXISTS playlists (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        remote_id TEXT,
        category_type TEXT NOT NULL,
        category_value TEXT NOT NULL,
        description TEXT,
        published_at TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS memberships (
        playlist_id TEXT NOT NULL,
        item_id TEXT NOT NULL,
        added_at TEXT NOT NULL,
        PRIMARY KEY (playlist_id, item_id),
        FOREIGN KEY (playlist_id) REFERENCES playlists (id) ON DELETE CASCADE,
        FOREIGN KEY (item_id) REFERENCES items (id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_memberships_item_id ON memberships (item_id)",
    # Remote adds already tried per playlist; survives membership rebuilds
    """
    CREATE TABLE IF NOT EXISTS publish_attempts (
        playlist_id TEXT NOT NULL,
        item_id TEXT NOT NULL,
        attempted_at TEXT NOT NULL,
        PRIMARY KEY (playlist_id, item_id),
        FOREIGN KEY (playlist_id) REFERENCES playlists (id) ON DELETE CASCADE
    )
    """,
)
