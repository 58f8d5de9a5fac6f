"""The Dash search index (``docSet.dsidx``)."""

import sqlite3
from pathlib import Path


def _like_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SearchIndex:
    """
    SQLite ``searchIndex`` table with a unique (name, type, path) index.

    Use as a context manager: the connection is committed and closed on every
    exit, so an aborted build still leaves a readable index behind.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.conn = sqlite3.connect(str(self.db_path))

    @classmethod
    def create(cls, db_path: Path) -> "SearchIndex":
        """Create a fresh, empty index at *db_path*."""
        index = cls(db_path)
        index.conn.execute("DROP TABLE IF EXISTS searchIndex")
        index.conn.execute(
            """
            CREATE TABLE searchIndex (
                id   INTEGER PRIMARY KEY,
                name TEXT,
                type TEXT,
                path TEXT
            )
            """
        )
        index.conn.execute("CREATE UNIQUE INDEX anchor ON searchIndex (name, type, path)")
        index.conn.commit()
        return index

    def insert(self, name: str, entry_type: str, path: str) -> None:
        self.conn.execute(
            "INSERT OR IGNORE INTO searchIndex(name, type, path) VALUES (?, ?, ?)",
            (name, entry_type, path),
        )

    def count(self, type: str, name: str, path: str | None = None) -> int:
        """
        Count entries of *type* named *name*.

        With *path*, only entries at that path or at an anchor inside it
        (``path#...``) are counted.
        """
        sql = "SELECT COUNT(*) FROM searchIndex WHERE type = ? AND name = ?"
        params: list[str] = [type, name]
        if path is not None:
            sql += " AND (path = ? OR path LIKE ? ESCAPE '\\')"
            params += [path, _like_escape(path) + "#%"]
        (n,) = self.conn.execute(sql, params).fetchone()
        return n

    def rows(self) -> list[tuple[str, str, str]]:
        return self.conn.execute(
            "SELECT name, type, path FROM searchIndex ORDER BY name, type, path"
        ).fetchall()

    def commit(self) -> None:
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "SearchIndex":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.conn.commit()
        finally:
            self.conn.close()
