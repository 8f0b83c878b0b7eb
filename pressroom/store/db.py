"""SQLite content store for sites, posts and example records.

Manages three tables in ``.pressroom/content.db``:

- ``sites``: tenants, addressed by subdomain or custom domain
- ``posts``: markdown-with-frontmatter content keyed by (site, slug)
- ``examples``: records embedded by ``<Examples names=[...]/>`` directives

Queries open a fresh connection each time, so :class:`ExampleLookup` can run
them from worker threads.
"""

from __future__ import annotations

import asyncio
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

# Cap on paths listed for static generation
MAX_PUBLISHED_PATHS = 80


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _site_clause(site: str) -> tuple[str, str]:
    """Column to match for a site identifier: custom domains contain a dot."""
    if "." in site:
        return "s.custom_domain = ?", site
    return "s.subdomain = ?", site


class ContentDB:
    """SQLite content store.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Parent directories are created.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_tables()

    # ------------------------------------------------------------------
    # Connection helpers
    # ------------------------------------------------------------------

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        conn.row_factory = sqlite3.Row
        return conn

    def _init_tables(self) -> None:
        conn = self._connect()
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS sites (
                    id             INTEGER PRIMARY KEY AUTOINCREMENT,
                    subdomain      TEXT NOT NULL UNIQUE,
                    custom_domain  TEXT UNIQUE,
                    name           TEXT,
                    created_at     TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS posts (
                    id           INTEGER PRIMARY KEY AUTOINCREMENT,
                    site_id      INTEGER NOT NULL REFERENCES sites(id),
                    slug         TEXT NOT NULL,
                    title        TEXT,
                    description  TEXT,
                    content      TEXT NOT NULL DEFAULT '',
                    image        TEXT,
                    published    INTEGER NOT NULL DEFAULT 0,
                    created_at   TEXT NOT NULL,
                    UNIQUE (site_id, slug)
                );

                CREATE TABLE IF NOT EXISTS examples (
                    id           INTEGER PRIMARY KEY AUTOINCREMENT,
                    name         TEXT NOT NULL,
                    description  TEXT,
                    domain       TEXT,
                    url          TEXT,
                    image        TEXT
                );
            """)
            conn.commit()
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Sites
    # ------------------------------------------------------------------

    def add_site(
        self,
        subdomain: str,
        custom_domain: str | None = None,
        name: str | None = None,
    ) -> int:
        """Insert a site. Returns the row id."""
        conn = self._connect()
        try:
            cur = conn.execute(
                """INSERT INTO sites (subdomain, custom_domain, name, created_at)
                   VALUES (?, ?, ?, ?)""",
                (subdomain, custom_domain, name, _now_iso()),
            )
            conn.commit()
            return cur.lastrowid  # type: ignore[return-value]
        finally:
            conn.close()

    def get_site_id(self, site: str) -> int | None:
        """Resolve a subdomain or custom domain to a site id."""
        clause, value = _site_clause(site)
        conn = self._connect()
        try:
            row = conn.execute(
                f"SELECT s.id FROM sites s WHERE {clause}", (value,),
            ).fetchone()
            return row["id"] if row else None
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def add_post(
        self,
        site_id: int,
        slug: str,
        content: str,
        title: str | None = None,
        description: str | None = None,
        image: str | None = None,
        published: bool = True,
    ) -> int:
        """Insert or replace the post at (site_id, slug). Returns the row id."""
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            conn.execute(
                """INSERT INTO posts
                   (site_id, slug, title, description, content, image, published, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT (site_id, slug) DO UPDATE SET
                       title = excluded.title,
                       description = excluded.description,
                       content = excluded.content,
                       image = excluded.image,
                       published = excluded.published""",
                (site_id, slug, title, description, content, image,
                 int(published), _now_iso()),
            )
            row = conn.execute(
                "SELECT id FROM posts WHERE site_id = ? AND slug = ?", (site_id, slug),
            ).fetchone()
            conn.commit()
            return row["id"]
        finally:
            conn.close()

    def get_post(self, site: str, slug: str) -> dict[str, Any] | None:
        """Fetch a post by site identifier and slug, with its site fields.

        Unpublished posts are returned too; the site owner may preview them.
        """
        clause, value = _site_clause(site)
        conn = self._connect()
        try:
            row = conn.execute(
                f"""SELECT p.*, s.subdomain, s.custom_domain, s.name AS site_name
                    FROM posts p JOIN sites s ON s.id = p.site_id
                    WHERE {clause} AND p.slug = ?""",
                (value, slug),
            ).fetchone()
            return _post_dict(row) if row else None
        finally:
            conn.close()

    def adjacent_posts(self, site: str, exclude_id: int) -> list[dict[str, Any]]:
        """Other published posts of *site*, oldest first."""
        clause, value = _site_clause(site)
        conn = self._connect()
        try:
            rows = conn.execute(
                f"""SELECT p.slug, p.title, p.description, p.image, p.created_at
                    FROM posts p JOIN sites s ON s.id = p.site_id
                    WHERE {clause} AND p.published = 1 AND p.id != ?
                    ORDER BY p.created_at ASC, p.id ASC""",
                (value, exclude_id),
            ).fetchall()
            return [dict(r) for r in rows]
        finally:
            conn.close()

    def published_paths(self, limit: int = MAX_PUBLISHED_PATHS) -> list[tuple[str, str]]:
        """(site, slug) pairs for published posts, oldest first.

        Posts on a site with a custom domain are listed under both the
        custom domain and the subdomain.
        """
        conn = self._connect()
        try:
            rows = conn.execute(
                """SELECT p.slug, s.subdomain, s.custom_domain
                   FROM posts p JOIN sites s ON s.id = p.site_id
                   WHERE p.published = 1
                   ORDER BY p.created_at ASC, p.id ASC
                   LIMIT ?""",
                (limit,),
            ).fetchall()
        finally:
            conn.close()

        paths: list[tuple[str, str]] = []
        for r in rows:
            if r["custom_domain"]:
                paths.append((r["custom_domain"], r["slug"]))
            paths.append((r["subdomain"], r["slug"]))
        return paths

    # ------------------------------------------------------------------
    # Examples
    # ------------------------------------------------------------------

    def add_example(
        self,
        name: str,
        description: str | None = None,
        domain: str | None = None,
        url: str | None = None,
        image: str | None = None,
        example_id: int | None = None,
    ) -> int:
        """Insert an example record. Returns the row id."""
        conn = self._connect()
        try:
            cur = conn.execute(
                """INSERT INTO examples (id, name, description, domain, url, image)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (example_id, name, description, domain, url, image),
            )
            conn.commit()
            return cur.lastrowid  # type: ignore[return-value]
        finally:
            conn.close()

    def get_example(self, example_id: int) -> dict[str, Any] | None:
        """Fetch an example record by primary key."""
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT * FROM examples WHERE id = ?", (example_id,),
            ).fetchone()
            return dict(row) if row else None
        finally:
            conn.close()


def _post_dict(row: sqlite3.Row) -> dict[str, Any]:
    post = dict(row)
    post["published"] = bool(post["published"])
    return post


class ExampleLookup:
    """Async example store backed by :class:`ContentDB`.

    Each lookup runs in a worker thread so concurrent directives do not
    block the event loop.
    """

    def __init__(self, db: ContentDB) -> None:
        self._db = db

    async def get_by_id(self, example_id: int) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._db.get_example, example_id)
