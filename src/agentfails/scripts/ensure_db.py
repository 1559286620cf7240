"""Create the configured Postgres database when it does not exist yet."""
from __future__ import annotations

import argparse
import logging
import sys
from urllib.parse import urlsplit, urlunsplit

import psycopg
from psycopg import sql

from agentfails.core.settings import settings

logger = logging.getLogger(__name__)


def to_libpq_url(uri: str) -> str:
    """Strip SQLAlchemy driver suffixes (``postgresql+psycopg``) from a URL."""
    uri = (uri or "").strip().strip("'\"")
    if not uri:
        raise ValueError("DATABASE_URL is empty")
    parts = urlsplit(uri)
    scheme = parts.scheme.split("+", 1)[0]
    if scheme not in ("postgresql", "postgres"):
        raise ValueError(f"Not a Postgres URL: {uri!r}")
    return urlunsplit(("postgresql", parts.netloc, parts.path, parts.query, parts.fragment))


def split_maintenance_url(uri: str) -> tuple[str, str]:
    """Return ``(maintenance_url, database_name)`` for a Postgres URL."""
    parts = urlsplit(to_libpq_url(uri))
    database = parts.path.lstrip("/") or "postgres"
    maintenance = urlunsplit(("postgresql", parts.netloc, "/postgres", parts.query, ""))
    return maintenance, database


def ensure_database_exists(uri: str) -> bool:
    """Create the database if missing. Returns True when it was created."""
    maintenance_url, database = split_maintenance_url(uri)
    with psycopg.connect(maintenance_url, autocommit=True) as conn, conn.cursor() as cur:
        cur.execute("SELECT 1 FROM pg_database WHERE datname = %s", (database,))
        if cur.fetchone() is not None:
            logger.info("Database %s already exists", database)
            return False
        cur.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(database)))
    logger.info("Created database %s", database)
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Ensure the configured database exists")
    parser.add_argument("--url", default=None, help="Override the database URL")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    try:
        ensure_database_exists(args.url or settings.effective_database_url)
    except (ValueError, psycopg.Error) as exc:
        logger.error("ensure_db failed: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
