from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor

from . import config
from .errors import BackendError

logger = logging.getLogger(__name__)

CHANGE_CHANNEL = "zesty_changes"
WATCHED_TABLES = ("incidents", "messages", "profiles", "shifts")

DB_POOL: pool.ThreadedConnectionPool | None = None


def get_db_pool() -> pool.ThreadedConnectionPool:
    global DB_POOL
    if DB_POOL is None:
        DB_POOL = pool.ThreadedConnectionPool(
            minconn=1,
            maxconn=config.DB_POOL_MAX,
            dsn=config.database_url(),
            options=f"-c statement_timeout={config.DB_STATEMENT_TIMEOUT_MS}",
        )
    return DB_POOL


@contextmanager
def connection() -> Iterator[Any]:
    db = get_db_pool().getconn()
    try:
        yield db
        db.commit()
    except Exception:
        try:
            db.rollback()
        except psycopg2.Error:
            logger.warning("Rollback failed on a pooled connection", exc_info=True)
        raise
    finally:
        get_db_pool().putconn(db)


def _to_postgres_placeholders(query: str) -> str:
    return query.replace("?", "%s")


def fetch_one(query: str, params: List[Any] | tuple[Any, ...] | None = None) -> Dict[str, Any] | None:
    try:
        with connection() as db, db.cursor(cursor_factory=RealDictCursor) as cursor:
            cursor.execute(_to_postgres_placeholders(query), params)
            row = cursor.fetchone()
            return dict(row) if row is not None else None
    except psycopg2.Error as exc:
        raise BackendError(f"Database query failed: {exc.pgerror or exc}") from exc


def fetch_all_rows(query: str, params: List[Any] | tuple[Any, ...] | None = None) -> List[Dict[str, Any]]:
    try:
        with connection() as db, db.cursor(cursor_factory=RealDictCursor) as cursor:
            cursor.execute(_to_postgres_placeholders(query), params)
            return [dict(row) for row in cursor.fetchall()]
    except psycopg2.Error as exc:
        raise BackendError(f"Database query failed: {exc.pgerror or exc}") from exc


def ensure_column(db, table: str, column: str, col_type: str) -> None:
    with db.cursor() as cursor:
        cursor.execute(f"ALTER TABLE {table} ADD COLUMN IF NOT EXISTS {column} {col_type}")


def init_db(db) -> None:
    schema_statements = [
        """
        CREATE TABLE IF NOT EXISTS profiles (
            id UUID PRIMARY KEY,
            display_name TEXT NOT NULL DEFAULT '',
            role TEXT NOT NULL DEFAULT '',
            department TEXT NOT NULL DEFAULT '',
            phone TEXT NOT NULL DEFAULT '',
            email TEXT NOT NULL DEFAULT '',
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS incidents (
            id BIGSERIAL PRIMARY KEY,
            location TEXT NOT NULL,
            category TEXT NOT NULL,
            priority TEXT NOT NULL DEFAULT 'Med',
            description TEXT NOT NULL,
            detailed_description TEXT,
            image_url TEXT,
            status TEXT NOT NULL DEFAULT 'Under Review',
            reported_by TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS messages (
            id BIGSERIAL PRIMARY KEY,
            sender_id UUID NOT NULL,
            receiver_id UUID NOT NULL,
            content TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS shifts (
            id BIGSERIAL PRIMARY KEY,
            profile_id UUID NOT NULL,
            starts_at TIMESTAMPTZ NOT NULL,
            ends_at TIMESTAMPTZ,
            location TEXT NOT NULL DEFAULT '',
            role TEXT NOT NULL DEFAULT ''
        )
        """,
        "CREATE INDEX IF NOT EXISTS incidents_created_at_idx ON incidents (created_at DESC)",
        "CREATE INDEX IF NOT EXISTS messages_sender_idx ON messages (sender_id, created_at)",
        "CREATE INDEX IF NOT EXISTS messages_receiver_idx ON messages (receiver_id, created_at)",
        "CREATE INDEX IF NOT EXISTS shifts_profile_idx ON shifts (profile_id, starts_at)",
        f"""
        CREATE OR REPLACE FUNCTION zesty_notify_change() RETURNS trigger AS $$
        DECLARE
            row_id TEXT;
        BEGIN
            IF TG_OP = 'DELETE' THEN
                row_id := OLD.id::text;
            ELSE
                row_id := NEW.id::text;
            END IF;
            PERFORM pg_notify(
                '{CHANGE_CHANNEL}',
                json_build_object('table', TG_TABLE_NAME, 'type', TG_OP, 'id', row_id)::text
            );
            RETURN NULL;
        END;
        $$ LANGUAGE plpgsql
        """,
    ]

    with db.cursor() as cursor:
        for statement in schema_statements:
            cursor.execute(statement)

    ensure_column(db, "profiles", "preferences", "JSONB NOT NULL DEFAULT '{}'::jsonb")
    ensure_column(db, "incidents", "reporter_id", "UUID")

    with db.cursor() as cursor:
        for table in WATCHED_TABLES:
            cursor.execute(f"DROP TRIGGER IF EXISTS {table}_notify_change ON {table}")
            cursor.execute(
                f"CREATE TRIGGER {table}_notify_change AFTER INSERT OR UPDATE OR DELETE ON {table} "
                "FOR EACH ROW EXECUTE FUNCTION zesty_notify_change()"
            )

    db.commit()


def maybe_init_db_on_startup() -> None:
    """Optionally initialize/upgrade schema at process startup.

    Schema changes never run on the request path. To apply them once, set
    RUN_DB_INIT=1, restart the app, then set RUN_DB_INIT=0 again.
    """
    if not config.run_db_init():
        return

    with connection() as db:
        init_db(db)
    logger.info("Database schema initialized")


def ping() -> bool:
    row = fetch_one("SELECT 1 AS ok")
    return bool(row and row.get("ok") == 1)
