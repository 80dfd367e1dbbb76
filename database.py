"""
Postgres access for request handlers.

One connection per app context (`get_db()` caches it on `flask.g`);
`close_connection` is registered as teardown in app.py.
"""
import os
import logging

import psycopg2
from psycopg2.extras import DictCursor
from flask import g

from config import IS_PRODUCTION, BASE_DIR
from utils.redaction import redact_database_url

logger = logging.getLogger(__name__)

SCHEMA_PATH = os.path.join(BASE_DIR, "schema.sql")


def get_db():
    if 'db' not in g:
        # config.py has already validated and normalized the URL.
        db_url = os.environ["DATABASE_URL"]
        try:
            conn = psycopg2.connect(db_url, cursor_factory=DictCursor)
        except psycopg2.Error as e:
            logger.error(
                "[DB] Could not connect to %s (%s)",
                redact_database_url(db_url), type(e).__name__,
            )
            raise
        g.db = PostgresDB(conn)
    return g.db


def close_connection(exception=None):
    db = g.pop('db', None)
    if db is not None:
        db.close()


class PostgresDB:
    """
    Thin psycopg2 wrapper: `%s` placeholders, DictCursor rows.
    Callers own commit/rollback.
    """
    def __init__(self, conn):
        self._conn = conn

    def execute(self, sql, params=None):
        cur = self._conn.cursor()
        try:
            cur.execute(sql, params)
        except psycopg2.Error as e:
            logger.error(f"[DB] Query failed: {e}")
            # Raw SQL only outside production; event rows carry user agents and referrers.
            if not IS_PRODUCTION:
                logger.error(f"[DB] SQL: {sql}")
            raise
        return cur

    def commit(self):
        self._conn.commit()

    def rollback(self):
        self._conn.rollback()

    def close(self):
        self._conn.close()


def init_schema(db, schema_path=SCHEMA_PATH):
    """
    Apply schema.sql (idempotent CREATE ... IF NOT EXISTS statements).
    Bootstrap only: there is no migration history.
    """
    with open(schema_path, encoding="utf-8") as f:
        sql = f.read()
    db.execute(sql)
    db.commit()
    logger.info("[DB] Schema applied from %s", os.path.basename(schema_path))
