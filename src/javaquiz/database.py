import os
import sqlite3
from contextlib import closing

from .config import settings


def get_db_path() -> str:
    return os.path.join(settings.DB_DIR, settings.DB_FILE)


def get_connection() -> sqlite3.Connection:
    if not os.path.exists(settings.DB_DIR):
        os.makedirs(settings.DB_DIR)
    return sqlite3.connect(get_db_path())


def init_db():
    with closing(get_connection()) as conn, conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at TEXT NOT NULL,
                level TEXT NOT NULL,
                logger TEXT NOT NULL,
                message TEXT NOT NULL
            )
            """
        )
