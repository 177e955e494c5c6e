import logging
from contextlib import closing
from datetime import datetime

from .database import get_connection, init_db


class SQLiteHandler(logging.Handler):
    """Writes log records to the ``logs`` table."""

    def __init__(self, level=logging.NOTSET):
        super().__init__(level)
        self._ready = False

    def emit(self, record: logging.LogRecord):
        try:
            if not self._ready:
                init_db()
                self._ready = True
            with closing(get_connection()) as conn, conn:
                conn.execute(
                    "INSERT INTO logs (created_at, level, logger, message) "
                    "VALUES (?, ?, ?, ?)",
                    (
                        datetime.fromtimestamp(record.created).isoformat(),
                        record.levelname,
                        record.name,
                        self.format(record),
                    ),
                )
        except Exception:
            self.handleError(record)
