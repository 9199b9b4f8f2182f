import logging

from .database import get_db_connection


class SessionContextFilter(logging.Filter):
    """Tags every record with the game session it was logged for.

    Game code passes ``extra={"session_id": ...}``; records from the
    vocabulary loader and the router carry none and are stored with NULL.
    """

    def filter(self, record):
        if not hasattr(record, "session_id"):
            record.session_id = None
        return True


class SQLiteHandler(logging.Handler):
    """
    Writes game events to the ``logs`` table together with the emitting
    module and the session id, so one player's history can be read back
    with ``database.get_session_events``.
    """

    def __init__(self, level=logging.INFO):
        super().__init__(level)
        self.addFilter(SessionContextFilter())

    def emit(self, record):
        try:
            conn = get_db_connection()
            with conn:
                conn.execute(
                    "INSERT INTO logs (level, logger, session_id, message) "
                    "VALUES (?, ?, ?, ?)",
                    (
                        record.levelname,
                        record.name,
                        record.session_id,
                        self.format(record),
                    ),
                )
            conn.close()
        except Exception:
            self.handleError(record)
