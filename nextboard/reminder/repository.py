"""
Database repository for reminders and board settings.
Uses SQLite with repository pattern for thread-safe CRUD operations.

Records are stored raw (legacy fields included) and converted through
Reminder.from_dict on the way out, so consumers only see canonical data.
"""

import json
import sqlite3
import threading
import uuid
from typing import List, Optional, Tuple
from datetime import datetime
from contextlib import contextmanager

from config.logging_config import get_logger
from config import settings
from nextboard.reminder.models import BoardSettings, Reminder

logger = get_logger(__name__)

_JSON_COLUMNS = {
    'week_days': 'weekDays',
    'month_days': 'monthDays',
    'legacy_days': 'days',
    'warning_rules': 'warningRules',
}

_TEXT_COLUMNS = {
    'title': 'title',
    'description': 'description',
    'image_url': 'imageUrl',
    'target_time': 'targetTime',
    'recurrence_type': 'recurrenceType',
    'date': 'date',
    'legacy_type': 'type',
}


class ReminderRepository:
    """
    Thread-safe SQLite repository for reminders and the settings singleton.
    """

    SCHEMA = """
    CREATE TABLE IF NOT EXISTS reminders (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT,
        image_url TEXT,
        target_time TEXT NOT NULL,
        recurrence_type TEXT,
        week_days TEXT,
        month_days TEXT,
        date TEXT,
        legacy_days TEXT,
        legacy_type TEXT,
        warning_rules TEXT,
        active BOOLEAN DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_target_time ON reminders(target_time);
    CREATE INDEX IF NOT EXISTS idx_active ON reminders(active);

    CREATE TABLE IF NOT EXISTS settings (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        theme TEXT NOT NULL,
        flash_mode TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """

    def __init__(self, db_path: str = None):
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database (default from settings)
        """
        self.db_path = db_path or str(settings.DB_PATH)
        self.lock = threading.Lock()

        logger.info(f"ReminderRepository initialized: {self.db_path}")
        self._initialize_database()

    def _initialize_database(self) -> None:
        """Create database schema if it doesn't exist."""
        try:
            with self._get_connection() as conn:
                conn.executescript(self.SCHEMA)
                conn.commit()
            logger.info("Database schema initialized")

        except Exception as e:
            logger.error(f"Failed to initialize database: {e}", exc_info=True)
            raise

    @contextmanager
    def _get_connection(self):
        """
        Get database connection (context manager).

        Yields:
            SQLite connection
        """
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row  # Access columns by name
        try:
            yield conn
        finally:
            conn.close()

    def create(self, record: dict) -> Reminder:
        """
        Store a raw reminder record.

        Args:
            record: camelCase record, as produced by the management surface.
                    An id is generated when the record has none.

        Returns:
            Created Reminder object

        Raises:
            ValueError: If the record cannot be ingested
        """
        record = dict(record)
        record['id'] = str(record.get('id') or record.get('_id') or uuid.uuid4().hex)
        record.pop('_id', None)

        # Fail before writing anything the display could never read back
        Reminder.from_dict(record)

        now = datetime.now().isoformat(timespec='seconds')
        values = {column: record.get(key) for column, key in _TEXT_COLUMNS.items()}
        for column, key in _JSON_COLUMNS.items():
            value = record.get(key)
            values[column] = None if value is None else json.dumps(value)
        if values['date'] is not None:
            values['date'] = str(values['date'])
        values['active'] = bool(record.get('active', True))

        columns = ['id', *values.keys(), 'created_at', 'updated_at']
        params = [record['id'], *values.values(), now, now]

        with self.lock:
            with self._get_connection() as conn:
                conn.execute(
                    f"INSERT INTO reminders ({', '.join(columns)}) "
                    f"VALUES ({', '.join('?' for _ in columns)})",
                    params
                )
                conn.commit()

        reminder = self.get_by_id(record['id'])
        logger.info(f"Created reminder: {reminder}")
        return reminder

    def get_by_id(self, reminder_id: str) -> Optional[Reminder]:
        """
        Get reminder by ID.

        Args:
            reminder_id: Reminder ID

        Returns:
            Reminder object or None if not found
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM reminders WHERE id = ?",
                (reminder_id,)
            ).fetchone()

        if row:
            return Reminder.from_dict(self._row_to_record(row))
        return None

    def get_all_active(self) -> List[Reminder]:
        """
        Get all active reminders, ordered by target time.

        Records that fail to ingest are skipped and logged.

        Returns:
            List of active Reminder objects
        """
        with self._get_connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM reminders
                WHERE active = 1
                ORDER BY target_time ASC
                """
            ).fetchall()

        reminders = []
        for row in rows:
            try:
                reminders.append(Reminder.from_dict(self._row_to_record(row)))
            except (TypeError, ValueError) as e:
                logger.error(f"Skipping unreadable reminder {row['id']}: {e}")
        return reminders

    def set_active(self, reminder_id: str, active: bool) -> bool:
        """
        Enable or disable a reminder.

        Returns:
            True if the reminder exists
        """
        with self.lock:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "UPDATE reminders SET active = ?, updated_at = ? WHERE id = ?",
                    (active, datetime.now().isoformat(timespec='seconds'), reminder_id)
                )
                conn.commit()

                success = cursor.rowcount > 0
                if success:
                    logger.debug(f"Reminder {reminder_id} active={active}")
                return success

    def delete(self, reminder_id: str) -> bool:
        """
        Delete a reminder.

        Returns:
            True if deleted successfully
        """
        with self.lock:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM reminders WHERE id = ?",
                    (reminder_id,)
                )
                conn.commit()

                success = cursor.rowcount > 0
                if success:
                    logger.info(f"Reminder {reminder_id} deleted")
                return success

    def get_settings(self) -> BoardSettings:
        """
        Get the settings singleton, with defaults when none is stored.
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT theme, flash_mode FROM settings WHERE id = 1"
            ).fetchone()

        if row is None:
            return BoardSettings()
        return BoardSettings.from_dict({'theme': row['theme'], 'flashMode': row['flash_mode']})

    def save_settings(self, board_settings: BoardSettings) -> None:
        """Create or replace the settings singleton."""
        with self.lock:
            with self._get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO settings (id, theme, flash_mode, updated_at)
                    VALUES (1, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        theme = excluded.theme,
                        flash_mode = excluded.flash_mode,
                        updated_at = excluded.updated_at
                    """,
                    (
                        board_settings.theme.value,
                        board_settings.flash_mode.value,
                        datetime.now().isoformat(timespec='seconds')
                    )
                )
                conn.commit()
        logger.info(f"Saved settings: {board_settings.to_dict()}")

    def fetch_snapshot(self) -> Tuple[List[Reminder], BoardSettings]:
        """
        Read everything the display needs in one call.

        Returns:
            (active reminders, settings)
        """
        return self.get_all_active(), self.get_settings()

    def _row_to_record(self, row: sqlite3.Row) -> dict:
        """
        Convert database row to a raw camelCase record.

        Args:
            row: SQLite row

        Returns:
            Record dictionary
        """
        record = {'id': row['id'], 'active': bool(row['active'])}
        for column, key in _TEXT_COLUMNS.items():
            record[key] = row[column]
        for column, key in _JSON_COLUMNS.items():
            value = row[column]
            record[key] = None if value is None else json.loads(value)
        return record
