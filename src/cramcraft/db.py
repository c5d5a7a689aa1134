"""SQLite-backed snapshot store for resuming interrupted work."""
import json
import logging
import sqlite3
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path

from cramcraft.config import DEFAULT_DB_PATH, SNAPSHOT_MAX_AGE
from cramcraft.models import ExtractedText

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS snapshots (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    files TEXT NOT NULL,
    extracted_texts TEXT NOT NULL,
    saved_at TEXT NOT NULL
);
"""


@dataclass
class Snapshot:
    files: list[dict]
    extracted_texts: list[ExtractedText]
    timestamp: datetime


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating the snapshot table if it doesn't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def save_snapshot(db_path: str, files: list[dict], extracted_texts: list[ExtractedText],
                  now: datetime | None = None) -> None:
    saved_at = (now or datetime.now()).isoformat()
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO snapshots (id, files, extracted_texts, saved_at) VALUES (1, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET files=excluded.files,
            extracted_texts=excluded.extracted_texts, saved_at=excluded.saved_at""",
        (json.dumps(files), json.dumps([asdict(t) for t in extracted_texts]), saved_at),
    )
    conn.commit()
    conn.close()
    logger.info("Saved snapshot with %d extracted texts", len(extracted_texts))


def clear_snapshot(db_path: str) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM snapshots")
    conn.commit()
    conn.close()


def has_snapshot(db_path: str) -> bool:
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM snapshots").fetchone()[0]
    conn.close()
    return count > 0


def load_snapshot(db_path: str, now: datetime | None = None) -> Snapshot | None:
    """Return the saved snapshot, or None if there is none or it is over a day old."""
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM snapshots WHERE id = 1").fetchone()
    conn.close()
    if row is None:
        return None
    saved_at = datetime.fromisoformat(row["saved_at"])
    if (now or datetime.now()) - saved_at > SNAPSHOT_MAX_AGE:
        logger.info("Discarding stale snapshot from %s", row["saved_at"])
        clear_snapshot(db_path)
        return None
    return Snapshot(
        files=json.loads(row["files"]),
        extracted_texts=[ExtractedText(**t) for t in json.loads(row["extracted_texts"])],
        timestamp=saved_at,
    )
