"""
Local database initialization and connection utilities.
Holds the SQLite schema behind the persisted key-value store.
"""

import sqlite3
import logging
from pathlib import Path
from typing import Optional

from .config import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)


def get_db_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Get SQLite database connection."""
    path = Path(db_path or settings.db_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(path))
        conn.row_factory = sqlite3.Row
        logger.debug(f"Connected to database: {path}")
        return conn
    except Exception as e:
        logger.error(f"Failed to connect to database: {e}")
        raise


def init_database(db_path: Optional[str] = None):
    """Initialize database schema."""
    conn = get_db_connection(db_path)
    cursor = conn.cursor()

    try:
        # Namespaced key-value records (carts, tokens, search history)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS local_storage (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        conn.commit()
        logger.info("Database schema created successfully")

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise
    finally:
        conn.close()
