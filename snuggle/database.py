import sqlite3
import logging
from typing import List, Dict, Any

DB_NAME = ".snuggle_themes.db"


def get_connection():
    """Get a database connection with row factory for dict-like access."""
    conn = sqlite3.connect(DB_NAME)
    conn.row_factory = sqlite3.Row
    return conn


def init_db():
    try:
        conn = sqlite3.connect(DB_NAME)
        cursor = conn.cursor()

        # Generated theme history
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS generated_themes (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                request TEXT NOT NULL,
                model TEXT,
                css TEXT NOT NULL,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_generated_themes_user ON generated_themes(user_id)")

        conn.commit()
        conn.close()
    except Exception as e:
        logging.error(f"Failed to initialize database: {e}")


def save_theme(user_id: str, request: str, css: str, model: str = "") -> bool:
    try:
        conn = get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO generated_themes (user_id, request, model, css, created_at)
            VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)
        """, (user_id, request, model, css))
        conn.commit()
        conn.close()
        return True
    except Exception as e:
        logging.error(f"Failed to save theme for {user_id}: {e}")
        return False


def get_recent_themes(user_id: str, limit: int = 20) -> List[Dict[str, Any]]:
    try:
        conn = get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            SELECT id, request, model, css, created_at FROM generated_themes
            WHERE user_id = ?
            ORDER BY id DESC
            LIMIT ?
        """, (user_id, limit))
        rows = cursor.fetchall()
        conn.close()
        return [dict(row) for row in rows]
    except Exception as e:
        logging.error(f"Failed to fetch themes for {user_id}: {e}")
        return []


def delete_themes(user_id: str) -> int:
    try:
        conn = get_connection()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM generated_themes WHERE user_id = ?", (user_id,))
        deleted = cursor.rowcount
        conn.commit()
        conn.close()
        return deleted
    except Exception as e:
        logging.error(f"Failed to delete themes for {user_id}: {e}")
        return 0
