"""
Persisted key-value storage and the cart/session records kept in it.

The store is the durable copy of every cart and the source of truth across
restarts; records are scoped by namespace key (`cart_<user id>` / `cart_guest`).
"""

import json
import logging
from typing import Iterable, List, Optional

from pydantic import ValidationError

from storefront.models.cart import LineItem
from .db import get_db_connection, init_database

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "user"
SEARCH_HISTORY_KEY = "search_history"
MAX_HISTORY_ITEMS = 5


class KeyValueStore:
    """String records keyed by name, backed by the `local_storage` table."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path
        init_database(db_path)

    def get_item(self, key: str) -> Optional[str]:
        conn = get_db_connection(self.db_path)
        try:
            row = conn.execute("SELECT value FROM local_storage WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set_item(self, key: str, value: str) -> None:
        conn = get_db_connection(self.db_path)
        try:
            conn.execute("""
                INSERT INTO local_storage (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
            """, (key, value))
            conn.commit()
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        conn = get_db_connection(self.db_path)
        try:
            conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    def keys(self) -> List[str]:
        conn = get_db_connection(self.db_path)
        try:
            return [row["key"] for row in conn.execute("SELECT key FROM local_storage ORDER BY key")]
        finally:
            conn.close()


class CartStorage:
    """
    Persisted Store Adapter for carts.

    Writes never raise: storage failures are logged and swallowed.
    Reads never raise: absence or corruption reads as an empty cart.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def write(self, namespace: str, line_items: Iterable[LineItem]) -> None:
        try:
            payload = json.dumps([item.dict() for item in line_items], ensure_ascii=False)
            self.store.set_item(namespace, payload)
            logger.debug(f"[STORAGE] Wrote cart {namespace}")
        except Exception as e:
            logger.error(f"[STORAGE] Failed to write cart {namespace}: {e}")

    def read(self, namespace: str) -> List[LineItem]:
        try:
            raw = self.store.get_item(namespace)
        except Exception as e:
            logger.error(f"[STORAGE] Failed to read cart {namespace}: {e}")
            return []

        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"[STORAGE] Corrupt cart record at {namespace}, treating as empty")
            return []

        if not isinstance(data, list):
            logger.warning(f"[STORAGE] Cart record at {namespace} is not a list, treating as empty")
            return []

        try:
            return [LineItem(**entry) for entry in data]
        except (TypeError, ValidationError) as e:
            logger.warning(f"[STORAGE] Invalid line item in {namespace}, treating as empty: {e}")
            return []

    def remove(self, namespace: str) -> None:
        try:
            self.store.remove_item(namespace)
            logger.info(f"[STORAGE] Removed cart {namespace}")
        except Exception as e:
            logger.error(f"[STORAGE] Failed to remove cart {namespace}: {e}")


class TokenStore:
    """Access/refresh tokens and the cached profile of the signed-in user."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    @property
    def access_token(self) -> Optional[str]:
        return self.store.get_item(ACCESS_TOKEN_KEY)

    @access_token.setter
    def access_token(self, token: Optional[str]) -> None:
        if token:
            self.store.set_item(ACCESS_TOKEN_KEY, token)
        else:
            self.store.remove_item(ACCESS_TOKEN_KEY)

    @property
    def refresh_token(self) -> Optional[str]:
        return self.store.get_item(REFRESH_TOKEN_KEY)

    @refresh_token.setter
    def refresh_token(self, token: Optional[str]) -> None:
        if token:
            self.store.set_item(REFRESH_TOKEN_KEY, token)
        else:
            self.store.remove_item(REFRESH_TOKEN_KEY)

    def save_user(self, user: dict) -> None:
        self.store.set_item(USER_KEY, json.dumps(user, ensure_ascii=False))

    def load_user_id(self) -> Optional[str]:
        raw = self.store.get_item(USER_KEY)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None
        user_id = data.get("id") or data.get("_id")
        return str(user_id) if user_id else None

    def clear(self) -> None:
        for key in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY):
            self.store.remove_item(key)


class SearchHistory:
    """Most recent distinct search terms, newest first."""

    def __init__(self, store: KeyValueStore, max_items: int = MAX_HISTORY_ITEMS):
        self.store = store
        self.max_items = max_items

    def load(self) -> List[str]:
        try:
            raw = self.store.get_item(SEARCH_HISTORY_KEY)
            data = json.loads(raw) if raw else []
        except Exception as e:
            logger.error(f"[STORAGE] Error loading search history: {e}")
            return []
        return [str(term) for term in data] if isinstance(data, list) else []

    def add(self, term: str) -> List[str]:
        trimmed = term.strip()
        if not trimmed:
            return self.load()
        history = [trimmed] + [t for t in self.load() if t != trimmed]
        return self._save(history[:self.max_items])

    def remove(self, term: str) -> List[str]:
        return self._save([t for t in self.load() if t != term])

    def clear(self) -> None:
        try:
            self.store.remove_item(SEARCH_HISTORY_KEY)
        except Exception as e:
            logger.error(f"[STORAGE] Error clearing search history: {e}")

    def _save(self, history: List[str]) -> List[str]:
        try:
            self.store.set_item(SEARCH_HISTORY_KEY, json.dumps(history, ensure_ascii=False))
        except Exception as e:
            logger.error(f"[STORAGE] Error saving search history: {e}")
        return history
