"""Persistent transition counters for the chatterchain engine.

Every observed pair of consecutive words is kept as one counter row keyed by
``(chain_id, from_state, to_state)``.  Chains never hold the transition graph
in memory; they query the store whenever they need the neighbours of a state.

Two stores share the same interface: :class:`SqliteStore` for the running bot
and :class:`MemoryStore` for tests and throwaway sessions.  Both also remember
who has spoken in each chat.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple, Union

logger = logging.getLogger(__name__)

DB_PATH = Path("chatterchain.sqlite")


@dataclass(frozen=True)
class User:
    """Author of a chat message."""

    id: int
    first_name: str = ""
    last_name: Optional[str] = None
    username: Optional[str] = None


class TransitionStore(Protocol):
    def increment(self, chain_id: int, from_key: str, to_key: str) -> None:
        ...

    def query_from(self, chain_id: int, from_key: str) -> List[Tuple[str, int]]:
        ...

    def query_to(self, chain_id: int, to_key: str) -> List[Tuple[str, int]]:
        ...

    def add_user(self, chain_id: int, user: User) -> None:
        ...

    def users(self, chain_id: int) -> List[User]:
        ...


class SqliteStore:
    """Transition store backed by a single sqlite connection.

    The connection is opened on construction and released by :meth:`close`
    (or by leaving a ``with`` block).  Access is serialized with a lock so
    one store can be shared between the transport and the learning worker.
    """

    def __init__(self, path: Union[str, Path] = DB_PATH) -> None:
        self.path = path
        self._lock = threading.Lock()
        self._db: Optional[sqlite3.Connection] = sqlite3.connect(
            str(path), check_same_thread=False
        )
        self.initialize()
        logger.info(f"Opened transition store at {path}")

    def initialize(self) -> None:
        """Ensure the required tables and indexes exist."""
        with self._lock, self._connection() as db:
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS transitions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    chain_id INTEGER NOT NULL,
                    from_state TEXT NOT NULL,
                    to_state TEXT NOT NULL,
                    frequency INTEGER NOT NULL DEFAULT 0,
                    UNIQUE (chain_id, from_state, to_state)
                )
                """
            )
            db.execute(
                "CREATE INDEX IF NOT EXISTS idx_transitions_to "
                "ON transitions(chain_id, to_state)"
            )
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    chain_id INTEGER NOT NULL,
                    first_name TEXT,
                    last_name TEXT,
                    username TEXT,
                    UNIQUE (user_id, chain_id)
                )
                """
            )

    def _connection(self) -> sqlite3.Connection:
        if self._db is None:
            raise sqlite3.ProgrammingError("The transition store is closed")
        return self._db

    def increment(self, chain_id: int, from_key: str, to_key: str) -> None:
        """Add one to the counter of a transition, creating it if needed."""
        with self._lock, self._connection() as db:
            db.execute(
                "INSERT INTO transitions(chain_id, from_state, to_state, frequency) "
                "VALUES (?, ?, ?, 1) "
                "ON CONFLICT(chain_id, from_state, to_state) "
                "DO UPDATE SET frequency = frequency + 1",
                (chain_id, from_key, to_key),
            )

    def query_from(self, chain_id: int, from_key: str) -> List[Tuple[str, int]]:
        with self._lock:
            cur = self._connection().execute(
                "SELECT to_state, frequency FROM transitions "
                "WHERE chain_id = ? AND from_state = ? ORDER BY id",
                (chain_id, from_key),
            )
            return cur.fetchall()

    def query_to(self, chain_id: int, to_key: str) -> List[Tuple[str, int]]:
        with self._lock:
            cur = self._connection().execute(
                "SELECT from_state, frequency FROM transitions "
                "WHERE chain_id = ? AND to_state = ? ORDER BY id",
                (chain_id, to_key),
            )
            return cur.fetchall()

    def add_user(self, chain_id: int, user: User) -> None:
        """Remember *user* as a member of the chat, once."""
        with self._lock, self._connection() as db:
            db.execute(
                "INSERT OR IGNORE INTO users"
                "(user_id, chain_id, first_name, last_name, username) "
                "VALUES (?, ?, ?, ?, ?)",
                (user.id, chain_id, user.first_name, user.last_name, user.username),
            )

    def users(self, chain_id: int) -> List[User]:
        with self._lock:
            cur = self._connection().execute(
                "SELECT user_id, first_name, last_name, username FROM users "
                "WHERE chain_id = ? ORDER BY id",
                (chain_id,),
            )
            return [
                User(row[0], row[1] or "", row[2], row[3]) for row in cur.fetchall()
            ]

    def close(self) -> None:
        with self._lock:
            if self._db is not None:
                self._db.close()
                self._db = None
                logger.info(f"Closed transition store at {self.path}")

    def __enter__(self) -> "SqliteStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class MemoryStore:
    """In-process transition store with the same interface as SqliteStore."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # chain id -> from key -> to key -> frequency
        self._transitions: Dict[int, Dict[str, Dict[str, int]]] = defaultdict(
            lambda: defaultdict(dict)
        )
        self._users: Dict[int, Dict[int, User]] = defaultdict(dict)

    def increment(self, chain_id: int, from_key: str, to_key: str) -> None:
        with self._lock:
            targets = self._transitions[chain_id][from_key]
            targets[to_key] = targets.get(to_key, 0) + 1

    def query_from(self, chain_id: int, from_key: str) -> List[Tuple[str, int]]:
        with self._lock:
            chain = self._transitions.get(chain_id, {})
            return list(chain.get(from_key, {}).items())

    def query_to(self, chain_id: int, to_key: str) -> List[Tuple[str, int]]:
        with self._lock:
            chain = self._transitions.get(chain_id, {})
            return [
                (from_key, targets[to_key])
                for from_key, targets in chain.items()
                if to_key in targets
            ]

    def add_user(self, chain_id: int, user: User) -> None:
        with self._lock:
            self._users[chain_id].setdefault(user.id, user)

    def users(self, chain_id: int) -> List[User]:
        with self._lock:
            return list(self._users.get(chain_id, {}).values())

    def close(self) -> None:
        pass

    def __enter__(self) -> "MemoryStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
