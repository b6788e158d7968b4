"""SQLite-backed snapshot history: every stored bundle is kept."""

import json
import sqlite3
from pathlib import Path
from typing import Optional, Union

from ..exceptions import SinkError, SnapshotLoadError
from ..logging_config import get_logger
from ..query.rows import json_default
from .models import ResultBundle

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1


class BundleHistoryDB:
    """Manages the snapshot history database.

    Usage::

        with BundleHistoryDB("storage/history.db") as db:
            bundle_id = save_bundle(db.conn, bundle)
    """

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path: Path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError(
                "BundleHistoryDB is not connected. Use as context manager or call connect()."
            )
        return self._conn

    # ── lifecycle ─────────────────────────────────────────────────

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        conn.row_factory = sqlite3.Row
        self._conn = conn
        self._migrate()
        logger.debug("History DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        """Close the connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "BundleHistoryDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── migration ─────────────────────────────────────────────────

    def _migrate(self) -> None:
        """Idempotently create all tables."""
        c = self.conn
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER NOT NULL
            )
            """
        )
        row = c.execute("SELECT version FROM schema_version").fetchone()
        if row is None:
            c.execute("INSERT INTO schema_version (version) VALUES (?)", (_SCHEMA_VERSION,))

        c.execute(
            """
            CREATE TABLE IF NOT EXISTS bundles (
                id           INTEGER PRIMARY KEY AUTOINCREMENT,
                generated_at TEXT    NOT NULL,
                parameters   TEXT    NOT NULL,
                results      TEXT    NOT NULL
            )
            """
        )
        c.execute("CREATE INDEX IF NOT EXISTS idx_bundles_generated ON bundles(generated_at)")
        c.commit()


def save_bundle(conn: sqlite3.Connection, bundle: ResultBundle) -> int:
    """Insert *bundle* and return its row id."""
    data = bundle.to_dict()
    with conn:
        cur = conn.execute(
            "INSERT INTO bundles (generated_at, parameters, results) VALUES (?, ?, ?)",
            (
                data["generated_at"],
                json.dumps(data["parameters"]),
                json.dumps(data["results"], default=json_default),
            ),
        )
    bundle_id = cur.lastrowid
    assert bundle_id is not None
    return bundle_id


def load_bundle(conn: sqlite3.Connection, bundle_id: Optional[int] = None) -> Optional[ResultBundle]:
    """Load a bundle by id, or the latest one when *bundle_id* is ``None``."""
    if bundle_id is None:
        row = conn.execute("SELECT * FROM bundles ORDER BY id DESC LIMIT 1").fetchone()
    else:
        row = conn.execute("SELECT * FROM bundles WHERE id = ?", (bundle_id,)).fetchone()
    if row is None:
        return None
    return ResultBundle.from_dict(
        {
            "generated_at": row["generated_at"],
            "parameters": json.loads(row["parameters"]),
            "results": json.loads(row["results"]),
        }
    )


def list_bundles(conn: sqlite3.Connection, limit: int = 20) -> list[dict]:
    """Summaries of recent bundles, newest first.

    Returns:
        List of dicts with keys: id, generated_at, parameters, row_counts.
    """
    rows = conn.execute(
        "SELECT id, generated_at, parameters, results FROM bundles ORDER BY id DESC LIMIT ?",
        (limit,),
    ).fetchall()

    summaries: list[dict] = []
    for r in rows:
        results = json.loads(r["results"])
        summaries.append(
            {
                "id": r["id"],
                "generated_at": r["generated_at"],
                "parameters": json.loads(r["parameters"]),
                "row_counts": {label: len(rows_) for label, rows_ in results.items()},
            }
        )
    return summaries


class SQLiteSnapshotSink:
    """Snapshot sink appending every bundle to a history database."""

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path = Path(db_path)

    @property
    def location(self) -> str:
        return str(self.db_path)

    def store(self, bundle: ResultBundle) -> str:
        try:
            with BundleHistoryDB(self.db_path) as db:
                bundle_id = save_bundle(db.conn, bundle)
        except sqlite3.Error as e:
            raise SinkError(str(e), location=str(self.db_path)) from e
        return f"{self.db_path}#{bundle_id}"

    def load(self) -> Optional[ResultBundle]:
        if not self.db_path.exists():
            return None
        try:
            with BundleHistoryDB(self.db_path) as db:
                return load_bundle(db.conn)
        except sqlite3.Error as e:
            raise SinkError(str(e), location=str(self.db_path)) from e
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotLoadError(f"not a result bundle: {e}", location=str(self.db_path)) from e

    def history(self, limit: int = 20) -> list[dict]:
        if not self.db_path.exists():
            return []
        try:
            with BundleHistoryDB(self.db_path) as db:
                return list_bundles(db.conn, limit=limit)
        except sqlite3.Error as e:
            raise SinkError(str(e), location=str(self.db_path)) from e
