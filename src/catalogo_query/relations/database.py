"""SQLite-backed relation store for ``Fornitori``, ``Pezzi`` and ``Catalogo``."""

import re
import sqlite3
import time
from pathlib import Path
from typing import Optional, Union

from ..exceptions import RelationStoreError
from ..logging_config import get_logger
from .models import CatalogEntry, Part, Relations, Supplier

logger = get_logger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS Fornitori (
        fid   INTEGER PRIMARY KEY,
        fnome TEXT    NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS Pezzi (
        pid    INTEGER PRIMARY KEY,
        pnome  TEXT    NOT NULL,
        colore TEXT    NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS Catalogo (
        fid   INTEGER NOT NULL REFERENCES Fornitori(fid),
        pid   INTEGER NOT NULL REFERENCES Pezzi(pid),
        costo REAL    NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_catalogo_fid ON Catalogo(fid)",
    "CREATE INDEX IF NOT EXISTS idx_catalogo_pid ON Catalogo(pid)",
)

TABLES = ("Fornitori", "Pezzi", "Catalogo")

_CREATE_TABLE = re.compile(r"\bCREATE\s+TABLE\b", re.IGNORECASE)


class CatalogDB:
    """Manages a writable connection to the relations database.

    Used to create the schema and load data; the query core only reads
    through :class:`SQLiteRelationStore`.

    Usage::

        with CatalogDB("database.sqlite") as db:
            db.create_schema()
            db.load_dump("database_dump.sql")
    """

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path: Path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError("CatalogDB is not connected. Use as context manager or call connect().")
        return self._conn

    # ── lifecycle ─────────────────────────────────────────────────

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA foreign_keys=ON")
        conn.row_factory = sqlite3.Row
        self._conn = conn
        logger.debug("Catalog DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        """Close the connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "CatalogDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── schema & data ─────────────────────────────────────────────

    def create_schema(self) -> None:
        """Idempotently create the three tables and their indexes."""
        for statement in _SCHEMA:
            self.conn.execute(statement)
        self.conn.commit()

    def load_dump(self, dump_path: Union[str, Path]) -> None:
        """Execute a SQL dump (schema and/or INSERTs) against the database."""
        script = Path(dump_path).read_text(encoding="utf-8")
        self.conn.executescript(script)
        self.conn.commit()
        logger.info("Loaded SQL dump %s", dump_path)

    def missing_tables(self) -> list[str]:
        """Names of the three relation tables not present in the database."""
        present = {
            row[0] for row in self.conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        return [name for name in TABLES if name not in present]

    def initialise(self, dump_path: Optional[Union[str, Path]] = None) -> None:
        """Bring the database to a usable state, optionally from a SQL dump.

        A dump with its own ``CREATE TABLE`` statements runs against the
        database as it is; an INSERT-only dump gets the schema first. Tables
        still missing afterwards are created.
        """
        if dump_path is not None:
            script = Path(dump_path).read_text(encoding="utf-8")
            if not _CREATE_TABLE.search(script):
                self.create_schema()
            self.load_dump(dump_path)
        if self.missing_tables():
            self.create_schema()

    def insert_relations(self, relations: Relations) -> None:
        """Insert every row of *relations* in a single transaction."""
        with self.conn:
            self.conn.executemany(
                "INSERT INTO Fornitori (fid, fnome) VALUES (?, ?)",
                [(s.fid, s.fnome) for s in relations.suppliers],
            )
            self.conn.executemany(
                "INSERT INTO Pezzi (pid, pnome, colore) VALUES (?, ?, ?)",
                [(p.pid, p.pnome, p.colore) for p in relations.parts],
            )
            self.conn.executemany(
                "INSERT INTO Catalogo (fid, pid, costo) VALUES (?, ?, ?)",
                [(c.fid, c.pid, float(c.costo)) for c in relations.catalog],
            )


class SQLiteRelationStore:
    """Relation store reading the three tables from an SQLite file.

    Each call opens its own read-only connection and reads all tables inside
    one transaction, so concurrent callers never share a connection and
    every read is self-consistent.

    A NULL ``colore`` is read as ``""``, so such a part never matches a
    colour. This differs from the legacy SQL, where ``LOWER(NULL) <> :colore``
    is unknown and the part does not disqualify its supplier in q7.
    """

    def __init__(self, db_path: Union[str, Path], timeout: float = 5.0) -> None:
        self.db_path = Path(db_path)
        self.timeout = timeout

    def read_relations(self) -> Relations:
        if not self.db_path.exists():
            raise RelationStoreError("database file not found", source=str(self.db_path))

        start = time.perf_counter()
        uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
        try:
            conn = sqlite3.connect(uri, uri=True, timeout=self.timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise RelationStoreError(str(e), source=str(self.db_path)) from e

        try:
            conn.execute("BEGIN")
            suppliers = tuple(
                Supplier(fid, fnome)
                for fid, fnome in conn.execute("SELECT fid, fnome FROM Fornitori")
            )
            parts = tuple(
                Part(pid, pnome, colore if colore is not None else "")
                for pid, pnome, colore in conn.execute("SELECT pid, pnome, colore FROM Pezzi")
            )
            catalog = tuple(
                CatalogEntry(fid, pid, costo)
                for fid, pid, costo in conn.execute("SELECT fid, pid, costo FROM Catalogo")
            )
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            raise RelationStoreError(str(e), source=str(self.db_path)) from e
        finally:
            conn.close()

        relations = Relations(suppliers=suppliers, parts=parts, catalog=catalog)
        logger.debug(
            "Read %d suppliers, %d parts, %d catalog rows from %s in %.1fms",
            len(suppliers),
            len(parts),
            len(catalog),
            self.db_path,
            (time.perf_counter() - start) * 1000,
        )
        return relations
