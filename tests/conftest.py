"""Shared fixtures for the catalogo-query tests."""

from datetime import datetime, timezone

import pytest

from catalogo_query.relations import CatalogDB, InMemoryRelationStore, Relations

SUPPLIERS = [
    (1, "Acme"),
    (2, "Bravo"),
    (3, "Carta"),
    (4, "Delta"),  # supplies nothing
    (5, "Acme"),  # same name as supplier 1
]

PARTS = [
    (10, "Bolt", "rosso"),
    (11, "Nut", "Rosso"),
    (12, "Screw", "verde"),
    (13, "Washer", "blu"),
    (14, "Bolt", "verde"),  # same name as part 10
]

# (fid, pid, costo)
CATALOG = [
    (1, 10, 10.0),
    (1, 11, 20.0),
    (1, 12, 30.0),
    (1, 13, 40.0),
    (1, 14, 50.0),
    (2, 10, 10.0),
    (2, 11, 5.0),
    (3, 10, 7.0),
    (3, 12, 35.0),
    (3, 13, 40.0),
    (5, 14, 60.0),
]


@pytest.fixture
def relations() -> Relations:
    """Five suppliers, five parts, eleven catalog rows."""
    return Relations.from_rows(suppliers=SUPPLIERS, parts=PARTS, catalog=CATALOG)


@pytest.fixture
def single_relations() -> Relations:
    """One supplier offering one part."""
    return Relations.from_rows(
        suppliers=[(1, "Acme")],
        parts=[(10, "Bolt", "red")],
        catalog=[(1, 10, 5.0)],
    )


@pytest.fixture
def store(relations) -> InMemoryRelationStore:
    return InMemoryRelationStore(relations)


@pytest.fixture
def sqlite_db(tmp_path, relations):
    """Path to an SQLite database populated with the ``relations`` fixture."""
    db_path = tmp_path / "database.sqlite"
    with CatalogDB(db_path) as db:
        db.create_schema()
        db.insert_relations(relations)
    return db_path


@pytest.fixture
def fixed_clock():
    """Clock frozen at 2024-05-01 10:00:00.123456 UTC."""
    moment = datetime(2024, 5, 1, 10, 0, 0, 123456, tzinfo=timezone.utc)
    return lambda: moment
