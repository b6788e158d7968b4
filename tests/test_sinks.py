"""Tests for JSON, SQLite history and composite snapshot sinks."""

import json
from decimal import Decimal

import pytest

from catalogo_query.exceptions import SinkError, SnapshotLoadError
from catalogo_query.query import json_default, resolve_params
from catalogo_query.relations import InMemoryRelationStore, Relations
from catalogo_query.snapshot import (
    BundleHistoryDB,
    CompositeSink,
    JsonFileSink,
    SQLiteSnapshotSink,
    SnapshotBuilder,
    SnapshotSink,
    list_bundles,
    load_bundle,
    save_bundle,
)


@pytest.fixture
def bundle(store, fixed_clock):
    return SnapshotBuilder(store, clock=fixed_clock).build()


class TestJsonFileSink:
    """Latest-bundle JSON file."""

    def test_satisfies_protocol(self, tmp_path):
        assert isinstance(JsonFileSink(tmp_path / "e.json"), SnapshotSink)

    def test_store_and_load(self, tmp_path, bundle):
        sink = JsonFileSink(tmp_path / "esiti.json")
        assert sink.store(bundle) == str(tmp_path / "esiti.json")
        assert sink.load() == bundle

    def test_creates_parent_directories(self, tmp_path, bundle):
        sink = JsonFileSink(tmp_path / "a" / "b" / "esiti.json")
        sink.store(bundle)
        assert (tmp_path / "a" / "b" / "esiti.json").exists()

    def test_pretty_printed_unicode(self, tmp_path, store):
        params = resolve_params({"fornitore": "Società"})
        sink = JsonFileSink(tmp_path / "esiti.json")
        sink.store(SnapshotBuilder(store).build(params))
        text = (tmp_path / "esiti.json").read_text(encoding="utf-8")
        assert "Società" in text
        assert '\n    "generated_at"' in text

    def test_last_write_wins(self, tmp_path, store):
        sink = JsonFileSink(tmp_path / "esiti.json")
        builder = SnapshotBuilder(store)
        sink.store(builder.build(resolve_params({"colore": "rosso"})))
        sink.store(builder.build(resolve_params({"colore": "verde"})))
        assert sink.load().parameters.colore == "verde"

    def test_no_temporary_files_left(self, tmp_path, bundle):
        sink = JsonFileSink(tmp_path / "esiti.json")
        sink.store(bundle)
        sink.store(bundle)
        assert [p.name for p in tmp_path.iterdir()] == ["esiti.json"]

    def test_missing_file_loads_none(self, tmp_path):
        sink = JsonFileSink(tmp_path / "missing.json")
        assert sink.load() is None
        assert sink.load_raw() is None

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "esiti.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SnapshotLoadError):
            JsonFileSink(path).load()

    def test_not_a_bundle(self, tmp_path):
        path = tmp_path / "esiti.json"
        path.write_text(json.dumps({"hello": "world"}), encoding="utf-8")
        sink = JsonFileSink(path)
        assert sink.load_raw() == {"hello": "world"}
        with pytest.raises(SnapshotLoadError):
            sink.load()

    def test_unwritable_target(self, tmp_path, bundle):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        with pytest.raises(SinkError) as exc_info:
            JsonFileSink(blocker / "esiti.json").store(bundle)
        assert exc_info.value.location == str(blocker / "esiti.json")


class TestBundleHistoryDB:
    """History database functions."""

    def test_save_and_load_latest(self, tmp_path, bundle, store):
        other = SnapshotBuilder(store).build(resolve_params({"colore": "blu"}))
        with BundleHistoryDB(tmp_path / "h.db") as db:
            first = save_bundle(db.conn, bundle)
            second = save_bundle(db.conn, other)
            assert second > first
            assert load_bundle(db.conn) == other
            assert load_bundle(db.conn, first) == bundle
            assert load_bundle(db.conn, 999) is None

    def test_list_bundles_newest_first(self, tmp_path, bundle):
        with BundleHistoryDB(tmp_path / "h.db") as db:
            for _ in range(3):
                save_bundle(db.conn, bundle)
            summaries = list_bundles(db.conn, limit=2)
        assert [s["id"] for s in summaries] == [3, 2]
        assert summaries[0]["row_counts"]["q1"] == 4
        assert summaries[0]["parameters"]["colore"] == "rosso"

    def test_conn_requires_connect(self, tmp_path):
        with pytest.raises(RuntimeError):
            BundleHistoryDB(tmp_path / "h.db").conn

    def test_migrate_is_idempotent(self, tmp_path, bundle):
        path = tmp_path / "h.db"
        with BundleHistoryDB(path) as db:
            save_bundle(db.conn, bundle)
        with BundleHistoryDB(path) as db:
            assert len(list_bundles(db.conn)) == 1


class TestSQLiteSnapshotSink:
    def test_store_returns_row_location(self, tmp_path, bundle):
        sink = SQLiteSnapshotSink(tmp_path / "h.db")
        assert sink.store(bundle) == f"{tmp_path / 'h.db'}#1"
        assert sink.store(bundle) == f"{tmp_path / 'h.db'}#2"
        assert sink.load() == bundle

    def test_missing_database(self, tmp_path):
        sink = SQLiteSnapshotSink(tmp_path / "missing.db")
        assert sink.load() is None
        assert sink.history() == []
        assert not (tmp_path / "missing.db").exists()

    def test_history(self, tmp_path, bundle):
        sink = SQLiteSnapshotSink(tmp_path / "h.db")
        sink.store(bundle)
        history = sink.history()
        assert len(history) == 1
        assert history[0]["generated_at"] == "2024-05-01T10:00:00+00:00"


class TestCompositeSink:
    def test_stores_everywhere_reads_primary(self, tmp_path, bundle):
        primary = JsonFileSink(tmp_path / "esiti.json")
        mirror = SQLiteSnapshotSink(tmp_path / "h.db")
        sink = CompositeSink(primary, mirror)
        assert sink.location == primary.location
        assert sink.store(bundle) == primary.location
        assert sink.load() == bundle
        assert len(mirror.history()) == 1

    def test_mirror_failure_propagates(self, tmp_path, bundle):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        sink = CompositeSink(JsonFileSink(tmp_path / "esiti.json"), JsonFileSink(blocker / "e.json"))
        with pytest.raises(SinkError):
            sink.store(bundle)


class TestDecimalCosts:
    """Decimal costs are written as JSON numbers and read back as numbers."""

    @pytest.fixture
    def decimal_bundle(self):
        relations = Relations.from_rows(
            suppliers=[(1, "Acme"), (2, "Bravo")],
            parts=[(10, "Bolt", "rosso")],
            catalog=[(1, 10, Decimal("1.20")), (2, 10, Decimal("0.80"))],
        )
        return SnapshotBuilder(InMemoryRelationStore(relations)).build()

    def test_json_file_keeps_costs_numeric(self, tmp_path, decimal_bundle):
        sink = JsonFileSink(tmp_path / "esiti.json")
        sink.store(decimal_bundle)
        raw = json.loads((tmp_path / "esiti.json").read_text(encoding="utf-8"))
        assert raw["results"]["q6"] == [{"pid": 10, "pnome": "Bolt", "fnome": "Acme", "costo": 1.2}]

        costo = sink.load().rows("q6")[0].costo
        assert isinstance(costo, float)
        assert costo == 1.2

    def test_history_keeps_costs_numeric(self, tmp_path, decimal_bundle):
        sink = SQLiteSnapshotSink(tmp_path / "h.db")
        sink.store(decimal_bundle)
        costo = sink.load().rows("q6")[0].costo
        assert isinstance(costo, float)
        assert costo == 1.2

    def test_json_default_rejects_other_types(self):
        assert json_default(Decimal("2.5")) == 2.5
        with pytest.raises(TypeError):
            json_default(object())
