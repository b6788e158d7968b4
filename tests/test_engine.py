"""Tests for the query registry and QueryEngine."""

import pytest

from catalogo_query.config import QueryDefaults
from catalogo_query.exceptions import RelationStoreError, UnknownQueryError
from catalogo_query.query import (
    QUERIES,
    QUERY_LABELS,
    QueryEngine,
    evaluate,
    evaluate_all,
    get_query,
    resolve_params,
)
from catalogo_query.query.rows import PartIdRow, SupplierIdRow, SupplierNameRow
from catalogo_query.relations import InMemoryRelationStore, Relations


class _CountingStore:
    def __init__(self, relations):
        self.relations = relations
        self.reads = 0

    def read_relations(self):
        self.reads += 1
        return self.relations


class _FailingStore:
    def read_relations(self):
        raise RelationStoreError("disk on fire", source="test")


class TestRegistry:
    """The q1..q10 registry."""

    def test_ten_labels_in_order(self):
        assert QUERY_LABELS == tuple(f"q{n}" for n in range(1, 11))

    def test_numbers_match_labels(self):
        for label, query in QUERIES.items():
            assert label == f"q{query.number}"

    def test_parameters_per_query(self):
        assert QUERIES["q1"].parameters == ()
        assert QUERIES["q3"].parameters == ("colore",)
        assert QUERIES["q4"].parameters == ("fornitore",)
        assert QUERIES["q7"].parameters == ("colore",)
        assert QUERIES["q8"].parameters == ("colore1", "colore2")
        assert QUERIES["q9"].parameters == ("colore1", "colore2")
        assert QUERIES["q10"].parameters == ("min_fornitori",)

    def test_parameter_values(self):
        params = resolve_params({"colore1": "blu", "colore2": "nero"})
        assert QUERIES["q8"].parameter_values(params) == {"colore1": "blu", "colore2": "nero"}
        assert QUERIES["q6"].parameter_values(params) == {}

    @pytest.mark.parametrize("label", ["q7", "Q7", " q7 "])
    def test_get_query_normalises_label(self, label):
        assert get_query(label).label == "q7"

    @pytest.mark.parametrize("label", ["q0", "q11", "esiti", ""])
    def test_unknown_label(self, label):
        with pytest.raises(UnknownQueryError) as exc_info:
            get_query(label)
        assert exc_info.value.label == label
        assert "q1" in exc_info.value.known


class TestEvaluate:
    """Module-level evaluation helpers."""

    def test_evaluate_uses_params(self, relations):
        rows = evaluate("q3", relations, resolve_params({"colore": "verde"}))
        assert rows == [SupplierNameRow("Acme")]

    def test_evaluate_all_label_order(self, relations):
        results = evaluate_all(relations, resolve_params())
        assert list(results) == list(QUERY_LABELS)

    def test_evaluate_unknown_label(self, relations):
        with pytest.raises(UnknownQueryError):
            evaluate("q42", relations, resolve_params())


class TestQueryEngine:
    """RunQuery over a relation store."""

    def test_run_with_defaults(self, store):
        engine = QueryEngine(store)
        assert engine.run("q7") == [SupplierIdRow(2)]

    def test_run_with_custom_defaults(self, store):
        engine = QueryEngine(store, QueryDefaults(colore="verde"))
        assert engine.run("q7") == [SupplierIdRow(5)]

    def test_threshold_below_floor_matches_floor(self, store):
        engine = QueryEngine(store)
        low = engine.run("q10", resolve_params({"min_fornitori": "1"}))
        floor = engine.run("q10", resolve_params({"min_fornitori": "2"}))
        assert low == floor == [PartIdRow(p) for p in range(10, 15)]

    def test_one_read_per_run(self, relations):
        counting = _CountingStore(relations)
        engine = QueryEngine(counting)
        engine.run("q1")
        engine.run("q2")
        assert counting.reads == 2

    def test_unknown_label_does_not_read(self, relations):
        counting = _CountingStore(relations)
        with pytest.raises(UnknownQueryError):
            QueryEngine(counting).run("q99")
        assert counting.reads == 0

    def test_store_failure_propagates(self):
        with pytest.raises(RelationStoreError) as exc_info:
            QueryEngine(_FailingStore()).run("q1")
        assert exc_info.value.reason == "disk on fire"

    def test_sees_replaced_relations(self, store, single_relations):
        engine = QueryEngine(store)
        assert len(engine.run("q1")) == 4
        store.replace(single_relations)
        assert [r.pnome for r in engine.run("q1")] == ["Bolt"]

    def test_empty_store(self):
        engine = QueryEngine(InMemoryRelationStore(Relations()))
        for label in QUERY_LABELS:
            assert engine.run(label) == []
