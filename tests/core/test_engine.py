"""Tests for GraphEngine - snapshot state, queries and locking."""

import threading

import pytest

from cardgraph.config import DEFAULT_CONFIG, merge_configs
from cardgraph.engine import GraphEngine
from cardgraph.exceptions import CardFormatError, DuplicateCardError, EngineLockError
from tests.core.graph_test_helpers import make_card, make_chain, make_cycle


@pytest.fixture
def engine(ab_cards):
    engine = GraphEngine()
    engine.rebuild(ab_cards)
    return engine


class TestRebuild:
    """Tests for GraphEngine.rebuild()."""

    def test_new_engine_is_empty(self):
        engine = GraphEngine()

        assert not engine.is_built
        assert engine.snapshot().node_count() == 0
        assert engine.orphans() == []
        assert engine.pagerank() == {}
        assert engine.clusters() == []

    def test_rebuild_publishes_snapshot(self, engine):
        assert engine.is_built
        assert engine.snapshot().node_count() == 2

    def test_rebuild_replaces_whole_state(self, engine):
        old = engine.snapshot()

        engine.rebuild([make_card("z", title="Zed")])

        graph = engine.snapshot()
        assert graph is not old
        assert graph.node_ids() == ["z"]
        assert graph.resolution_index() == {"Zed": "z"}
        assert old.node_count() == 2

    def test_failed_rebuild_keeps_previous_snapshot(self, engine):
        old = engine.snapshot()

        with pytest.raises(CardFormatError):
            engine.rebuild([{"title": "no id"}])

        assert engine.snapshot() is old

    def test_rebuild_twice_is_identical(self, ab_cards):
        engine = GraphEngine()
        engine.rebuild(ab_cards)
        first = (engine.pagerank(), [c.to_dict() for c in engine.clusters()])
        engine.rebuild(ab_cards)
        second = (engine.pagerank(), [c.to_dict() for c in engine.clusters()])

        assert first == second

    def test_accepts_dict_records(self):
        engine = GraphEngine()
        engine.rebuild([{"id": "a", "links": ["b"]}, {"id": "b"}])

        assert engine.snapshot().has_edge("a", "b")


class TestQueries:
    """Tests for the query facade."""

    def test_backlinks(self, engine):
        assert [info.id for info in engine.backlinks("a")] == ["b"]
        assert engine.backlinks("missing") == []

    def test_importance_ranking(self, engine):
        ranking = engine.importance_ranking(limit=1)

        assert len(ranking) == 1
        assert ranking[0].id == "a"

    def test_clusters_mode_override(self):
        engine = GraphEngine()
        engine.rebuild(make_chain("a", "b"))

        assert len(engine.clusters()) == 2
        assert len(engine.clusters("weak")) == 1

    def test_unresolved_references(self):
        engine = GraphEngine()
        engine.rebuild([make_card("c", links=["Nonexistent"])])

        assert [r.reference for r in engine.unresolved_references()] == ["Nonexistent"]
        assert engine.orphans() == ["c"]

    def test_layout(self, engine):
        data = engine.layout(seed=5)

        assert len(data.nodes) == 2
        assert data.cluster_count == 1
        assert data == engine.layout(seed=5)

    def test_stats(self, engine):
        stats = engine.stats()

        assert stats == {
            "built": True,
            "node_count": 2,
            "edge_count": 2,
            "orphan_count": 0,
            "unresolved_count": 0,
            "mutation_count": 0,
        }


class TestConfig:
    """Configuration changes flow into queries."""

    def test_cluster_mode_from_config(self):
        config = merge_configs(DEFAULT_CONFIG, {"clusters": {"mode": "weak"}})
        engine = GraphEngine(config)
        engine.rebuild(make_chain("a", "b"))

        assert len(engine.clusters()) == 1
        assert engine.layout(seed=1).cluster_count == 1

    def test_pagerank_options_from_config(self):
        cards = make_chain("a", "b")
        plain = GraphEngine()
        plain.rebuild(cards)
        config = merge_configs(DEFAULT_CONFIG, {"pagerank": {"redistribute_dangling": True}})
        textbook = GraphEngine(config)
        textbook.rebuild(cards)

        assert sum(plain.pagerank().values()) < 1.0
        assert sum(textbook.pagerank().values()) == pytest.approx(1.0)

    def test_layout_options_from_config(self, ab_cards):
        config = merge_configs(DEFAULT_CONFIG, {"layout": {"iterations": 0, "init_range": 0.0}})
        engine = GraphEngine(config)
        engine.rebuild(ab_cards)

        data = engine.layout(seed=3)

        assert all(node.x == 0.0 and node.y == 0.0 for node in data.nodes)

    def test_config_is_copied(self):
        config = merge_configs(DEFAULT_CONFIG, {})
        engine = GraphEngine(config)
        config["clusters"]["mode"] = "weak"

        assert engine.config["clusters"]["mode"] == "strong"


class TestMutations:
    """Tests for incremental updates through the engine."""

    def test_add_card_publishes_new_snapshot(self, engine):
        old = engine.snapshot()

        engine.add_card(make_card("c", links=["a"]))

        assert "c" not in old
        assert engine.snapshot().has_edge("c", "a")
        assert engine.stats()["mutation_count"] == 1

    def test_failed_mutation_keeps_snapshot(self, engine):
        old = engine.snapshot()

        with pytest.raises(DuplicateCardError):
            engine.add_card(make_card("a"))

        assert engine.snapshot() is old

    def test_update_and_remove(self, engine):
        engine.update_card("a", link_refs=[])
        assert engine.orphans() == []

        engine.remove_card("b")
        assert engine.orphans() == ["a"]

    def test_undo(self, engine):
        engine.remove_card("b")

        entry = engine.undo_last()

        assert entry.operation == "remove_card"
        assert [info.id for info in engine.backlinks("a")] == ["b"]
        assert engine.undo_last() is None

    def test_update_accepts_generators(self, engine):
        engine.update_card("a", aliases=(alias for alias in ["Alpha"]))

        assert engine.snapshot().resolve("Alpha") == "a"


class TestLocking:
    """Tests for lock acquisition and concurrent access."""

    def test_lock_timeout_raises(self, ab_cards):
        config = merge_configs(DEFAULT_CONFIG, {"engine": {"lock_timeout": 0.05}})
        engine = GraphEngine(config)
        engine.rebuild(ab_cards)

        engine._state_lock.acquire()
        try:
            with pytest.raises(EngineLockError) as exc_info:
                engine.backlinks("a")
        finally:
            engine._state_lock.release()

        assert exc_info.value.operation == "read"
        assert "0.05" in str(exc_info.value)

    def test_lock_released_after_error(self, engine):
        with pytest.raises(DuplicateCardError):
            engine.add_card(make_card("a"))

        engine.add_card(make_card("c"))
        assert "c" in engine.snapshot()

    def test_readers_see_consistent_snapshots(self):
        """Concurrent readers never observe a half-swapped graph."""
        small = make_cycle("a", "b")
        large = make_cycle(*[f"n{i}" for i in range(40)])
        engine = GraphEngine()
        engine.rebuild(small)

        errors = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                graph = engine.snapshot()
                ids = set(graph.node_ids())
                for edge in graph.iter_edges():
                    if edge.source not in ids or edge.target not in ids:
                        errors.append(edge)
                if set(graph.resolution_index().values()) - ids:
                    errors.append("index")

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        try:
            for i in range(30):
                engine.rebuild(large if i % 2 else small)
        finally:
            stop.set()
            for thread in threads:
                thread.join()

        assert errors == []
