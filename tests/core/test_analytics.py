"""Tests for graph analytics: PageRank, ranking, clusters, backlinks, orphans."""

import pytest

from cardgraph.graph.analytics import (
    backlinks,
    cluster_assignment,
    importance_ranking,
    knowledge_clusters,
    orphan_ids,
    pagerank,
    strongly_connected_components,
    weakly_connected_components,
)
from tests.core.graph_test_helpers import build_graph, make_card, make_chain, make_cycle


class TestPageRank:
    """Tests for pagerank()."""

    def test_empty_graph(self, empty_graph):
        assert pagerank(empty_graph) == {}

    def test_single_node(self):
        graph = build_graph(make_card("solo"))

        # (1 - d) / N with nothing flowing in
        assert pagerank(graph) == {"solo": pytest.approx(0.15)}

    def test_cycle_sums_to_one(self):
        graph = build_graph(*make_cycle("a", "b", "c", "d"))

        scores = pagerank(graph)

        assert sum(scores.values()) == pytest.approx(1.0)
        for score in scores.values():
            assert score == pytest.approx(0.25)

    def test_two_card_example_is_symmetric(self, ab_graph):
        scores = pagerank(ab_graph)

        assert scores["a"] == pytest.approx(0.5)
        assert scores["b"] == pytest.approx(0.5)

    def test_dangling_mass_not_redistributed_by_default(self):
        graph = build_graph(*make_chain("a", "b"))

        scores = pagerank(graph)

        assert sum(scores.values()) < 1.0

    def test_redistribute_dangling_sums_to_one(self):
        graph = build_graph(*make_chain("a", "b", "c"), make_card("d"))

        scores = pagerank(graph, redistribute_dangling=True)

        assert sum(scores.values()) == pytest.approx(1.0)

    def test_linked_card_outranks_source(self):
        graph = build_graph(
            make_card("hub"),
            make_card("s1", links=["hub"]),
            make_card("s2", links=["hub"]),
        )

        scores = pagerank(graph)

        assert scores["hub"] > scores["s1"]
        assert scores["s1"] == pytest.approx(scores["s2"])

    def test_zero_iterations_returns_uniform(self, mixed_graph):
        scores = pagerank(mixed_graph, iterations=0)

        assert list(scores.values()) == pytest.approx([0.2] * 5)

    def test_invalid_arguments(self, ab_graph):
        with pytest.raises(ValueError):
            pagerank(ab_graph, damping=1.5)
        with pytest.raises(ValueError):
            pagerank(ab_graph, iterations=-1)

    def test_deterministic_across_rebuilds(self, mixed_graph):
        rebuilt = build_graph(*mixed_graph.cards())

        assert pagerank(rebuilt) == pagerank(mixed_graph)


class TestImportanceRanking:
    """Tests for importance_ranking()."""

    def test_sorted_by_score_descending(self):
        graph = build_graph(
            make_card("hub"),
            make_card("s1", links=["hub"]),
            make_card("s2", links=["hub"]),
        )

        ranking = importance_ranking(graph)

        assert ranking[0].id == "hub"
        assert ranking[0].inbound_links == 2
        assert ranking[0].outbound_links == 0
        scores = [entry.score for entry in ranking]
        assert scores == sorted(scores, reverse=True)

    def test_ties_broken_by_id(self):
        graph = build_graph(make_card("c"), make_card("a"), make_card("b"))

        assert [entry.id for entry in importance_ranking(graph)] == ["a", "b", "c"]

    def test_limit_truncates(self, mixed_graph):
        assert len(importance_ranking(mixed_graph, limit=2)) == 2
        assert len(importance_ranking(mixed_graph, limit=100)) == 5
        assert importance_ranking(mixed_graph, limit=0) == []

    def test_negative_limit_rejected(self, mixed_graph):
        with pytest.raises(ValueError):
            importance_ranking(mixed_graph, limit=-1)

    def test_uses_precomputed_scores(self, ab_graph):
        ranking = importance_ranking(ab_graph, scores={"a": 0.9, "b": 0.1})

        assert [(e.id, e.score) for e in ranking] == [("a", 0.9), ("b", 0.1)]

    def test_carries_title(self, ab_graph):
        titles = {entry.id: entry.title for entry in importance_ranking(ab_graph)}

        assert titles == {"a": "A", "b": "B"}


class TestComponents:
    """Tests for strong and weak connectivity."""

    def test_scc_separates_one_way_reference(self):
        graph = build_graph(*make_chain("a", "b"))

        components = sorted(sorted(c) for c in strongly_connected_components(graph))

        assert components == [["a"], ["b"]]

    def test_wcc_joins_one_way_reference(self):
        graph = build_graph(*make_chain("a", "b"))

        assert [sorted(c) for c in weakly_connected_components(graph)] == [["a", "b"]]

    def test_scc_on_long_chain_does_not_recurse(self):
        ids = [f"n{i:05d}" for i in range(3000)]
        graph = build_graph(*make_cycle(*ids))

        components = strongly_connected_components(graph)

        assert len(components) == 1
        assert len(components[0]) == 3000


class TestKnowledgeClusters:
    """Tests for knowledge_clusters()."""

    def test_example_single_cluster(self, ab_graph):
        clusters = knowledge_clusters(ab_graph)

        assert len(clusters) == 1
        assert clusters[0].size == 2
        assert clusters[0].nodes == ["a", "b"]

    def test_partition_no_overlap(self, mixed_graph):
        clusters = knowledge_clusters(mixed_graph)

        members = [card_id for cluster in clusters for card_id in cluster.nodes]
        assert sorted(members) == sorted(mixed_graph.node_ids())
        assert len(members) == len(set(members))

    def test_isolated_card_is_singleton(self, mixed_graph):
        clusters = knowledge_clusters(mixed_graph)

        lonely = [c for c in clusters if "w" in c.nodes]
        assert len(lonely) == 1
        assert lonely[0].size == 1
        assert lonely[0].center_node == "w"

    def test_sorted_by_size_and_numbered(self, mixed_graph):
        clusters = knowledge_clusters(mixed_graph)

        assert [c.id for c in clusters] == list(range(len(clusters)))
        sizes = [c.size for c in clusters]
        assert sizes == sorted(sizes, reverse=True)
        assert clusters[0].nodes == ["x", "y"]

    def test_weak_mode(self, mixed_graph):
        clusters = knowledge_clusters(mixed_graph, mode="weak")

        assert clusters[0].nodes == ["x", "y", "z"]
        assert len(clusters) == 3

    def test_center_is_highest_pagerank(self):
        graph = build_graph(
            make_card("hub", links=["s1"]),
            make_card("s1", links=["hub"]),
            make_card("s2", links=["hub"]),
            make_card("s3", links=["s2"]),
        )

        clusters = knowledge_clusters(graph, mode="weak")

        assert clusters[0].center_node == "hub"

    def test_unknown_mode(self, ab_graph):
        with pytest.raises(ValueError, match="Unknown cluster mode"):
            knowledge_clusters(ab_graph, mode="fuzzy")

    def test_empty_graph(self, empty_graph):
        assert knowledge_clusters(empty_graph) == []

    def test_cluster_assignment(self, mixed_graph):
        clusters = knowledge_clusters(mixed_graph)
        assignment = cluster_assignment(clusters)

        assert assignment["x"] == assignment["y"] == 0
        assert len(set(assignment.values())) == len(clusters)


class TestBacklinks:
    """Tests for backlinks()."""

    def test_example_scenario(self, ab_graph):
        assert [info.id for info in backlinks(ab_graph, "a")] == ["b"]
        assert [info.id for info in backlinks(ab_graph, "b")] == ["a"]

    def test_carries_source_metadata(self):
        graph = build_graph(
            make_card("src", title="Source", card_type="literature", links=["dst"]),
            make_card("dst"),
        )

        [info] = backlinks(graph, "dst")

        assert info.title == "Source"
        assert info.card_type == "literature"
        assert info.context is None

    def test_not_transitive(self):
        graph = build_graph(*make_chain("a", "b", "c"))

        assert [info.id for info in backlinks(graph, "c")] == ["b"]

    def test_unknown_card(self, ab_graph):
        assert backlinks(ab_graph, "missing") == []

    def test_no_phantom_backlinks(self, mixed_graph):
        for node in mixed_graph.all_nodes():
            sources = {info.id for info in backlinks(mixed_graph, node.id)}
            expected = {n.id for n in mixed_graph.all_nodes() if n.links_to(node.id)}
            assert sources == expected


class TestOrphans:
    """Tests for orphan_ids()."""

    def test_orphans_exact(self, mixed_graph):
        assert orphan_ids(mixed_graph) == ["u", "w"]

    def test_one_way_edges_are_not_orphans(self):
        graph = build_graph(*make_chain("a", "b"))

        assert orphan_ids(graph) == []

    def test_example_has_no_orphans(self, ab_graph):
        assert orphan_ids(ab_graph) == []

    def test_empty_graph(self, empty_graph):
        assert orphan_ids(empty_graph) == []
