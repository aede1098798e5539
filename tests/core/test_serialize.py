"""Tests for graph serialization and result rendering."""

import csv
import io
import json

from cardgraph.graph.analytics import importance_ranking
from cardgraph.graph.serialize import serialize_graph, serialize_node, to_csv, to_markdown


class TestSerializeNode:
    """Tests for serialize_node()."""

    def test_linked_node(self, ab_graph):
        data = serialize_node(ab_graph.find_by_id("b"))

        assert data == {
            "id": "b",
            "title": "B",
            "card_type": "fleeting",
            "aliases": ["Bee"],
            "links": ["a"],
            "backlinks": ["a"],
        }

    def test_orphan_omits_adjacency(self, mixed_graph):
        data = serialize_node(mixed_graph.find_by_id("w"))

        assert "links" not in data
        assert "backlinks" not in data


class TestSerializeGraph:
    """Tests for serialize_graph()."""

    def test_structure(self, mixed_graph):
        data = serialize_graph(mixed_graph)

        assert set(data) == {"nodes", "edges", "unresolved", "metadata"}
        assert data["metadata"]["node_count"] == 5
        assert data["metadata"]["edge_count"] == 3
        assert data["metadata"]["by_type"] == {"permanent": 5}
        assert ["x", "y"] in data["edges"]
        assert data["unresolved"] == [{"source_id": "u", "reference": "Nonexistent"}]

    def test_json_serializable(self, mixed_graph):
        json.dumps(serialize_graph(mixed_graph))

    def test_empty_graph(self, empty_graph):
        data = serialize_graph(empty_graph)

        assert data["nodes"] == {}
        assert data["edges"] == []
        assert data["metadata"]["node_count"] == 0


class TestRendering:
    """Tests for markdown and CSV rendering."""

    def test_markdown_table(self, ab_graph):
        rows = [entry.to_dict() for entry in importance_ranking(ab_graph)]

        output = to_markdown(rows, ["id", "title", "score"], title="Card Importance")

        lines = output.splitlines()
        assert lines[0] == "# Card Importance"
        assert lines[2] == "| id | title | score |"
        assert lines[4] == "| a | A | 0.500000 |"

    def test_markdown_escapes_pipes_and_lists(self):
        output = to_markdown([{"title": "a|b", "nodes": ["x", "y"], "center": None}], ["title", "nodes", "center"])

        assert "| a\\|b | x, y | - |" in output

    def test_csv(self):
        rows = [{"id": 0, "nodes": ["a", "b"], "center_node": None}]

        output = to_csv(rows, ["id", "nodes", "center_node"])

        parsed = list(csv.reader(io.StringIO(output)))
        assert parsed == [["id", "nodes", "center_node"], ["0", "a; b", ""]]
