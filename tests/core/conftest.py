"""Pytest fixtures for core tests."""

import pytest


@pytest.fixture
def ab_cards():
    """Two cards referencing each other: a by title, b by id."""
    from cardgraph.graph.GraphNode import CardRef

    return [
        CardRef(id="a", title="A", link_refs=("B",)),
        CardRef(id="b", title="B", aliases=("Bee",), link_refs=("a",)),
    ]


@pytest.fixture
def ab_graph(ab_cards):
    """Graph built from ab_cards."""
    from tests.core.graph_test_helpers import build_graph

    return build_graph(*ab_cards)


@pytest.fixture
def mixed_graph():
    """Graph with a cycle, a one-way tail, an orphan and an unresolved link.

    x <-> y -> z, w (orphan), u -> "Nonexistent"
    """
    from tests.core.graph_test_helpers import build_graph, make_card

    return build_graph(
        make_card("x", title="Ex", links=["y"]),
        make_card("y", title="Why", links=["Ex", "z"]),
        make_card("z", title="Zed"),
        make_card("w", title="Lonely"),
        make_card("u", title="You", links=["Nonexistent"]),
    )


@pytest.fixture
def empty_graph():
    """Graph built from no cards."""
    from cardgraph.graph.builder import GraphBuilder

    return GraphBuilder().build()
