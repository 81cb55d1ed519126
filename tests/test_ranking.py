from __future__ import annotations

import pytest

from graph_vector_store.knowledge_graph.models import Edge, Node
from graph_vector_store.knowledge_graph.ranking import harmonic_score, rank_relationships


def _node(name: str, count: int = 1, harmonic: float = 1.0) -> Node:
    return Node(name=name, count=count, harmonic=harmonic)


def _edge(src: Node, dst: Node, rel_type: str = "RELATES_TO", count: int = 1, harmonic: float = 1.0) -> Edge:
    return Edge(src=src, dst=dst, rel_type=rel_type, count=count, harmonic=harmonic)


def test_score_is_mean_of_three_ratios() -> None:
    edge = _edge(_node("A", 2, 4.0), _node("B", 3, 3.0), count=4, harmonic=2.0)
    assert harmonic_score(edge) == pytest.approx((0.5 + 2.0 + 1.0) / 3)


def test_zero_harmonic_counts_as_zero() -> None:
    edge = _edge(_node("A", 0, 0.0), _node("B", 1, 1.0), count=1, harmonic=1.0)
    assert harmonic_score(edge) == pytest.approx(2 / 3)


def test_confident_frequent_relationships_rank_first() -> None:
    weak = _edge(_node("A"), _node("B"), count=1, harmonic=10.0)
    strong = _edge(_node("C", 5, 5.5), _node("D", 5, 5.5), count=5, harmonic=5.5)

    ranked = rank_relationships([weak, strong])

    assert [r.edge for r in ranked] == [strong, weak]
    assert ranked[0].score > ranked[1].score


def test_ties_keep_input_order() -> None:
    edges = [_edge(_node(f"N{i}"), _node("X"), rel_type=f"T{i}") for i in range(6)]

    first = rank_relationships(edges)
    second = rank_relationships(edges)

    assert [r.edge.rel_type for r in first] == [f"T{i}" for i in range(6)]
    assert first == second


def test_empty_input() -> None:
    assert rank_relationships([]) == []
