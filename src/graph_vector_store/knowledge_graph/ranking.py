from __future__ import annotations

from collections.abc import Iterable

from .models import Edge, Node, RankedRelationship


def _ratio(item: Node | Edge) -> float:
    # count / harmonic is the harmonic mean of every emphasis merged in.
    if item.harmonic <= 0:
        return 0.0
    return item.count / item.harmonic


def harmonic_score(edge: Edge) -> float:
    """Mean of count/harmonic over source node, edge, and destination node."""
    return (_ratio(edge.src) + _ratio(edge) + _ratio(edge.dst)) / 3


def rank_relationships(edges: Iterable[Edge]) -> list[RankedRelationship]:
    """Score and sort edges, best first.

    The sort is stable: equal scores keep their input order.
    """
    ranked = [RankedRelationship(edge=e, score=harmonic_score(e)) for e in edges]
    ranked.sort(key=lambda r: r.score, reverse=True)
    return ranked
