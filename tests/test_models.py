from __future__ import annotations

import pytest

from graph_vector_store.knowledge_graph.models import Entity, Relationship, is_identifier, normalize_name


@pytest.mark.parametrize(
    "a, b",
    [
        ("Prompt Engineering", "prompt-engineering"),
        ("prompt.engineering", "PROMPT ENGINEERING"),
        ("Apollo 11", "apollo-11"),
    ],
)
def test_normalize_name_merges_case_and_separators(a: str, b: str) -> None:
    assert normalize_name(a) == normalize_name(b)


def test_normalize_name_examples() -> None:
    assert normalize_name("Prompt Engineering") == "PROMPT_ENGINEERING"
    assert normalize_name("3D Printing") == "_3D_PRINTING"
    assert normalize_name("Apollo 11") == "APOLLO_11"
    assert normalize_name("O'Brien & Sons!") == "OBRIEN__SONS"
    assert normalize_name("snake_case") == "SNAKE_CASE"


def test_normalize_name_is_idempotent() -> None:
    for raw in ["3D Printing", "Prompt Engineering", "a.b-c d", "__x__"]:
        once = normalize_name(raw)
        assert normalize_name(once) == once
        assert is_identifier(once)


def test_normalize_name_drops_non_ascii() -> None:
    assert normalize_name("Café") == "CAF"
    assert normalize_name("東京") == ""


def test_entity_labels_are_normalized_and_sorted() -> None:
    e = Entity(name="Apollo 11", types=frozenset({"space mission", "Mission", "!!"}), emphasis=0.9)
    assert e.key == "APOLLO_11"
    assert e.labels == ["MISSION", "SPACE_MISSION"]
    assert e.kind == "entity"


def test_entity_accepts_any_iterable_of_types() -> None:
    e = Entity(name="Moon", types=["Place", "Place"], emphasis=0.5)
    assert e.types == frozenset({"Place"})


@pytest.mark.parametrize("emphasis", [0.0, -0.1, 1.01])
def test_entity_rejects_emphasis_out_of_range(emphasis: float) -> None:
    with pytest.raises(ValueError):
        Entity(name="Moon", emphasis=emphasis)


def test_entity_rejects_unusable_name() -> None:
    with pytest.raises(ValueError):
        Entity(name="!!!", emphasis=0.5)


def test_relationship_keys() -> None:
    r = Relationship(src="Apollo 11", dst="Moon", rel_type="landed on", emphasis=0.8)
    assert (r.src_key, r.dst_key, r.key) == ("APOLLO_11", "MOON", "LANDED_ON")
    assert r.kind == "relationship"


def test_relationship_rejects_unusable_type() -> None:
    with pytest.raises(ValueError):
        Relationship(src="A", dst="B", rel_type="???", emphasis=0.5)
