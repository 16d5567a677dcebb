"""Unit tests for Struct merging."""

from __future__ import annotations

from workflow_closure.merge import merge, merge_layers
from workflow_closure.model import Struct, Value


def _struct(**values: str) -> Struct:
    return Struct.of({key: Value.of_string(value) for key, value in values.items()})


def test_merge_source_wins_on_shared_keys() -> None:
    source = _struct(a="a0", b="b0")
    target = _struct(b="b1", c="c1")

    expected = _struct(a="a0", b="b0", c="c1")
    assert len(expected.fields) == 3

    assert merge(source, target) == expected


def test_merge_keys_are_the_union() -> None:
    source = _struct(a="1", x="2")
    target = _struct(x="3", y="4", z="5")

    merged = merge(source, target)

    assert set(merged.fields) == set(source.fields) | set(target.fields)
    for key in source.fields:
        assert merged.fields[key] == source.fields[key]
    for key in set(target.fields) - set(source.fields):
        assert merged.fields[key] == target.fields[key]


def test_merge_with_empty_is_identity() -> None:
    a = _struct(a="a0", b="b0")

    assert merge(a, Struct.empty()) == a
    assert merge(Struct.empty(), a) == a
    assert merge(Struct.empty(), Struct.empty()) == Struct.empty()
    assert merge(a, a) == a


def test_merge_does_not_mutate_inputs() -> None:
    source = _struct(a="a0")
    target = _struct(a="a1", b="b1")

    merge(source, target)

    assert source == _struct(a="a0")
    assert target == _struct(a="a1", b="b1")


def test_merge_is_independent_of_insertion_order() -> None:
    source_a = Struct.of({"a": Value.of_string("1"), "b": Value.of_string("2")})
    source_b = Struct.of({"b": Value.of_string("2"), "a": Value.of_string("1")})
    target = _struct(c="3")

    assert merge(source_a, target) == merge(source_b, target)


def test_merge_replaces_nested_structs_wholesale() -> None:
    source = Struct.of({"resources": Value.of_struct(_struct(cpu="2"))})
    target = Struct.of({"resources": Value.of_struct(_struct(cpu="1", memory="1Gi"))})

    merged = merge(source, target)

    assert merged.to_python() == {"resources": {"cpu": "2"}}


def test_merge_layers_highest_priority_first() -> None:
    node = _struct(retries="5")
    workflow = _struct(retries="3", cache="true")
    project = _struct(cache="false", queue="default")

    merged = merge_layers(node, workflow, None, project)

    assert merged.to_python() == {"retries": "5", "cache": "true", "queue": "default"}
    assert merge_layers() == Struct.empty()
