import copy

import pytest

from shortlink.services.binding.merge import merge


def test_merge_removes_keys_missing_from_source():
    target = {"a": 1, "b": 2}
    merge(target, {"a": 1})
    assert target == {"a": 1}


def test_merge_assigns_scalars_and_new_keys():
    target = {"a": 1}
    merge(target, {"a": 5, "b": "x", "c": None})
    assert target == {"a": 5, "b": "x", "c": None}


def test_merge_into_itself_is_a_noop():
    document = {"k": {"fulllink": "http://x", "tags": [1, 2, {"n": 3}]}, "n": 4}
    snapshot = copy.deepcopy(document)
    nested = document["k"]
    tags = nested["tags"]

    merge(document, document)

    assert document == snapshot
    assert document["k"] is nested
    assert document["k"]["tags"] is tags


def test_nested_container_identity_is_preserved():
    target = {"abc": {"fulllink": "http://old"}}
    held = target["abc"]

    merge(target, {"abc": {"fulllink": "http://new", "expiry": "2099-01-01"}})

    assert target["abc"] is held
    assert held == {"fulllink": "http://new", "expiry": "2099-01-01"}


def test_lists_are_merged_by_index_and_truncated():
    target = {"items": [1, 2, 3, 4]}
    held = target["items"]

    merge(target, {"items": [9, 8]})

    assert target["items"] is held
    assert held == [9, 8]

    merge(target, {"items": [9, 8, {"x": 1}]})
    assert held == [9, 8, {"x": 1}]


def test_slot_kind_change_gets_fresh_container():
    target = {"a": [1, 2], "b": {"x": 1}, "c": 3}
    merge(target, {"a": {"k": "v"}, "b": [1], "c": {"d": [1]}})
    assert target == {"a": {"k": "v"}, "b": [1], "c": {"d": [1]}}
    assert isinstance(target["a"], dict)
    assert isinstance(target["b"], list)


def test_structured_value_replaces_null_slot():
    target = {"a": None}
    merge(target, {"a": {"b": 1}})
    assert target == {"a": {"b": 1}}


def test_merge_rejects_mismatched_roots():
    with pytest.raises(TypeError):
        merge({}, [])
    with pytest.raises(TypeError):
        merge([], {})
    with pytest.raises(TypeError):
        merge("text", {})
