"""
Flatten/rebuild must preserve the document's shape exactly: same key sets in
the same order, same array lengths, same scalar values.
"""

import json

import pytest

from json_i18n.errors import PathKeyError
from json_i18n.flattener import PendingUnit, flatten, pending_units
from json_i18n.rebuilder import rebuild


DOCUMENTS = [
    {"a": "hello", "b": "world"},
    {"items": ["red", "blue"]},
    {"n": 42, "flag": True, "x": None, "f": 1.5},
    {"deep": {"list": [[1, "two"], [], {"k": [None, False]}]}, "empty": {}},
    ["a", ["b", ["c"]], {"d": "e"}],
    "just a string",
    7,
    None,
    {},
    [],
    [[], {}],
    {"ünï": {"日本": ["テキスト", 0]}, "tags[]": "x"},
    {"": "x", "a": {"": [1]}},
    {"": {"b": "y"}},
]


def dumps(value):
    return json.dumps(value, ensure_ascii=False)


class TestFlatten:
    def test_nested_array_keys(self):
        assert flatten({"items": ["red", "blue"]}) == {"items[0]": "red", "items[1]": "blue"}

    def test_only_leaves_are_values(self):
        flat = flatten({"a": {"b": [1, {"c": "x"}]}})
        assert flat == {"a->b[0]": 1, "a->b[1]->c": "x"}

    def test_document_order(self):
        flat = flatten({"z": "1", "a": ["2", "3"], "m": "4"})
        assert list(flat) == ["z", "a[0]", "a[1]", "m"]

    def test_empty_containers_are_kept(self):
        assert flatten({"a": {}, "b": []}) == {"a": {}, "b": []}

    def test_root_scalar(self):
        assert flatten("hi") == {"": "hi"}

    def test_empty_key_at_root(self):
        assert flatten({"": "x", "a": {"": "y"}}) == {"->": "x", "a->": "y"}
        assert rebuild({"->": "x"}, {"->": "X"}) == {"": "X"}

    @pytest.mark.parametrize("doc", DOCUMENTS)
    def test_keys_are_unique_per_leaf(self, doc):
        leaves = []

        def count(o):
            if isinstance(o, dict) and o:
                for v in o.values():
                    count(v)
            elif isinstance(o, list) and o:
                for v in o:
                    count(v)
            else:
                leaves.append(o)

        count(doc)
        assert len(flatten(doc)) == len(leaves)

    def test_ambiguous_key_is_rejected(self):
        with pytest.raises(PathKeyError):
            flatten({"a->b": "x"})


class TestPendingUnits:
    def test_non_strings_never_pending(self):
        flat = flatten({"n": 42, "flag": True, "x": None, "s": "text", "e": ""})
        assert pending_units(flat) == [PendingUnit("s", "text")]

    def test_blank_strings_skipped(self):
        assert pending_units({"a": "   ", "b": "ok"}) == [PendingUnit("b", "ok")]


class TestRebuild:
    @pytest.mark.parametrize("doc", DOCUMENTS)
    def test_round_trip_without_translations(self, doc):
        assert dumps(rebuild(flatten(doc), {})) == dumps(doc)

    def test_substitutes_by_path(self):
        doc = {"a": "hello", "b": ["hello", 3]}
        out = rebuild(flatten(doc), {"b[0]": "bonjour"})
        assert out == {"a": "hello", "b": ["bonjour", 3]}

    def test_nested_array_shape(self):
        out = rebuild(flatten({"items": ["red", "blue"]}), {"items[0]": "rouge", "items[1]": "bleu"})
        assert out == {"items": ["rouge", "bleu"]}

    def test_does_not_share_empty_containers(self):
        doc = {"a": [], "b": {}}
        flat = flatten(doc)
        out = rebuild(flat, {})
        out["a"].append(1)
        assert doc["a"] == []

    def test_gap_in_array_is_an_error(self):
        with pytest.raises(ValueError):
            rebuild({"[1]": "x"}, {})

    def test_empty_leaf_map_is_an_error(self):
        with pytest.raises(ValueError):
            rebuild({}, {})
