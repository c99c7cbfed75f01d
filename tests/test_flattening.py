"""Unit tests for flatten/unflatten."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import pytest

from smart_case_lab.errors import PathConflictError
from smart_case_lab.flattening import flatten, flatten_columns, unflatten


class TestFlatten:

    def test_order_is_depth_first(self, sample_item):
        assert list(flatten_columns(sample_item)) == [
            "id", "name", "details.price", "details.stock", "tags.0", "tags.1",
        ]

    def test_paths_are_tagged(self, sample_item):
        flat = flatten(sample_item)
        assert flat[("tags", 1)] == "tag2"
        assert flat[("details", "price")] == 100

    def test_scalars_kept_as_is(self):
        assert flatten({"a": None, "b": True, "c": 1.5}) == {("a",): None, ("b",): True, ("c",): 1.5}

    def test_empty_containers_contribute_no_columns(self):
        assert flatten({"a": {}, "b": [], "c": 1}) == {("c",): 1}

    def test_keep_empty(self):
        assert flatten({"a": {}, "b": []}, keep_empty=True) == {("a",): {}, ("b",): []}

    def test_digit_key_is_a_field(self):
        assert flatten({"0": "a"}) == {("0",): "a"}
        assert flatten(["a"]) == {(0,): "a"}


class TestUnflatten:

    @pytest.mark.parametrize("value", [
        {"id": 1, "name": "Test Item", "details": {"price": 100, "stock": 10}, "tags": ["tag1", "tag2"]},
        [{"a": 1}, {"a": 2, "b": [True, None]}],
        {"matrix": [[1, 2], [3, 4]]},
        {"0": "a", "1": {"2": "b"}},
    ])
    def test_round_trip(self, value):
        assert unflatten(flatten(value)) == value

    def test_string_paths_infer_arrays(self):
        assert unflatten({"tags.0": "x", "tags.1": "y"}) == {"tags": ["x", "y"]}

    def test_sparse_index_pads_with_none(self):
        assert unflatten({"items.2": "c"}) == {"items": [None, None, "c"]}

    def test_empty_input(self):
        assert unflatten({}) == {}

    def test_conflicting_kinds(self):
        with pytest.raises(PathConflictError):
            unflatten([(("a", 0), 1), (("a", "b"), 2)])

    def test_accepts_iterable_of_pairs(self):
        assert unflatten([(("a", "b"), 1), (("c",), 2)]) == {"a": {"b": 1}, "c": 2}
