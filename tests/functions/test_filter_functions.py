import pytest

from feedbase.core.database import get_default_database
from feedbase.functions import filter_functions
from feedbase.functions.filter_functions import LimitInfo, SortRule
from feedbase.models.fc_model import PropertyMapping
from feedbase.sql.searcher import SQLSearcher

MAPPING = PropertyMapping({"uid": "uid", "key1": "key1", "createTime": "create_time", "_hidden": "hidden"})


@pytest.mark.parametrize(
    "direction, expected",
    [
        ("ASC", "ASC"),
        ("desc", "DESC"),
        ("ascending", "ASC"),
        ("Descending", "DESC"),
        ("sideways", "ASC"),
        (None, "ASC"),
    ],
)
def test_sort_direction_synonyms(direction, expected):
    rule = filter_functions.build_sort_rule({"_sortKey": "uid", "_sortDirection": direction})
    assert rule == SortRule("uid", expected)


def test_limit_info_parsing():
    assert filter_functions.build_limit_info({}) == LimitInfo(-1, -1)
    assert filter_functions.build_limit_info({"_offset": "10", "_length": 5}) == LimitInfo(10, 5)
    assert filter_functions.build_limit_info({"_offset": "abc", "_length": 5}) == LimitInfo(-1, 5)
    assert LimitInfo(0, 5).is_active()
    assert not LimitInfo(0, 0).is_active()
    assert not LimitInfo(-1, 5).is_active()


@pytest.mark.parametrize(
    "offset, length, expected",
    [
        ("0", "1e1", LimitInfo(0, 10)),
        ("2.0", "2.0", LimitInfo(2, 2)),
        (3.7, 5, LimitInfo(3, 5)),
        (0, float("inf"), LimitInfo(0, -1)),
        (float("-inf"), 5, LimitInfo(-1, 5)),
        (0, float("nan"), LimitInfo(0, -1)),
        (0, "inf", LimitInfo(0, -1)),
        ([1], {}, LimitInfo(-1, -1)),
    ],
)
def test_limit_info_accepts_numeric_payload_values(offset, length, expected):
    assert filter_functions.build_limit_info({"_offset": offset, "_length": length}) == expected


def test_infinite_length_leaves_searcher_unpaginated(settings_override):
    searcher = SQLSearcher(get_default_database())
    filter_functions.apply_filter_options(searcher, {"_offset": 0, "_length": float("inf")}, MAPPING)
    assert searcher.limit_info is None


def test_filter_conditions_keep_only_truthy_mapped_identifiers():
    params = {
        "uid": 3,
        "key1": "",
        "createTime": "2024-01-01",
        "_hidden": "x",
        "unmapped": "x",
        "_sortKey": "uid",
        "1abc": "x",
    }
    assert filter_functions.extract_filter_conditions(params, MAPPING) == {
        "uid": 3,
        "create_time": "2024-01-01",
    }


@pytest.mark.parametrize("falsy", [0, "", None, False])
def test_falsy_filter_values_are_dropped(falsy):
    assert filter_functions.extract_filter_conditions({"uid": falsy}, MAPPING) == {}


def test_clean_filter_params():
    params = {"uid": 0, "key1": "a", "unmapped": 1, "_offset": 0}
    assert filter_functions.clean_filter_params(params, MAPPING) == {"uid": 0, "key1": "a"}


def test_apply_filter_options(settings_override):
    searcher = SQLSearcher(get_default_database())
    params = {
        "_sortKey": "createTime",
        "_sortDirection": "descending",
        "_offset": 20,
        "_length": 10,
        "key1": "a",
    }

    filter_functions.apply_filter_options(searcher, params, MAPPING)

    assert searcher.order_rules == [("create_time", "DESC")]
    assert searcher.conditions == [("key1", "a")]
    assert searcher.limit_info == (20, 10)


def test_apply_filter_options_ignores_unmapped_sort_and_inactive_paging(settings_override):
    searcher = SQLSearcher(get_default_database())

    filter_functions.apply_filter_options(searcher, {"_sortKey": "nope", "_offset": -1, "_length": 10}, MAPPING)

    assert searcher.order_rules == []
    assert searcher.limit_info is None
