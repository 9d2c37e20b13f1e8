import pytest

from feedbase.core.database import get_default_database
from feedbase.sql.searcher import SQLSearcher


def _compiled(stmt) -> str:
    return str(stmt.compile(compile_kwargs={"literal_binds": True}))


def test_searcher_requires_table(settings_override):
    searcher = SQLSearcher(get_default_database())
    with pytest.raises(ValueError, match="no table"):
        searcher.build_select()


def test_order_rule_direction_is_validated(settings_override):
    searcher = SQLSearcher(get_default_database()).set_table("demo_table")
    searcher.add_order_rule("uid", "desc")
    assert searcher.order_rules == [("uid", "DESC")]
    with pytest.raises(ValueError, match="Sort direction"):
        searcher.add_order_rule("uid", "sideways")


@pytest.mark.parametrize(
    "page, length, expected",
    [
        (0, 10, (0, 10)),
        (2, 10, (20, 10)),
        (-1, 10, None),
        (1, 0, None),
    ],
)
def test_page_info(settings_override, page, length, expected):
    searcher = SQLSearcher(get_default_database())
    searcher.set_page_info(page, length)
    assert searcher.limit_info == expected


def test_inactive_limit_clears_previous_pagination(settings_override):
    searcher = SQLSearcher(get_default_database())
    searcher.set_limit_info(5, 5)
    searcher.set_limit_info(-1, 5)
    assert searcher.limit_info is None


def test_build_select(settings_override):
    searcher = SQLSearcher(get_default_database())
    searcher.set_table("demo_table").set_columns(["uid", "key1"])
    searcher.add_condition_kv("key2", "grp-a").add_order_rule("uid", "DESC").set_limit_info(4, 2)

    sql = _compiled(searcher.build_select())

    assert "SELECT demo_table.uid, demo_table.key1" in sql
    assert "WHERE demo_table.key2 = 'grp-a'" in sql
    assert "ORDER BY demo_table.uid DESC" in sql
    assert "LIMIT 2 OFFSET 4" in sql

    count_sql = _compiled(searcher.build_count())
    assert "count(*)" in count_sql
    assert "LIMIT" not in count_sql


@pytest.mark.asyncio
async def test_query_methods(demo_rows, database):
    searcher = SQLSearcher(database).set_table("demo_table").set_columns(["uid", "key1", "key2"])
    searcher.add_condition_kv("key2", "grp-a").add_order_rule("uid", "ASC")

    rows = await searcher.query_list()
    assert [row["key1"] for row in rows] == ["K1-0", "K1-1", "K1-3"]
    assert set(rows[0]) == {"uid", "key1", "key2"}

    assert await searcher.query_count() == 3

    searcher.set_limit_info(1, 1)
    assert [row["key1"] for row in await searcher.query_list()] == ["K1-1"]
    assert await searcher.query_count() == 3

    first = await searcher.query_single()
    assert first["key1"] == "K1-0"
    assert searcher.limit_info == (1, 1)


@pytest.mark.asyncio
async def test_query_single_without_match(database):
    searcher = SQLSearcher(database).set_table("demo_table").add_condition_kv("uid", 404)
    assert await searcher.query_single() is None
    assert await searcher.query_count() == 0
