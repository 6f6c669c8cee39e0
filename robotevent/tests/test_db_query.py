import pytest

from robotevent.domain.db_query import DbQuery, MissingFromTarget, StatementType


def q():
    return DbQuery(prefix="")


def test_where_conditions_are_anded():
    sql = q().from_("team").where("id = 1").where("active = 1").build()
    assert sql == "SELECT *\nFROM `team`\nWHERE (id = 1) AND (active = 1)\n"


def test_left_join_with_limit_and_offset():
    sql = q().from_("team", "t").left_join("score", "s", "s.team_id = t.id").limit(10, 20).build()
    assert sql == "SELECT *\nFROM `team` t\nLEFT JOIN `score` `s` ON s.team_id = t.id\nLIMIT 20, 10"


def test_build_without_from_raises():
    with pytest.raises(MissingFromTarget):
        q().select("id").where("id = 1").build()
    # empty table name does not count as a from target
    with pytest.raises(MissingFromTarget):
        q().from_("").build()
    assert issubclass(MissingFromTarget, ValueError)


def test_select_fields_keep_order():
    sql = q().select("b").select("a").select("c.x AS y").from_("t").build()
    assert sql.startswith("SELECT b,\na,\nc.x AS y\nFROM `t`\n")


def test_chain_returns_same_instance():
    query = q()
    assert query.select("a") is query
    assert query.from_("t") is query
    assert query.join("JOIN x") is query
    assert query.where("1") is query
    assert query.limit(1) is query
    assert query.type("DELETE") is query


def test_empty_fragments_are_ignored():
    base = q().from_("team").build()
    query = q().from_("team")
    query.select("").where("").having("").order_by("").group_by("").join("").select(None)
    assert query.build() == base
    assert query.query["select"] == [] and query.query["where"] == []


def test_full_clause_order():
    sql = (
        q()
        .order_by("cnt DESC")
        .having("COUNT(*) > 1")
        .group_by("t.country")
        .where("t.active = 1")
        .inner_join("member", "m", "m.team_id = t.team_id")
        .from_("team", "t")
        .select("t.country")
        .select("COUNT(*) AS cnt")
        .limit(5)
        .build()
    )
    assert sql == (
        "SELECT t.country,\nCOUNT(*) AS cnt\n"
        "FROM `team` t\n"
        "INNER JOIN `member` `m` ON m.team_id = t.team_id\n"
        "WHERE (t.active = 1)\n"
        "GROUP BY t.country\n"
        "HAVING (COUNT(*) > 1)\n"
        "ORDER BY cnt DESC\n"
        "LIMIT 5"
    )


def test_typed_join_helpers():
    query = (
        q()
        .from_("a")
        .left_outer_join("b", "bb", "bb.id = a.id")
        .right_join("c")
        .natural_join("d", "dd")
        .join("CROSS JOIN e")
    )
    assert query.query["join"] == [
        "LEFT OUTER JOIN `b` `bb` ON bb.id = a.id",
        "RIGHT JOIN `c`",
        "NATURAL JOIN `d` `dd`",
        "CROSS JOIN e",
    ]
    assert "NATURAL JOIN `d` `dd`\nCROSS JOIN e\n" in query.build()


def test_table_prefix_applies_to_from_and_joins():
    sql = DbQuery(prefix="re_").from_("team", "t").left_join("score", "s", "s.team_id = t.team_id").build()
    assert "FROM `re_team` t\n" in sql
    assert "LEFT JOIN `re_score` `s`" in sql


def test_backticks_in_table_names_are_stripped():
    sql = q().from_("te`am").left_join("sc`ore", "a`b").build()
    assert "FROM `team`\n" in sql
    assert "LEFT JOIN `score` `ab`\n" in sql


def test_limit_replaces_and_clamps_offset():
    query = q().from_("team").limit(10, 30).limit(5, -4)
    assert query.query["limit"] == {"offset": 0, "limit": 5}
    assert query.build().endswith("LIMIT 5")


def test_limit_zero_omits_clause():
    sql = q().from_("team").limit(0, 10).build()
    assert "LIMIT" not in sql
    assert sql.endswith("\n")


def test_limit_coerces_strings():
    assert q().from_("team").limit("7", "3").build().endswith("LIMIT 3, 7")


def test_delete_type_has_no_field_list():
    sql = q().type("DELETE").select("ignored").from_("team").where("team_id = 3").build()
    assert sql == "DELETE FROM `team`\nWHERE (team_id = 3)\n"


def test_unknown_type_is_ignored():
    query = q().type("DELETE").type("UPDATE").type("select").type(None)
    assert query.query["type"] is StatementType.DELETE
    query.type(StatementType.SELECT)
    assert query.from_("t").build() == "SELECT *\nFROM `t`\n"


def test_build_is_repeatable_and_str_matches():
    query = q().from_("team").where("id = 1").order_by("name").limit(3)
    first = query.build()
    assert query.build() == first
    assert str(query) == first


def test_multiple_group_having_order_fragments():
    sql = (
        q()
        .from_("t")
        .group_by("a")
        .group_by("b")
        .having("x > 1")
        .having("y < 2")
        .order_by("a")
        .order_by("b DESC")
        .build()
    )
    assert sql == "SELECT *\nFROM `t`\nGROUP BY a, b\nHAVING (x > 1) AND (y < 2)\nORDER BY a, b DESC\n"


def test_zero_string_fragment_is_kept():
    sql = q().select("0").from_("t").where("0").build()
    assert sql == "SELECT 0\nFROM `t`\nWHERE (0)\n"


def test_limit_truncates_decimal_strings():
    query = q().from_("t").limit("3.9", "2.5")
    assert query.query["limit"] == {"offset": 2, "limit": 3}
    assert query.build().endswith("LIMIT 2, 3")
    assert q().from_("t").limit("abc").query["limit"]["limit"] == 0
