import pytest

from miniob.parse_defs import (
    MAX_NUM,
    AttrInfo,
    AttrType,
    CompOp,
    Condition,
    CreateTable,
    Deletes,
    Inserts,
    Query,
    RelAttr,
    Selects,
    SqlCommandFlag,
    Updates,
    make_load_data,
    value_from_float,
    value_from_int,
    value_from_string,
)


def test_enum_values_match_declaration_order():
    cond = Condition(CompOp(0), RelAttr("a"), value_from_int(1))
    assert cond.comp is CompOp.EQUAL_TO
    cond = Condition(CompOp(5), RelAttr("a"), value_from_int(1))
    assert cond.comp is CompOp.GREAT_THAN
    assert value_from_string("x").type == 1
    assert value_from_int(1).type == 2
    assert value_from_float(1.0).type == 3
    q = Query()
    assert q.flag == 0
    q.flag = SqlCommandFlag(17)
    assert q.flag is SqlCommandFlag.SCF_EXIT


def test_value_constructors():
    iv = value_from_int(42)
    assert iv.type is AttrType.INTS and iv.data == 42
    sv = value_from_string("abc")
    assert sv.type is AttrType.CHARS and sv.data == "abc"
    fv = value_from_float(1.5)
    assert fv.type is AttrType.FLOATS and fv.data == 1.5


def test_float_value_single_precision():
    fv = value_from_float(0.1)
    assert fv.data == pytest.approx(0.1, rel=1e-6)
    assert fv.data != 0.1


def test_condition_sides():
    cond = Condition(CompOp.EQUAL_TO, RelAttr("id", "t"), value_from_int(1))
    assert cond.left_is_attr is True
    assert cond.right_is_attr is False
    both = Condition(CompOp.LESS_THAN, RelAttr("a"), RelAttr("b"))
    assert both.left_is_attr and both.right_is_attr


def test_selects_append():
    sel = Selects()
    sel.append_attribute(RelAttr("*"))
    sel.append_relation("t")
    assert sel.attributes == [RelAttr("*")]
    assert sel.relations == ["t"]


def test_selects_append_conditions_replaces():
    sel = Selects()
    c1 = Condition(CompOp.EQUAL_TO, RelAttr("a"), value_from_int(1))
    c2 = Condition(CompOp.NOT_EQUAL, RelAttr("b"), value_from_int(2))
    sel.append_conditions([c1])
    sel.append_conditions([c2])
    assert sel.conditions == [c2]


def test_selects_limits():
    sel = Selects()
    for i in range(MAX_NUM):
        sel.append_relation(f"t{i}")
    with pytest.raises(ValueError):
        sel.append_relation("extra")
    assert len(sel.relations) == MAX_NUM
    cond = Condition(CompOp.EQUAL_TO, RelAttr("a"), value_from_int(1))
    with pytest.raises(ValueError):
        sel.append_conditions([cond] * (MAX_NUM + 1))


def test_inserts_limit():
    values = [value_from_int(i) for i in range(MAX_NUM)]
    ins = Inserts("t", values)
    assert len(ins.values) == MAX_NUM
    with pytest.raises(ValueError):
        Inserts("t", values + [value_from_int(0)])


def test_deletes_set_conditions():
    d = Deletes("t")
    cond = Condition(CompOp.GREAT_EQUAL, RelAttr("x"), value_from_float(2.0))
    d.set_conditions([cond])
    assert d.conditions == [cond]
    with pytest.raises(ValueError):
        d.set_conditions([cond] * (MAX_NUM + 1))


def test_updates_limit():
    cond = Condition(CompOp.EQUAL_TO, RelAttr("a"), value_from_int(1))
    with pytest.raises(ValueError):
        Updates("t", "a", value_from_int(3), [cond] * (MAX_NUM + 1))
    up = Updates("t", "a", value_from_int(3), [cond])
    assert up.conditions == [cond]


def test_create_table_append_attribute():
    ct = CreateTable("t")
    info = AttrInfo("id", AttrType.INTS, 4)
    ct.append_attribute(info)
    assert ct.attributes == [info]
    for i in range(MAX_NUM - 1):
        ct.append_attribute(AttrInfo(f"c{i}", AttrType.CHARS, 4))
    with pytest.raises(ValueError):
        ct.append_attribute(info)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("'data.csv'", "data.csv"),
        ('"data.csv"', "data.csv"),
        ("data.csv", "data.csv"),
        ("'data.csv", "data.csv"),
    ],
)
def test_make_load_data_strips_quotes(raw, expected):
    ld = make_load_data("t", raw)
    assert ld.file_name == expected
    assert ld.relation_name == "t"


def test_make_load_data_single_quote_only():
    assert make_load_data("t", "'").file_name == ""


def test_query_default_and_reset():
    q = Query()
    assert q.flag is SqlCommandFlag.SCF_ERROR
    assert q.statement is None
    sel = Selects()
    sel.append_relation("t")
    q.flag = SqlCommandFlag.SCF_SELECT
    q.statement = sel
    q.reset()
    assert q.flag is SqlCommandFlag.SCF_ERROR
    assert q.statement is None
    assert q.errors is None