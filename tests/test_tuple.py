import pytest

from miniob.parse_defs import AttrType
from miniob.tuple import Tuple, TupleField, TupleSchema, TupleSet
from miniob.value import FloatValue, IntValue, StringValue


def test_tuple_add_wraps_plain_values():
    t = Tuple()
    t.add(7)
    t.add(2.5)
    t.add("abc")
    assert len(t) == 3
    assert isinstance(t.get(0), IntValue)
    assert isinstance(t.get(1), FloatValue)
    assert isinstance(t.get(2), StringValue)
    assert [v.to_string() for v in t] == ["7", "2.5", "abc"]


def test_tuple_add_keeps_value_object():
    v = IntValue(3)
    t = Tuple()
    t.add(v)
    assert t.get(0) is v


def test_tuple_add_rejects_unknown():
    with pytest.raises(TypeError):
        Tuple().add(object())


def test_field_to_string_contains_names_and_type():
    f = TupleField(AttrType.INTS, "t", "id")
    assert f.to_string() == "t.id" + str(int(AttrType.INTS))


def test_schema_add_if_not_exists_skips_duplicates():
    s = TupleSchema()
    s.add_if_not_exists(AttrType.INTS, "t", "id")
    s.add_if_not_exists(AttrType.INTS, "t", "id")
    s.add_if_not_exists(AttrType.CHARS, "t", "name")
    assert len(s) == 2
    assert s.index_of_field("t", "name") == 1
    assert s.index_of_field("t", "missing") == -1


def test_schema_append_and_clear():
    a = TupleSchema()
    a.add(AttrType.INTS, "t1", "a")
    b = TupleSchema()
    b.add(AttrType.CHARS, "t2", "b")
    a.append(b)
    assert [f.field_name for f in a] == ["a", "b"]
    a.clear()
    assert len(a) == 0


def test_schema_render_empty():
    assert TupleSchema().render() == "No schema"


def test_schema_render_multi_table_qualifies():
    s = TupleSchema()
    s.add(AttrType.INTS, "t1", "a")
    s.add(AttrType.CHARS, "t2", "b")
    assert s.render() == "t1.a | t2.b\n"


def test_tupleset_render_single_table():
    s = TupleSchema()
    s.add(AttrType.INTS, "t", "id")
    s.add(AttrType.CHARS, "t", "name")
    ts = TupleSet()
    ts.set_schema(s)
    ts.add(Tuple([1, "a"]))
    assert ts.render() == "id | name\n1 | a\n"


def test_tupleset_render_without_schema_is_empty():
    ts = TupleSet()
    ts.add(Tuple([1]))
    assert ts.render() == ""


def test_tupleset_schema_is_copied():
    s = TupleSchema()
    s.add(AttrType.INTS, "t", "id")
    ts = TupleSet(s)
    s.add(AttrType.INTS, "t", "other")
    assert len(ts.schema) == 1


def test_tupleset_size_get_and_clear():
    s = TupleSchema()
    s.add(AttrType.INTS, "t", "id")
    ts = TupleSet(s)
    assert ts.is_empty()
    ts.add(Tuple([5]))
    ts.add(Tuple([6]))
    assert len(ts) == 2
    assert ts.get(1).get(0).to_string() == "6"
    ts.clear()
    assert ts.is_empty()
    assert len(ts.schema) == 0