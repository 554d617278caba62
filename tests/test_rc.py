import pytest

from miniob.rc import RC, strrc


def test_success_name():
    assert strrc(RC.SUCCESS) == "SUCCESS"


def test_plain_int_is_accepted():
    assert strrc(int(RC.SCHEMA_TABLE_NOT_EXIST)) == "SCHEMA_TABLE_NOT_EXIST"


def test_notice_value_fixed_by_source():
    assert RC.NOTICE == 100
    assert strrc(100) == "NOTICE"


@pytest.mark.parametrize("code", [-1, 31, 99, 15 | (1 << 8), 1 << 20])
def test_unknown_codes(code):
    assert strrc(code) == "UNKNOWN"


def test_every_member_round_trips_through_strrc():
    for member in RC:
        assert strrc(member) == member.name
        assert RC[strrc(member)] is member


def test_values_are_unique():
    names = {strrc(int(member)) for member in RC}
    assert len(names) == len(RC)
    assert "UNKNOWN" not in names


@pytest.mark.parametrize(
    "prefix",
    [
        "BUFFERPOOL",
        "RECORD",
        "SCHEMA",
        "IOERR",
        "LOCKED",
        "BUSY",
        "CANTOPEN",
        "READONLY",
        "ABORT",
        "CONSTRAINT",
        "NOTICE",
        "AUTH",
    ],
)
def test_extended_codes_keep_primary_in_low_byte(prefix):
    extended = [m for m in RC if m.name.startswith(prefix + "_")]
    assert extended
    for member in extended:
        assert strrc(int(member) & 0xFF) == prefix
        assert strrc(int(member)) == member.name


def test_extended_detail_numbers_are_consecutive():
    names = [strrc(int(RC.BUSY) | (detail << 8)) for detail in range(1, 4)]
    assert names == ["BUSY_RECOVERY", "BUSY_SNAPSHOT", "BUSY_TIMEOUT"]
    assert strrc(int(RC.BUSY) | (4 << 8)) == "UNKNOWN"


def test_specific_extended_composition():
    assert strrc(int(RC.BUFFERPOOL) | (1 << 8)) == "BUFFERPOOL_EXIST"
    assert strrc(int(RC.AUTH) | (1 << 8)) == "AUTH_USER"
    assert strrc(int(RC.IOERR) | (29 << 8)) == "IOERR_OPEN_TOO_MANY_FILES"


def test_primary_codes_below_notice_are_dense():
    primaries = sorted(int(m) for m in RC if m < 100)
    assert primaries == list(range(len(primaries)))
    assert strrc(primaries[-1]) == "NOTADB"