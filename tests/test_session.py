from miniob.session import Session


def test_default_session_is_shared():
    first = Session.default_session()
    saved = first.current_db
    try:
        first.current_db = "shared_db"
        assert Session.default_session().current_db == "shared_db"
    finally:
        first.current_db = saved
    assert Session.default_session().current_db == saved


def test_new_session_defaults():
    s = Session()
    assert s.current_db == ""
    assert s.trx_multi_operation_mode is False


def test_copy_keeps_db_but_not_trx_mode():
    s = Session(current_db="sys")
    s.trx_multi_operation_mode = True
    c = s.copy()
    assert c is not s
    assert c.current_db == "sys"
    assert c.trx_multi_operation_mode is False


def test_copy_is_independent():
    s = Session(current_db="a")
    c = s.copy()
    c.current_db = "b"
    assert s.current_db == "a"