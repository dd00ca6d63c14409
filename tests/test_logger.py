import logging
from core.logger import UserContextFilter, set_log_user


def _record():
    return logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)


def test_filter_attaches_current_user():
    set_log_user("alice")
    record = _record()
    assert UserContextFilter().filter(record)
    assert record.user == "alice"


def test_anonymous_user_placeholder():
    set_log_user(None)
    record = _record()
    UserContextFilter().filter(record)
    assert record.user == "-"
