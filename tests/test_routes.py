import pytest
from routes import resolve, requires_auth, event_path, match


@pytest.mark.parametrize("path,page,params", [
    ("/", "home", {}),
    ("/login", "login", {}),
    ("/admin", "admin", {}),
    ("/summary", "summary", {}),
    ("/events/new", "event_create", {}),
    ("/events/abc-123", "event_detail", {"id": "abc-123"}),
    ("/events/abc-123/edit", "event_edit", {"id": "abc-123"}),
    ("/events/abc-123/add-record", "add_record", {"id": "abc-123"}),
    ("/events/abc-123/", "event_detail", {"id": "abc-123"}),
])
def test_resolve(path, page, params):
    route, resolved = resolve(path)
    assert route.page == page
    assert resolved == params


@pytest.mark.parametrize("path", ["/nowhere", "/events", "/events/1/unknown", ""])
def test_unknown_paths_fall_back_to_home(path):
    route, params = resolve(path)
    assert route.page == "home"
    assert params == {}


def test_only_login_is_public():
    assert not requires_auth(resolve("/login")[0])
    assert requires_auth(resolve("/")[0])
    assert requires_auth(resolve("/events/1")[0])


def test_event_path():
    assert event_path("e1") == "/events/e1"
    assert event_path("e1", "add-record") == "/events/e1/add-record"
    assert match("/events/:id", event_path("e1")) == {"id": "e1"}
