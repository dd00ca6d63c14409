import pytest
from core.exceptions import ValidationError
from core.schemas import CreateEventInput, UpdateEventInput
from core.validators import (
    is_valid_username, validate_username, validate_password, require_fields, build_auth_email,
    validate_create_event, validate_update_event,
)


@pytest.mark.parametrize("username", ["alice", "Bob_42", "_", "A1"])
def test_valid_usernames(username):
    assert is_valid_username(username)


@pytest.mark.parametrize("username", ["", "alice!", "张三", "bob smith", "a-b", "x@y"])
def test_invalid_usernames(username):
    assert not is_valid_username(username)
    with pytest.raises(ValidationError):
        validate_username(username)


def test_password_mismatch():
    with pytest.raises(ValidationError, match="不一致"):
        validate_password("secret1", "secret2")


def test_password_too_short():
    with pytest.raises(ValidationError, match="至少需要6个字符"):
        validate_password("abc", "abc")


def test_password_custom_min_length():
    validate_password("abcd", "abcd", min_length=4)
    with pytest.raises(ValidationError, match="8"):
        validate_password("abcdefg", min_length=8)


def test_require_fields():
    require_fields("a", "b")
    with pytest.raises(ValidationError, match="请填写完整信息"):
        require_fields("a", "  ")
    with pytest.raises(ValidationError):
        require_fields(None)


def test_build_auth_email():
    assert build_auth_email("alice", "miaoda.com") == "alice@miaoda.com"


def test_create_event_requires_title():
    with pytest.raises(ValidationError, match="标题"):
        validate_create_event(CreateEventInput(title="   "))


def test_create_event_importance_bounds():
    validate_create_event(CreateEventInput(title="ok", importance=5))
    with pytest.raises(ValidationError):
        validate_create_event(CreateEventInput(title="ok", importance=6))


def test_update_cannot_reopen():
    with pytest.raises(ValidationError):
        validate_update_event(UpdateEventInput(status="ongoing"))


def test_summary_only_with_closed_status():
    with pytest.raises(ValidationError):
        validate_update_event(UpdateEventInput(summary="总结"))
    validate_update_event(UpdateEventInput(status="closed", summary="总结"))
