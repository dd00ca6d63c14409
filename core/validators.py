"""
输入校验 (Validators)
表单提交前的本地校验规则。失败时抛出携带中文提示的 ValidationError。
"""
import re
from typing import Optional
from core.exceptions import ValidationError
from core.schemas import CreateEventInput, UpdateEventInput

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
DEFAULT_MIN_PASSWORD_LENGTH = 6


def is_valid_username(username: str) -> bool:
    """用户名只能包含字母、数字和下划线"""
    return bool(username) and USERNAME_PATTERN.fullmatch(username) is not None


def validate_username(username: str):
    if not is_valid_username(username):
        raise ValidationError("用户名格式错误：用户名只能包含字母、数字和下划线")


def validate_password(password: str, confirm: Optional[str] = None, min_length: int = DEFAULT_MIN_PASSWORD_LENGTH):
    if confirm is not None and password != confirm:
        raise ValidationError("密码不一致：两次输入的密码不一致")
    if len(password) < min_length:
        raise ValidationError(f"密码太短：密码至少需要{min_length}个字符")


def require_fields(*values: Optional[str]):
    if any(not (v or "").strip() for v in values):
        raise ValidationError("请填写完整信息")


def build_auth_email(username: str, email_domain: str) -> str:
    """由用户名合成内部认证邮箱"""
    return f"{username}@{email_domain}"


def validate_importance(importance: Optional[int]):
    if importance is not None and not 1 <= int(importance) <= 5:
        raise ValidationError("重要程度必须在 1 到 5 之间")


def validate_create_event(data: CreateEventInput):
    if not (data.title or "").strip():
        raise ValidationError("请输入事件标题")
    validate_importance(data.importance)


def validate_update_event(data: UpdateEventInput):
    """
    事件更新规则：
    - 状态只能改为 closed (闭环不可逆)
    - summary 只能与 status=closed 一起写入
    """
    if data.title is not None and not data.title.strip():
        raise ValidationError("请输入事件标题")
    validate_importance(data.importance)
    if data.status is not None and data.status != "closed":
        raise ValidationError("已闭环的事件不能重新打开")
    if data.summary is not None and data.status != "closed":
        raise ValidationError("事件总结只能在闭环时写入")
