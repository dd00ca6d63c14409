"""
认证业务服务 (Auth Service)
用户名 + 密码登录/注册。认证邮箱由用户名与配置的域名合成。
"""
import logging
from core.schemas import Identity
from core.validators import (
    require_fields, validate_username, validate_password, build_auth_email,
    DEFAULT_MIN_PASSWORD_LENGTH,
)
from infra.storage.backend import Backend

logger = logging.getLogger(__name__)

DEFAULT_EMAIL_DOMAIN = "miaoda.com"


class AuthService:
    def __init__(self, backend: Backend, auth_config: dict = None):
        auth_config = auth_config or {}
        self.backend = backend
        self.email_domain = auth_config.get("email_domain", DEFAULT_EMAIL_DOMAIN)
        self.min_password_length = int(auth_config.get("min_password_length", DEFAULT_MIN_PASSWORD_LENGTH))

    def sign_in(self, username: str, password: str) -> Identity:
        require_fields(username, password)
        username = username.strip()
        validate_username(username)
        identity = self.backend.sign_in(build_auth_email(username, self.email_domain), password)
        logger.info(f"用户登录: {username}")
        return identity

    def sign_up(self, username: str, password: str, confirm: str) -> Identity:
        require_fields(username, password, confirm)
        username = username.strip()
        validate_username(username)
        validate_password(password, confirm, self.min_password_length)
        return self.backend.sign_up(build_auth_email(username, self.email_domain), password)

    def sign_out(self):
        self.backend.sign_out()
