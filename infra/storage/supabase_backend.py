"""
Supabase 托管后端 (Supabase Backend)
通过 supabase-py 客户端访问托管的数据库与认证服务。
行级权限 (RLS) 由托管端执行；客户端登录后会自动携带用户令牌。
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from supabase import create_client, Client
from core.schemas import Identity
from core.exceptions import BackendOperationError, AuthenticationError, ConfigurationError
from infra.storage.backend import Backend, Filter

logger = logging.getLogger(__name__)

def _to_wire(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list):
        return [_to_wire(v) for v in value]
    return value


class SupabaseBackend(Backend):
    """
    托管后端实现。
    客户端实例保存了用户会话，因此每个浏览器会话应持有独立实例。
    """

    def __init__(self, url: str, anon_key: str, service_role_key: Optional[str] = None, client: Optional[Client] = None):
        if not url or not anon_key:
            raise ConfigurationError("缺少 SUPABASE_URL 或 SUPABASE_ANON_KEY 配置")
        self.url = url
        self._service_role_key = service_role_key
        self.client = client or create_client(url, anon_key)

    @staticmethod
    def _apply_filters(builder, filters: Sequence[Filter]):
        for f in filters:
            method = "in_" if f.op == "in" else f.op
            builder = getattr(builder, method)(f.column, _to_wire(f.value))
        return builder

    def select(self, table: str, filters: Sequence[Filter] = (), order_by: Optional[str] = None,
               descending: bool = False, columns: str = "*") -> List[Dict[str, Any]]:
        try:
            builder = self._apply_filters(self.client.table(table).select(columns), filters)
            if order_by:
                builder = builder.order(order_by, desc=descending)
            response = builder.execute()
            return response.data if isinstance(response.data, list) else []
        except Exception as e:
            logger.error(f"查询 {table} 失败: {e}", exc_info=True)
            raise BackendOperationError(f"查询 {table} 失败: {e}") from e

    def insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.client.table(table).insert({k: _to_wire(v) for k, v in values.items()}).execute()
        except Exception as e:
            logger.error(f"写入 {table} 失败: {e}", exc_info=True)
            raise BackendOperationError(f"写入 {table} 失败: {e}") from e
        if not response.data:
            raise BackendOperationError(f"写入 {table} 后未返回数据")
        return response.data[0]

    def update(self, table: str, values: Dict[str, Any], filters: Sequence[Filter]) -> List[Dict[str, Any]]:
        try:
            builder = self.client.table(table).update({k: _to_wire(v) for k, v in values.items()})
            response = self._apply_filters(builder, filters).execute()
            return response.data or []
        except Exception as e:
            logger.error(f"更新 {table} 失败: {e}", exc_info=True)
            raise BackendOperationError(f"更新 {table} 失败: {e}") from e

    def delete(self, table: str, filters: Sequence[Filter]) -> int:
        try:
            response = self._apply_filters(self.client.table(table).delete(), filters).execute()
            return len(response.data) if isinstance(response.data, list) else -1
        except Exception as e:
            logger.error(f"删除 {table} 失败: {e}", exc_info=True)
            raise BackendOperationError(f"删除 {table} 失败: {e}") from e

    # --- 认证 ---

    def sign_up(self, email: str, password: str) -> Identity:
        try:
            response = self.client.auth.sign_up({"email": email, "password": password})
        except Exception as e:
            logger.warning(f"注册失败 {email}: {e}")
            raise AuthenticationError(str(e) or "注册过程中出现错误") from e
        if response.user is None:
            raise AuthenticationError("注册过程中出现错误")
        return Identity(user_id=str(response.user.id), email=response.user.email or email)

    def sign_in(self, email: str, password: str) -> Identity:
        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.warning(f"登录失败 {email}: {e}")
            raise AuthenticationError("用户名或密码错误") from e
        if response.user is None:
            raise AuthenticationError("用户名或密码错误")
        return Identity(user_id=str(response.user.id), email=response.user.email or email)

    def sign_out(self):
        try:
            self.client.auth.sign_out()
        except Exception as e:
            logger.error(f"退出登录失败: {e}", exc_info=True)
            raise AuthenticationError(f"退出登录失败: {e}") from e

    def delete_auth_user(self, user_id: str):
        if not self._service_role_key:
            raise ConfigurationError("删除认证用户需要配置 SUPABASE_SERVICE_ROLE_KEY")
        try:
            admin_client = create_client(self.url, self._service_role_key)
            admin_client.auth.admin.delete_user(user_id)
        except Exception as e:
            logger.error(f"删除认证用户失败 {user_id}: {e}", exc_info=True)
            raise BackendOperationError(f"删除认证用户失败: {e}") from e
