"""
管理员业务服务 (Admin Service)
每个操作执行前都会从后端重新读取调用者角色，页面上的跳转只是交互层面的提示。
"""
import logging
from typing import List, Optional
from core.schemas import Identity, Profile, UserDeletionResult, PROFILE_ROLES
from core.exceptions import AuthorizationError, AuthenticationError, ValidationError, BackendOperationError, ConfigurationError
from infra.storage import event_store, profile_store
from infra.storage.backend import Backend

logger = logging.getLogger(__name__)


class AdminService:
    @staticmethod
    def is_admin(backend: Backend, identity: Optional[Identity]) -> bool:
        if identity is None:
            return False
        return profile_store.get_profile_role(backend, identity.user_id) == "admin"

    @staticmethod
    def require_admin(backend: Backend, identity: Optional[Identity]):
        if identity is None:
            raise AuthenticationError("用户未登录")
        if not AdminService.is_admin(backend, identity):
            logger.warning(f"非管理员尝试执行管理操作: {identity.user_id}")
            raise AuthorizationError("您没有管理员权限")

    @staticmethod
    def list_profiles(backend: Backend, identity: Optional[Identity]) -> List[Profile]:
        AdminService.require_admin(backend, identity)
        return profile_store.list_profiles(backend)

    @staticmethod
    def change_role(backend: Backend, identity: Optional[Identity], user_id: str, role: str):
        AdminService.require_admin(backend, identity)
        if user_id == identity.user_id:
            raise ValidationError("不能修改自己的角色")
        if role not in PROFILE_ROLES:
            raise ValidationError(f"未知的角色: {role}")
        profile_store.update_profile_role(backend, user_id, role)

    @staticmethod
    def delete_user(backend: Backend, identity: Optional[Identity], user_id: str) -> UserDeletionResult:
        """
        删除用户：依次删除其事件 (记录随之级联)、资料、认证身份。
        最后一步失败只记录在结果中，不回滚前两步。
        """
        AdminService.require_admin(backend, identity)
        if user_id == identity.user_id:
            raise ValidationError("不能删除自己的账号")

        result = UserDeletionResult(user_id=user_id)
        event_store.delete_events_for_user(backend, user_id)
        result.events_deleted = True
        profile_store.delete_profile(backend, user_id)
        result.profile_deleted = True

        try:
            backend.delete_auth_user(user_id)
            result.auth_deleted = True
        except (BackendOperationError, ConfigurationError) as e:
            logger.error(f"用户 {user_id} 的数据已删除，但认证身份删除失败: {e}", exc_info=True)
            result.auth_error = str(e)
        logger.info(f"管理员 {identity.user_id} 删除了用户 {user_id}")
        return result
