"""
用户资料数据访问层 (Profile Store)
"""
import logging
from typing import List, Optional
from core.schemas import Profile
from infra.storage.backend import Backend, eq

logger = logging.getLogger(__name__)

PROFILES = "profiles"

def get_profile(backend: Backend, user_id: str) -> Optional[Profile]:
    rows = backend.select(PROFILES, [eq("id", user_id)])
    return Profile.from_row(rows[0]) if rows else None

def get_profile_role(backend: Backend, user_id: str) -> Optional[str]:
    rows = backend.select(PROFILES, [eq("id", user_id)], columns="role")
    return rows[0].get("role") if rows else None

def list_profiles(backend: Backend) -> List[Profile]:
    """全部用户资料，按注册时间倒序"""
    rows = backend.select(PROFILES, order_by="created_at", descending=True)
    return [Profile.from_row(r) for r in rows]

def update_profile_role(backend: Backend, user_id: str, role: str):
    backend.update(PROFILES, {"role": role}, [eq("id", user_id)])
    logger.info(f"用户 {user_id} 的角色已更新为 {role}")

def delete_profile(backend: Backend, user_id: str):
    backend.delete(PROFILES, [eq("id", user_id)])
