"""
后端工厂 (Backend Factory)
根据 config.yaml 中的 backend 分区与环境变量创建后端客户端实例。
"""
import os
import logging
from core.exceptions import ConfigurationError
from infra.storage.backend import Backend

logger = logging.getLogger(__name__)

def get_backend(full_config: dict) -> Backend:
    """
    创建一个新的后端客户端。

    Args:
        full_config (dict): 全局合并配置。

    Returns:
        Backend: supabase 或 sql 后端实例。调用方负责按会话缓存。
    """
    backend_config = full_config.get("backend", {})
    backend_type = (os.getenv("BACKEND_TYPE") or backend_config.get("type") or "supabase").lower()

    if backend_type == "supabase":
        from infra.storage.supabase_backend import SupabaseBackend
        logger.info("正在创建 Supabase 后端客户端")
        return SupabaseBackend(
            url=os.getenv("SUPABASE_URL", ""),
            anon_key=os.getenv("SUPABASE_ANON_KEY", ""),
            service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY") or None,
        )
    if backend_type == "sql":
        from infra.storage.sql_backend import SqlBackend
        database_url = (os.getenv("DATABASE_URL") or backend_config.get("sql_url") or "").strip()
        if not database_url:
            raise ConfigurationError("SQL 后端缺少 DATABASE_URL 或 backend.sql_url 配置")
        logger.info(f"正在创建 SQL 后端: {database_url.split('@')[-1]}")
        return SqlBackend(database_url)

    logger.error(f"未知的后端类型: {backend_type}")
    raise ConfigurationError(f"未知的后端类型: {backend_type}")
