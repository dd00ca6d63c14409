"""
后端客户端契约 (Backend Contract)
托管后端 (Supabase) 与本地 SQL 后端共用的最小接口：带过滤/排序的行级 CRUD + 认证。
数据访问层只依赖这里的接口，不关心具体实现。
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
from core.schemas import Identity

@dataclass(frozen=True)
class Filter:
    column: str
    op: str
    value: Any


def eq(column: str, value) -> Filter:
    return Filter(column, "eq", value)


def gte(column: str, value) -> Filter:
    return Filter(column, "gte", value)


def lte(column: str, value) -> Filter:
    return Filter(column, "lte", value)


def in_(column: str, values) -> Filter:
    return Filter(column, "in", list(values))


class Backend(ABC):
    """
    后端客户端抽象。
    所有方法失败时抛出 BackendOperationError / AuthenticationError。
    """

    @abstractmethod
    def select(self, table: str, filters: Sequence[Filter] = (), order_by: Optional[str] = None,
               descending: bool = False, columns: str = "*") -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """插入一行并返回后端生成的完整行"""
        ...

    @abstractmethod
    def update(self, table: str, values: Dict[str, Any], filters: Sequence[Filter]) -> List[Dict[str, Any]]:
        """更新匹配的行并返回更新后的行"""
        ...

    @abstractmethod
    def delete(self, table: str, filters: Sequence[Filter]) -> int:
        """删除匹配的行，返回删除数量 (后端无法提供时为 -1)"""
        ...

    # --- 认证 ---

    @abstractmethod
    def sign_up(self, email: str, password: str) -> Identity:
        ...

    @abstractmethod
    def sign_in(self, email: str, password: str) -> Identity:
        ...

    @abstractmethod
    def sign_out(self):
        ...

    @abstractmethod
    def delete_auth_user(self, user_id: str):
        """删除认证身份 (需要管理员级凭据)"""
        ...
