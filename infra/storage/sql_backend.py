"""
SQL 数据库后端 (SQL Backend)
基于 SQLAlchemy 的本地后端实现，用于开发与测试。
与托管后端保持相同的表结构与行为：事件删除级联到进展记录、第一个注册用户成为管理员。
"""
import os
import uuid
import hmac
import hashlib
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy import create_engine, event, func
from sqlalchemy import select as sa_select, insert as sa_insert, update as sa_update, delete as sa_delete
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from core.models import Base, AuthUser, Profile, Event, EventRecord
from core.schemas import Identity
from core.exceptions import BackendOperationError, AuthenticationError
from infra.storage.backend import Backend, Filter, eq

logger = logging.getLogger(__name__)

TABLES = {m.__tablename__: m.__table__ for m in (AuthUser, Profile, Event, EventRecord)}
# 认证表不通过通用 CRUD 暴露
PUBLIC_TABLES = ("events", "event_records", "profiles")

PBKDF2_ITERATIONS = 100_000

@lru_cache(maxsize=5)
def get_engine(database_url: str):
    """
    获取指定数据库的引擎 (带缓存)，并自动建表。
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(url.database)), exist_ok=True)
        # check_same_thread=False 允许 Streamlit 多线程访问
        engine = create_engine(database_url, connect_args={"check_same_thread": False})

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            # SQLite 默认不执行外键约束，级联删除依赖它
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
    else:
        engine = create_engine(database_url, pool_pre_ping=True)

    Base.metadata.create_all(engine)
    return engine

def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    salt = salt or os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt.hex()}${digest.hex()}"

def verify_password(password: str, encoded: str) -> bool:
    try:
        _, iterations, salt_hex, digest_hex = encoded.split("$")
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt_hex), int(iterations))
    return hmac.compare_digest(digest.hex(), digest_hex)

def _to_db(value):
    """带时区的时间统一转换为不带时区的 UTC"""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

def _from_db(row) -> Dict[str, Any]:
    data = dict(row)
    for k, v in data.items():
        if isinstance(v, datetime) and v.tzinfo is None:
            data[k] = v.replace(tzinfo=timezone.utc)
    return data


class SqlBackend(Backend):
    """本地 SQL 后端。认证状态保存在实例上，每个浏览器会话应持有独立实例。"""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.engine = get_engine(database_url)
        self.identity: Optional[Identity] = None

    def _table(self, name: str):
        if name not in PUBLIC_TABLES:
            raise BackendOperationError(f"未知的数据表: {name}")
        return TABLES[name]

    @staticmethod
    def _apply_filters(stmt, table, filters: Sequence[Filter]):
        for f in filters:
            col = table.c[f.column]
            if f.op == "eq":
                stmt = stmt.where(col == _to_db(f.value))
            elif f.op == "gte":
                stmt = stmt.where(col >= _to_db(f.value))
            elif f.op == "lte":
                stmt = stmt.where(col <= _to_db(f.value))
            elif f.op == "in":
                stmt = stmt.where(col.in_([_to_db(v) for v in f.value]))
            else:
                raise BackendOperationError(f"不支持的过滤操作: {f.op}")
        return stmt

    # --- 具体的 CRUD 操作 ---

    def select(self, table: str, filters: Sequence[Filter] = (), order_by: Optional[str] = None,
               descending: bool = False, columns: str = "*") -> List[Dict[str, Any]]:
        t = self._table(table)
        try:
            if columns == "*":
                stmt = sa_select(t)
            else:
                stmt = sa_select(*[t.c[c.strip()] for c in columns.split(",")])
            stmt = self._apply_filters(stmt, t, filters)
            if order_by:
                col = t.c[order_by]
                stmt = stmt.order_by(col.desc() if descending else col.asc())
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
            return [_from_db(r) for r in rows]
        except SQLAlchemyError as e:
            logger.error(f"查询 {table} 失败: {e}", exc_info=True)
            raise BackendOperationError(f"查询 {table} 失败: {e}") from e

    def insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        t = self._table(table)
        row = {k: _to_db(v) for k, v in values.items()}
        if not row.get("id"):
            row["id"] = str(uuid.uuid4())
        try:
            with self.engine.begin() as conn:
                conn.execute(sa_insert(t).values(**row))
        except SQLAlchemyError as e:
            logger.error(f"写入 {table} 失败: {e}", exc_info=True)
            raise BackendOperationError(f"写入 {table} 失败: {e}") from e
        return self.select(table, [eq("id", row["id"])])[0]

    def update(self, table: str, values: Dict[str, Any], filters: Sequence[Filter]) -> List[Dict[str, Any]]:
        t = self._table(table)
        try:
            with self.engine.begin() as conn:
                stmt = self._apply_filters(sa_update(t), t, filters)
                conn.execute(stmt.values(**{k: _to_db(v) for k, v in values.items()}))
        except SQLAlchemyError as e:
            logger.error(f"更新 {table} 失败: {e}", exc_info=True)
            raise BackendOperationError(f"更新 {table} 失败: {e}") from e
        return self.select(table, filters)

    def delete(self, table: str, filters: Sequence[Filter]) -> int:
        t = self._table(table)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(self._apply_filters(sa_delete(t), t, filters))
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"删除 {table} 失败: {e}", exc_info=True)
            raise BackendOperationError(f"删除 {table} 失败: {e}") from e

    # --- 认证 ---

    def sign_up(self, email: str, password: str) -> Identity:
        users, profiles = TABLES["auth_users"], TABLES["profiles"]
        try:
            with self.engine.begin() as conn:
                existing = conn.execute(sa_select(users.c.id).where(users.c.email == email)).first()
                if existing:
                    raise AuthenticationError("该用户名已被注册")
                user_id = str(uuid.uuid4())
                conn.execute(sa_insert(users).values(id=user_id, email=email, password_hash=hash_password(password)))
                # 对应托管后端的触发器：第一个注册的用户成为管理员
                profile_count = conn.execute(sa_select(func.count()).select_from(profiles)).scalar()
                conn.execute(sa_insert(profiles).values(
                    id=user_id,
                    username=email.split("@", 1)[0],
                    role="admin" if profile_count == 0 else "user",
                ))
        except SQLAlchemyError as e:
            logger.error(f"注册用户失败: {e}", exc_info=True)
            raise BackendOperationError(f"注册用户失败: {e}") from e
        self.identity = Identity(user_id=user_id, email=email)
        logger.info(f"新用户已注册: {email}")
        return self.identity

    def sign_in(self, email: str, password: str) -> Identity:
        users = TABLES["auth_users"]
        try:
            with self.engine.connect() as conn:
                row = conn.execute(sa_select(users).where(users.c.email == email)).mappings().first()
        except SQLAlchemyError as e:
            logger.error(f"登录查询失败: {e}", exc_info=True)
            raise BackendOperationError(f"登录查询失败: {e}") from e
        if not row or not verify_password(password, row["password_hash"]):
            raise AuthenticationError("用户名或密码错误")
        self.identity = Identity(user_id=row["id"], email=row["email"])
        return self.identity

    def sign_out(self):
        self.identity = None

    def delete_auth_user(self, user_id: str):
        users = TABLES["auth_users"]
        try:
            with self.engine.begin() as conn:
                conn.execute(sa_delete(users).where(users.c.id == user_id))
        except SQLAlchemyError as e:
            logger.error(f"删除认证用户失败 {user_id}: {e}", exc_info=True)
            raise BackendOperationError(f"删除认证用户失败: {e}") from e
