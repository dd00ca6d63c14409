"""
核心数据模型 (Data Models)
定义本地 SQL 后端使用的表结构，与托管后端 (Supabase) 中的表一一对应。
时间字段统一以 UTC (不带时区) 存储，由后端适配层负责时区换算。
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()

def _new_id() -> str:
    return str(uuid.uuid4())

def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)

class AuthUser(Base):
    """
    认证用户表
    仅本地后端使用，对应托管后端的 auth.users。
    """
    __tablename__ = 'auth_users'

    id = Column(String, primary_key=True, default=_new_id)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

class Profile(Base):
    """
    用户资料表
    id 与认证用户 id 相同；第一个注册的用户为管理员。
    """
    __tablename__ = 'profiles'

    id = Column(String, ForeignKey('auth_users.id', ondelete='CASCADE'), primary_key=True)
    username = Column(String, nullable=True)
    role = Column(String, nullable=False, default='user') # user / admin
    created_at = Column(DateTime, default=_utcnow, nullable=False)

class Event(Base):
    """
    事件表
    summary 只在事件闭环 (status = closed) 时写入。
    """
    __tablename__ = 'events'

    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=False, default='未分类')
    status = Column(String, nullable=False, default='ongoing') # ongoing / closed
    importance = Column(Integer, nullable=False, default=3) # 1-5
    summary = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_events_user_updated", "user_id", "updated_at"),
    )

class EventRecord(Base):
    """
    事件进展记录表
    随父事件级联删除。
    """
    __tablename__ = 'event_records'

    id = Column(String, primary_key=True, default=_new_id)
    event_id = Column(String, ForeignKey('events.id', ondelete='CASCADE'), nullable=False, index=True)
    original_content = Column(Text, nullable=False)
    ai_summary = Column(Text, nullable=False, default='')
    created_at = Column(DateTime, default=_utcnow, nullable=False)
