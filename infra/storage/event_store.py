"""
事件数据访问层 (Event Store)
对 events / event_records 两张表的类型化读写封装。
每个函数都显式接收后端与请求身份，所有用户数据读写都按 identity.user_id 限定范围。
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional
from core.schemas import (
    Identity, Event, EventRecord, EventWithRecords, EventStats,
    CreateEventInput, UpdateEventInput, CreateEventRecordInput,
)
from core.exceptions import AuthenticationError, NotFoundError, BackendOperationError
from core.validators import validate_create_event, validate_update_event
from infra.storage.backend import Backend, eq, gte, lte, in_

logger = logging.getLogger(__name__)

EVENTS = "events"
RECORDS = "event_records"


def _owner(identity: Optional[Identity]):
    return eq("user_id", identity.user_id)


def _list_events(backend: Backend, identity: Optional[Identity], *filters) -> List[Event]:
    if identity is None:
        return []
    rows = backend.select(EVENTS, [_owner(identity), *filters], order_by="updated_at", descending=True)
    return [Event.from_row(r) for r in rows]


# --- 事件查询 ---

def get_user_events(backend: Backend, identity: Optional[Identity]) -> List[Event]:
    """获取用户的所有事件，按更新时间倒序"""
    return _list_events(backend, identity)

def get_events_by_category(backend: Backend, identity: Optional[Identity], category: str) -> List[Event]:
    return _list_events(backend, identity, eq("category", category))

def get_events_by_status(backend: Backend, identity: Optional[Identity], status: str) -> List[Event]:
    return _list_events(backend, identity, eq("status", status))

def get_events_by_date_range(backend: Backend, identity: Optional[Identity], start: datetime, end: datetime) -> List[Event]:
    """创建时间落在 [start, end] 内的事件"""
    return _list_events(backend, identity, gte("created_at", start), lte("created_at", end))

def get_event_by_id(backend: Backend, identity: Optional[Identity], event_id: str) -> Optional[Event]:
    if identity is None:
        return None
    rows = backend.select(EVENTS, [eq("id", event_id), _owner(identity)])
    return Event.from_row(rows[0]) if rows else None

def get_event_with_records(backend: Backend, identity: Optional[Identity], event_id: str) -> Optional[EventWithRecords]:
    """先读事件，再读其记录，组合为聚合对象"""
    event = get_event_by_id(backend, identity, event_id)
    if event is None:
        return None
    records = get_event_records(backend, event_id)
    return EventWithRecords.compose(event, records)

def get_events_with_records_by_date_range(backend: Backend, identity: Optional[Identity],
                                          start: datetime, end: datetime) -> List[EventWithRecords]:
    """
    获取时间段内的事件及其全部记录 (用于生成总结与导出)。
    记录一次性按事件 id 批量读取，再按创建时间正序挂到各自的事件上。
    """
    events = get_events_by_date_range(backend, identity, start, end)
    if not events:
        return []
    rows = backend.select(RECORDS, [in_("event_id", [e.id for e in events])], order_by="created_at")
    grouped = {e.id: [] for e in events}
    for row in rows:
        record = EventRecord.from_row(row)
        grouped.setdefault(record.event_id, []).append(record)
    return [EventWithRecords.compose(e, grouped[e.id]) for e in events]


# --- 事件写入 ---

def create_event(backend: Backend, identity: Optional[Identity], data: CreateEventInput) -> Event:
    if identity is None:
        raise AuthenticationError("用户未登录")
    validate_create_event(data)
    row = backend.insert(EVENTS, data.to_row(identity.user_id))
    logger.info(f"事件已创建: {row.get('id')}")
    return Event.from_row(row)

def update_event(backend: Backend, identity: Optional[Identity], event_id: str, data: UpdateEventInput) -> Event:
    if identity is None:
        raise AuthenticationError("用户未登录")
    validate_update_event(data)
    values = data.to_values()
    values["updated_at"] = datetime.now(timezone.utc)
    rows = backend.update(EVENTS, values, [eq("id", event_id), _owner(identity)])
    if not rows:
        raise NotFoundError("事件不存在")
    return Event.from_row(rows[0])

def delete_event(backend: Backend, identity: Optional[Identity], event_id: str):
    """删除事件；其进展记录由外键级联删除"""
    if identity is None:
        raise AuthenticationError("用户未登录")
    backend.delete(EVENTS, [eq("id", event_id), _owner(identity)])
    logger.info(f"事件已删除: {event_id}")

def delete_events_for_user(backend: Backend, user_id: str) -> int:
    """删除某个用户的全部事件 (管理员级联删除用户时使用)"""
    return backend.delete(EVENTS, [eq("user_id", user_id)])


# --- 进展记录 ---

def get_event_records(backend: Backend, event_id: str) -> List[EventRecord]:
    rows = backend.select(RECORDS, [eq("event_id", event_id)], order_by="created_at")
    return [EventRecord.from_row(r) for r in rows]

def create_event_record(backend: Backend, data: CreateEventRecordInput) -> EventRecord:
    """
    创建进展记录，然后把父事件的 updated_at 更新为当前时间。
    两次写入之间没有事务：第二次写入失败只会让 updated_at 停留在旧值，记录本身已保存，
    因此这里只记录警告而不向上抛出。
    """
    row = backend.insert(RECORDS, {
        "event_id": data.event_id,
        "original_content": data.original_content,
        "ai_summary": data.ai_summary,
    })
    try:
        backend.update(EVENTS, {"updated_at": datetime.now(timezone.utc)}, [eq("id", data.event_id)])
    except BackendOperationError as e:
        logger.warning(f"记录已保存，但更新事件 {data.event_id} 的 updated_at 失败: {e}")
    return EventRecord.from_row(row)

def update_event_record(backend: Backend, event_id: str, record_id: str, ai_summary: str):
    backend.update(RECORDS, {"ai_summary": ai_summary}, [eq("id", record_id), eq("event_id", event_id)])

def delete_event_record(backend: Backend, event_id: str, record_id: str):
    backend.delete(RECORDS, [eq("id", record_id), eq("event_id", event_id)])


# --- 聚合 ---

def get_all_categories(backend: Backend, identity: Optional[Identity]) -> List[str]:
    """用户事件中出现过的全部分类，去重、去空，保持首次出现的顺序"""
    if identity is None:
        return []
    rows = backend.select(EVENTS, [_owner(identity)], columns="category")
    return list(dict.fromkeys(r["category"] for r in rows if r.get("category")))

def get_event_stats(backend: Backend, identity: Optional[Identity]) -> EventStats:
    if identity is None:
        return EventStats()
    rows = backend.select(EVENTS, [_owner(identity)], columns="status")
    return EventStats(
        total=len(rows),
        ongoing=sum(1 for r in rows if r.get("status") == "ongoing"),
        closed=sum(1 for r in rows if r.get("status") == "closed"),
    )
