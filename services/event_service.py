"""
事件业务服务 (Event Service)
处理进展记录的添加/编辑/删除、事件闭环，以及首页数据的加载与筛选。
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import List, Optional, Tuple
from core.schemas import (
    Identity, Event, EventRecord, EventWithRecords, HomeData,
    CreateEventRecordInput, UpdateEventInput,
)
from core.exceptions import ValidationError, NotFoundError
from core.periods import get_filter_window
from infra.storage import event_store
from infra.storage.backend import Backend
from services.summary_service import SummaryService

logger = logging.getLogger(__name__)

# 首页筛选标签：状态标签与分类标签分开标记，分类名与状态同名时互不干扰
ALL_TAB = ("status", "all")
STATUS_TABS = (ALL_TAB, ("status", "ongoing"), ("status", "closed"))


def category_tab(name: str) -> Tuple[str, str]:
    return ("category", name)


def _load_open_event(backend: Backend, identity: Optional[Identity], event_id: str) -> EventWithRecords:
    event = event_store.get_event_with_records(backend, identity, event_id)
    if event is None:
        raise NotFoundError("事件不存在")
    if event.is_closed:
        raise ValidationError("事件已闭环，无法修改进展")
    return event


class EventService:
    @staticmethod
    def add_record(backend: Backend, identity: Optional[Identity], event_id: str, content: str) -> EventRecord:
        """先由 AI 整理进展，再保存原文与整理结果"""
        if not (content or "").strip():
            raise ValidationError("请输入进展内容")
        _load_open_event(backend, identity, event_id)
        content = content.strip()
        ai_summary = SummaryService.summarize_record(content)
        return event_store.create_event_record(backend, CreateEventRecordInput(
            event_id=event_id, original_content=content, ai_summary=ai_summary,
        ))

    @staticmethod
    def edit_record(backend: Backend, identity: Optional[Identity], event_id: str, record_id: str, ai_summary: str):
        if not (ai_summary or "").strip():
            raise ValidationError("进展内容不能为空")
        _load_open_event(backend, identity, event_id)
        event_store.update_event_record(backend, event_id, record_id, ai_summary.strip())

    @staticmethod
    def remove_record(backend: Backend, identity: Optional[Identity], event_id: str, record_id: str):
        _load_open_event(backend, identity, event_id)
        event_store.delete_event_record(backend, event_id, record_id)

    @staticmethod
    def close_event(backend: Backend, identity: Optional[Identity], event_id: str) -> Event:
        """
        闭环事件。
        AI 总结成功后才执行唯一一次写入 {status: closed, summary}；
        AI 失败时不写任何数据，事件保持进行中。
        """
        event = _load_open_event(backend, identity, event_id)
        summary = SummaryService.summarize_event(event.title, event.records)
        closed = event_store.update_event(
            backend, identity, event_id, UpdateEventInput(status="closed", summary=summary),
        )
        logger.info(f"事件已闭环: {event_id}")
        return closed

    @staticmethod
    def load_home_data(backend: Backend, identity: Optional[Identity], date_filter: str = "all",
                       now: Optional[datetime] = None) -> HomeData:
        """加载事件列表，再并发读取统计与分类"""
        window = get_filter_window(date_filter, now)
        if window is None:
            events = event_store.get_user_events(backend, identity)
        else:
            events = event_store.get_events_by_date_range(backend, identity, window.start, window.end)

        with ThreadPoolExecutor(max_workers=2) as executor:
            stats_future = executor.submit(event_store.get_event_stats, backend, identity)
            categories_future = executor.submit(event_store.get_all_categories, backend, identity)
            stats = stats_future.result()
            categories = categories_future.result()

        return HomeData(events=events, stats=stats, categories=categories)

    @staticmethod
    def filter_events(events: List[Event], tab: Tuple[str, str] = ALL_TAB, keyword: str = "") -> List[Event]:
        """
        首页本地筛选。
        tab 为 ("status", all|ongoing|closed) 或 ("category", 分类名)；关键词不区分大小写，匹配标题、描述与分类。
        """
        kind, value = tab
        if kind == "category":
            events = [e for e in events if e.category == value]
        elif value != "all":
            events = [e for e in events if e.status == value]

        keyword = (keyword or "").strip().lower()
        if keyword:
            events = [
                e for e in events
                if keyword in e.title.lower()
                or keyword in (e.description or "").lower()
                or keyword in e.category.lower()
            ]
        return events
