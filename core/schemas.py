"""
业务对象定义 (Schemas)
定义系统各层级间传递的强类型数据结构，确保数据流透明且可预测。
后端返回的行 (dict) 通过 from_row 转换为这些对象；页面层只接触这些对象。
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

DEFAULT_CATEGORY = "未分类"
DEFAULT_IMPORTANCE = 3
EVENT_STATUSES = ("ongoing", "closed")
PROFILE_ROLES = ("user", "admin")


def parse_timestamp(value) -> Optional[datetime]:
    """将后端返回的时间 (ISO 字符串或 datetime) 统一为带时区的 datetime。"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass
class Identity:
    """
    请求级身份
    每次数据访问都显式传入，替代全局认证上下文。
    """
    user_id: str
    email: str

    @property
    def username(self) -> str:
        return self.email.split("@", 1)[0]


@dataclass
class Event:
    id: str
    user_id: str
    title: str
    description: Optional[str]
    category: str
    status: str
    importance: int
    summary: Optional[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Event":
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            title=row["title"],
            description=row.get("description"),
            category=row.get("category") or DEFAULT_CATEGORY,
            status=row.get("status") or "ongoing",
            importance=int(row.get("importance") or DEFAULT_IMPORTANCE),
            summary=row.get("summary"),
            created_at=parse_timestamp(row.get("created_at")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )

    @property
    def is_closed(self) -> bool:
        return self.status == "closed"


@dataclass
class EventRecord:
    id: str
    event_id: str
    original_content: str
    ai_summary: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "EventRecord":
        return cls(
            id=str(row["id"]),
            event_id=str(row["event_id"]),
            original_content=row.get("original_content") or "",
            ai_summary=row.get("ai_summary") or "",
            created_at=parse_timestamp(row.get("created_at")),
        )

    @property
    def display_text(self) -> str:
        """优先展示 AI 整理后的文本，缺失时回退到原文"""
        return self.ai_summary or self.original_content


@dataclass
class EventWithRecords(Event):
    """事件聚合视图：事件本身 + 按时间正序排列的进展记录"""
    records: List[EventRecord] = field(default_factory=list)

    @classmethod
    def compose(cls, event: Event, records: List[EventRecord]) -> "EventWithRecords":
        return cls(**asdict(event), records=list(records))

    @property
    def record_count(self) -> int:
        return len(self.records)


@dataclass
class Profile:
    id: str
    username: Optional[str]
    role: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Profile":
        return cls(
            id=str(row["id"]),
            username=row.get("username"),
            role=row.get("role") or "user",
            created_at=parse_timestamp(row.get("created_at")),
        )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass
class CreateEventInput:
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    importance: Optional[int] = None

    def to_row(self, user_id: str) -> Dict[str, Any]:
        """补全默认值后生成待插入的行"""
        return {
            "user_id": user_id,
            "title": self.title.strip(),
            "description": (self.description or "").strip() or None,
            "category": (self.category or "").strip() or DEFAULT_CATEGORY,
            "importance": self.importance or DEFAULT_IMPORTANCE,
        }


@dataclass
class UpdateEventInput:
    """事件的部分更新；值为 None 的字段不会写入"""
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    importance: Optional[int] = None
    status: Optional[str] = None
    summary: Optional[str] = None

    def to_values(self) -> Dict[str, Any]:
        values = {k: v for k, v in asdict(self).items() if v is not None}
        if "title" in values:
            values["title"] = values["title"].strip()
        if "description" in values:
            values["description"] = values["description"].strip() or None
        if "category" in values:
            values["category"] = values["category"].strip() or DEFAULT_CATEGORY
        return values


@dataclass
class CreateEventRecordInput:
    event_id: str
    original_content: str
    ai_summary: str


@dataclass
class EventStats:
    total: int = 0
    ongoing: int = 0
    closed: int = 0


@dataclass
class DateWindow:
    start: datetime
    end: datetime


@dataclass
class PeriodRecord:
    ai_summary: str
    created_at: str


@dataclass
class PeriodEvent:
    """提交给 AI 生成周期总结的扁平化事件结构"""
    title: str
    description: Optional[str]
    category: str
    status: str
    importance: int
    created_at: str
    updated_at: str
    records: List[PeriodRecord] = field(default_factory=list)

    @classmethod
    def from_event(cls, event: EventWithRecords) -> "PeriodEvent":
        return cls(
            title=event.title,
            description=event.description,
            category=event.category,
            status=event.status,
            importance=event.importance,
            created_at=event.created_at.isoformat(),
            updated_at=event.updated_at.isoformat(),
            records=[
                PeriodRecord(ai_summary=r.display_text, created_at=r.created_at.isoformat())
                for r in event.records
            ],
        )

    def to_dict(self):
        return asdict(self)


@dataclass
class PeriodReport:
    """周期总结结果"""
    period: str
    window: DateWindow
    event_count: int
    summary: str


@dataclass
class PeriodEventsExport:
    """已生成的周期事件导出文件，只对生成时的周期与时间窗口有效"""
    period: str
    window: DateWindow
    file_name: str
    content: str

    def matches(self, period: str, window: DateWindow) -> bool:
        return self.period == period and self.window == window


@dataclass
class HomeData:
    events: List[Event]
    stats: EventStats
    categories: List[str]


@dataclass
class UserDeletionResult:
    """
    管理员删除用户的分步结果。
    三步之间没有事务：前两步成功后第三步失败时，不会回滚前两步。
    """
    user_id: str
    events_deleted: bool = False
    profile_deleted: bool = False
    auth_deleted: bool = False
    auth_error: Optional[str] = None
