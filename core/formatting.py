"""
展示格式化工具
按 zh-CN 习惯格式化日期、状态与重要程度，供页面与导出共用。
"""
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo
from core.periods import get_local_timezone
from core.schemas import DateWindow

STATUS_LABELS = {"ongoing": "进行中", "closed": "已闭环"}
ROLE_LABELS = {"user": "普通用户", "admin": "管理员"}
IMPORTANCE_LABELS = ["低", "较低", "中等", "较高", "高"]


def to_local(dt: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    return dt.astimezone(tz or get_local_timezone())


def format_date(dt: datetime, tz: Optional[ZoneInfo] = None) -> str:
    """2024/1/5"""
    d = to_local(dt, tz)
    return f"{d.year}/{d.month}/{d.day}"


def format_date_padded(dt: datetime, tz: Optional[ZoneInfo] = None) -> str:
    """2024/01/05"""
    d = to_local(dt, tz)
    return f"{d.year}/{d.month:02d}/{d.day:02d}"


def format_datetime(dt: datetime, tz: Optional[ZoneInfo] = None) -> str:
    """2024/1/5 14:03:09"""
    d = to_local(dt, tz)
    return f"{d.year}/{d.month}/{d.day} {d.hour:02d}:{d.minute:02d}:{d.second:02d}"


def format_short_datetime(dt: datetime, tz: Optional[ZoneInfo] = None) -> str:
    """01/05 14:03"""
    d = to_local(dt, tz)
    return f"{d.month:02d}/{d.day:02d} {d.hour:02d}:{d.minute:02d}"


def format_minute_datetime(dt: datetime, tz: Optional[ZoneInfo] = None) -> str:
    """2024/01/05 14:03"""
    d = to_local(dt, tz)
    return f"{d.year}/{d.month:02d}/{d.day:02d} {d.hour:02d}:{d.minute:02d}"


def format_date_range(window: DateWindow, tz: Optional[ZoneInfo] = None) -> str:
    return f"{format_date_padded(window.start, tz)} - {format_date_padded(window.end, tz)}"


def format_relative_date(dt: datetime, now: datetime, tz: Optional[ZoneInfo] = None) -> str:
    """今天 / 昨天 / N天前，超过一周显示日期"""
    days = int((now - dt).total_seconds() // 86400)
    if days <= 0:
        return "今天"
    if days == 1:
        return "昨天"
    if days < 7:
        return f"{days}天前"
    return format_date(dt, tz)


def importance_stars(importance: int) -> str:
    return "⭐" * importance


def importance_meter(importance: int) -> str:
    return "★" * importance + "☆" * (5 - importance)


def importance_label(importance: int) -> str:
    if 1 <= importance <= 5:
        return IMPORTANCE_LABELS[importance - 1]
    return IMPORTANCE_LABELS[2]
