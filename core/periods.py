"""
时间窗口计算 (Periods)
根据“现在”计算周期总结与首页筛选所用的起止时间。所有时间均带本地时区。
"""
import os
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo
from core.schemas import DateWindow

DEFAULT_TIMEZONE = "Asia/Shanghai"

PERIOD_NAMES = {
    "day": "日",
    "week": "周",
    "month": "月",
    "year": "年",
}

DATE_FILTERS = {
    "all": "全部时间",
    "today": "今天",
    "week": "最近一周",
    "month": "本月",
    "year": "今年",
}


def get_local_timezone() -> ZoneInfo:
    return ZoneInfo(os.getenv("APP_TIMEZONE", DEFAULT_TIMEZONE))


def now_local() -> datetime:
    return datetime.now(get_local_timezone())


def _start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _end_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=23, minute=59, second=59, microsecond=0)


def get_period_window(period: str, now: Optional[datetime] = None) -> DateWindow:
    """
    计算周期总结的时间窗口。

    Args:
        period (str): day / week / month / year。
        now (datetime): 锚定时间，默认取本地当前时间。

    Returns:
        DateWindow: 开始于周期首日 00:00:00，结束于今天 23:59:59。周以周一为首日。
    """
    now = now or now_local()
    end = _end_of_day(now)
    if period == "day":
        start = _start_of_day(now)
    elif period == "week":
        start = _start_of_day(now - timedelta(days=now.weekday()))
    elif period == "month":
        start = _start_of_day(now.replace(day=1))
    elif period == "year":
        start = _start_of_day(now.replace(month=1, day=1))
    else:
        raise ValueError(f"未知的周期类型: {period}")
    return DateWindow(start=start, end=end)


def get_filter_window(date_filter: str, now: Optional[datetime] = None) -> Optional[DateWindow]:
    """
    首页日期筛选的时间窗口；"all" 表示不过滤，返回 None。
    注意“最近一周”是滚动的 7 天，而不是自然周。
    """
    if date_filter == "all":
        return None
    now = now or now_local()
    end = _end_of_day(now)
    if date_filter == "today":
        start = _start_of_day(now)
    elif date_filter == "week":
        start = _start_of_day(now - timedelta(days=7))
    elif date_filter == "month":
        start = _start_of_day(now.replace(day=1))
    elif date_filter == "year":
        start = _start_of_day(now.replace(month=1, day=1))
    else:
        raise ValueError(f"未知的日期筛选: {date_filter}")
    return DateWindow(start=start, end=end)
