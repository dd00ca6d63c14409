"""
导出工具 (Export)
事件分享文本、周期事件 Markdown、周期总结 Markdown 与 PDF 的生成。
除 PDF 外均为纯函数，输出只取决于输入与时区。
"""
import os
import math
import logging
from typing import List, Optional
from zoneinfo import ZoneInfo
from fpdf import FPDF
from core.schemas import EventWithRecords, DateWindow, PeriodReport, PeriodEventsExport
from core.periods import PERIOD_NAMES
from core.formatting import (
    STATUS_LABELS, format_date, format_datetime, format_short_datetime,
    format_date_range, importance_stars, importance_meter,
)

logger = logging.getLogger(__name__)

RULE = "━" * 20

CJK_FONT_CANDIDATES = [
    "C:/Windows/Fonts/simhei.ttf",
    "C:/Windows/Fonts/msyh.ttc",
    "/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc",
    "/usr/share/fonts/truetype/wqy/wqy-microhei.ttc",
    "/usr/share/fonts/truetype/droid/DroidSansFallbackFull.ttf",
    "/System/Library/Fonts/STHeiti Light.ttc",
]


def build_share_text(event: EventWithRecords, tz: Optional[ZoneInfo] = None) -> str:
    """生成可复制分享的事件纯文本摘要"""
    lines = [f"📋 {event.title}", RULE, ""]
    if event.description:
        lines += ["📝 事件内容：", event.description, ""]

    lines += [
        f"📊 状态：{STATUS_LABELS.get(event.status, event.status)}",
        f"📁 分类：{event.category}",
        f"⭐ 重要性：{importance_meter(event.importance)}",
        f"📅 创建时间：{format_datetime(event.created_at, tz)}",
        "",
    ]

    if event.records:
        lines += [f"📌 事件进展（共{len(event.records)}条）：", RULE, ""]
        for i, record in enumerate(event.records, 1):
            lines += [f"{i}. [{format_short_datetime(record.created_at, tz)}]", f"   {record.display_text}", ""]
    else:
        lines += ["📌 暂无进展记录", ""]

    if event.summary:
        lines += [RULE, "💡 事件总结：", event.summary]
    return "\n".join(lines) + "\n"


def export_event_as_text(event: EventWithRecords, tz: Optional[ZoneInfo] = None) -> bytes:
    return build_share_text(event, tz).encode("utf-8")


def _span_days(event: EventWithRecords) -> int:
    """创建到最后更新的天数，向上取整"""
    seconds = (event.updated_at - event.created_at).total_seconds()
    return math.ceil(seconds / 86400)


def export_period_events_markdown(period: str, window: DateWindow, events: List[EventWithRecords],
                                  tz: Optional[ZoneInfo] = None) -> str:
    """
    将时间段内的全部事件导出为 Markdown。
    事件按分类分组 (分类名排序)，组内保持传入顺序；末尾附统计信息。
    """
    period_name = PERIOD_NAMES[period]
    parts = [
        f"# {period_name}事件记录导出\n\n",
        f"**时间范围**：{format_date_range(window, tz)}\n",
        f"**事件总数**：{len(events)}\n\n",
        "---\n\n",
    ]

    by_category = {}
    for event in events:
        by_category.setdefault(event.category, []).append(event)

    for category in sorted(by_category):
        parts.append(f"## 📂 {category}\n\n")
        for index, event in enumerate(by_category[category], 1):
            parts.append(f"### {index}. {event.title}\n\n")
            parts.append(f"- **状态**：{STATUS_LABELS.get(event.status, event.status)}\n")
            parts.append(f"- **重要程度**：{importance_stars(event.importance)}\n")
            parts.append(f"- **创建时间**：{format_datetime(event.created_at, tz)}\n")
            parts.append(f"- **更新时间**：{format_datetime(event.updated_at, tz)}\n")
            parts.append(f"- **时间跨度**：{_span_days(event)}天\n\n")

            if event.description:
                parts.append(f"**事件描述**：\n{event.description}\n\n")

            if event.records:
                parts.append(f"**进展记录**（共{len(event.records)}条）：\n\n")
                for i, record in enumerate(event.records, 1):
                    parts.append(f"{i}. [{format_datetime(record.created_at, tz)}]\n")
                    parts.append(f"   {record.display_text}\n\n")
            else:
                parts.append("**进展记录**：暂无\n\n")

            if event.summary:
                parts.append(f"**事件总结**：\n{event.summary}\n\n")
            parts.append("---\n\n")

    parts += [
        "## 📊 统计信息\n\n",
        f"- 总事件数：{len(events)}\n",
        f"- 进行中：{sum(1 for e in events if e.status == 'ongoing')}\n",
        f"- 已闭环：{sum(1 for e in events if e.status == 'closed')}\n",
        f"- 分类数：{len(by_category)}\n",
        f"- 总进展记录数：{sum(e.record_count for e in events)}\n\n",
    ]
    return "".join(parts)


def build_period_events_export(period: str, window: DateWindow, events: List[EventWithRecords],
                               tz: Optional[ZoneInfo] = None) -> PeriodEventsExport:
    return PeriodEventsExport(
        period=period,
        window=window,
        file_name=export_filename("事件记录", period, window, "md", tz),
        content=export_period_events_markdown(period, window, events, tz),
    )


def export_period_summary_markdown(report: PeriodReport, tz: Optional[ZoneInfo] = None) -> str:
    period_name = PERIOD_NAMES[report.period]
    return (
        f"# {period_name}总结报告\n\n"
        f"时间范围：{format_date_range(report.window, tz)}\n"
        f"事件数量：{report.event_count}\n\n"
        f"---\n\n{report.summary}"
    )


def export_filename(kind: str, period: str, window: DateWindow, ext: str, tz: Optional[ZoneInfo] = None) -> str:
    """例如 周总结_2024-1-5.md / 月事件记录_2024-1-1.md"""
    return f"{PERIOD_NAMES[period]}{kind}_{format_date(window.start, tz).replace('/', '-')}.{ext}"


def _load_cjk_font(pdf: FPDF) -> bool:
    font_path = os.getenv("PDF_FONT_PATH")
    candidates = [font_path] if font_path else []
    for path in candidates + CJK_FONT_CANDIDATES:
        if not os.path.exists(path):
            continue
        try:
            pdf.add_font("Chinese", "", path)
            pdf.add_font("Chinese", "B", path)
            pdf.set_font("Chinese", size=12)
            return True
        except Exception as e:
            logger.warning(f"加载字体 {path} 失败: {e}")
    return False


def export_as_pdf(title: str, content: str) -> bytes:
    """导出为 PDF 字节流；找不到中文字体时回退 Helvetica (中文将无法显示)"""
    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()
    pdf.set_left_margin(15)
    pdf.set_right_margin(15)

    has_cjk = _load_cjk_font(pdf)
    if not has_cjk:
        logger.warning("未找到可用的中文字体，PDF 将使用 Helvetica")
        pdf.set_font("Helvetica", size=12)

    def _text(s: str) -> str:
        # Helvetica 只支持 latin-1
        return s if has_cjk else s.encode("latin-1", "replace").decode("latin-1")

    pdf.set_font(pdf.font_family, "B", 18)
    pdf.multi_cell(0, 12, _text(title), align="C", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(6)

    pdf.set_font(pdf.font_family, size=12)
    for paragraph in content.split("\n"):
        paragraph = paragraph.strip()
        if not paragraph:
            pdf.ln(4)
            continue
        pdf.multi_cell(0, 8, _text(paragraph), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(1)

    return bytes(pdf.output())
