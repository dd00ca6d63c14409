from datetime import datetime, timezone
from zoneinfo import ZoneInfo
from core.schemas import EventWithRecords, EventRecord, DateWindow, PeriodReport
from infra.utils.export import (
    build_share_text, export_period_events_markdown, export_period_summary_markdown, export_filename, export_as_pdf,
    build_period_events_export,
)

TZ = ZoneInfo("Asia/Shanghai")
WINDOW = DateWindow(start=datetime(2024, 1, 8, tzinfo=TZ), end=datetime(2024, 1, 10, 23, 59, 59, tzinfo=TZ))


def _event(event_id, title, category, status="ongoing", records=(), summary=None,
           created=datetime(2024, 1, 8, 1, 0, tzinfo=timezone.utc),
           updated=datetime(2024, 1, 9, 2, 0, tzinfo=timezone.utc)):
    return EventWithRecords(
        id=event_id, user_id="u1", title=title, description=None, category=category,
        status=status, importance=4, summary=summary, created_at=created, updated_at=updated,
        records=list(records),
    )


def _record(record_id, event_id, summary, original="原文"):
    return EventRecord(id=record_id, event_id=event_id, original_content=original, ai_summary=summary,
                       created_at=datetime(2024, 1, 8, 3, 0, tzinfo=timezone.utc))


def test_events_markdown_groups_by_sorted_category():
    events = [
        _event("e1", "写周报", "工作", records=[_record("r1", "e1", "完成初稿"), _record("r2", "e1", "")]),
        _event("e2", "跑步", "健康", status="closed", summary="坚持了三天"),
        _event("e3", "评审", "工作"),
    ]
    md = export_period_events_markdown("week", WINDOW, events, TZ)

    assert md.startswith("# 周事件记录导出\n\n**时间范围**：2024/01/08 - 2024/01/10\n**事件总数**：3\n")
    headings = [line for line in md.splitlines() if line.startswith("## ")]
    assert headings == ["## 📂 健康", "## 📂 工作", "## 📊 统计信息"]
    assert "### 1. 写周报" in md and "### 2. 评审" in md and "### 1. 跑步" in md
    assert "- **重要程度**：⭐⭐⭐⭐" in md
    assert "- **创建时间**：2024/1/8 09:00:00" in md
    # 25 小时向上取整为 2 天
    assert "- **时间跨度**：2天" in md
    assert "**进展记录**（共2条）：" in md
    # ai_summary 为空时回退到原文
    assert "   原文\n" in md
    assert "**事件总结**：\n坚持了三天" in md
    assert md.endswith(
        "- 总事件数：3\n- 进行中：2\n- 已闭环：1\n- 分类数：2\n- 总进展记录数：2\n\n"
    )


def test_events_markdown_marks_missing_records():
    md = export_period_events_markdown("day", WINDOW, [_event("e1", "空事件", "未分类")], TZ)
    assert "**进展记录**：暂无" in md


def test_summary_markdown_header():
    report = PeriodReport(period="month", window=WINDOW, event_count=5, summary="## 总体概览\n很好")
    md = export_period_summary_markdown(report, TZ)
    assert md == "# 月总结报告\n\n时间范围：2024/01/08 - 2024/01/10\n事件数量：5\n\n---\n\n## 总体概览\n很好"


def test_export_filename():
    assert export_filename("总结", "week", WINDOW, "md", TZ) == "周总结_2024-1-8.md"


def test_period_events_export_is_bound_to_its_period():
    exported = build_period_events_export("week", WINDOW, [_event("e1", "写周报", "工作")], TZ)
    assert exported.file_name == "周事件记录_2024-1-8.md"
    assert exported.content.startswith("# 周事件记录导出\n")
    assert exported.matches("week", WINDOW)
    assert not exported.matches("month", WINDOW)
    later = DateWindow(start=WINDOW.start, end=datetime(2024, 1, 11, 23, 59, 59, tzinfo=TZ))
    assert not exported.matches("week", later)


def test_share_text():
    event = _event("e1", "写周报", "工作", records=[_record("r1", "e1", "完成初稿")])
    text = build_share_text(event, TZ)
    assert text.startswith("📋 写周报\n")
    assert "📊 状态：进行中" in text
    assert "⭐ 重要性：★★★★☆" in text
    assert "📌 事件进展（共1条）：" in text
    assert "1. [01/08 11:00]\n   完成初稿" in text
    assert "💡 事件总结" not in text


def test_share_text_without_records_shows_placeholder():
    text = build_share_text(_event("e1", "跑步", "健康", status="closed", summary="完成"), TZ)
    assert "📌 暂无进展记录" in text
    assert text.endswith("💡 事件总结：\n完成\n")


def test_pdf_export_produces_document():
    data = export_as_pdf("周总结报告", "# 周总结报告\n\n时间范围：2024/01/08 - 2024/01/10\n\nWeekly summary")
    assert data.startswith(b"%PDF")
