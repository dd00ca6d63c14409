from datetime import datetime, timedelta, timezone
import pytest
from core.exceptions import ValidationError, LLMOperationError, NotFoundError
from core.periods import now_local
from core.schemas import Event, UpdateEventInput
from infra.storage import event_store
from services.event_service import ALL_TAB, EventService, category_tab


def test_add_record_saves_original_and_ai_text(backend, alice, make_event, fake_llm):
    fake_llm("与客户确认了需求范围。")
    event = make_event(alice)
    record = EventService.add_record(backend, alice, event.id, "  今天跟客户聊了下需求  ")
    assert record.original_content == "今天跟客户聊了下需求"
    assert record.ai_summary == "与客户确认了需求范围。"
    assert event_store.get_event_with_records(backend, alice, event.id).record_count == 1


def test_add_record_rejects_empty_text(backend, alice, make_event, fake_llm):
    fake_llm("不应被调用")
    event = make_event(alice)
    with pytest.raises(ValidationError):
        EventService.add_record(backend, alice, event.id, "   ")


def test_add_record_to_missing_event(backend, alice, fake_llm):
    fake_llm("x")
    with pytest.raises(NotFoundError):
        EventService.add_record(backend, alice, "missing", "内容")


def test_add_record_ai_failure_saves_nothing(backend, alice, make_event, failing_llm):
    event = make_event(alice)
    with pytest.raises(LLMOperationError):
        EventService.add_record(backend, alice, event.id, "内容")
    assert event_store.get_event_records(backend, event.id) == []


def test_close_event_writes_status_and_summary(backend, alice, make_event, fake_llm):
    fake_llm("整理一", "## 事件概述\n顺利完成")
    event = make_event(alice, "发布新版本")
    EventService.add_record(backend, alice, event.id, "完成测试")
    closed = EventService.close_event(backend, alice, event.id)
    assert closed.status == "closed"
    assert closed.summary == "## 事件概述\n顺利完成"


def test_close_event_ai_failure_keeps_event_ongoing(backend, alice, make_event, failing_llm):
    event = make_event(alice)
    with pytest.raises(LLMOperationError):
        EventService.close_event(backend, alice, event.id)
    unchanged = event_store.get_event_by_id(backend, alice, event.id)
    assert unchanged.status == "ongoing"
    assert unchanged.summary is None


def test_closed_event_rejects_progress_changes(backend, alice, make_event, fake_llm):
    fake_llm("整理", "总结")
    event = make_event(alice)
    record = EventService.add_record(backend, alice, event.id, "内容")
    EventService.close_event(backend, alice, event.id)

    with pytest.raises(ValidationError):
        EventService.add_record(backend, alice, event.id, "再加一条")
    with pytest.raises(ValidationError):
        EventService.edit_record(backend, alice, event.id, record.id, "修改")
    with pytest.raises(ValidationError):
        EventService.remove_record(backend, alice, event.id, record.id)
    with pytest.raises(ValidationError):
        EventService.close_event(backend, alice, event.id)
    with pytest.raises(ValidationError):
        event_store.update_event(backend, alice, event.id, UpdateEventInput(status="ongoing"))


def test_edit_and_remove_record_on_open_event(backend, alice, make_event, fake_llm):
    fake_llm("整理")
    event = make_event(alice)
    record = EventService.add_record(backend, alice, event.id, "内容")
    EventService.edit_record(backend, alice, event.id, record.id, " 手动修改 ")
    assert event_store.get_event_records(backend, event.id)[0].ai_summary == "手动修改"
    EventService.remove_record(backend, alice, event.id, record.id)
    assert event_store.get_event_records(backend, event.id) == []


def test_load_home_data(backend, alice, make_event):
    make_event(alice, "a", category="工作")
    make_event(alice, "b", category="生活")
    old = make_event(alice, "旧", category="工作", created_at=datetime(2020, 1, 1, tzinfo=timezone.utc))

    data = EventService.load_home_data(backend, alice, "all")
    assert len(data.events) == 3
    assert data.stats.total == 3
    assert set(data.categories) == {"工作", "生活"}

    today = EventService.load_home_data(backend, alice, "today", now_local())
    assert old.id not in {e.id for e in today.events}
    assert len(today.events) == 2
    # 统计与分类不受日期筛选影响
    assert today.stats.total == 3


def _event(title, category="工作", status="ongoing", description=None):
    now = datetime.now(timezone.utc)
    return Event(id=title, user_id="u", title=title, description=description, category=category,
                 status=status, importance=3, summary=None, created_at=now, updated_at=now)


def test_filter_events_by_tab_and_keyword():
    events = [
        _event("Weekly Report", description="写周报"),
        _event("跑步", category="健康", status="closed"),
        _event("读书", category="学习", description="读 Python 书"),
    ]
    assert [e.title for e in EventService.filter_events(events, ("status", "closed"))] == ["跑步"]
    assert len(EventService.filter_events(events, ("status", "ongoing"))) == 2
    assert [e.title for e in EventService.filter_events(events, category_tab("健康"))] == ["跑步"]
    assert [e.title for e in EventService.filter_events(events, ALL_TAB, "weekly")] == ["Weekly Report"]
    assert [e.title for e in EventService.filter_events(events, ALL_TAB, "PYTHON")] == ["读书"]
    assert [e.title for e in EventService.filter_events(events, ALL_TAB, "学习")] == ["读书"]
    assert EventService.filter_events(events, category_tab("健康"), "周报") == []


def test_category_named_like_a_status_filters_by_category():
    events = [
        _event("复盘", category="closed"),
        _event("旧项目", category="工作", status="closed"),
        _event("日常", category="all"),
    ]
    assert [e.title for e in EventService.filter_events(events, category_tab("closed"))] == ["复盘"]
    assert [e.title for e in EventService.filter_events(events, ("status", "closed"))] == ["旧项目"]
    assert [e.title for e in EventService.filter_events(events, category_tab("all"))] == ["日常"]
    assert len(EventService.filter_events(events, ALL_TAB)) == 3
