"""
事件详情页面
事件信息、进展时间线、闭环与导出。已闭环的事件只读。
"""
import streamlit as st
from core.formatting import STATUS_LABELS, format_datetime, format_minute_datetime
from infra.storage import event_store
from infra.utils.export import export_event_as_text
from routes import event_path
from services.event_service import EventService
from ui_components.common import PageContext, navigate, notify, run_action
from ui_components.importance import render_importance


def _render_record(ctx: PageContext, event, record, index: int):
    with st.container(border=True):
        st.caption(f"#{index} · {format_minute_datetime(record.created_at)}")
        editing_key = f"editing_record_{record.id}"
        if st.session_state.get(editing_key):
            new_text = st.text_area("进展内容", value=record.display_text, key=f"edit_text_{record.id}")
            c1, c2 = st.columns(2)
            if c1.button("保存", key=f"save_{record.id}", type="primary"):
                ok, _ = run_action(EventService.edit_record, ctx.backend, ctx.identity, event.id, record.id, new_text,
                                   spinner_text="正在保存...", error_message="保存失败")
                if ok:
                    st.session_state[editing_key] = False
                    notify("进展已更新", persist=True)
                    st.rerun()
            if c2.button("取消", key=f"cancel_{record.id}"):
                st.session_state[editing_key] = False
                st.rerun()
            return

        st.markdown(record.display_text)
        if record.ai_summary and record.original_content != record.ai_summary:
            with st.expander("查看原文"):
                st.write(record.original_content)

        if not event.is_closed:
            c1, c2, _ = st.columns([1, 1, 6])
            if c1.button("编辑", key=f"edit_{record.id}"):
                st.session_state[editing_key] = True
                st.rerun()
            with c2.popover("删除"):
                st.write("确定删除这条进展吗？")
                if st.button("确认删除", key=f"delete_record_{record.id}", type="primary"):
                    ok, _ = run_action(EventService.remove_record, ctx.backend, ctx.identity, event.id, record.id,
                                       spinner_text="正在删除...", error_message="删除失败")
                    if ok:
                        notify("进展已删除", persist=True)
                        st.rerun()


def _render_actions(ctx: PageContext, event):
    c1, c2, c3, c4 = st.columns(4)
    if not event.is_closed:
        if c1.button("➕ 添加进展", type="primary", width="stretch"):
            navigate(event_path(event.id, "add-record"))
        if c2.button("✏️ 编辑", width="stretch"):
            navigate(event_path(event.id, "edit"))
        with c3.popover("✅ 闭环"):
            st.write("闭环后事件将不能再添加或修改进展，AI 会根据全部进展生成事件总结。")
            if st.button("确认闭环", type="primary", key="confirm_close"):
                ok, _ = run_action(EventService.close_event, ctx.backend, ctx.identity, event.id,
                                   spinner_text="AI 正在生成事件总结...", error_message="无法闭环事件，请稍后重试")
                if ok:
                    notify("事件已闭环，AI 已生成事件总结", persist=True)
                    st.rerun()

    c4.download_button(
        "📥 导出",
        data=export_event_as_text(event),
        file_name=f"{event.title}.txt",
        mime="text/plain",
        width="stretch",
    )

    with st.popover("🗑️ 删除事件"):
        st.write("确定删除该事件吗？所有进展记录将一并删除，此操作无法撤销。")
        if st.button("确认删除", type="primary", key="confirm_delete_event"):
            ok, _ = run_action(event_store.delete_event, ctx.backend, ctx.identity, event.id,
                               spinner_text="正在删除...", error_message="删除失败，请稍后重试")
            if ok:
                notify("事件已删除", persist=True)
                navigate("/")


def render_event_detail_view(ctx: PageContext):
    if st.button("← 返回首页"):
        navigate("/")

    ok, event = run_action(event_store.get_event_with_records, ctx.backend, ctx.identity, ctx.params["id"],
                           spinner_text="正在加载...", error_message="无法加载事件详情，请稍后重试")
    if not ok:
        return
    if event is None:
        st.warning("事件不存在或无权访问")
        return

    st.header(event.title)
    st.caption(f"📁 {event.category} · {STATUS_LABELS.get(event.status, event.status)} · "
               f"创建于 {format_datetime(event.created_at)} · 更新于 {format_datetime(event.updated_at)}")
    render_importance(event.importance)
    if event.description:
        st.write(event.description)

    _render_actions(ctx, event)

    if event.summary:
        with st.container(border=True):
            st.subheader("💡 事件总结")
            st.markdown(event.summary)

    st.subheader(f"📌 进展记录 ({event.record_count})")
    if not event.records:
        st.info("暂无进展记录")
    for index, record in enumerate(event.records, 1):
        _render_record(ctx, event, record, index)
