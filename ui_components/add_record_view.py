import streamlit as st
from infra.storage import event_store
from routes import event_path
from services.event_service import EventService
from ui_components.common import PageContext, navigate, notify, run_action


def render_add_record_view(ctx: PageContext):
    """添加进展：AI 整理后保存"""
    event_id = ctx.params["id"]
    if st.button("← 返回"):
        navigate(event_path(event_id))

    ok, event = run_action(event_store.get_event_by_id, ctx.backend, ctx.identity, event_id,
                           spinner_text="正在加载...", error_message="无法加载事件")
    if not ok:
        return
    if event is None:
        st.warning("事件不存在或无权访问")
        return
    if event.is_closed:
        st.info("事件已闭环，不能再添加进展")
        return

    st.header("添加进展")
    st.caption(f"事件：{event.title}")
    with st.form("add_record_form"):
        content = st.text_area("进展内容", height=200, placeholder="随手记下发生了什么，AI 会帮你整理")
        submitted = st.form_submit_button("保存进展", type="primary", width="stretch")

    if submitted:
        ok, _ = run_action(EventService.add_record, ctx.backend, ctx.identity, event_id, content,
                           spinner_text="AI 正在整理进展...", error_message="保存失败，请稍后重试")
        if ok:
            notify("进展已保存", persist=True)
            navigate(event_path(event_id))
