"""
首页视图 (Home View)
统计卡片、日期筛选、分类标签、关键词搜索与事件列表。
"""
import streamlit as st
from core.periods import DATE_FILTERS, now_local
from core.formatting import STATUS_LABELS, format_relative_date, importance_stars
from infra.storage import event_store
from infra.utils.export import build_share_text
from routes import event_path
from services.event_service import ALL_TAB, STATUS_TABS, EventService, category_tab
from ui_components.common import PageContext, navigate, notify, run_action

TAB_LABELS = {"all": "全部", "ongoing": "进行中", "closed": "已闭环"}


def _tab_label(tab) -> str:
    kind, value = tab
    return f"📁 {value}" if kind == "category" else TAB_LABELS[value]


def _render_header(ctx: PageContext):
    c1, c2 = st.columns([3, 2])
    with c1:
        st.title("📒 事件记录助手")
        st.caption(f"👤 {ctx.identity.username}")
    with c2:
        b1, b2, b3, b4 = st.columns(4)
        if b1.button("➕ 新建", type="primary", width="stretch"):
            navigate("/events/new")
        if b2.button("📊 总结", width="stretch"):
            navigate("/summary")
        if ctx.is_admin and b3.button("🛡️ 管理", width="stretch"):
            navigate("/admin")
        if b4.button("退出", width="stretch"):
            st.session_state["sign_out_requested"] = True
            st.rerun()


def _render_event_card(ctx: PageContext, event, now):
    with st.container(border=True):
        c1, c2 = st.columns([5, 2])
        with c1:
            st.markdown(f"**{event.title}**")
            if event.description:
                st.caption(event.description[:120])
            st.caption(
                f"📁 {event.category} · {STATUS_LABELS.get(event.status, event.status)} · "
                f"{importance_stars(event.importance)} · 🕒 {format_relative_date(event.updated_at, now)}"
            )
        with c2:
            a1, a2, a3 = st.columns(3)
            if a1.button("查看", key=f"open_{event.id}", width="stretch"):
                navigate(event_path(event.id))
            if a2.button("分享", key=f"share_{event.id}", width="stretch"):
                current = st.session_state.get("share_event_id")
                st.session_state["share_event_id"] = None if current == event.id else event.id
            with a3.popover("删除"):
                st.write(f"确定删除「{event.title}」吗？所有进展记录将一并删除，此操作无法撤销。")
                if st.button("确认删除", key=f"delete_{event.id}", type="primary"):
                    ok, _ = run_action(event_store.delete_event, ctx.backend, ctx.identity, event.id,
                                       spinner_text="正在删除...", error_message="删除失败，请稍后重试")
                    if ok:
                        notify("事件已删除", persist=True)
                        st.rerun()

        if st.session_state.get("share_event_id") == event.id:
            ok, detail = run_action(event_store.get_event_with_records, ctx.backend, ctx.identity, event.id,
                                    spinner_text="正在生成分享内容...", error_message="无法生成分享内容")
            if ok and detail is not None:
                st.caption("点击右上角按钮复制到剪贴板")
                st.code(build_share_text(detail), language=None)


def render_home_view(ctx: PageContext):
    _render_header(ctx)

    date_filter = st.selectbox("时间范围", options=list(DATE_FILTERS.keys()),
                               format_func=DATE_FILTERS.get, key="home_date_filter")
    now = now_local()
    ok, data = run_action(EventService.load_home_data, ctx.backend, ctx.identity, date_filter, now,
                          spinner_text="正在加载事件...", error_message="加载失败，请刷新重试")
    if not ok:
        if st.button("🔄 重新加载"):
            st.rerun()
        return

    m1, m2, m3 = st.columns(3)
    m1.metric("全部事件", data.stats.total)
    m2.metric("进行中", data.stats.ongoing)
    m3.metric("已闭环", data.stats.closed)

    keyword = st.text_input("搜索", placeholder="搜索标题、描述或分类", label_visibility="collapsed")
    tab_options = list(STATUS_TABS) + [category_tab(c) for c in data.categories]
    previous_tab = st.session_state.get("home_tab", ALL_TAB)
    tab = st.radio("筛选", tab_options, horizontal=True, label_visibility="collapsed",
                   index=tab_options.index(previous_tab) if previous_tab in tab_options else 0,
                   format_func=_tab_label)
    st.session_state["home_tab"] = tab

    events = EventService.filter_events(data.events, tab, keyword)
    if not events:
        st.info("暂无事件。点击“新建”开始记录吧。" if not data.events else "没有符合条件的事件。")
        return

    for event in events:
        _render_event_card(ctx, event, now)
