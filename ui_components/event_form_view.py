"""
新建/编辑事件页面
两个页面共用同一个表单，编辑时预填当前值。
"""
import streamlit as st
from core.schemas import CreateEventInput, UpdateEventInput, DEFAULT_CATEGORY
from infra.storage import event_store
from routes import event_path
from ui_components.common import PageContext, navigate, notify, run_action
from ui_components.importance import importance_input

NEW_CATEGORY = "➕ 新分类..."


def _event_form(ctx: PageContext, form_key: str, event=None):
    """渲染表单；提交时返回 (title, description, category, importance)，否则返回 None"""
    _, categories = run_action(event_store.get_all_categories, ctx.backend, ctx.identity,
                               spinner_text="正在加载分类...", error_message="无法加载分类")
    categories = list(categories or [])
    current = event.category if event else DEFAULT_CATEGORY
    if current not in categories:
        categories.insert(0, current)
    options = categories + [NEW_CATEGORY]

    # 分类选择放在表单外，便于切换“新分类”时立即显示输入框
    chosen = st.selectbox("分类", options, index=options.index(current), key=f"{form_key}_category")
    with st.form(form_key):
        title = st.text_input("事件标题 *", value=event.title if event else "")
        description = st.text_area("事件描述", value=(event.description or "") if event else "", height=150)
        custom_category = st.text_input("新分类名称") if chosen == NEW_CATEGORY else ""
        importance = importance_input(value=event.importance if event else 3)
        submitted = st.form_submit_button("保存", type="primary", width="stretch")

    if not submitted:
        return None
    category = custom_category if chosen == NEW_CATEGORY else chosen
    return title, description, category, importance


def render_event_create_view(ctx: PageContext):
    if st.button("← 返回"):
        navigate("/")
    st.header("新建事件")

    values = _event_form(ctx, "create_event_form")
    if values is None:
        return
    title, description, category, importance = values
    data = CreateEventInput(title=title, description=description, category=category, importance=importance)
    ok, event = run_action(event_store.create_event, ctx.backend, ctx.identity, data,
                           spinner_text="正在创建...", error_message="创建失败，请稍后重试")
    if ok:
        notify("事件已创建", persist=True)
        navigate(event_path(event.id))


def render_event_edit_view(ctx: PageContext):
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
        st.info("事件已闭环，不能再编辑")
        return

    st.header("编辑事件")
    values = _event_form(ctx, "edit_event_form", event)
    if values is None:
        return
    title, description, category, importance = values
    data = UpdateEventInput(title=title, description=description, category=category, importance=importance)
    ok, _ = run_action(event_store.update_event, ctx.backend, ctx.identity, event_id, data,
                       spinner_text="正在保存...", error_message="保存失败，请稍后重试")
    if ok:
        notify("事件已更新", persist=True)
        navigate(event_path(event_id))
