"""
管理员页面 (Admin View)
用户列表、角色调整与删除用户。权限由 AdminService 在每个操作中重新校验。
"""
import pandas as pd
import streamlit as st
from core.formatting import ROLE_LABELS, format_datetime
from prompts import force_reload_prompts
from services.admin_service import AdminService
from ui_components.common import PageContext, navigate, notify, run_action


def _render_user_row(ctx: PageContext, profile):
    is_self = profile.id == ctx.identity.user_id
    cols = st.columns([2, 1, 2, 1])
    cols[0].write(f"{profile.username or profile.id}{' (我)' if is_self else ''}")
    cols[1].write(ROLE_LABELS.get(profile.role, profile.role))

    if is_self:
        cols[2].caption("不能修改自己的角色")
        return

    target_role = "user" if profile.is_admin else "admin"
    label = "设为普通用户" if profile.is_admin else "设为管理员"
    if cols[2].button(label, key=f"role_{profile.id}"):
        ok, _ = run_action(AdminService.change_role, ctx.backend, ctx.identity, profile.id, target_role,
                           spinner_text="正在更新角色...", error_message="更新角色失败")
        if ok:
            notify("角色已更新", persist=True)
            st.rerun()

    with cols[3].popover("删除"):
        st.write(f"确定删除用户「{profile.username}」吗？该用户的全部事件与进展记录都将被删除。")
        if st.button("确认删除", key=f"delete_user_{profile.id}", type="primary"):
            ok, result = run_action(AdminService.delete_user, ctx.backend, ctx.identity, profile.id,
                                    spinner_text="正在删除用户...", error_message="删除用户失败")
            if ok:
                if result.auth_error:
                    notify(f"用户数据已删除，但认证账号删除失败：{result.auth_error}", icon="⚠️", persist=True)
                else:
                    notify("用户已删除", persist=True)
                st.rerun()


def render_admin_view(ctx: PageContext):
    if not ctx.is_admin:
        notify("您没有管理员权限", icon="⚠️", persist=True)
        navigate("/")

    if st.button("← 返回首页"):
        navigate("/")
    st.header("🛡️ 用户管理")

    ok, profiles = run_action(AdminService.list_profiles, ctx.backend, ctx.identity,
                              spinner_text="正在加载用户...", error_message="无法加载用户列表")
    if not ok:
        return

    df = pd.DataFrame([
        {"用户名": p.username, "角色": ROLE_LABELS.get(p.role, p.role), "注册时间": format_datetime(p.created_at)}
        for p in profiles
    ])
    c1, c2 = st.columns(2)
    c1.metric("用户总数", len(profiles))
    c2.metric("管理员", sum(1 for p in profiles if p.is_admin))
    if not df.empty:
        st.dataframe(df, hide_index=True)

    st.subheader("操作")
    for profile in profiles:
        _render_user_row(ctx, profile)

    with st.expander("⚙️ 系统维护"):
        if st.button("重新加载 Prompt 模板"):
            force_reload_prompts()
            st.toast("Prompt 模板已重新加载")
