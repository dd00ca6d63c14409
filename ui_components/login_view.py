"""
登录/注册页面
"""
import streamlit as st
from services.auth_service import AuthService
from ui_components.common import PageContext, navigate, notify, run_action


def _on_signed_in(identity, message: str):
    st.session_state["identity"] = identity
    notify(message, persist=True)
    navigate(st.session_state.pop("redirect_after_login", "/"))


def render_login_view(ctx: PageContext):
    auth = AuthService(ctx.backend, ctx.full_config.get("auth", {}))

    _, center, _ = st.columns([1, 2, 1])
    with center:
        st.title("📒 事件记录助手")
        st.caption("记录事件进展，AI 帮你整理与总结")

        login_tab, signup_tab = st.tabs(["登录", "注册"])

        with login_tab:
            with st.form("login_form"):
                username = st.text_input("用户名")
                password = st.text_input("密码", type="password")
                submitted = st.form_submit_button("登录", type="primary", width="stretch")
            if submitted:
                ok, identity = run_action(auth.sign_in, username, password,
                                          spinner_text="正在登录...", error_message="登录失败")
                if ok:
                    _on_signed_in(identity, "登录成功")

        with signup_tab:
            with st.form("signup_form"):
                new_username = st.text_input("用户名", help="只能包含字母、数字和下划线")
                new_password = st.text_input("密码", type="password")
                confirm = st.text_input("确认密码", type="password")
                submitted = st.form_submit_button("注册", type="primary", width="stretch")
            if submitted:
                ok, identity = run_action(auth.sign_up, new_username, new_password, confirm,
                                          spinner_text="正在注册...", error_message="注册失败")
                if ok:
                    _on_signed_in(identity, "注册成功，已自动登录")
