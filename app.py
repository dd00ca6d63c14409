"""
事件记录助手 Streamlit 入口
负责初始化、会话级后端、登录拦截与页面分发。
"""
import logging
import streamlit as st
from config import load_environment
from config import loader as config_loader
from core import logger as logger_config
from core.exceptions import ConfigurationError, BackendOperationError, AuthenticationError
from infra.storage.factory import get_backend
from routes import resolve, requires_auth, LOGIN_PATH
from services.admin_service import AdminService
from services.auth_service import AuthService
from ui_components.common import PageContext, flush_notifications, navigate, notify
from ui_components.login_view import render_login_view
from ui_components.home_view import render_home_view
from ui_components.admin_view import render_admin_view
from ui_components.summary_view import render_summary_view
from ui_components.event_form_view import render_event_create_view, render_event_edit_view
from ui_components.event_detail_view import render_event_detail_view
from ui_components.add_record_view import render_add_record_view

# --- 初始化 ---
load_environment()
logger_config.setup_logging()
app_logger = logging.getLogger(__name__)

st.set_page_config(page_title="事件记录助手", page_icon="📒", layout="centered")

PAGES = {
    "home": render_home_view,
    "login": render_login_view,
    "admin": render_admin_view,
    "summary": render_summary_view,
    "event_create": render_event_create_view,
    "event_detail": render_event_detail_view,
    "event_edit": render_event_edit_view,
    "add_record": render_add_record_view,
}


def get_session_backend(full_config: dict):
    """每个浏览器会话持有独立的后端客户端 (其中保存了该会话的认证状态)"""
    if "backend" not in st.session_state:
        st.session_state.backend = get_backend(full_config)
    return st.session_state.backend


def handle_sign_out(backend, full_config: dict):
    try:
        AuthService(backend, full_config.get("auth", {})).sign_out()
    except AuthenticationError as e:
        app_logger.warning(f"退出登录时出错: {e}")
    for key in list(st.session_state.keys()):
        if key != "backend":
            del st.session_state[key]
    notify("已退出登录", persist=True)
    navigate(LOGIN_PATH)


def main():
    full_config = config_loader.load_config()
    try:
        backend = get_session_backend(full_config)
    except ConfigurationError as e:
        st.error(f"后端配置错误：{e}")
        st.stop()

    if st.session_state.pop("sign_out_requested", False):
        handle_sign_out(backend, full_config)

    flush_notifications()

    path = st.query_params.get("path", "/")
    route, params = resolve(path)
    identity = st.session_state.get("identity")
    logger_config.set_log_user(identity.username if identity else None)

    # 登录拦截：除登录页外都需要登录
    if requires_auth(route) and identity is None:
        st.session_state["redirect_after_login"] = path
        navigate(LOGIN_PATH)
    if route.page == "login" and identity is not None:
        navigate("/")

    is_admin = False
    if identity is not None:
        try:
            is_admin = AdminService.is_admin(backend, identity)
        except BackendOperationError as e:
            app_logger.warning(f"读取用户角色失败: {e}")

    ctx = PageContext(backend=backend, identity=identity, full_config=full_config,
                      params=params, is_admin=is_admin)
    try:
        PAGES[route.page](ctx)
    except Exception as e:
        app_logger.error(f"渲染页面 {route.pattern} 失败: {e}", exc_info=True)
        st.error(f"页面出现未知错误: {e}")


main()
