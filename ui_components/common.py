"""
页面公共组件
页面上下文、跳转、通知与统一的异常处理包装。
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional
import streamlit as st
from core.schemas import Identity
from core.exceptions import (
    BackendOperationError, LLMOperationError, AuthenticationError, AuthorizationError,
    ValidationError, NotFoundError, EmptyPeriodError, ConfigurationError,
)
from infra.storage.backend import Backend

logger = logging.getLogger(__name__)

FLASH_KEY = "flash_messages"

# 这些异常携带可直接展示给用户的中文提示
EXPECTED_ERRORS = (
    BackendOperationError, LLMOperationError, AuthenticationError, AuthorizationError,
    ValidationError, NotFoundError, EmptyPeriodError, ConfigurationError,
)


@dataclass
class PageContext:
    """一次页面渲染所需的全部依赖"""
    backend: Backend
    identity: Optional[Identity]
    full_config: dict
    params: Dict[str, str] = field(default_factory=dict)
    is_admin: bool = False


def navigate(path: str):
    st.query_params["path"] = path
    st.rerun()


def notify(message: str, icon: str = "✅", persist: bool = False):
    """
    弹出通知。persist=True 时先放入队列，在下一次渲染开始时显示，
    用于紧接着跳转或 rerun 的场景。
    """
    if persist:
        st.session_state.setdefault(FLASH_KEY, []).append((message, icon))
    else:
        st.toast(message, icon=icon)


def flush_notifications():
    for message, icon in st.session_state.pop(FLASH_KEY, []):
        st.toast(message, icon=icon)


def run_action(func, *args, spinner_text: str = "处理中...", error_message: str = "操作失败，请稍后重试"):
    """
    执行一个业务操作并把异常转换为通知。

    Returns:
        (bool, Any): 是否成功，以及操作的返回值。
    """
    with st.spinner(spinner_text):
        try:
            return True, func(*args)
        except EXPECTED_ERRORS as e:
            notify(str(e) or error_message, icon="⚠️")
        except Exception as e:
            logger.error(f"{error_message}: {e}", exc_info=True)
            notify(error_message, icon="❌")
    return False, None
