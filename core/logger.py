import logging
import logging.handlers
import os
import sys
from contextvars import ContextVar

LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_FILE = os.path.join(LOG_DIR, "app.log")
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - [%(user)s] %(message)s"

# 当前脚本运行所代表的用户，Streamlit 每个会话在独立线程中运行脚本
_current_user: ContextVar[str] = ContextVar("current_user", default="-")


def set_log_user(username: str = None):
    _current_user.set(username or "-")


class UserContextFilter(logging.Filter):
    """为每条日志附加当前用户名"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.user = _current_user.get()
        return True


def setup_logging(level: str = None):
    """
    配置根日志：按大小轮转的文件日志 + 标准输出。
    Streamlit 每次交互都会重跑脚本，重复调用时会先移除旧的 handler。
    """
    os.makedirs(LOG_DIR, exist_ok=True)
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())

    formatter = logging.Formatter(LOG_FORMAT)
    user_filter = UserContextFilter()

    file_handler = logging.handlers.RotatingFileHandler(
        LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8",
    )
    console_handler = logging.StreamHandler(sys.stdout)
    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)
        handler.addFilter(user_filter)
        root.addHandler(handler)

    # httpx 会为每个 Supabase 请求打印 INFO 日志
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.captureWarnings(True)
