"""
Prompt 模板管理
从 config/prompts.yaml 读取三类总结步骤的模板，文件修改后下次读取时自动生效。
每个模板在使用前都会检查是否包含该步骤需要的全部占位符。
"""
import os
import logging
from typing import Dict, List
import yaml
from langchain_core.prompts import PromptTemplate
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PROMPTS_PATH = os.getenv(
    "PROMPTS_PATH",
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config", "prompts.yaml"),
)

# 步骤 -> 链在调用时提供的变量
REQUIRED_VARIABLES = {
    "record_summarizer": {"content"},
    "event_summarizer": {"title", "record_count", "records_text"},
    "period_summarizer": {"period_name", "start_date", "end_date", "event_count", "events_json"},
}


class PromptCache:
    """按文件修改时间失效的模板缓存"""

    def __init__(self, path: str = PROMPTS_PATH):
        self.path = path
        self._prompts: Dict[str, str] = {}
        self._mtime = 0.0

    def invalidate(self):
        self._mtime = 0.0

    def load(self) -> Dict[str, str]:
        try:
            mtime = os.path.getmtime(self.path)
        except OSError:
            logger.error(f"未找到 Prompts 文件: {self.path}")
            self._prompts = {}
            return self._prompts

        if mtime > self._mtime:
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    self._prompts = yaml.safe_load(f) or {}
                self._mtime = mtime
                logger.info(f"Prompts 已加载: {sorted(self._prompts)}")
            except yaml.YAMLError as e:
                # 保留上一次成功加载的模板
                logger.error(f"解析 Prompts 文件失败，继续使用旧模板: {e}")
        return self._prompts


_prompt_cache = PromptCache()


def list_prompt_keys() -> List[str]:
    return sorted(_prompt_cache.load())


def get_prompt_template(prompt_key: str) -> PromptTemplate:
    """
    获取某个步骤的 PromptTemplate。

    Raises:
        ConfigurationError: 模板不存在，或缺少该步骤需要的占位符。
    """
    template_str = _prompt_cache.load().get(prompt_key)
    if not template_str:
        raise ConfigurationError(f"Prompt '{prompt_key}' 未在 {_prompt_cache.path} 中定义")

    template = PromptTemplate.from_template(template_str)
    missing = REQUIRED_VARIABLES.get(prompt_key, set()) - set(template.input_variables)
    if missing:
        raise ConfigurationError(f"Prompt '{prompt_key}' 缺少占位符: {', '.join(sorted(missing))}")
    return template


def force_reload_prompts():
    """下次读取时强制重新加载"""
    _prompt_cache.invalidate()
    logger.info("已请求手动重载 Prompts。")
