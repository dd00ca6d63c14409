"""
配置加载模块 (Config Loader)
运行时配置由三层合并而成：内置默认值 <- config.yaml <- user_config.yaml。
provider_templates.yaml 描述如何实例化各家聊天模型，单独读取。
"""
import os
import copy
import logging
import yaml
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR = os.getenv("APP_CONFIG_DIR", os.path.abspath("."))
CONFIG_PATH = os.path.join(CONFIG_DIR, "config.yaml")
USER_CONFIG_PATH = os.path.join(CONFIG_DIR, "user_config.yaml")
PROVIDER_TEMPLATES_PATH = os.path.join(CONFIG_DIR, "provider_templates.yaml")

# 用户配置允许覆盖或扩展的分区
MERGEABLE_SECTIONS = ("backend", "auth", "models", "steps")

DEFAULT_CONFIG = {
    "backend": {"type": "supabase", "sql_url": "sqlite:///data/event_journal.db"},
    "auth": {"email_domain": "miaoda.com", "min_password_length": 6},
    "models": {},
    "steps": {},
}


def _read_yaml(path: str, required: bool = False) -> dict:
    """读取 YAML 文件；文件不存在时返回空字典，解析失败时抛出 ConfigurationError"""
    if not os.path.exists(path):
        if required:
            logger.warning(f"配置文件 {path} 未找到，使用内置默认配置。")
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"解析 {path} 文件失败: {e}", exc_info=True)
        raise ConfigurationError(f"错误: 解析 {path} 文件失败: {e}")
    return data if isinstance(data, dict) else {}


def _merge_configs(base_config: dict, user_config: dict) -> dict:
    """
    按分区合并配置。
    user_config 中的分区按键覆盖 base_config 的同名分区，未知分区被忽略；输入不会被修改。
    """
    merged = copy.deepcopy(base_config)
    for section in MERGEABLE_SECTIONS:
        override = user_config.get(section)
        if isinstance(override, dict):
            merged.setdefault(section, {})
            merged[section] = {**(merged[section] or {}), **override}
    return merged


def load_user_config() -> dict:
    return _read_yaml(USER_CONFIG_PATH)


def load_config() -> dict:
    """返回合并后的运行时配置。每次调用都重新读取文件，修改配置无需重启。"""
    config = _merge_configs(DEFAULT_CONFIG, _read_yaml(CONFIG_PATH, required=True))
    return _merge_configs(config, load_user_config())


def load_provider_templates() -> dict:
    templates = _read_yaml(PROVIDER_TEMPLATES_PATH)
    if not templates:
        logger.warning(f"提供商模板文件 {PROVIDER_TEMPLATES_PATH} 不存在或为空。")
    return templates
