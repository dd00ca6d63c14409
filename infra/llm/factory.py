"""
管理和提供不同LLM（大语言模型）的实例。
由 config.yaml 的 steps/models 分区和 provider_templates.yaml 驱动：
步骤别名 (record_summarizer 等) -> 模型ID -> 提供商模板 -> LangChain 聊天模型类。
"""
import os
import importlib
from functools import lru_cache
from config.loader import load_config, load_provider_templates
from core.exceptions import ConfigurationError
import logging

logger = logging.getLogger(__name__)

@lru_cache(maxsize=1)
def get_provider_templates():
    """缓存提供商模板以避免重复读取文件。"""
    return load_provider_templates()

def _get_class_from_path(class_path: str):
    """根据字符串路径动态导入类。"""
    try:
        module_path, class_name = class_path.rsplit(".", 1)
        module = importlib.import_module(module_path)
        return getattr(module, class_name)
    except (ImportError, AttributeError, ValueError) as e:
        logger.error(f"无法从路径 '{class_path}' 动态导入类: {e}", exc_info=True)
        raise ConfigurationError(f"无法从路径 '{class_path}' 动态导入类: {e}")

def _resolve_params(model_id: str, user_model_config: dict, template_params: dict) -> dict:
    """按模板声明的参数类型，从模型配置和环境变量中取值。"""
    params = {}
    for param_name, param_type in template_params.items():
        user_value = user_model_config.get(param_name)
        if user_value is None:
            continue
        if param_type == "string":
            params[param_name] = user_value
        elif param_type in ("secret_env", "url_env"):
            env_var_value = os.getenv(user_value)
            if not env_var_value and param_type == "url_env":
                # 未设置服务地址时使用提供商的默认地址
                continue
            if not env_var_value:
                logger.error(f"模型 '{model_id}' 需要设置环境变量 '{user_value}'，但它未被设置。")
                raise ConfigurationError(f"错误: 需要为模型 '{model_id}' 设置环境变量 '{user_value}'，但它未被设置。")
            # 例如 'api_key_env' -> 'api_key'
            params[param_name.replace("_env", "")] = env_var_value
    return params

def get_llm(alias: str, temperature: float = 0.7):
    """
    根据步骤别名从配置文件获取并实例化一个 LangChain 聊天模型。

    Args:
        alias (str): 步骤的别名 (record_summarizer / event_summarizer / period_summarizer)。
        temperature (float): 控制模型创造力的参数。

    Returns:
        A LangChain chat model instance.
    """
    # config每次都重新加载，以反映配置文件的修改
    config = load_config()
    templates = get_provider_templates()

    model_id = config.get("steps", {}).get(alias)
    if not model_id:
        logger.error(f"在 config.yaml 的 'steps' 部分找不到别名 '{alias}'。")
        raise ConfigurationError(f"错误: 在 config.yaml 的 'steps' 部分找不到别名 '{alias}'。")

    user_model_config = config.get("models", {}).get(model_id)
    if not user_model_config:
        logger.error(f"在 config.yaml 的 'models' 部分找不到模型ID '{model_id}'。")
        raise ConfigurationError(f"错误: 在 config.yaml 的 'models' 部分找不到模型ID '{model_id}'。")

    template_id = user_model_config.get("template")
    provider_template = templates.get(template_id) if template_id else None
    if not provider_template or not provider_template.get("class"):
        logger.error(f"模型 '{model_id}' 的提供商模板 '{template_id}' 无效。")
        raise ConfigurationError(f"错误: 模型 '{model_id}' 的提供商模板 '{template_id}' 无效。")

    LLMClass = _get_class_from_path(provider_template["class"])
    constructor_params = {"temperature": temperature}
    constructor_params.update(_resolve_params(model_id, user_model_config, provider_template.get("params", {})))

    logger.info(f"正在实例化模型: {model_id} (类: {LLMClass.__name__}, 步骤: {alias})")

    try:
        return LLMClass(**constructor_params)
    except Exception as e:
        safe_params = {k: v for k, v in constructor_params.items() if k != "api_key"}
        logger.error(f"实例化模型 '{model_id}' 失败: {e}\n使用的参数: {safe_params}", exc_info=True)
        raise ConfigurationError(f"实例化模型 '{model_id}' 失败: {e}")
