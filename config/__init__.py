import logging
from dotenv import load_dotenv, find_dotenv

logger = logging.getLogger(__name__)

def load_environment() -> bool:
    """
    从当前工作目录向上查找 .env 并加载。
    部署平台已注入的环境变量优先，不会被 .env 覆盖。
    """
    dotenv_path = find_dotenv(usecwd=True)
    if not dotenv_path:
        logger.debug("未找到 .env 文件，仅使用进程环境变量。")
        return False
    loaded = load_dotenv(dotenv_path, override=False)
    logger.debug(f"环境变量已从 {dotenv_path} 加载。")
    return loaded
