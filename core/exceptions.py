"""
自定义异常类
用于在应用的不同层之间传递具有明确语义的错误信息。
页面层统一捕获这些异常并转换为用户可见的提示。
"""

class BackendOperationError(Exception):
    """当与后端服务 (数据库/认证) 交互时发生错误"""
    pass

class LLMOperationError(Exception):
    """当与大语言模型交互时发生错误"""
    pass

class AuthenticationError(Exception):
    """当登录、注册或会话校验失败时发生错误"""
    pass

class AuthorizationError(Exception):
    """当调用者没有执行该操作的权限时发生错误"""
    pass

class ValidationError(Exception):
    """当用户输入或业务规则校验不通过时发生错误"""
    pass

class NotFoundError(Exception):
    """当请求的事件、记录或用户不存在 (或对调用者不可见) 时发生错误"""
    pass

class EmptyPeriodError(Exception):
    """当所选时间段内没有任何事件时发生错误"""
    pass

class ConfigurationError(Exception):
    """当应用配置不正确或缺失时发生错误"""
    pass
