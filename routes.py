"""
路由表 (Routes)
页面路径与页面键的映射。当前路径保存在 URL 查询参数 path 中。
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

HOME_PATH = "/"
LOGIN_PATH = "/login"
PUBLIC_PATHS = (LOGIN_PATH,)


@dataclass(frozen=True)
class Route:
    pattern: str
    page: str
    title: str


ROUTES = [
    Route("/", "home", "首页"),
    Route("/login", "login", "登录"),
    Route("/admin", "admin", "管理员"),
    Route("/summary", "summary", "总结"),
    Route("/events/new", "event_create", "新建事件"),
    Route("/events/:id", "event_detail", "事件详情"),
    Route("/events/:id/edit", "event_edit", "编辑事件"),
    Route("/events/:id/add-record", "add_record", "添加进展"),
]


def _split(path: str):
    return [p for p in (path or "").strip().split("/") if p]


def match(pattern: str, path: str) -> Optional[Dict[str, str]]:
    """匹配成功返回路径参数 (可能为空字典)，否则返回 None"""
    pattern_parts, path_parts = _split(pattern), _split(path)
    if len(pattern_parts) != len(path_parts):
        return None
    params = {}
    for expected, actual in zip(pattern_parts, path_parts):
        if expected.startswith(":"):
            params[expected[1:]] = actual
        elif expected != actual:
            return None
    return params


def resolve(path: str) -> Tuple[Route, Dict[str, str]]:
    """
    解析路径；静态段优先于参数段 (/events/new 不会被当作事件 id)。
    未知路径回落到首页。
    """
    candidates = sorted(ROUTES, key=lambda r: r.pattern.count(":"))
    for route in candidates:
        params = match(route.pattern, path)
        if params is not None:
            return route, params
    return ROUTES[0], {}


def requires_auth(route: Route) -> bool:
    return route.pattern not in PUBLIC_PATHS


def event_path(event_id: str, action: str = "") -> str:
    return f"/events/{event_id}/{action}" if action else f"/events/{event_id}"
