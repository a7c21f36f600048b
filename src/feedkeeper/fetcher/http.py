"""HTTP 客户端与 URL 校验."""

import httpx

from feedkeeper.config import Settings, get_settings


class InvalidURLError(ValueError):
    """URL 不是带主机名的 http(s) 地址."""


class InvalidContentError(Exception):
    """响应内容无法解码为文本."""


def validate_http_url(url: str) -> httpx.URL:
    """校验并解析 http(s) URL."""
    try:
        parsed = httpx.URL(url.strip())
    except (httpx.InvalidURL, TypeError) as e:
        msg = f"无效的 URL: {url!r}"
        raise InvalidURLError(msg) from e

    if parsed.scheme not in ("http", "https") or not parsed.host:
        msg = f"无效的 URL: {url!r}"
        raise InvalidURLError(msg)
    return parsed


def decode_body(data: bytes) -> str:
    """按 UTF-8 解码，失败时回退到 Latin-1."""
    for encoding in ("utf-8", "latin-1"):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue

    msg = "无法解码响应内容"
    raise InvalidContentError(msg)


def create_http_client(
    settings: Settings | None = None, timeout: float | None = None
) -> httpx.AsyncClient:
    """
    创建异步 HTTP 客户端（模拟浏览器 UA，自动跟随重定向）.

    Args:
        settings: 应用配置，默认使用全局配置
        timeout: 请求超时秒数，默认取 settings.request_timeout_seconds
    """
    settings = settings or get_settings()
    return httpx.AsyncClient(
        timeout=timeout if timeout is not None else settings.request_timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
    )


# 应用内共享的客户端，cookie（例如机构代理的登录状态）在请求之间保留
_shared_client: httpx.AsyncClient | None = None


def init_http_client(settings: Settings | None = None) -> httpx.AsyncClient:
    """创建应用共享的 HTTP 客户端."""
    global _shared_client

    if _shared_client is None:
        _shared_client = create_http_client(settings)
    return _shared_client


async def close_http_client() -> None:
    """关闭共享的 HTTP 客户端."""
    global _shared_client

    if _shared_client is not None:
        await _shared_client.aclose()
    _shared_client = None


async def get_http_client() -> httpx.AsyncClient:
    """获取共享的 HTTP 客户端（用于依赖注入）."""
    if _shared_client is None:
        msg = "HTTP 客户端未初始化，请先调用 init_http_client()"
        raise RuntimeError(msg)
    return _shared_client
