"""
正文提取器.

基于正则的近似提取：按顺序尝试常见正文容器，取第一个清理后内容足够长
的结果；都失败时退回到段落聚合。extract_main_content 是纯函数，不做 I/O。
"""

import asyncio
import logging
import re
from urllib.parse import quote

import httpx

from feedkeeper.config import Settings, get_settings
from feedkeeper.fetcher.http import (
    InvalidURLError,
    create_http_client,
    decode_body,
    validate_http_url,
)

logger = logging.getLogger(__name__)

_FLAGS = re.IGNORECASE | re.DOTALL

# 按优先级排列的正文容器
CONTENT_PATTERNS = [
    re.compile(r"<article\b[^>]*>(.*?)</article>", _FLAGS),
    re.compile(
        r'<div[^>]*class="[^"]*(?:article-content|article-body|post-content'
        r'|entry-content|content-body|story-body|article__body|post-body)'
        r'[^"]*"[^>]*>(.*?)</div>',
        _FLAGS,
    ),
    re.compile(r"<main\b[^>]*>(.*?)</main>", _FLAGS),
    re.compile(
        r'<div[^>]*id="(?:content|main-content|article|post)[^"]*"[^>]*>(.*?)</div>',
        _FLAGS,
    ),
]

_PARAGRAPH_RE = re.compile(r"<p\b[^>]*>(.*?)</p>", _FLAGS)
_TAG_RE = re.compile(r"<[^>]+>")

_BOILERPLATE_RES = [
    re.compile(r"<script\b[^>]*>.*?</script>", _FLAGS),
    re.compile(r"<style\b[^>]*>.*?</style>", _FLAGS),
    re.compile(r"<!--.*?-->", re.DOTALL),
    *(
        re.compile(rf"<{tag}\b[^>]*>.*?</{tag}>", _FLAGS)
        for tag in ("nav", "header", "footer", "aside", "form", "noscript")
    ),
    re.compile(
        r'<div[^>]*class="[^"]*(?:ad-|advertisement|social-share|share-buttons'
        r'|related-posts|sidebar)[^"]*"[^>]*>.*?</div>',
        _FLAGS,
    ),
]
_BLANK_LINES_RE = re.compile(r"\n\s*\n")

# 容器内容少于该长度时视为空壳
MIN_CONTAINER_LENGTH = 200
# 段落纯文本少于该长度时丢弃
MIN_PARAGRAPH_LENGTH = 50


class ArticleExtractorError(Exception):
    """全文抓取错误."""


class FetchFailedError(ArticleExtractorError):
    """请求失败或返回非 2xx 状态."""


class ProxyLoginRequiredError(ArticleExtractorError):
    """代理跳转到了登录页，需要先交互式登录."""


def clean_html(html: str) -> str:
    """移除脚本、样式、注释、导航等非正文块，并压缩空行."""
    result = html
    for pattern in _BOILERPLATE_RES:
        result = pattern.sub("", result)
    result = _BLANK_LINES_RE.sub("\n", result)
    return result.strip()


def extract_paragraphs(html: str) -> str:
    """聚合所有足够长的 <p> 段落."""
    paragraphs = []
    for match in _PARAGRAPH_RE.finditer(html):
        inner = match.group(1)
        if len(_TAG_RE.sub("", inner).strip()) > MIN_PARAGRAPH_LENGTH:
            paragraphs.append(f"<p>{inner}</p>")
    return "\n".join(paragraphs)


def extract_main_content(html: str) -> str:
    """
    从 HTML 中提取正文.

    Args:
        html: 完整的网页 HTML

    Returns:
        正文 HTML 片段，可能为空字符串
    """
    for pattern in CONTENT_PATTERNS:
        match = pattern.search(html)
        if not match:
            continue
        cleaned = clean_html(match.group(1))
        if len(cleaned) > MIN_CONTAINER_LENGTH:
            return cleaned

    return extract_paragraphs(html)


class ArticleExtractor:
    """抓取网页并提取正文."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = client or create_http_client(self.settings)
        self._owns_client = client is None

    async def close(self) -> None:
        """关闭客户端."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ArticleExtractor":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def fetch_article(self, url: str) -> str:
        """下载文章页面 HTML."""
        target = validate_http_url(url)
        response = await self._get(target)
        self._ensure_success(response, url)
        return decode_body(response.content)

    async def fetch_article_via_proxy(self, url: str) -> str:
        """通过机构代理下载文章页面（依赖客户端保存的登录 cookie）."""
        validate_http_url(url)
        base = self.settings.proxy_base_url
        if not base:
            msg = "未配置代理地址 proxy_base_url"
            raise InvalidURLError(msg)

        proxy_url = validate_http_url(base + quote(url, safe=":/?#[]@!$&'()*+,;=%"))
        response = await self._get(proxy_url)

        if "login" in str(response.url):
            msg = "请先登录机构代理"
            raise ProxyLoginRequiredError(msg)

        self._ensure_success(response, url)
        return decode_body(response.content)

    async def extract(self, url: str) -> str:
        """下载并提取正文."""
        html = await self.fetch_article(url)
        return await asyncio.to_thread(extract_main_content, html)

    async def extract_via_proxy(self, url: str) -> str:
        """通过代理下载并提取正文."""
        html = await self.fetch_article_via_proxy(url)
        return await asyncio.to_thread(extract_main_content, html)

    async def _get(self, url: httpx.URL) -> httpx.Response:
        try:
            return await self._client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"抓取页面失败: {url} - {e}")
            msg = f"抓取页面失败: {e}"
            raise FetchFailedError(msg) from e

    @staticmethod
    def _ensure_success(response: httpx.Response, url: str) -> None:
        if not response.is_success:
            msg = f"抓取页面失败: {url} 返回 {response.status_code}"
            raise FetchFailedError(msg)
