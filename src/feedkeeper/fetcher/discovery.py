"""Feed 地址发现."""

from urllib.parse import urljoin

from bs4 import BeautifulSoup

# 常见 Feed 路径（按顺序探测）
COMMON_FEED_PATHS = [
    "/feed",
    "/rss",
    "/feed.xml",
    "/rss.xml",
    "/atom.xml",
    "/index.xml",
]

# <link> 标签中的 Feed MIME 类型（RSS 优先）
FEED_MIME_TYPES = [
    "application/rss+xml",
    "application/atom+xml",
]


def find_advertised_feed(html: str, page_url: str) -> str | None:
    """
    查找网页 <link> 标签声明的 Feed 地址.

    Args:
        html: 网页 HTML
        page_url: 网页地址，用于解析相对链接

    Returns:
        绝对 Feed URL，未找到时返回 None
    """
    soup = BeautifulSoup(html, "lxml")
    links = soup.find_all("link", href=True, type=True)

    for mime in FEED_MIME_TYPES:
        for link in links:
            link_type = str(link.get("type", "")).strip().lower()
            href = str(link.get("href", "")).strip()
            if link_type == mime and href:
                return urljoin(page_url, href)

    return None


def candidate_feed_urls(website_url: str) -> list[str]:
    """生成待探测的常见 Feed 地址."""
    base_url = website_url.rstrip("/")
    return [base_url + path for path in COMMON_FEED_PATHS]
