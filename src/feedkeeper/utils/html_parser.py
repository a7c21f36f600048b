"""HTML 解析工具."""

import re

from bs4 import BeautifulSoup

_TAG_RE = re.compile(r"<[^>]+>")


def strip_tags(html: str) -> str:
    """移除所有 HTML 标签（不解码实体）."""
    return _TAG_RE.sub("", html)


def decode_entities(text: str) -> str:
    """解码 HTML 实体，例如 &#8217; -> ’."""
    if not text or "&" not in text:
        return text
    return BeautifulSoup(text, "html.parser").get_text()


def clean_text(html: str) -> str:
    """移除标签并解码实体."""
    if not html:
        return ""
    return decode_entities(strip_tags(html).strip())


def html_to_text(html: str) -> str:
    """
    将 HTML 转换为纯文本.

    Args:
        html: HTML 内容

    Returns:
        提取的纯文本内容
    """
    if not html:
        return ""

    # 使用 BeautifulSoup 解析
    soup = BeautifulSoup(html, "lxml")

    # 移除 script 和 style 标签
    for element in soup(["script", "style"]):
        element.decompose()

    # 获取文本
    text = soup.get_text(separator="\n")

    # 清理多余空白
    lines = []
    for line in text.split("\n"):
        line = line.strip()
        if line:
            lines.append(line)

    return "\n\n".join(lines).strip()


def sanitize_filename(name: str, max_length: int = 100) -> str:
    """移除文件名中的非法字符并截断."""
    sanitized = re.sub(r'[:/\\?%*|"<>]', "-", name).strip()
    return sanitized[:max_length]
