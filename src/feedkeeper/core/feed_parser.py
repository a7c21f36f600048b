"""
RSS / Atom / RDF 解析器.

使用 lxml 的流式 XMLPullParser 逐个读取元素事件，驱动显式的状态机
FeedParserState。状态机本身不依赖任何 XML 分词器，可以直接单测。
"""

import contextlib
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from urllib.parse import urlparse

from lxml import etree

from feedkeeper.utils.dates import parse_date, utcnow

logger = logging.getLogger(__name__)

# 每次喂给解析器的字节数
_CHUNK_SIZE = 64 * 1024

# Reddit 使用 [link] 锚文本标记外部链接
_REDDIT_LINK_RE = re.compile(
    r"""<a\s+href="([^"]+)"[^>]*>\[link\]</a>""", re.IGNORECASE
)
_REDDIT_HOSTS = ("reddit.com", "redd.it")


# 需要读取文本内容的元素
_TEXT_ELEMENTS = frozenset(
    {
        "title",
        "description",
        "summary",
        "subtitle",
        "content",
        "content:encoded",
        "link",
        "author",
        "dc:creator",
        "pubdate",
        "published",
        "updated",
        "dc:date",
    }
)


@dataclass
class ParsedArticle:
    """解析出的文章（保存前）."""

    title: str = ""
    summary: str = ""
    content: str = ""
    url: str = ""
    external_url: str | None = None
    author: str | None = None
    published_date: datetime = field(default_factory=utcnow)


@dataclass
class ParsedFeed:
    """解析出的 Feed（保存前）."""

    title: str = ""
    description: str = ""
    link: str = ""
    articles: list[ParsedArticle] = field(default_factory=list)


class FeedType(Enum):
    """Feed 方言."""

    RSS = "rss"
    ATOM = "atom"
    UNKNOWN = "unknown"


class FeedParseError(Exception):
    """XML 格式错误，partial 中保留出错前已完整解析的内容."""

    def __init__(
        self,
        message: str,
        partial: ParsedFeed | None = None,
        line: int | None = None,
    ) -> None:
        super().__init__(message)
        self.partial = partial if partial is not None else ParsedFeed()
        self.line = line


class UnknownFeedParseError(FeedParseError):
    """解析失败且没有可用的错误详情."""


def extract_external_link(html: str) -> str | None:
    """从 Reddit 内容中提取 [link] 指向的外部链接."""
    match = _REDDIT_LINK_RE.search(html)
    if not match:
        return None

    url = match.group(1)
    host = (urlparse(url).hostname or "").lower()
    if any(host == h or host.endswith("." + h) for h in _REDDIT_HOSTS):
        return None
    return url


class FeedParserState:
    """
    Feed 解析状态机.

    start()/end() 对应元素的开始与结束；end() 接收该元素的完整文本
    （字符数据与 CDATA 拼接后的结果）。元素名需为小写限定名，
    例如 ``item``、``content:encoded``、``dc:creator``。
    """

    def __init__(self) -> None:
        self.feed_type = FeedType.UNKNOWN
        self.in_item = False
        self.current_article: ParsedArticle | None = None
        self.title = ""
        self.description = ""
        self.link = ""
        self.articles: list[ParsedArticle] = []

    def start(self, name: str, attrs: dict[str, str]) -> None:
        """处理元素开始."""
        if name in ("rss", "rdf:rdf"):
            self.feed_type = FeedType.RSS
        elif name == "feed":
            self.feed_type = FeedType.ATOM
        elif name in ("item", "entry"):
            self.in_item = True
            self.current_article = ParsedArticle()
        elif name == "link" and self.feed_type is FeedType.ATOM:
            self._atom_link(attrs)

    def end(self, name: str, text: str) -> None:
        """处理元素结束."""
        text = text.strip()
        if self.in_item:
            self._end_item_element(name, text)
        else:
            self._end_feed_element(name, text)

    def result(self) -> ParsedFeed:
        """当前已完整解析的结果."""
        return ParsedFeed(
            title=self.title,
            description=self.description,
            link=self.link,
            articles=list(self.articles),
        )

    def _atom_link(self, attrs: dict[str, str]) -> None:
        href = attrs.get("href")
        if not href:
            return
        rel = attrs.get("rel", "alternate")
        if rel not in ("alternate", ""):
            return

        if self.in_item:
            if self.current_article is not None and not self.current_article.url:
                self.current_article.url = href.strip()
        elif not self.link:
            self.link = href.strip()

    def _end_item_element(self, name: str, text: str) -> None:
        article = self.current_article
        if article is None:
            return

        if name == "title":
            article.title = text
        elif name in ("description", "summary"):
            article.summary = text
        elif name in ("content", "content:encoded"):
            article.content = text
            external = extract_external_link(text)
            if external:
                article.external_url = external
        elif name == "link":
            if self.feed_type is FeedType.RSS:
                article.url = text
        elif name in ("author", "dc:creator"):
            article.author = text
        elif name in ("pubdate", "published", "updated", "dc:date"):
            article.published_date = parse_date(text) or utcnow()
        elif name in ("item", "entry"):
            # 正文与摘要互相回填，保证有内容时二者都非空
            if not article.content:
                article.content = article.summary
            if not article.summary:
                article.summary = article.content
            self.articles.append(article)
            self.current_article = None
            self.in_item = False

    def _end_feed_element(self, name: str, text: str) -> None:
        if name == "title":
            if not self.title:
                self.title = text
        elif name in ("description", "subtitle"):
            if not self.description:
                self.description = text
        elif name == "link":
            if self.feed_type is FeedType.RSS and not self.link:
                self.link = text


def _qualified_name(element: etree._Element) -> str:
    """小写的限定名，例如 content:encoded."""
    local = etree.QName(element).localname
    if element.prefix:
        return f"{element.prefix}:{local}".lower()
    return local.lower()


def _attributes(element: etree._Element) -> dict[str, str]:
    return {
        etree.QName(key).localname.lower(): value
        for key, value in element.attrib.items()
    }


def parse_feed(data: bytes) -> ParsedFeed:
    """
    解析 RSS 2.0 / RDF / Atom 文档.

    Args:
        data: 原始 XML 字节

    Returns:
        ParsedFeed

    Raises:
        FeedParseError: XML 格式错误（partial 为出错前的结果）
        UnknownFeedParseError: 解析失败但没有错误详情
    """
    state = FeedParserState()
    parser = etree.XMLPullParser(
        events=("start", "end"),
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )

    def drain() -> None:
        for event, element in parser.read_events():
            if not isinstance(element.tag, str):
                continue
            name = _qualified_name(element)
            if event == "start":
                state.start(name, _attributes(element))
                continue

            text = "".join(element.itertext()) if name in _TEXT_ELEMENTS else ""
            state.end(name, text)
            if name in ("item", "entry"):
                # 已处理的条目不再需要，释放内存
                element.clear(keep_tail=True)

    try:
        if not data.strip():
            msg = "Feed 内容为空"
            raise FeedParseError(msg)

        for offset in range(0, len(data), _CHUNK_SIZE):
            parser.feed(data[offset : offset + _CHUNK_SIZE])
            drain()
        parser.close()
        drain()
    except etree.XMLSyntaxError as e:
        # 出错前已产生的事件仍需处理
        with contextlib.suppress(etree.LxmlError):
            drain()
        logger.warning(f"Feed XML 格式错误: {e}")
        raise FeedParseError(str(e), partial=state.result(), line=e.lineno) from e
    except etree.LxmlError as e:
        msg = "Feed 解析失败（未知错误）"
        raise UnknownFeedParseError(msg, partial=state.result()) from e

    feed = state.result()
    logger.info(f"解析完成: {feed.title or '(无标题)'}，共 {len(feed.articles)} 篇文章")
    return feed
