"""网络抓取模块."""

from feedkeeper.fetcher.discovery import (
    COMMON_FEED_PATHS,
    find_advertised_feed,
    candidate_feed_urls,
)
from feedkeeper.fetcher.extractor import (
    ArticleExtractor,
    ArticleExtractorError,
    FetchFailedError,
    ProxyLoginRequiredError,
    extract_main_content,
)
from feedkeeper.fetcher.http import (
    InvalidContentError,
    InvalidURLError,
    close_http_client,
    create_http_client,
    get_http_client,
    init_http_client,
    validate_http_url,
)

__all__ = [
    "COMMON_FEED_PATHS",
    "ArticleExtractor",
    "ArticleExtractorError",
    "FetchFailedError",
    "InvalidContentError",
    "InvalidURLError",
    "ProxyLoginRequiredError",
    "close_http_client",
    "create_http_client",
    "extract_main_content",
    "find_advertised_feed",
    "get_http_client",
    "init_http_client",
    "candidate_feed_urls",
    "validate_http_url",
]
