"""YouTube 视频目录客户端：关键词搜索 -> 批量拉取详情 -> 统一为 VideoMetadata。"""

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from core.ranking import VideoMetadata
from spider.utils import clean_html, parse_count, parse_time

logger = logging.getLogger(__name__)

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"
MAX_PAGE_SIZE = 50  # search / videos 接口单次最多 50 条
REQUEST_TIMEOUT = 15
THUMBNAIL_PREFERENCE = ("high", "medium", "default")


class CatalogError(RuntimeError):
    """目录接口失败（网络异常、HTTP 错误或 API 返回 error）。"""


def build_session(total_retries: int = 3) -> requests.Session:
    """带重试的 Session：只对 5xx 做指数退避重试。"""
    session = requests.Session()
    retries = Retry(total=total_retries, backoff_factor=1, status_forcelist=[500, 502, 503, 504])
    session.mount("https://", HTTPAdapter(max_retries=retries))
    return session


def request_youtube_data(
    session: requests.Session,
    path: str,
    params: Dict[str, Any],
    *,
    api_key: str,
    timeout: int = REQUEST_TIMEOUT,
) -> Dict[str, Any]:
    if not api_key:
        raise CatalogError("YOUTUBE_API_KEY is not configured")

    url = f"{YOUTUBE_API_BASE}/{path}"
    try:
        resp = session.get(url, params={**params, "key": api_key}, timeout=timeout)
    except requests.RequestException as exc:
        raise CatalogError(f"youtube request failed: {exc}") from exc

    try:
        payload = resp.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}

    if resp.status_code >= 400 or "error" in payload:
        error = payload.get("error") or {}
        msg = error.get("message") if isinstance(error, dict) else error
        raise CatalogError(f"youtube api error: {resp.status_code} {msg or resp.reason}")
    return payload


def pick_thumbnail(thumbnails: Optional[Dict[str, Any]]) -> str:
    thumbnails = thumbnails or {}
    for size in THUMBNAIL_PREFERENCE:
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return ""


def normalize_from_detail(item: Dict[str, Any]) -> Optional[VideoMetadata]:
    """把 videos 接口的一条记录转为 VideoMetadata；缺少 id 或发布时间时返回 None。"""
    video_id = item.get("id") or ""
    snippet = item.get("snippet") or {}
    stats = item.get("statistics") or {}

    published_at = parse_time(snippet.get("publishedAt"))
    if not video_id or published_at is None:
        return None

    return VideoMetadata(
        video_id=video_id,
        published_at=published_at,
        view_count=parse_count(stats.get("viewCount")),
        like_count=parse_count(stats.get("likeCount")),
        description=snippet.get("description") or "",
        title=clean_html(snippet.get("title") or ""),
        channel_title=snippet.get("channelTitle") or "",
        thumbnail_url=pick_thumbnail(snippet.get("thumbnails")),
    )


def chunked(values: Sequence[str], size: int) -> Iterable[Sequence[str]]:
    for start in range(0, len(values), size):
        yield values[start:start + size]


class YouTubeClient:
    """YouTube Data API v3 目录客户端。"""

    def __init__(
        self,
        api_key: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: int = REQUEST_TIMEOUT,
    ):
        self.api_key = api_key
        self._shared_session = session
        self._local = threading.local()
        self.timeout = timeout

    @property
    def session(self) -> requests.Session:
        """未注入 session 时每个线程各用一个（入门/进阶两条流水线并发请求）。"""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = build_session()
        return session

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        return request_youtube_data(self.session, path, params, api_key=self.api_key, timeout=self.timeout)

    def search(self, query: str, max_results: int) -> List[str]:
        """
        关键词搜索

        Args:
            query: 搜索词
            max_results: 最多返回的视频数（超过 50 时自动翻页）

        Returns:
            按目录相关度排序的 videoId 列表
        """
        ids: List[str] = []
        page_token = None

        while len(ids) < max_results:
            params = {
                "part": "id",
                "type": "video",
                "q": query,
                "maxResults": min(MAX_PAGE_SIZE, max_results - len(ids)),
            }
            if page_token:
                params["pageToken"] = page_token

            payload = self._get("search", params)
            for item in payload.get("items") or []:
                video_id = (item.get("id") or {}).get("videoId")
                if video_id:
                    ids.append(video_id)

            page_token = payload.get("nextPageToken")
            if not page_token or not payload.get("items"):
                break

        logger.info("Catalog search '%s' returned %d ids", query, len(ids))
        return ids[:max_results]

    def fetch_details(self, ids: Sequence[str], max_results: int) -> List[VideoMetadata]:
        """
        批量获取视频详情

        返回顺序以接口为准，不保证与 ids 一一对应；无法解析的记录会被跳过。
        """
        unique_ids = list(dict.fromkeys(i for i in ids if i))[:max_results]
        videos: List[VideoMetadata] = []
        skipped = 0

        for chunk in chunked(unique_ids, MAX_PAGE_SIZE):
            payload = self._get(
                "videos",
                {"part": "snippet,statistics", "id": ",".join(chunk), "maxResults": len(chunk)},
            )
            for item in payload.get("items") or []:
                video = normalize_from_detail(item)
                if video is None:
                    skipped += 1
                    continue
                videos.append(video)

        if skipped:
            logger.warning("Skipped %d catalog records without id/publish date", skipped)
        return videos
