"""Unsplash 图片搜索：为新课程挑选封面图。"""

import logging
from typing import List, Optional

import requests

from spider.youtube_api import REQUEST_TIMEOUT, build_session

logger = logging.getLogger(__name__)

UNSPLASH_SEARCH_URL = "https://api.unsplash.com/search/photos"


class UnsplashClient:
    def __init__(
        self,
        access_key: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: int = REQUEST_TIMEOUT,
    ):
        self.access_key = access_key
        self.session = session or build_session()
        self.timeout = timeout

    def search_images(self, query: str, count: int = 5) -> List[str]:
        """返回最多 count 张图片 URL；失败只记日志，不影响课程创建。"""
        if not self.access_key:
            logger.warning("UNSPLASH_ACCESS_KEY is not configured, skipping image search")
            return []

        try:
            resp = self.session.get(
                UNSPLASH_SEARCH_URL,
                params={"query": query, "per_page": count},
                headers={"Authorization": f"Client-ID {self.access_key}", "Accept-Version": "v1"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Image search failed for '%s': %s", query, exc)
            return []

        if not isinstance(payload, dict):
            logger.warning("Image search returned unexpected payload for '%s'", query)
            return []

        urls = []
        for item in payload.get("results") or []:
            url = (item.get("urls") or {}).get("regular")
            if url:
                urls.append(url)
        return urls[:count]
