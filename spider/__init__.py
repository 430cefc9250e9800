"""外部目录模块（Spider）：YouTube 视频搜索/详情 + Unsplash 封面图。

说明：
- 这里保持“轻量”，避免在 import spider 时触发网络等副作用。
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "YouTubeClient": ".youtube_api",
    "CatalogError": ".youtube_api",
    "normalize_from_detail": ".youtube_api",
    "UnsplashClient": ".unsplash_api",
}

__all__ = list(_EXPORTS)


def __getattr__(name: str) -> Any:
    """延迟导入子模块，仅导入 spider.utils 时不会拉起 requests 客户端。"""
    if name in _EXPORTS:
        mod = import_module(_EXPORTS[name], __name__)
        return getattr(mod, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
