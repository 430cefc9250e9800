import re
from datetime import datetime, timezone
from html import unescape
from typing import Any, Optional


def clean_html(text: str) -> str:
    if not text:
        return ""
    return unescape(re.sub(r"<[^>]+>", "", text)).strip()


def parse_count(value: Any) -> int:
    """YouTube 的 statistics 计数是字符串：'123' / '1,234'；无法解析一律按 0。"""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        return max(int(value), 0) if value == value else 0
    s = str(value).strip().replace(",", "")
    if not s or s == "-":
        return 0
    try:
        return max(int(float(s)), 0)
    except (ValueError, OverflowError):
        return 0


def parse_time(value: Any) -> Optional[datetime]:
    """解析 ISO 8601 时间（'2023-01-05T10:00:00Z'）或时间戳（秒/毫秒），统一返回 UTC aware datetime。"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        ts = int(value)
        if ts > 10**12:
            ts //= 1000
        try:
            return datetime.fromtimestamp(ts, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    s = str(value).strip()
    if s.isdigit():
        return parse_time(int(s))
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def build_video_url(video_id: str) -> str:
    if not video_id:
        return ""
    return f"https://youtube.com/video/{video_id}"


def parse_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    s = str(value).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return default
