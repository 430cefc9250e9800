"""视频排名算法（外部排名）

流水线：
原始分 -> 批内最大值 -> 归一化 -> 加权 -> 排序截断

原始分维度说明：
- date：新鲜度衰减曲线 max(-1.6^years + 11, 0)，years = 天数 / 264
- dateXViews：播放量 / years
- dateXLikes：点赞数 / 天数
- useOfChapters：简介中出现 "数字:数字"（章节时间戳）记 1，否则 0

综合评分 = 0.5×(date + dateXLikes) + 0.3×dateXViews + 0.2×useOfChapters
（每一项已先乘以 RankingWeights 中的特征权重）

每个阶段都返回新的不可变对象，不修改上一阶段的输入。
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

# ============================================================================
# 常量配置
# ============================================================================

# 评分公式使用的“年”，刻意不是 365
DAYS_PER_RANKING_YEAR = 264

# 当天发布（或发布时间晚于当前时间）时按 1 天计，避免除零
MIN_DAYS_SINCE_PUBLISHED = 1

DATE_SCORE_BASE = 1.6
DATE_SCORE_CEILING = 11

# date 使用固定区间归一化，与批内其他视频无关
DATE_NORMALIZE_MIN = 0
DATE_NORMALIZE_MAX = 10

# 外层组合系数（固定，不可在运行时配置）
FINAL_DATE_LIKES_COEF = 0.5
FINAL_VIEWS_COEF = 0.3
FINAL_CHAPTERS_COEF = 0.2

CHAPTER_PATTERN = re.compile(r"[0-9]:[0-9]")


@dataclass(frozen=True)
class RankingWeights:
    """特征权重表。

    reserved_4 / reserved_6 为预留槽位，保持为 0 且不参与计算。
    """

    date: float = 60
    date_x_likes: float = 40
    date_x_views: float = 100
    reserved_4: float = 0
    use_of_chapters: float = 100
    reserved_6: float = 0


DEFAULT_WEIGHTS = RankingWeights()


# ============================================================================
# 各阶段数据结构
# ============================================================================


@dataclass(frozen=True)
class VideoMetadata:
    """目录返回的视频详情（计数已解析为 int）。"""

    video_id: str
    published_at: datetime
    view_count: int = 0
    like_count: int = 0
    description: str = ""
    title: str = ""
    channel_title: str = ""
    thumbnail_url: str = ""


@dataclass(frozen=True)
class RawScore:
    date: float
    date_x_views: float
    date_x_likes: float
    use_of_chapters: int


@dataclass(frozen=True)
class MaxScores:
    date_x_views: float = 0.0
    date_x_likes: float = 0.0


@dataclass(frozen=True)
class NormalizedScore:
    date: float
    date_x_views: float
    date_x_likes: float
    use_of_chapters: int


@dataclass(frozen=True)
class WeightedScore:
    date: float
    date_x_views: float
    date_x_likes: float
    use_of_chapters: float
    final_score: float


@dataclass(frozen=True)
class RankedVideo:
    """视频 + 全部阶段的评分结果。"""

    video: VideoMetadata
    raw: RawScore
    normalized: NormalizedScore
    weighted: WeightedScore

    @property
    def final_score(self) -> float:
        return self.weighted.final_score


# ============================================================================
# 1) 原始分
# ============================================================================


def days_since_published(published_at: datetime, now: Optional[datetime] = None) -> int:
    """按日历天计算发布至今的天数（不计小数）。

    naive datetime 一律视为 UTC；比较时统一换算到 now 的时区。
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if published_at.tzinfo is None:
        published_at = published_at.replace(tzinfo=timezone.utc)
    published_local = published_at.astimezone(now.tzinfo)
    return (now.date() - published_local.date()).days


def date_score(years_since_published: float) -> float:
    return max(-math.pow(DATE_SCORE_BASE, years_since_published) + DATE_SCORE_CEILING, 0)


def use_of_chapters(description: Optional[str]) -> int:
    """简介中出现类似 1:23 的时间戳即视为有章节（允许误判）。"""
    if not description:
        return 0
    return 1 if CHAPTER_PATTERN.search(description) else 0


def raw_score(video: VideoMetadata, now: Optional[datetime] = None) -> RawScore:
    """计算单个视频的原始分（纯函数）。"""
    days = max(days_since_published(video.published_at, now), MIN_DAYS_SINCE_PUBLISHED)
    years = days / DAYS_PER_RANKING_YEAR

    return RawScore(
        date=date_score(years),
        date_x_views=video.view_count / years,
        date_x_likes=video.like_count / days,
        use_of_chapters=use_of_chapters(video.description),
    )


# ============================================================================
# 2) 批内最大值
# ============================================================================


def max_scores(raw_scores: Iterable[RawScore]) -> MaxScores:
    """扫描一批原始分，返回需要批内归一化的两个维度的最大值；空批次为 (0, 0)。"""
    max_views = 0.0
    max_likes = 0.0
    for raw in raw_scores:
        max_views = max(max_views, raw.date_x_views)
        max_likes = max(max_likes, raw.date_x_likes)
    return MaxScores(date_x_views=max_views, date_x_likes=max_likes)


# ============================================================================
# 3) 归一化
# ============================================================================


def normalize(value: float, min_value: float, max_value: float) -> float:
    """(value - min) / (max - min)；区间宽度为 0 时返回 0（视为无互动）。"""
    span = max_value - min_value
    if span == 0:
        return 0.0
    return (value - min_value) / span


def normalized_score(raw: RawScore, maxima: MaxScores) -> NormalizedScore:
    return NormalizedScore(
        date=normalize(raw.date, DATE_NORMALIZE_MIN, DATE_NORMALIZE_MAX),
        date_x_views=normalize(raw.date_x_views, 0, maxima.date_x_views),
        date_x_likes=normalize(raw.date_x_likes, 0, maxima.date_x_likes),
        use_of_chapters=raw.use_of_chapters,
    )


# ============================================================================
# 4) 加权
# ============================================================================


def weighted_score(normalized: NormalizedScore, weights: RankingWeights = DEFAULT_WEIGHTS) -> WeightedScore:
    date = normalized.date * weights.date
    date_x_likes = normalized.date_x_likes * weights.date_x_likes
    date_x_views = normalized.date_x_views * weights.date_x_views
    chapters = normalized.use_of_chapters * weights.use_of_chapters

    final = (
        FINAL_DATE_LIKES_COEF * (date + date_x_likes) +
        FINAL_VIEWS_COEF * date_x_views +
        FINAL_CHAPTERS_COEF * chapters
    )

    return WeightedScore(
        date=date,
        date_x_views=date_x_views,
        date_x_likes=date_x_likes,
        use_of_chapters=chapters,
        final_score=final,
    )


# ============================================================================
# 5) 排序
# ============================================================================


def select_top(ranked: Sequence[RankedVideo], top_n: int) -> List[RankedVideo]:
    """截取前 top_n 个；不足时有多少返回多少，不补齐。"""
    return list(ranked[:max(top_n, 0)])


class VideoRanker:
    """视频排名器：对同一批候选视频执行完整流水线。"""

    def __init__(self, weights: RankingWeights = DEFAULT_WEIGHTS, now: Optional[datetime] = None):
        """
        初始化排名器

        Args:
            weights: 特征权重表（测试时可替换）
            now: 固定“当前时间”，便于复现；默认每次取 UTC 当前时间
        """
        self.weights = weights
        self.now = now

    def score(self, videos: Sequence[VideoMetadata]) -> List[RankedVideo]:
        """计算每个视频的各阶段评分，保持输入顺序。"""
        now = self.now or datetime.now(timezone.utc)
        raws = [raw_score(video, now) for video in videos]
        maxima = max_scores(raws)

        ranked = []
        for video, raw in zip(videos, raws):
            normalized = normalized_score(raw, maxima)
            ranked.append(
                RankedVideo(
                    video=video,
                    raw=raw,
                    normalized=normalized,
                    weighted=weighted_score(normalized, self.weights),
                )
            )
        return ranked

    def rank(self, videos: Sequence[VideoMetadata]) -> List[RankedVideo]:
        """
        评分并按综合评分降序排列

        Returns:
            排序后的列表；分数相同的视频保持目录返回的原始顺序（稳定排序）
        """
        ranked = self.score(videos)
        ranked.sort(key=lambda r: r.final_score, reverse=True)
        logger.debug("Ranked %d videos", len(ranked))
        return ranked

    def get_top_videos(self, videos: Sequence[VideoMetadata], top_n: int = 3) -> List[RankedVideo]:
        return select_top(self.rank(videos), top_n)
