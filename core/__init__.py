"""核心业务模块

包含：
- VideoRanker: 视频排名流水线（原始分 -> 归一化 -> 加权 -> 排序）
- CourseBuilder: 按难度生成课程资源
"""

from .ranking import (
    DEFAULT_WEIGHTS,
    MaxScores,
    NormalizedScore,
    RankedVideo,
    RankingWeights,
    RawScore,
    VideoMetadata,
    VideoRanker,
    WeightedScore,
)
from .course_builder import (
    CourseBuilder,
    DIFFICULTY_LEVELS,
    GenerationCancelled,
    TOP_K_PER_TIER,
    calculate_completion,
)

__all__ = [
    "DEFAULT_WEIGHTS",
    "MaxScores",
    "NormalizedScore",
    "RankedVideo",
    "RankingWeights",
    "RawScore",
    "VideoMetadata",
    "VideoRanker",
    "WeightedScore",
    "CourseBuilder",
    "DIFFICULTY_LEVELS",
    "GenerationCancelled",
    "TOP_K_PER_TIER",
    "calculate_completion",
]
