"""课程生成：按难度搜索视频 -> 排名 -> 取 Top3 -> 落库为课程资源

流程：
1. 每个难度拼出查询词 "<difficulty> <topic> tutorial"
2. 目录搜索最多 100 条，再按 id 批量拉取详情
3. VideoRanker 打分排序，截取前 3
4. 入门 / 进阶两条流水线互不共享状态，并发执行后汇总（不合并、不去重）
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Sequence

from models import (
    LEVEL_ADVANCED,
    LEVEL_BEGINNER,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_NOT_STARTED,
    Course,
    Resource,
    db,
)
from core.ranking import RankedVideo, VideoRanker, select_top
from spider.utils import build_video_url

logger = logging.getLogger(__name__)

VIDEOS_PER_QUERY = 100
TOP_K_PER_TIER = 3

# 难度关键词 -> 资源 level
DIFFICULTY_LEVELS: Dict[str, int] = {
    "beginner": LEVEL_BEGINNER,
    "advanced": LEVEL_ADVANCED,
}


class GenerationCancelled(RuntimeError):
    """stop_flag 被置位后，不再发起新的目录请求。"""


def build_query(topic: str, difficulty: str) -> str:
    return f"{difficulty} {topic} tutorial"


class CourseBuilder:
    """课程生成器"""

    def __init__(
        self,
        catalog,
        ranker: Optional[VideoRanker] = None,
        *,
        videos_per_query: int = VIDEOS_PER_QUERY,
        top_k: int = TOP_K_PER_TIER,
        stop_flag: Optional[threading.Event] = None,
    ):
        """初始化课程生成器

        Args:
            catalog: 目录客户端，需提供 search(query, max_results) 与 fetch_details(ids, max_results)
            ranker: 视频排名器（默认使用标准权重）
            videos_per_query: 每次搜索/详情请求的条数上限
            top_k: 每个难度保留的视频数
            stop_flag: 可选的取消信号
        """
        self.catalog = catalog
        self.ranker = ranker or VideoRanker()
        self.videos_per_query = videos_per_query
        self.top_k = top_k
        self.stop_flag = stop_flag

    def _check_cancelled(self) -> None:
        if self.stop_flag is not None and self.stop_flag.is_set():
            raise GenerationCancelled("course generation cancelled")

    def ranked_videos(self, query: str) -> List[RankedVideo]:
        """搜索并排名一批候选视频（目录异常直接向上抛出）。"""
        self._check_cancelled()
        ids = self.catalog.search(query, self.videos_per_query)
        if not ids:
            return []

        self._check_cancelled()
        videos = self.catalog.fetch_details(ids, self.videos_per_query)

        # 详情接口不保证顺序，这里按搜索相关度重排，作为同分时的兜底顺序
        position: Dict[str, int] = {}
        for index, video_id in enumerate(ids):
            position.setdefault(video_id, index)
        videos = sorted(videos, key=lambda v: position.get(v.video_id, len(position)))

        return self.ranker.rank(videos)

    def top_by_difficulty(self, topic: str, difficulty: str) -> List[RankedVideo]:
        ranked = self.ranked_videos(build_query(topic, difficulty))
        top = select_top(ranked, self.top_k)
        logger.info(
            "Selected %d/%d videos for %s '%s'", len(top), len(ranked), difficulty, topic
        )
        return top

    def generate_resources(self, topic: str) -> Dict[str, List[RankedVideo]]:
        """
        生成两个难度的 Top-K 视频

        Returns:
            {"beginner": [...], "advanced": [...]}
        """
        topic = (topic or "").strip()
        if not topic:
            raise ValueError("topic is required")

        with ThreadPoolExecutor(max_workers=len(DIFFICULTY_LEVELS)) as pool:
            futures = {
                difficulty: pool.submit(self.top_by_difficulty, topic, difficulty)
                for difficulty in DIFFICULTY_LEVELS
            }
            return {difficulty: future.result() for difficulty, future in futures.items()}


# ============================================================================
# 资源落库 / 学习进度
# ============================================================================


def create_course(name: str, user_id: int, images: Optional[List[str]] = None) -> Course:
    course = Course(name=name, images=list(images or []), user_id=user_id)
    db.session.add(course)
    db.session.flush()
    return course


def save_resources(
    videos: Sequence[RankedVideo],
    course: Course,
    level: int,
    user_id: int,
) -> List[Resource]:
    """把排名结果写成课程资源（调用方负责 commit）。"""
    resources = []
    for ranked in videos:
        video = ranked.video
        resource = Resource(
            type="video",
            level=level,
            status=STATUS_NOT_STARTED,
            title=video.title,
            description=video.description,
            url=build_video_url(video.video_id),
            thumbnail=video.thumbnail_url,
            channel=video.channel_title,
            feedback=0,
            course_id=course.id,
            user_id=user_id,
        )
        db.session.add(resource)
        resources.append(resource)
    return resources


def save_generated_resources(
    generated: Dict[str, List[RankedVideo]],
    course: Course,
    user_id: int,
) -> List[Resource]:
    saved = []
    for difficulty, level in DIFFICULTY_LEVELS.items():
        saved.extend(save_resources(generated.get(difficulty) or [], course, level, user_id))
    return saved


def copy_course(source: Course, user_id: int) -> Course:
    """课程码：把别人的课程复制一份，状态与反馈全部重置。"""
    course = create_course(source.name, user_id, source.images)
    for res in source.resources:
        db.session.add(
            Resource(
                type=res.type,
                level=res.level,
                status=STATUS_NOT_STARTED,
                title=res.title,
                description=res.description,
                url=res.url,
                thumbnail=res.thumbnail,
                channel=res.channel,
                feedback=0,
                course_id=course.id,
                user_id=user_id,
            )
        )
    return course


def calculate_completion(statuses: Iterable[str]) -> float:
    """完成度 = (已完成 + 0.5 × 进行中) / 总数 × 100；没有资源时为 0。"""
    total = 0
    completed = 0
    in_progress = 0
    for status in statuses:
        total += 1
        if status == STATUS_COMPLETED:
            completed += 1
        elif status == STATUS_IN_PROGRESS:
            in_progress += 1

    if total == 0:
        return 0.0
    return (completed + 0.5 * in_progress) / total * 100


def progress_by_level(resources: Iterable[Resource]) -> Dict[int, float]:
    by_level: Dict[int, List[str]] = {level: [] for level in DIFFICULTY_LEVELS.values()}
    for res in resources:
        if res.level in by_level:
            by_level[res.level].append(res.status)
    return {level: calculate_completion(statuses) for level, statuses in by_level.items()}
