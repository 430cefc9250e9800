"""命令行预览：不落库，直接打印某个主题在两个难度下的排名结果

使用方法：
    python -m core.preview_ranking React --top-k 5
"""

import argparse
import logging
import sys
from pathlib import Path

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import Config
from core.course_builder import CourseBuilder, TOP_K_PER_TIER
from spider.youtube_api import CatalogError, YouTubeClient


def print_ranking(generated, out=None):
    out = out or sys.stdout
    for difficulty, ranked in generated.items():
        print(f"[{difficulty}] {len(ranked)} videos", file=out)
        print("-" * 50, file=out)
        for position, r in enumerate(ranked, start=1):
            print(
                f"  {position}. {r.final_score:7.2f}  {r.video.title}  ({r.video.channel_title})",
                file=out,
            )
        print(file=out)


def main(argv=None, catalog=None):
    parser = argparse.ArgumentParser(description="预览主题视频排名")
    parser.add_argument("topic", help="课程主题，例如 React")
    parser.add_argument(
        "--top-k",
        type=int,
        default=TOP_K_PER_TIER,
        help=f"每个难度保留的视频数（默认 {TOP_K_PER_TIER}）",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    catalog = catalog or YouTubeClient(Config.YOUTUBE_API_KEY, timeout=Config.CATALOG_TIMEOUT)
    builder = CourseBuilder(catalog, videos_per_query=Config.VIDEOS_PER_QUERY, top_k=args.top_k)
    try:
        generated = builder.generate_resources(args.topic)
    except CatalogError as exc:
        print(f"目录请求失败: {exc}", file=sys.stderr)
        return 1

    print_ranking(generated)
    return 0


if __name__ == "__main__":
    sys.exit(main())
