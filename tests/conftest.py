from datetime import datetime, timedelta, timezone

import pytest

from app import create_app
from config import TestingConfig
from core.ranking import VideoMetadata
from models import db

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_video(video_id="v1", *, days_old=264, views=0, likes=0, description="", now=NOW, **extra):
    return VideoMetadata(
        video_id=video_id,
        published_at=now - timedelta(days=days_old),
        view_count=views,
        like_count=likes,
        description=description,
        title=extra.pop("title", f"title {video_id}"),
        channel_title=extra.pop("channel_title", "channel"),
        thumbnail_url=extra.pop("thumbnail_url", f"https://img.example/{video_id}.jpg"),
    )


class FakeCatalog:
    """内存版目录：每个查询返回同一批视频，详情按倒序返回（模拟顺序不一致）。"""

    def __init__(self, videos=None, *, error=None):
        self.videos = list(videos or [])
        self.error = error
        self.search_calls = []
        self.detail_calls = []

    def search(self, query, max_results):
        self.search_calls.append((query, max_results))
        if self.error:
            raise self.error
        return [v.video_id for v in self.videos][:max_results]

    def fetch_details(self, ids, max_results):
        self.detail_calls.append((list(ids), max_results))
        wanted = set(ids)
        return [v for v in reversed(self.videos) if v.video_id in wanted][:max_results]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_videos():
    return [
        make_video("a", days_old=30, views=5000, likes=300, description="0:00 intro 4:20 hooks"),
        make_video("b", days_old=400, views=90000, likes=2000),
        make_video("c", days_old=10, views=800, likes=90, description="no chapters"),
        make_video("d", days_old=900, views=250000, likes=4000, description="1:00 setup"),
        make_video("e", days_old=2, views=50, likes=1),
    ]


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    client.post("/register", json={"account": "alice", "password": "secret"})
    resp = client.post("/login", json={"account": "alice", "password": "secret"})
    assert resp.status_code == 200
    return client
