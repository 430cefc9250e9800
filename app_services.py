"""业务/工具函数集合（路由层共用）。

阅读提示：
1) 这个文件只放“可复用”的函数：API 响应、DB 提交、账号密码、序列化、外部客户端构造。
2) 路由层（`app_routes.py`）只做 request/response/权限控制，不要塞复杂业务逻辑。
3) 排名/课程生成逻辑在 `core/` 里，这里只负责把它们接到 Flask 上。
"""

from __future__ import annotations

from flask import current_app, jsonify
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from models import Course, Resource, User, db

# ============================================================
# 1) 常量与约定
# ============================================================

PASSWORD_HASH_METHOD = "pbkdf2:sha256:260000"
PASSWORD_SALT_LENGTH = 8  # keep hash length within DB column limits

FEEDBACK_DELTAS = {1, -1}  # 点赞 / 点踩


# ============================================================
# 2) 通用：API 响应 / DB 提交
# ============================================================


def api_ok(msg: str = "OK", *, code: int = 200, **extra):
    """统一成功返回结构：{code,msg,...}"""
    return jsonify({"code": code, "msg": msg, **extra})


def api_error(msg: str, *, code: int = 400, http_status: int = 400, **extra):
    """统一失败返回结构：({code,msg,...}, http_status)"""
    return jsonify({"code": code, "msg": msg, **extra}), http_status


def commit_or_rollback(session) -> bool:
    """提交事务；遇到 IntegrityError 自动回滚并返回 False。"""
    try:
        session.commit()
        return True
    except IntegrityError:
        session.rollback()
        return False


# ============================================================
# 3) 账号/密码
# ============================================================


def is_hashed_password(value: str) -> bool:
    return isinstance(value, str) and value.count("$") >= 2


def hash_password(password: str) -> str:
    return generate_password_hash(password, method=PASSWORD_HASH_METHOD, salt_length=PASSWORD_SALT_LENGTH)


def verify_password(stored: str, candidate: str) -> bool:
    """安全校验密码；遇到坏数据返回 False（不抛异常）。"""
    if not stored or not candidate or not is_hashed_password(stored):
        return False
    try:
        return check_password_hash(stored, candidate)
    except ValueError:
        return False


def default_nickname(account: str) -> str:
    account = (account or "").strip()
    if not account:
        return "user"
    suffix = account[-4:] if len(account) >= 4 else account
    return f"user{suffix}"


def account_exists(account: str) -> bool:
    if not account:
        return False
    return db.session.query(User.query.filter_by(account=account).exists()).scalar()


# ============================================================
# 4) 课程 / 资源：查询与序列化
# ============================================================


def get_user_course(user_id: int, course_id: int) -> Course | None:
    return Course.query.filter_by(id=course_id, user_id=user_id).first()


def serialize_resource(r: Resource) -> dict:
    return {
        "id": r.id,
        "type": r.type,
        "level": r.level,
        "status": r.status,
        "title": r.title,
        "description": r.description,
        "url": r.url,
        "thumbnail": r.thumbnail,
        "channel": r.channel,
        "feedback": r.feedback or 0,
    }


def serialize_course(c: Course, *, with_resources: bool = False) -> dict:
    data = {
        "id": c.id,
        "name": c.name,
        "images": c.images or [],
        "create_time": c.create_time.isoformat() if c.create_time else None,
    }
    if with_resources:
        grouped: dict[str, list[dict]] = {"1": [], "2": []}
        for r in c.resources:
            grouped.setdefault(str(r.level), []).append(serialize_resource(r))
        data["resources"] = grouped
    return data


def serialize_ranked_video(ranked) -> dict:
    """排名结果（含各阶段分数），便于前端展示为什么排在前面。"""
    video = ranked.video
    return {
        "video_id": video.video_id,
        "title": video.title,
        "channel": video.channel_title,
        "thumbnail": video.thumbnail_url,
        "published_at": video.published_at.isoformat(),
        "final_score": round(ranked.final_score, 4),
        "raw_score": {
            "date": ranked.raw.date,
            "dateXViews": ranked.raw.date_x_views,
            "dateXLikes": ranked.raw.date_x_likes,
            "useOfChapters": ranked.raw.use_of_chapters,
        },
    }


# ============================================================
# 5) 外部客户端（按 app.config 构造，测试里可以 monkeypatch 替换）
# ============================================================


def build_catalog():
    from spider.youtube_api import YouTubeClient

    cfg = current_app.config
    return YouTubeClient(cfg.get("YOUTUBE_API_KEY", ""), timeout=cfg.get("CATALOG_TIMEOUT", 15))


def build_image_search():
    from spider.unsplash_api import UnsplashClient

    cfg = current_app.config
    return UnsplashClient(cfg.get("UNSPLASH_ACCESS_KEY", ""), timeout=cfg.get("CATALOG_TIMEOUT", 15))
