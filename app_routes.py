"""路由层（Blueprint）全集。

阅读提示：
1) 这个文件只做“薄路由”：取参数 -> 校验/登录态 -> 调用 `core` / `app_services.py` -> 返回 JSON。
2) 从上到下按“用户访问路径”排序：
   - 认证（/register /login /logout）
   - API：课程（生成 / 列表 / 详情 / 进度 / 课程码复制 / 删除）
   - API：资源（状态、反馈）
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from core.course_builder import (
    CourseBuilder,
    GenerationCancelled,
    copy_course,
    create_course,
    progress_by_level,
    save_generated_resources,
)
from models import RESOURCE_STATUSES, Course, Resource, User, db
from spider.utils import parse_bool
from spider.youtube_api import CatalogError

import app_services as svc


# 对外只暴露 2 个 Blueprint，`app.py` 会负责注册。
__all__ = ["auth_bp", "api_bp"]


auth_bp = Blueprint("auth", __name__)
api_bp = Blueprint("api", __name__, url_prefix="/api")


def _payload() -> dict:
    return request.get_json(silent=True) or request.form.to_dict() or {}


# ============================================================
# 1) 认证（Auth）
# ============================================================


@auth_bp.post("/register")
def register():
    """注册：账号唯一，密码只存哈希。"""
    data = _payload()
    account = (data.get("account") or "").strip()
    password = data.get("password")
    if not account or not password:
        return svc.api_error("account and password are required")
    if svc.account_exists(account):
        return svc.api_error("account already exists", code=409, http_status=409)

    user = User(
        account=account,
        username=(data.get("username") or "").strip() or svc.default_nickname(account),
        password=svc.hash_password(password),
    )
    db.session.add(user)
    if not svc.commit_or_rollback(db.session):
        return svc.api_error("account already exists", code=409, http_status=409)
    return svc.api_ok("registered", code=201, user={"id": user.id, "account": user.account}), 201


@auth_bp.post("/login")
def login():
    data = _payload()
    account = (data.get("account") or "").strip()
    password = data.get("password")
    if not account or not password:
        return svc.api_error("account and password are required")

    user = User.query.filter_by(account=account).first()
    if not user or not svc.verify_password(user.password, password):
        return svc.api_error("invalid account or password", code=401, http_status=401)

    login_user(user)
    return svc.api_ok("logged in", user={"id": user.id, "account": user.account, "username": user.username})


@auth_bp.post("/logout")
@login_required
def logout():
    logout_user()
    return svc.api_ok("logged out")


# ============================================================
# 2) API：课程（Courses）
# ============================================================


@api_bp.get("/health")
def health():
    return jsonify({"status": "healthy"})


@api_bp.post("/courses")
@login_required
def create_course_route():
    """生成课程：封面图 + 入门/进阶各 Top3 视频，一次性落库。"""
    name = (_payload().get("name") or "").strip()
    if not name:
        return svc.api_error("topic of the course is required")

    cfg = current_app.config
    builder = CourseBuilder(svc.build_catalog(), videos_per_query=cfg.get("VIDEOS_PER_QUERY", 100))
    try:
        generated = builder.generate_resources(name)
    except (CatalogError, GenerationCancelled) as exc:
        current_app.logger.error("Course generation failed for '%s': %s", name, exc)
        return svc.api_error("course generation failed, please try again later", code=502, http_status=502)

    images = svc.build_image_search().search_images(name, cfg.get("IMAGES_PER_COURSE", 5))
    course = create_course(name, current_user.id, images)
    save_generated_resources(generated, course, current_user.id)
    if not svc.commit_or_rollback(db.session):
        return svc.api_error("failed to save course", code=500, http_status=500)

    current_app.logger.info("Created course %s '%s' for user %s", course.id, name, current_user.id)
    return jsonify(
        {
            "course": svc.serialize_course(course, with_resources=True),
            "ranking": {
                difficulty: [svc.serialize_ranked_video(r) for r in ranked]
                for difficulty, ranked in generated.items()
            },
        }
    ), 201


@api_bp.get("/courses")
@login_required
def list_courses():
    courses = (
        Course.query.filter_by(user_id=current_user.id)
        .order_by(Course.create_time.desc(), Course.id.desc())
        .all()
    )
    return jsonify({"courses": [svc.serialize_course(c) for c in courses]})


@api_bp.get("/courses/<int:course_id>")
@login_required
def get_course(course_id: int):
    """课程详情；?with_progress=1 时附带各难度完成度。"""
    course = svc.get_user_course(current_user.id, course_id)
    if not course:
        return svc.api_error("course not found", code=404, http_status=404)

    data = svc.serialize_course(course, with_resources=True)
    if parse_bool(request.args.get("with_progress"), False):
        data["progress"] = {str(k): v for k, v in progress_by_level(course.resources).items()}
    return jsonify({"course": data})


@api_bp.get("/courses/<int:course_id>/progress")
@login_required
def get_course_progress(course_id: int):
    course = svc.get_user_course(current_user.id, course_id)
    if not course:
        return svc.api_error("course not found", code=404, http_status=404)
    progress = progress_by_level(course.resources)
    return jsonify({str(level): pct for level, pct in progress.items()})


@api_bp.post("/courses/<int:course_id>/copy")
@login_required
def copy_course_route(course_id: int):
    """课程码：课程 id 即课程码，复制到当前用户名下。"""
    source = db.session.get(Course, course_id)
    if not source:
        return svc.api_error("invalid course code", code=404, http_status=404)

    course = copy_course(source, current_user.id)
    if not svc.commit_or_rollback(db.session):
        return svc.api_error("failed to copy course", code=500, http_status=500)
    return jsonify({"course": svc.serialize_course(course, with_resources=True)}), 201


@api_bp.delete("/courses/<int:course_id>")
@login_required
def delete_course(course_id: int):
    course = svc.get_user_course(current_user.id, course_id)
    if not course:
        return svc.api_error("course not found", code=404, http_status=404)
    db.session.delete(course)
    db.session.commit()
    return svc.api_ok("deleted")


@api_bp.post("/courses/<int:course_id>/resources/delete")
@login_required
def delete_course_resources(course_id: int):
    """批量删除课程中选中的视频。"""
    course = svc.get_user_course(current_user.id, course_id)
    if not course:
        return svc.api_error("course not found", code=404, http_status=404)

    ids = _payload().get("ids") or []
    if not isinstance(ids, list) or not ids:
        return svc.api_error("ids must be a non-empty list")

    deleted = Resource.query.filter(
        Resource.course_id == course.id,
        Resource.id.in_(ids),
    ).delete(synchronize_session=False)
    db.session.commit()
    return svc.api_ok("deleted", deleted=deleted)


# ============================================================
# 3) API：资源（Resources）
# ============================================================


@api_bp.patch("/resources/<int:resource_id>")
@login_required
def update_resource(resource_id: int):
    """更新学习状态 / 反馈（+1 点赞，-1 点踩）。"""
    resource = Resource.query.filter_by(id=resource_id, user_id=current_user.id).first()
    if not resource:
        return svc.api_error("resource not found", code=404, http_status=404)

    data = _payload()
    if "status" not in data and "feedback" not in data:
        return svc.api_error("nothing to update")

    if "status" in data:
        if data["status"] not in RESOURCE_STATUSES:
            return svc.api_error("invalid status")
        resource.status = data["status"]

    if "feedback" in data:
        try:
            delta = int(data["feedback"])
        except (TypeError, ValueError):
            return svc.api_error("invalid feedback")
        if delta not in svc.FEEDBACK_DELTAS:
            return svc.api_error("invalid feedback")
        resource.feedback = (resource.feedback or 0) + delta

    db.session.commit()
    return jsonify({"resource": svc.serialize_resource(resource)})
