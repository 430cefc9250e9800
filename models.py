"""数据模型定义：封装所有与数据库表对应的 SQLAlchemy ORM 类。"""

from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from sqlalchemy import func

db = SQLAlchemy()

# 资源难度：1 = 入门（beginner），2 = 进阶（advanced）
LEVEL_BEGINNER = 1
LEVEL_ADVANCED = 2

STATUS_NOT_STARTED = "not started"
STATUS_IN_PROGRESS = "in progress"
STATUS_COMPLETED = "completed"
RESOURCE_STATUSES = (STATUS_NOT_STARTED, STATUS_IN_PROGRESS, STATUS_COMPLETED)


class User(UserMixin, db.Model):
    """用户账户表：仅存储基本资料和密码哈希。"""

    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    account = db.Column(db.String(50), unique=True, index=True, nullable=False)
    username = db.Column(db.String(50))
    password = db.Column(db.String(255))
    create_time = db.Column(db.DateTime, default=func.now())


class Course(db.Model):
    """用户生成的课程：名称 + 封面图，资源挂在课程下面。"""

    __tablename__ = 'courses'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    images = db.Column(db.JSON, default=list)  # Unsplash 图片 URL 列表
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), index=True, nullable=False)
    create_time = db.Column(db.DateTime, default=func.now())

    resources = db.relationship(
        'Resource',
        backref='course',
        lazy=True,
        cascade='all, delete-orphan',
        order_by='Resource.id',
    )


class Resource(db.Model):
    """课程资源：由排名后的视频生成，状态由用户学习进度驱动。"""

    __tablename__ = 'resources'

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(20), default="video")
    level = db.Column(db.Integer, index=True)  # 1 入门 / 2 进阶
    status = db.Column(db.String(20), default=STATUS_NOT_STARTED)

    title = db.Column(db.String(255))
    description = db.Column(db.Text)
    url = db.Column(db.String(255))
    thumbnail = db.Column(db.String(500))
    channel = db.Column(db.String(255))
    feedback = db.Column(db.Integer, default=0)  # 点赞 +1 / 点踩 -1 的累计值

    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), index=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), index=True, nullable=False)
    create_time = db.Column(db.DateTime, default=func.now())
