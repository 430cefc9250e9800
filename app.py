"""Flask 入口：应用工厂、登录管理、日志配置。

运行：
    flask --app app run
"""

import logging
import os

from flask import Flask
from flask_login import LoginManager

from app_routes import api_bp, auth_bp
from config import Config
from models import User, db

import app_services as svc

login_manager = LoginManager()


@login_manager.user_loader
def load_user(user_id):
    """Flask-Login 回调：根据 user_id 取出用户对象。"""
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return svc.api_error("login required", code=401, http_status=401)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)


def create_app(config_object=Config) -> Flask:
    """应用工厂：测试时传入 TestingConfig。"""
    app = Flask(__name__)
    app.config.from_object(config_object)
    setup_logging(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    login_manager.init_app(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)

    @app.errorhandler(404)
    def not_found(error):
        return svc.api_error("endpoint not found", code=404, http_status=404)

    @app.errorhandler(500)
    def internal_error(error):
        return svc.api_error("internal server error", code=500, http_status=500)

    # 确保表存在（开发环境连不上数据库时只告警）
    try:
        with app.app_context():
            db.create_all()
    except Exception as exc:
        app.logger.warning("Skipping db.create_all during startup: %s", exc)

    return app


if __name__ == "__main__":
    application = create_app()
    application.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 5000)),
        debug=os.environ.get("FLASK_DEBUG") == "1",
    )
