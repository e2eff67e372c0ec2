import logging
import os
import sys

# Alembic
from alembic import command
from alembic.config import Config
from dotenv import load_dotenv
from flask import Flask, jsonify
from logtail import LogtailHandler

from models import db
from modules.common.errors import TaskEngineError
from modules.tasks.config import init_task_config

# Blueprints
from modules.admin.routes import admin_bp
from modules.auth.routes import auth_bp, login_manager
from modules.jobs.routes import jobs_bp
from modules.profiles.routes import profiles_bp
from modules.tasks.routes import tasks_bp

load_dotenv()


# -------------------- Auto Alembic ---------------------
def run_auto_migrations(app: Flask) -> None:
    if os.getenv("AUTO_MIGRATE", "1") != "1":
        return

    db_url = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if db_url.startswith("sqlite"):
        app.logger.info("AUTO_MIGRATE skipped (SQLite dev).")
        return

    cfg = Config(os.path.join(app.root_path, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(app.root_path, "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)

    try:
        with app.app_context():
            command.upgrade(cfg, "head")
        app.logger.info("Alembic migrations applied (upgrade head).")
    except Exception as e:
        app.logger.error(f"Alembic upgrade failed: {e}")
        raise


# -------------------- App factory ----------------------
def create_app(overrides=None):
    app = Flask(__name__)

    # Logging
    handlers = [logging.StreamHandler(sys.stdout)]
    token = os.getenv("LOGTAIL_TOKEN")
    if token:
        handlers.append(LogtailHandler(source_token=token))
    logging.basicConfig(level=logging.INFO, handlers=handlers)
    app.logger.handlers = handlers
    app.logger.setLevel(logging.INFO)

    # Core config
    secret = os.getenv("SECRET_KEY") or os.getenv("FLASK_SECRET_KEY") or "dev-secret-key"
    app.config["SECRET_KEY"] = secret

    db_url = os.getenv("DATABASE_URL") or os.getenv("DEV_DATABASE_URI") or "sqlite:///careerquest.db"
    if db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql://", 1)
    app.config["SQLALCHEMY_DATABASE_URI"] = db_url
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    if os.getenv("FLASK_ENV") == "production" or os.getenv("ENV") == "production":
        app.config.update(
            SESSION_COOKIE_SECURE=True,
            SESSION_COOKIE_SAMESITE="Lax",
            REMEMBER_COOKIE_SECURE=True,
        )
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    if overrides:
        app.config.update(overrides)

    # 🔹 Task catalog / eligibility / referral defaults
    init_task_config(app)

    # Extensions
    db.init_app(app)
    login_manager.init_app(app)

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(tasks_bp, url_prefix="/tasks")
    app.register_blueprint(profiles_bp, url_prefix="/profile")
    app.register_blueprint(jobs_bp, url_prefix="/jobs")
    app.register_blueprint(admin_bp, url_prefix="/admin")

    @app.route("/health", endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    # -------------------- Errors --------------------
    @app.errorhandler(TaskEngineError)
    def task_engine_error(e):
        return jsonify(e.as_dict()), e.status_code

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"ok": False, "error": "not_found", "message": "Not found."}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"ok": False, "error": "method_not_allowed", "message": str(e.description)}), 405

    @app.errorhandler(500)
    def srv_error(e):
        try:
            app.logger.exception("Unhandled 500 error")
            db.session.rollback()
        except Exception:
            pass
        return jsonify({"ok": False, "error": "server_error", "message": "Internal server error."}), 500

    @app.teardown_request
    def _teardown_request(exc):
        if exc:
            try:
                db.session.rollback()
            except Exception:
                pass

    # Dev sqlite quickstart
    with app.app_context():
        is_sqlite = str(app.config["SQLALCHEMY_DATABASE_URI"]).startswith("sqlite")
        is_prod = (os.getenv("FLASK_ENV") == "production" or os.getenv("ENV") == "production")
        if is_sqlite and not is_prod:
            db.create_all()

    run_auto_migrations(app)
    return app
