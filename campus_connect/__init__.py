import logging
import click
from flask import Flask, request
from typing import Optional, Dict, Any
from sqlalchemy import select
from .config import Config
from .errors import register_error_handlers
from .extensions import db, login_manager

CORS_METHODS = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
CORS_HEADERS = "Content-Type, Authorization"

def create_app(config_overrides: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)

    if config_overrides:
        app.config.update(config_overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db.init_app(app)
    login_manager.init_app(app)

    # Registers the token request_loader on login_manager
    from . import security  # noqa: F401

    register_error_handlers(app)
    _init_cors(app)

    from .routes.users import users_bp
    app.register_blueprint(users_bp)

    from .routes.events import events_bp
    app.register_blueprint(events_bp)

    from .routes.clubs import clubs_bp
    app.register_blueprint(clubs_bp)

    from .routes.admin import admin_bp
    app.register_blueprint(admin_bp)

    from .routes.uploads import uploads_bp
    app.register_blueprint(uploads_bp)

    @app.get("/")
    def home():
        return "Welcome to Campus Connect Backend!"

    _register_cli(app)
    return app

def _init_cors(app: Flask) -> None:
    @app.before_request
    def preflight():
        if request.method == "OPTIONS":
            return app.response_class(status=204)
        return None

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = app.config["FRONTEND_ORIGIN"]
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Allow-Methods"] = CORS_METHODS
        response.headers["Access-Control-Allow-Headers"] = CORS_HEADERS
        return response

def _register_cli(app: Flask) -> None:
    from .models import User

    @app.cli.command("init-db")
    def init_db():
        """Create tables if they don't exist."""
        with app.app_context():
            db.create_all()
        print("Database initialised.")

    @app.cli.command("promote-admin")
    @click.argument("email")
    def promote_admin(email: str):
        """Give the user with EMAIL the admin role."""
        with app.app_context():
            user = db.session.scalar(select(User).where(User.email == email.strip().lower()))
            if user is None:
                raise click.ClickException(f"No user with email {email}")
            user.role = "admin"
            db.session.commit()
        print(f"{email} is now an admin.")
