import logging

from flask import Flask, request

from linkhub.api import api_bp
from linkhub.auth import auth_bp
from linkhub.config import Config
from linkhub.extensions import db, login_manager, migrate
from linkhub.services.store import ProfileStore
from linkhub.services.ui_mode import UiModeState
from linkhub.web import web_bp


def create_app(config_object=Config):
    app = Flask(__name__, template_folder="../templates", static_folder="../static")
    app.config.from_object(config_object)

    level = app.config.get("LOG_LEVEL", "INFO")
    app.logger.setLevel(level)
    logging.getLogger("linkhub").setLevel(level)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    app.extensions["profile_store"] = ProfileStore()

    app.register_blueprint(auth_bp)
    app.register_blueprint(web_bp)
    app.register_blueprint(api_bp)

    @app.cli.command("init-db")
    def init_db_command():
        db.create_all()
        print("Initialized LinkHub database.")

    @app.context_processor
    def inject_globals():
        ui_mode = UiModeState(
            {key: value for key, value in request.cookies.items()},
            system_default=request.headers.get("Sec-CH-Prefers-Color-Scheme"),
            storage_key=app.config["UI_MODE_COOKIE"],
        )
        return {"app_name": "LinkHub", "ui_mode": ui_mode.mode}

    with app.app_context():
        db.create_all()

    return app
