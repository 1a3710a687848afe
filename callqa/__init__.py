import logging
import os

from flask import Flask

from .extensions import db, migrate, rq
from .settings import PipelineSettings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    # service modules log under "callqa.*"; the app logger is named "callqa" too
    pkg_logger = logging.getLogger("callqa")
    pkg_logger.handlers = [handler]
    pkg_logger.setLevel(level)
    app.logger.setLevel(level)


def create_app(test_config=None):
    """Application factory.

    ``test_config`` overrides values loaded from ``config.Config``.
    """
    app = Flask(__name__)
    app.config.from_object("config.Config")
    if test_config:
        app.config.update(test_config)

    _configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db, directory="alembic")
    rq.init_app(app)

    app.extensions["pipeline_settings"] = PipelineSettings.from_config(app.config)

    from .api.calls import bp as calls_bp
    app.register_blueprint(calls_bp)

    if not os.getenv("SKIP_CREATE_ALL"):
        from . import models  # noqa: F401
        with app.app_context():
            db.create_all()

    return app
