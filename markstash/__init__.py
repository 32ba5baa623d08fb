import logging.config

from flask import Flask

from markstash.api import api_bp
from markstash.config import Config
from markstash.extensions import db, migrate
from markstash.schema_migrations import migrate_guid_column_to_id


def configure_logging(level: str) -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {"format": "%(levelname)s:%(name)s:%(message)s"}
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                }
            },
            "loggers": {
                "markstash": {
                    "level": level,
                    "handlers": ["console"],
                    "propagate": False,
                },
                "httpx": {"level": "WARNING"},
            },
        }
    )


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    configure_logging(app.config["LOG_LEVEL"])

    db.init_app(app)
    migrate.init_app(app, db)

    app.register_blueprint(api_bp)

    @app.cli.command("init-db")
    def init_db_command():
        db.create_all()
        migrate_guid_column_to_id()
        print("Initialized Markstash database.")

    with app.app_context():
        migrate_guid_column_to_id()
        db.create_all()

    return app
