import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

# Load environment variables conditionally
# Only load from .env when DATABASE_URL is not already defined by the environment
if not os.getenv("DATABASE_URL"):
    load_dotenv()

from clinic_schedules.core import config  # noqa: E402
from clinic_schedules.core.logging_config import setup_logging  # noqa: E402
from clinic_schedules.db.session import create_tables, get_engine  # noqa: E402

logger = logging.getLogger(__name__)


def test_database_connection() -> bool:
    """Test database connection"""
    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
            return True
    except SQLAlchemyError as e:
        logger.error(
            "Database connection failed",
            extra={"context": {"error": str(e)}},
            exc_info=True,
        )
        return False


# Not a test; keep pytest from collecting it when main is imported in tests
test_database_connection.__test__ = False


def create_app(testing: bool = False) -> Flask:
    app = Flask(__name__)

    testing_env = os.getenv("TESTING", "").lower().strip()
    if testing or testing_env in config.TRUTHY_VALUES:
        app.config["TESTING"] = True

    # Configure structured logging (after app creation so we can register hooks)
    options = config.get_logging_options()
    if app.config.get("TESTING"):
        options["log_to_file"] = False
    setup_logging(app=app, **options)
    config.log_timezone_config()

    from clinic_schedules.controllers.schedule_controller import (
        clinic_bp,
        schedule_bp,
    )

    app.register_blueprint(clinic_bp)
    app.register_blueprint(schedule_bp)

    create_tables()

    @app.route("/health")
    def health_check():
        """Health check endpoint"""
        db_status = test_database_connection()
        return jsonify(
            {
                "status": "healthy" if db_status else "unhealthy",
                "database": "connected" if db_status else "disconnected",
            }
        ), (200 if db_status else 503)

    logger.info(
        "Application created",
        extra={
            "context": {
                "testing": bool(app.config.get("TESTING")),
                "timezone": str(config.APP_TZ),
            }
        },
    )
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
