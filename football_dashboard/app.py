from datetime import datetime, timezone

from flask import Flask

from .app_utils import make_error, make_ok
from .config import setup_logger
from .constants import DEV_SERVER_HOST, DEV_SERVER_PORT
from .errors import APIError
from .routes.sportradar_api import bp as sportradar_api_bp, proxy_status

logger = setup_logger(__name__)


def create_app() -> Flask:
    app = Flask(__name__)
    app.register_blueprint(sportradar_api_bp)
    logger.info("Sportradar proxy mounted at %s", sportradar_api_bp.url_prefix)

    @app.get("/status")
    def status():
        """Upstream timeout metrics and the demo-fallback flag."""
        return make_ok(proxy_status())

    @app.get("/health")
    def health():
        return make_ok({"ok": True, "ts": datetime.now(timezone.utc).isoformat()}, "OK")

    @app.errorhandler(404)
    def not_found(_exc):
        return make_error(APIError("Dashboard", "NOT_FOUND", "No such route"), "Not found", status_code=404)

    @app.errorhandler(500)
    def internal_error(exc):
        original = getattr(exc, "original_exception", None) or exc
        logger.error("Unhandled error while serving request", exc_info=original)
        return make_error(APIError("Dashboard", "INTERNAL", "Internal server error"), "Internal error", status_code=500)

    return app


app = create_app()


if __name__ == "__main__":
    app.run(debug=True, host=DEV_SERVER_HOST, port=DEV_SERVER_PORT)
