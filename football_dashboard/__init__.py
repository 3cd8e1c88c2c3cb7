"""Football dashboard: Sportradar soccer client, proxy and match statistics."""
import logging
import os

__version__ = "0.1.0"

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _configure_root_logging() -> None:
    # an embedding application that already set up logging keeps its handlers
    if logging.getLogger().handlers:
        return
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=_LOG_FORMAT)


_configure_root_logging()

# HTTP stack chatter (connection pool, per-request lines) stays out of the app log
for _noisy in ("urllib3", "requests", "werkzeug"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
