import logging
from typing import Optional

activity_logger = logging.getLogger("rct_connect.activity")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not any(getattr(h, "_rct_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._rct_handler = True
        root.addHandler(handler)
    root.setLevel(level)


def log_activity(user_id: str, action: str, metadata: Optional[dict] = None):
    activity_logger.info("user=%s action=%s metadata=%s", user_id, action, metadata or {})
