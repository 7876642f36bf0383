import logging
from typing import Optional

from streetmap.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Install a root handler once; safe to call repeatedly."""
    logging.basicConfig(level=(level or settings.log_level).upper(), format=LOG_FORMAT)
    # Per-request lines from httpx drown out the fallback warnings
    logging.getLogger("httpx").setLevel(logging.WARNING)
