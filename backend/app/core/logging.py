"""
Logging setup for the application.
"""
import logging
from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    """Configure the root logger once, using LOG_LEVEL from settings by default."""
    level_name = (level or settings.LOG_LEVEL or "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
    
    # SQLAlchemy echo is controlled by DB_ECHO; keep its logger quiet otherwise
    if not settings.DB_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
