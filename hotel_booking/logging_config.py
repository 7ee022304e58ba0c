"""
Logging setup shared by the API process and scripts
"""
import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    from hotel_booking.config import settings

    level_name = (level or settings.LOG_LEVEL).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level_name, format=LOG_FORMAT)
    root.setLevel(level_name)
    # SQL echo is noisy; only surface it in debug mode
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DEBUG else logging.WARNING
    )
