"""Root logger configuration."""

import logging
import sys

from warrantycheck.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once, from settings.log_level by default."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    # urllib3 logs every pooled connection
    logging.getLogger("urllib3").setLevel(logging.WARNING)
