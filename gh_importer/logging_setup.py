# gh_importer/logging_setup.py
import logging
import sys


def setup_logging(level="INFO", sql_echo=False):
    """Log to stdout; with sql_echo, include every statement SQLAlchemy emits."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
        force=True,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if sql_echo else logging.WARNING)
