import logging
import os
from decimal import Decimal

# Database location; see db.py for sqlite path normalization
DATABASE_URL = os.getenv("DATABASE_URL")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# parking VAT when the car tariff row is absent
DEFAULT_PARKING_VAT = Decimal(os.getenv("DEFAULT_PARKING_VAT", "8"))

# caller-side chunking for large unit lists
CALC_BATCH_SIZE = int(os.getenv("CALC_BATCH_SIZE", "50"))
CALC_MAX_WORKERS = int(os.getenv("CALC_MAX_WORKERS", "4"))

# none | period_start | period_end
TARIFF_REFERENCE_DATE = os.getenv("TARIFF_REFERENCE_DATE", "none")

CORS_ALLOWED = os.getenv("CORS_ALLOWED", "").split(",") if os.getenv("CORS_ALLOWED") else []

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Install a single stream handler on the package logger.

    Safe to call more than once; handlers are only added the first time.
    """
    pkg_logger = logging.getLogger("feecalc")
    pkg_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if pkg_logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    pkg_logger.addHandler(handler)
