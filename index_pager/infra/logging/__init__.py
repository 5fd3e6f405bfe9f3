"""Logging infrastructure.

Basic usage:
    from index_pager.infra.logging import setup_logging
    import logging

    setup_logging()  # reads LOG_* settings once
    logger = logging.getLogger(__name__)
    logger.info("Walking index", extra={"index": "customer_id_filter"})
"""

from index_pager.infra.logging.config import configure_logging, setup_logging, shutdown
from index_pager.infra.logging.formatters import JSONFormatter

__all__ = [
    "JSONFormatter",
    "configure_logging",
    "setup_logging",
    "shutdown",
]
