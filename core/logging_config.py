# WORKFLOW: Logging setup shared by the CLI and the pipeline.
# Used by: scripts/extract.py at startup, tests that assert on pipeline events
# Functions:
# 1. configure_logging() - stdlib root logger + structlog key/value rendering
# 2. get_event_logger() - structlog logger used for per-dataset pipeline events
#
# Modules log plain messages through logging.getLogger(__name__); pipeline
# milestones (fetched/cleaned/exported counts) go through structlog so the
# counts stay machine-readable in the same stream.

import logging

import structlog

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO", verbose: bool = False) -> None:
    """
    Configure stdlib logging and route structlog through it.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG")
        verbose: Force DEBUG regardless of level
    """
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"], sort_keys=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def get_event_logger(name: str):
    """Get a structlog logger bound to the given module name."""
    return structlog.get_logger(name)
