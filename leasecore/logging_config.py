"""Logging setup for services and command-line entry points."""
import logging
import sys
from typing import Optional

from leasecore.config import get_pipeline_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Install a stdout handler on the root logger.

    Args:
        level: Log level name; defaults to PipelineConfig.log_level
    """
    level_name = (level or get_pipeline_config().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )
