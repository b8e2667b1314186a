"""Shared logging configuration for all functions.

Entry points call ``setup_logging()`` once at import time; warm invocations
in the same process reuse that configuration.
"""

from __future__ import annotations
import logging
import os
import sys
from typing import Optional

# AWS SDK loggers are chatty at INFO (credential lookups, retries, endpoints)
NOISY_LOGGERS = ("boto3", "botocore", "urllib3", "s3transfer")

TIMESTAMPED_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
# The Lambda runtime prefixes every line with its own timestamp and request id
RUNTIME_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _running_in_lambda() -> bool:
    return bool(os.getenv("AWS_LAMBDA_FUNCTION_NAME"))


def setup_logging(level: Optional[str] = None, include_timestamp: Optional[bool] = None) -> None:
    """Configure the root logger to write to stdout.

    Args:
        level: Level name; defaults to LOG_LEVEL or INFO. Unknown names fall
               back to INFO.
        include_timestamp: Prefix lines with a timestamp. Defaults to True
               locally and False inside Lambda.

    Example:
        >>> setup_logging(level="DEBUG")
        >>> logging.getLogger(__name__).debug("Debug message")
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if include_timestamp is None:
        include_timestamp = not _running_in_lambda()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=TIMESTAMPED_FORMAT if include_timestamp else RUNTIME_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True  # Lambda pre-installs a root handler
    )

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
