"""Runtime configuration for the issue ingestion function."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from src.shared.db import DynamoConfig
from src.shared.utils.config_validator import (
    require_env,
    validate_choice_env,
    validate_int_env,
)

logger = logging.getLogger(__name__)

# DynamoDB rejects BatchWriteItem requests with more than 25 put/delete requests
MAX_BATCH_SIZE = 25
MAX_BATCH_RETRIES = 3
BASE_DELAY_MS = 100

UNWRAP_NONE = "none"
UNWRAP_MESSAGE = "message"
UNWRAP_MODES = [UNWRAP_NONE, UNWRAP_MESSAGE]


@dataclass
class IngestionConfig:
    """Settings shared by every invocation of the ingestion handler."""

    table_name: str
    envelope_unwrap: str = UNWRAP_MESSAGE
    batch_size: int = MAX_BATCH_SIZE
    max_retries: int = MAX_BATCH_RETRIES
    base_delay_ms: int = BASE_DELAY_MS
    fallback_max_workers: int = 10
    deadline_margin_ms: int = 1000
    dynamo: DynamoConfig = field(default_factory=DynamoConfig)

    def __post_init__(self) -> None:
        if not self.table_name:
            raise ValueError("table_name is required")
        if self.envelope_unwrap not in UNWRAP_MODES:
            raise ValueError(
                f"envelope_unwrap must be one of {', '.join(UNWRAP_MODES)}, got {self.envelope_unwrap!r}"
            )
        if not 1 <= self.batch_size <= MAX_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if self.fallback_max_workers < 1:
            raise ValueError("fallback_max_workers must be at least 1")

    @property
    def base_delay_seconds(self) -> float:
        return self.base_delay_ms / 1000.0

    @classmethod
    def from_env(cls) -> IngestionConfig:
        """Build configuration from environment variables.

        Raises:
            ConfigurationError: If DYNAMODB_TABLE is missing or a value is invalid
        """
        config = cls(
            table_name=require_env("DYNAMODB_TABLE", "target DynamoDB table"),
            envelope_unwrap=validate_choice_env("ENVELOPE_UNWRAP", UNWRAP_MODES, default=UNWRAP_MESSAGE),
            max_retries=validate_int_env("BATCH_MAX_RETRIES", default=MAX_BATCH_RETRIES, min_value=0, max_value=10),
            base_delay_ms=validate_int_env("BATCH_BASE_DELAY_MS", default=BASE_DELAY_MS, min_value=1),
            fallback_max_workers=validate_int_env("FALLBACK_MAX_WORKERS", default=10, min_value=1, max_value=64),
            deadline_margin_ms=validate_int_env("DEADLINE_MARGIN_MS", default=1000, min_value=0),
            dynamo=DynamoConfig.from_env(),
        )
        logger.debug("Loaded ingestion config: %s", config.snapshot())
        return config

    def snapshot(self) -> Dict[str, Any]:
        """Return a log-safe view of the configuration."""
        return {
            "table_name": self.table_name,
            "envelope_unwrap": self.envelope_unwrap,
            "batch_size": self.batch_size,
            "max_retries": self.max_retries,
            "base_delay_ms": self.base_delay_ms,
            "fallback_max_workers": self.fallback_max_workers,
            "region": self.dynamo.region,
        }
