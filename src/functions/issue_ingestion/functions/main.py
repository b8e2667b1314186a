"""Queue-triggered entry point for issue ingestion.

The queue runtime invokes ``handler(event, context)`` with a batch of
records. The handler always returns a structured response; it never raises
back into the runtime.
"""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional

# Ensure project root is on sys.path before importing project modules
project_root = Path(__file__).parent.parent.parent.parent.parent.absolute()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.shared.utils.config_validator import ConfigurationError
from src.shared.utils.env import load_env
from src.shared.utils.logging import setup_logging

from src.functions.issue_ingestion.core.config import IngestionConfig
from src.functions.issue_ingestion.core.contracts import IngestionResult, IngestionStatus
from src.functions.issue_ingestion.core.pipelines import IngestionPipeline

load_env()
setup_logging()
logger = logging.getLogger(__name__)

_config: Optional[IngestionConfig] = None


def _get_config() -> IngestionConfig:
    """Load configuration once per process."""
    global _config
    if _config is None:
        _config = IngestionConfig.from_env()
    return _config


def _deadline_from_context(context: Any, margin_ms: int) -> Optional[float]:
    """Translate the runtime's remaining time into a monotonic deadline."""
    remaining = getattr(context, "get_remaining_time_in_millis", None)
    if not callable(remaining):
        return None
    return time.monotonic() + max(remaining() - margin_ms, 0) / 1000.0


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """Persist the issues carried by one queue event.

    Returns:
        ``{"statusCode", "body", "batchItemFailures"}``: 200 when records were
        written (body counts any failures), 400 when no message produced a
        record, 500 on configuration or unexpected errors.
    """
    try:
        config = _get_config()
    except (ConfigurationError, ValueError) as exc:
        logger.error("Invalid ingestion configuration: %s", exc)
        return IngestionResult(status=IngestionStatus.ERROR, error=str(exc)).to_response()

    try:
        if not isinstance(event, dict):
            raise TypeError(f"event must be an object, got {type(event).__name__}")
        records = event.get("Records") or []
        deadline = _deadline_from_context(context, config.deadline_margin_ms)
        result = IngestionPipeline(config).run(records, deadline=deadline)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error in issue ingestion handler")
        result = IngestionResult(status=IngestionStatus.ERROR, error=str(exc))

    return result.to_response()
