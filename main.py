"""Deployment wrapper for the issue ingestion function.

Configure the function handler as ``main.issue_ingestion_handler``.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict

project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.functions.issue_ingestion.functions.main import handler


def issue_ingestion_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    return handler(event, context)
