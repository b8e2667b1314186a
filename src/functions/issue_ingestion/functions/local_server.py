"""Local development server for the issue ingestion function.

POST a queue event (``{"Records": [...]}``) to replay it through the
handler. A bare issue envelope (``{"title": ..., "content": ...}``) is
wrapped into a one-record event first.
"""

from __future__ import annotations

import json
import os
import sys
import uuid
from pathlib import Path
from typing import Any, Dict

from flask import Flask, jsonify, request

# Ensure project root is on sys.path
project_root = Path(__file__).parent.parent.parent.parent.parent.absolute()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.shared.utils.config_validator import ConfigurationError

from src.functions.issue_ingestion.core.config import UNWRAP_MESSAGE
from src.functions.issue_ingestion.functions.main import _get_config, handler

app = Flask(__name__)


def event_from_payload(payload: Dict[str, Any], unwrap: str) -> Dict[str, Any]:
    """Return *payload* as a queue event, wrapping a bare envelope if needed."""
    if "Records" in payload:
        return payload
    body: Any = payload
    if unwrap == UNWRAP_MESSAGE:
        body = {"Message": json.dumps(payload)}
    return {"Records": [{"messageId": str(uuid.uuid4()), "body": json.dumps(body)}]}


@app.route("/", methods=["POST"])
def local_handler():
    """Proxy HTTP requests to the queue handler."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"status": "error", "message": "Invalid or missing JSON payload"}), 400

    try:
        unwrap = _get_config().envelope_unwrap
    except (ConfigurationError, ValueError) as exc:
        return jsonify({"status": "error", "message": str(exc)}), 500

    event = event_from_payload(payload, unwrap)
    response = handler(event)
    body = json.loads(response["body"])
    body["batchItemFailures"] = response["batchItemFailures"]
    return jsonify(body), response["statusCode"]


@app.route("/health", methods=["GET"])
def health_check():
    return jsonify({"status": "healthy", "service": "issue_ingestion"})


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    print(f"Starting local issue ingestion server on http://localhost:{port}")
    print(
        "Test with: curl -X POST http://localhost:{port} -H 'Content-Type: application/json' "
        "-d '{\"title\": \"Ticket\", \"content\": \"Key: TEST-4\\nSummary: test ticket\"}'".replace(
            "{port}", str(port)
        )
    )
    print("")
    app.run(host="0.0.0.0", port=port, debug=True)
