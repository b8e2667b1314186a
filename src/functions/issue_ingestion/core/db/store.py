"""DynamoDB access for issue records."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from src.shared.db import DynamoConfig, get_dynamodb_resource

from ..errors import StoreWriteError

logger = logging.getLogger(__name__)


def _describe(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        return f"{error.get('Code', 'ClientError')}: {error.get('Message', str(exc))}"
    return str(exc)


class IssueStore:
    """Thin wrapper over the issues table.

    ``batch_put`` returns the items DynamoDB handed back as unprocessed;
    only exceptions from boto3 are raised, as ``StoreWriteError``.
    """

    def __init__(
        self,
        table_name: str,
        resource: Optional[Any] = None,
        dynamo_config: Optional[DynamoConfig] = None,
    ):
        self.table_name = table_name
        self._resource = resource
        self._dynamo_config = dynamo_config

    @property
    def resource(self) -> Any:
        if self._resource is None:
            self._resource = get_dynamodb_resource(self._dynamo_config)
        return self._resource

    def batch_put(self, items: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Submit one BatchWriteItem request of put requests.

        Returns:
            Items the store did not process (empty when all were accepted)

        Raises:
            StoreWriteError: If the request itself fails
        """
        request = {self.table_name: [{"PutRequest": {"Item": item}} for item in items]}
        try:
            response = self.resource.batch_write_item(RequestItems=request)
        except (ClientError, BotoCoreError) as exc:
            raise StoreWriteError(
                _describe(exc), [item.get("issueId") for item in items]
            ) from exc

        unprocessed = response.get("UnprocessedItems", {}).get(self.table_name, [])
        return [entry["PutRequest"]["Item"] for entry in unprocessed if "PutRequest" in entry]

    def put(self, item: Dict[str, Any]) -> None:
        """Write a single item.

        Goes through the resource's client, which is thread-safe, so fallback
        workers may call this concurrently.

        Raises:
            StoreWriteError: If the write fails
        """
        try:
            self.resource.meta.client.put_item(TableName=self.table_name, Item=item)
        except (ClientError, BotoCoreError) as exc:
            raise StoreWriteError(_describe(exc), [item.get("issueId")]) from exc
