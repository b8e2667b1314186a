"""Shared DynamoDB connection utilities.

A single boto3 resource is created lazily per process and reused across
handler invocations so warm containers keep their HTTP connection pool.
"""

from __future__ import annotations
import atexit
import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Optional

import boto3
from botocore.config import Config

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 5
DEFAULT_READ_TIMEOUT = 10
DEFAULT_MAX_ATTEMPTS = 3


@dataclass
class DynamoConfig:
    """Configuration for the DynamoDB connection.

    Attributes:
        region: AWS region; None defers to the boto3 credential chain
        endpoint_url: Optional endpoint override (DynamoDB Local, LocalStack)
        connect_timeout: Socket connect timeout in seconds
        read_timeout: Socket read timeout in seconds
        max_attempts: botocore-level attempts for throttled or dropped calls
    """
    region: Optional[str] = None
    endpoint_url: Optional[str] = None
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    read_timeout: int = DEFAULT_READ_TIMEOUT
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    @classmethod
    def from_env(
        cls,
        region_var: str = "AWS_REGION",
        endpoint_var: str = "DYNAMODB_ENDPOINT_URL",
    ) -> DynamoConfig:
        """Create configuration from environment variables."""
        return cls(
            region=os.getenv(region_var) or None,
            endpoint_url=os.getenv(endpoint_var) or None,
        )

    def client_config(self) -> Config:
        return Config(
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
            retries={"max_attempts": self.max_attempts, "mode": "standard"},
        )


class DynamoResourceHandle:
    """Process-wide, lazily created DynamoDB service resource.

    Concurrent first calls to ``get()`` create one resource. The resource
    itself is not thread-safe; worker threads must use ``resource.meta.client``.
    ``close()`` releases the underlying HTTP connection pool and is
    registered with ``atexit`` the first time a resource is created.

    Example:
        handle = DynamoResourceHandle()
        client = handle.get().meta.client
        client.put_item(TableName="issues", Item={...})
    """

    def __init__(self, config: Optional[DynamoConfig] = None):
        self._config = config
        self._resource: Optional[Any] = None
        self._lock = threading.Lock()
        self._exit_hook_registered = False

    def configure(self, config: DynamoConfig) -> None:
        """Set the config used when the resource is next created."""
        with self._lock:
            if self._resource is None:
                self._config = config

    def get(self) -> Any:
        """Return the shared resource, creating it on first use."""
        if self._resource is not None:
            return self._resource

        with self._lock:
            if self._resource is None:
                config = self._config or DynamoConfig.from_env()
                logger.debug(
                    "Creating DynamoDB resource (region=%s, endpoint=%s)",
                    config.region or "default",
                    config.endpoint_url or "default",
                )
                self._resource = boto3.resource(
                    "dynamodb",
                    region_name=config.region,
                    endpoint_url=config.endpoint_url,
                    config=config.client_config(),
                )
                if not self._exit_hook_registered:
                    atexit.register(self.close)
                    self._exit_hook_registered = True
            return self._resource

    def close(self) -> None:
        """Release the resource; the next ``get()`` creates a fresh one."""
        with self._lock:
            if self._resource is None:
                return
            self._resource.meta.client.close()
            self._resource = None
            logger.debug("DynamoDB resource closed")


_default_handle = DynamoResourceHandle()


def get_dynamodb_resource(config: Optional[DynamoConfig] = None) -> Any:
    """Return the process-wide DynamoDB resource.

    Args:
        config: Optional DynamoConfig applied when the resource is first
            created. Ignored once the shared resource exists.
    """
    if config is not None:
        _default_handle.configure(config)
    return _default_handle.get()


def close_dynamodb_resource() -> None:
    """Close the process-wide DynamoDB resource if one was created."""
    _default_handle.close()
