"""Shared database utilities."""

from .connection import (
    DynamoConfig,
    DynamoResourceHandle,
    close_dynamodb_resource,
    get_dynamodb_resource,
)

__all__ = [
    "DynamoConfig",
    "DynamoResourceHandle",
    "close_dynamodb_resource",
    "get_dynamodb_resource",
]
