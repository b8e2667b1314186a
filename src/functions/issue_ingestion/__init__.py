"""Issue ingestion: queue messages to DynamoDB issue records."""
