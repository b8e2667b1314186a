"""Core logic for issue ingestion."""
