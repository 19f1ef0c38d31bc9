"""Application layer: invalidation service and administrative API."""
