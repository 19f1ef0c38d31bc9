"""Infrastructure layer: cache stores, remote backend and metrics."""
