"""Infrastructure layer: configuration, locking and security adapters."""
