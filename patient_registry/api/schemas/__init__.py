"""Request and response models for the registry API."""
