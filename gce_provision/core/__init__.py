"""Core package: configuration, authentication, errors, resource handles."""
