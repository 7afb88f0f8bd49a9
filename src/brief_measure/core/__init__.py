"""Core domain primitives: settings, errors, credentials and validation."""
