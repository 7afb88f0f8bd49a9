"""Command line entry points for operating the service."""
