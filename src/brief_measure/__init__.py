"""Brief Measure: API-key gated observation ingestion service."""

__version__ = "0.1.0"
