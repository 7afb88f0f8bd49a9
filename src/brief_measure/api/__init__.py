"""HTTP API for the Brief Measure service."""
