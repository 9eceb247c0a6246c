"""HTTP API for the migration service."""
