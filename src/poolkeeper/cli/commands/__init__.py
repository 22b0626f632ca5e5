"""CLI commands for poolkeeper."""
