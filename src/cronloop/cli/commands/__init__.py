"""CLI commands for cronloop."""
