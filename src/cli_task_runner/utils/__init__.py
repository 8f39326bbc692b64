"""Helpers consumed by task steps and the CLI entry point."""
