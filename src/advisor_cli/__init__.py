"""Command-line entry for invoking advisor tools."""
