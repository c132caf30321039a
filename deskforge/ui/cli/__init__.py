"""CLI command groups and terminal rendering."""
