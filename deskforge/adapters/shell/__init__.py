"""Shell-backed adapters."""
