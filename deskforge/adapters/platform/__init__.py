"""Host platform adapters."""
