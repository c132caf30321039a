"""Core domain — models, errors, services. No terminal output."""
