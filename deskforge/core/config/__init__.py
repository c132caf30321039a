"""Configuration — manifest discovery and loading."""
