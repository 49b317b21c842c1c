"""Configuration: catgen.toml discovery, settings, and logging."""
