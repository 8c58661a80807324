"""Configuration — frozen pydantic models, TOML discovery, logging setup."""
