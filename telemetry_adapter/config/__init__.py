"""Configuration models for sources and environment settings."""
