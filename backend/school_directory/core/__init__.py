"""Configuration and error types shared by every layer."""
