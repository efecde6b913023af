"""Configuration, security and error handling."""
