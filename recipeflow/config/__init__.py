"""Packaged default configuration."""
