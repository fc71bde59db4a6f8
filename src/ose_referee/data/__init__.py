"""Bundled rules tables and expert definitions."""
