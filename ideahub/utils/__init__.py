"""Shared utilities: auth, storage and request infrastructure."""
