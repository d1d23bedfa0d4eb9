"""Adapters for the filesystem, HTTP frameworks and logging."""
